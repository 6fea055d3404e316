"""
Segment Injection.

Prepends the two deferred segment statements to declaration bodies.

Injection is unconditional: a body that already starts with segment
statements receives another pair. Running the tool twice over the same tree
therefore doubles the instrumentation.
"""

import logging
from typing import List

from nrseg.core import builder, locator
from nrseg.core.builder import DeferStmt
from nrseg.core.model import CompilationUnit, Declaration

logger = logging.getLogger(__name__)


def inject(declaration: Declaration, context_variant: DeferStmt, request_variant: DeferStmt) -> None:
  """
  Prepends ``[context_variant, request_variant]`` to the declaration's body.

  Args:
      declaration: A declaration with a body.
      context_variant: Statement deriving the transaction from ``ctx``.
      request_variant: Statement deriving the transaction from ``req.Context()``.

  Raises:
      ValueError: If the declaration has no body.
  """
  if declaration.body is None:
    raise ValueError(f"Declaration '{declaration.name}' has no body to instrument")
  declaration.body.statements[0:0] = [context_variant, request_variant]


def inject_all(unit: CompilationUnit, qualifier: str) -> List[Declaration]:
  """
  Instruments every selected declaration of the unit.

  Fresh statements are built for each declaration.

  Args:
      unit: The compilation unit.
      qualifier: Resolved package qualifier.

  Returns:
      List[Declaration]: The mutated declarations, in source order.
  """
  touched = []
  for decl in locator.select(unit):
    ctx_stmt, req_stmt = builder.build(qualifier)
    inject(decl, ctx_stmt, req_stmt)
    logger.debug("Injected segment into %s (line %d)", decl.display_name, decl.line)
    touched.append(decl)
  return touched
