"""
Declaration Locator.

Selects the declarations that receive instrumentation: top-level functions and
methods that have a body. Signatures without a body (forward or assembly
declarations) are skipped; interface methods, function-typed fields and
function literals never appear in the unit's declaration list.
"""

from typing import Iterator

from nrseg.core.model import CompilationUnit, Declaration


def select(unit: CompilationUnit) -> Iterator[Declaration]:
  """
  Yields the candidate declarations in source order.

  Args:
      unit: The compilation unit.

  Yields:
      Declaration: Each function or method with a non-null body.
  """
  for decl in unit.declarations:
    if decl.kind in ("function", "method") and decl.body is not None:
      yield decl
