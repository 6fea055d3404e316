"""
Synthetic Statement Builder.

A small typed node API for the statements injected into declaration bodies.
The closed set of node kinds (identifier, string literal, selector, call and
deferred call) is all the segment template needs, and keeping construction
here means the templates can be rendered and tested without a parsed file.

The two templates are::

    defer newrelic.FromContext(ctx).StartSegment("slow").End()
    defer newrelic.FromContext(req.Context()).StartSegment("slow").End()

where ``newrelic`` is replaced by the qualifier resolved for the file.
"""

import json
from dataclasses import dataclass
from typing import Tuple, Union

DEFAULT_PACKAGE_NAME = "newrelic"
CONTEXT_VAR = "ctx"
REQUEST_VAR = "req"
SEGMENT_NAME = "slow"

# Call chain shared by both templates: FromContext(...).StartSegment(...).End()
FROM_CONTEXT = "FromContext"
START_SEGMENT = "StartSegment"
END = "End"
REQUEST_CONTEXT = "Context"


@dataclass(frozen=True)
class Ident:
  name: str


@dataclass(frozen=True)
class StringLit:
  value: str


@dataclass(frozen=True)
class SelectorExpr:
  x: "Expr"
  sel: str


@dataclass(frozen=True)
class CallExpr:
  fun: "Expr"
  args: Tuple["Expr", ...] = ()


@dataclass(frozen=True)
class DeferStmt:
  call: CallExpr


Expr = Union[Ident, StringLit, SelectorExpr, CallExpr]
Node = Union[Ident, StringLit, SelectorExpr, CallExpr, DeferStmt]


def render(node: Node) -> str:
  """
  Renders a builder node as Go source text.

  Args:
      node: Any node of the builder API.

  Returns:
      str: Go source for the node, without indentation or trailing newline.

  Raises:
      TypeError: If the node is not part of the builder API.
  """
  if isinstance(node, Ident):
    return node.name
  if isinstance(node, StringLit):
    # JSON string escaping is a subset of Go interpreted string literals.
    return json.dumps(node.value, ensure_ascii=False)
  if isinstance(node, SelectorExpr):
    return f"{render(node.x)}.{node.sel}"
  if isinstance(node, CallExpr):
    args = ", ".join(render(a) for a in node.args)
    return f"{render(node.fun)}({args})"
  if isinstance(node, DeferStmt):
    return f"defer {render(node.call)}"
  raise TypeError(f"Cannot render node of type {type(node).__name__}")


def qualified(qualifier: str, name: str) -> Expr:
  """
  References an exported name of the instrumentation package.

  Args:
      qualifier: Resolved qualifier. Empty means the default package name,
          ``"."`` means the package was dot-imported.
      name: Exported identifier.

  Returns:
      Expr: ``Ident`` for dot imports, otherwise a selector.
  """
  if qualifier == ".":
    return Ident(name)
  return SelectorExpr(Ident(qualifier or DEFAULT_PACKAGE_NAME), name)


def segment_statement(qualifier: str, source: Expr) -> DeferStmt:
  """
  Builds ``defer Q.FromContext(source).StartSegment("slow").End()``.

  Args:
      qualifier: Resolved package qualifier.
      source: Expression producing the context.

  Returns:
      DeferStmt: The deferred segment call.
  """
  txn = CallExpr(qualified(qualifier, FROM_CONTEXT), (source,))
  segment = CallExpr(SelectorExpr(txn, START_SEGMENT), (StringLit(SEGMENT_NAME),))
  return DeferStmt(CallExpr(SelectorExpr(segment, END)))


def context_statement(qualifier: str) -> DeferStmt:
  return segment_statement(qualifier, Ident(CONTEXT_VAR))


def request_statement(qualifier: str) -> DeferStmt:
  return segment_statement(qualifier, CallExpr(SelectorExpr(Ident(REQUEST_VAR), REQUEST_CONTEXT)))


def build(qualifier: str) -> Tuple[DeferStmt, DeferStmt]:
  """
  Builds the context and request variants for one declaration.

  Args:
      qualifier: Resolved package qualifier.

  Returns:
      Tuple[DeferStmt, DeferStmt]: (context variant, request variant).
  """
  return context_statement(qualifier), request_statement(qualifier)
