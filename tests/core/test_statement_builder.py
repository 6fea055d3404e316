"""
Tests for the Synthetic Statement Builder.

Verifies that:
1. Both variants render the exact deferred call chain.
2. The qualifier is honoured (default, alias, dot import).
3. Each build returns fresh nodes.
4. Unknown nodes are rejected by the renderer.
"""

import pytest

from nrseg.core.builder import (
  CallExpr,
  DeferStmt,
  Ident,
  SelectorExpr,
  StringLit,
  build,
  render,
)


def test_context_variant_default_qualifier():
  ctx_stmt, _ = build("")
  assert render(ctx_stmt) == 'defer newrelic.FromContext(ctx).StartSegment("slow").End()'


def test_request_variant_default_qualifier():
  _, req_stmt = build("")
  assert render(req_stmt) == 'defer newrelic.FromContext(req.Context()).StartSegment("slow").End()'


def test_alias_qualifier():
  ctx_stmt, req_stmt = build("nr")
  assert render(ctx_stmt) == 'defer nr.FromContext(ctx).StartSegment("slow").End()'
  assert render(req_stmt) == 'defer nr.FromContext(req.Context()).StartSegment("slow").End()'


def test_dot_import_is_unqualified():
  ctx_stmt, _ = build(".")
  assert render(ctx_stmt) == 'defer FromContext(ctx).StartSegment("slow").End()'


def test_call_chain_shape():
  """The statement is End() called on StartSegment() called on FromContext()."""
  ctx_stmt, _ = build("")
  assert isinstance(ctx_stmt, DeferStmt)

  end = ctx_stmt.call
  assert isinstance(end.fun, SelectorExpr) and end.fun.sel == "End"
  assert end.args == ()

  start = end.fun.x
  assert isinstance(start, CallExpr)
  assert start.fun.sel == "StartSegment"
  assert start.args == (StringLit("slow"),)

  from_ctx = start.fun.x
  assert from_ctx.fun == SelectorExpr(Ident("newrelic"), "FromContext")
  assert from_ctx.args == (Ident("ctx"),)


def test_builds_are_fresh_but_equal():
  first = build("nr")
  second = build("nr")
  assert first == second
  assert first[0] is not second[0]


def test_string_literal_escaping():
  assert render(StringLit('a"b\\c')) == '"a\\"b\\\\c"'


def test_render_rejects_foreign_nodes():
  with pytest.raises(TypeError):
    render("defer x()")
