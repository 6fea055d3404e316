"""
Tests for the Unit Printer (splice rendering).

Verifies that:
1. Unmutated units render byte-identical.
2. Statements land after the opening brace with tab indentation.
3. Bodies written on one line, with a trailing comment, or empty are handled.
4. Appended imports go into the grouped declaration, after single imports,
   or after the package clause.
"""

from nrseg.core.imports import resolve
from nrseg.core.injector import inject_all
from nrseg.core.printer import apply_edits, render_unit
from nrseg.core.syntax import has_syntax_error, parse_unit

NR = "github.com/newrelic/go-agent/v3/newrelic"
CTX = 'defer newrelic.FromContext(ctx).StartSegment("slow").End()'
REQ = 'defer newrelic.FromContext(req.Context()).StartSegment("slow").End()'


def _instrument(source: bytes) -> str:
  unit = parse_unit("t.go", source)
  qualifier = resolve(unit)
  inject_all(unit, qualifier)
  out = render_unit(unit)
  assert not has_syntax_error(out)
  return out.decode()


def test_unmutated_unit_is_identical():
  source = b"package a\n\nvar x = 1\n"
  unit = parse_unit("t.go", source)
  assert render_unit(unit) == source


def test_multiline_body_and_single_import():
  source = b'package main\n\nimport "fmt"\n\nfunc A() {\n\tfmt.Println("a")\n}\n'
  expected = (
    "package main\n\n"
    'import "fmt"\n'
    f'import "{NR}"\n\n'
    "func A() {\n"
    f"\t{CTX}\n"
    f"\t{REQ}\n"
    '\tfmt.Println("a")\n'
    "}\n"
  )
  assert _instrument(source) == expected


def test_empty_body():
  source = f'package a\n\nimport "{NR}"\n\nfunc A() {{}}\n'.encode()
  expected = f'package a\n\nimport "{NR}"\n\nfunc A() {{\n\t{CTX}\n\t{REQ}\n}}\n'
  assert _instrument(source) == expected


def test_blank_body_whitespace_is_replaced():
  source = f'package a\n\nimport "{NR}"\n\nfunc A() {{\n\n}}\n'.encode()
  expected = f'package a\n\nimport "{NR}"\n\nfunc A() {{\n\t{CTX}\n\t{REQ}\n}}\n'
  assert _instrument(source) == expected


def test_one_line_body():
  source = f'package a\n\nimport "{NR}"\n\nfunc A() int {{ return 1 }}\n'.encode()
  out = _instrument(source)
  assert f"func A() int {{\n\t{CTX}\n\t{REQ}\n\t return 1 }}" in out


def test_brace_line_comment_is_kept_on_its_line():
  source = f'package a\n\nimport "{NR}"\n\nfunc A() {{ // entry\n\treturn\n}}\n'.encode()
  out = _instrument(source)
  assert f"func A() {{ // entry\n\t{CTX}\n\t{REQ}\n\treturn\n}}" in out


def test_grouped_import_receives_new_spec():
  source = b'package a\n\nimport (\n\t"context"\n\t"net/http"\n)\n\nfunc A() {}\n'
  out = _instrument(source)
  assert f'import (\n\t"context"\n\t"net/http"\n\t"{NR}"\n)' in out


def test_grouped_import_on_one_line():
  source = b'package a\n\nimport ("fmt")\n\nfunc A() {}\n'
  out = _instrument(source)
  assert f'import ("fmt"\n\t"{NR}"\n)' in out


def test_import_after_package_clause():
  source = b"package a\n\nfunc A() {}\n"
  out = _instrument(source)
  assert out.startswith(f'package a\n\nimport "{NR}"\n\nfunc A() {{\n')


def test_statements_are_indented_per_declaration():
  source = f'package a\n\nimport "{NR}"\n\nfunc A(){{}}\nfunc B(){{}}\n'.encode()
  out = _instrument(source)
  assert out.count(f"\t{CTX}\n") == 2
  assert out.index("func A()") < out.index(CTX) < out.index("func B()")


def test_apply_edits_right_to_left():
  assert apply_edits(b"abcdef", [(1, 1, "X"), (4, 6, "Y")]) == b"aXbcdY"


def test_import_goes_after_trailing_comment_of_single_import():
  out = _instrument(b'package a\n\nimport "fmt" // why\n\nfunc A() {}\n')
  assert out.startswith(f'package a\n\nimport "fmt" // why\nimport "{NR}"\n\nfunc A() {{')


def test_import_goes_after_package_clause_comment():
  out = _instrument(b'package a // import "x"\n\nfunc A() {}\n')
  assert out.startswith(f'package a // import "x"\n\nimport "{NR}"\n\nfunc A() {{')


def test_import_before_code_on_same_line():
  out = _instrument(b'package a; func A() {}\n')
  assert out.startswith(f'package a\n\nimport "{NR}"; func A() {{')
