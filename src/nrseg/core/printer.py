"""
Unit Printer.

Serializes a mutated :class:`~nrseg.core.model.CompilationUnit` back to
source bytes. Untouched regions are copied verbatim from the original source;
synthetic nodes (appended imports and injected statements) are rendered and
spliced in at their anchor offsets. The output is laid out the way ``gofmt``
would lay it out for the common cases, one tab of indentation and one
statement per line, so that it is already close to canonical before the
external printer runs.
"""

from typing import List, Tuple

from nrseg.core import builder
from nrseg.core.model import Body, CompilationUnit, ImportSpec

# (start, end, replacement) over the original byte offsets
Edit = Tuple[int, int, str]


def render_unit(unit: CompilationUnit) -> bytes:
  """
  Renders the unit to bytes.

  Args:
      unit: The (possibly mutated) compilation unit.

  Returns:
      bytes: The serialized source. Identical to ``unit.source`` when the
      unit was not mutated.
  """
  edits: List[Edit] = []

  added = unit.added_imports()
  if added:
    edits.append(_import_edit(unit, added))

  for decl in unit.declarations:
    if decl.body is None:
      continue
    synthetic = decl.body.leading_synthetic()
    if synthetic:
      edits.append(_body_edit(unit.source, decl.body, synthetic))

  return apply_edits(unit.source, edits)


def apply_edits(source: bytes, edits: List[Edit]) -> bytes:
  """
  Applies non-overlapping edits to the source.

  Args:
      source: Original bytes.
      edits: (start, end, text) triples over the original offsets.

  Returns:
      bytes: The edited source.
  """
  out = bytearray(source)
  for start, end, text in sorted(edits, key=lambda e: (e[0], e[1]), reverse=True):
    out[start:end] = text.encode("utf-8")
  return bytes(out)


def _import_edit(unit: CompilationUnit, specs: List[ImportSpec]) -> Edit:
  src = unit.source
  lines = [spec.to_source() for spec in specs]

  grouped = [d for d in unit.import_decls if d.grouped]
  if grouped:
    decl = grouped[-1]
    prefix = "" if src[: decl.rparen].endswith(b"\n") else "\n"
    return decl.rparen, decl.rparen, prefix + "".join(f"\t{line}\n" for line in lines)

  if unit.import_decls:
    end = _line_end(src, unit.import_decls[-1].end)
    return end, end, "".join(f"\nimport {line}" for line in lines)

  if unit.package_end:
    end = _line_end(src, unit.package_end)
    return end, end, "".join(f"\n\nimport {line}" for line in lines)

  return 0, 0, "".join(f"import {line}\n" for line in lines) + "\n"


def _line_end(src: bytes, offset: int) -> int:
  """Moves past a trailing line comment so the insertion does not split it."""
  newline = src.find(b"\n", offset)
  if newline == -1:
    newline = len(src)
  rest = src[offset:newline].strip()
  if not rest or rest.startswith(b"//"):
    return newline
  return offset


def _body_edit(src: bytes, body: Body, statements: List[builder.Node]) -> Edit:
  rendered = "".join(f"\n\t{builder.render(stmt)}" for stmt in statements)
  start = body.lbrace + 1

  inner = src[start : body.rbrace]
  if not inner.strip():
    # Empty block: replace whatever whitespace it held.
    return start, body.rbrace, rendered + "\n"

  newline = src.find(b"\n", start, body.rbrace)
  head = src[start : newline if newline != -1 else body.rbrace].strip()
  if newline != -1 and (not head or head.startswith(b"//")):
    return newline, newline, rendered

  # Statements share the line with the opening brace.
  return start, start, rendered + "\n\t"
