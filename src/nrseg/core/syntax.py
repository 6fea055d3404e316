"""
Go Source Parsing.

Parses Go source bytes with the tree-sitter Go grammar and hydrates the
:class:`~nrseg.core.model.CompilationUnit` model consumed by the
instrumentation passes.

Only the top level of the file is modelled: the package clause, the import
declarations and the function/method declarations. Everything else stays in
the original bytes and is carried through untouched by the printer.
"""

import logging
from typing import Iterator, List, Optional, Tuple

import tree_sitter_go
from tree_sitter import Language, Node, Parser

from nrseg.core.errors import ParseError
from nrseg.core.model import Body, CompilationUnit, Declaration, ImportDecl, ImportSpec, SourceStatement

logger = logging.getLogger(__name__)

GO_LANGUAGE = Language(tree_sitter_go.language())

DECLARATION_KINDS = {
  "function_declaration": "function",
  "method_declaration": "method",
}

# Named node types allowed after the imports.
TOP_LEVEL_DECLARATIONS = frozenset(
  {"function_declaration", "method_declaration", "const_declaration", "var_declaration", "type_declaration"}
)


def _text(node: Node, source: bytes) -> str:
  return source[node.start_byte : node.end_byte].decode("utf-8")


def _first_error(node: Node) -> Optional[Node]:
  """
  Depth-first search for the first ERROR or MISSING node.

  Args:
      node: Subtree root.

  Returns:
      Optional[Node]: The offending node, if any.
  """
  if node.type == "ERROR" or node.is_missing:
    return node
  for child in node.children:
    if child.has_error or child.is_missing:
      found = _first_error(child)
      if found is not None:
        return found
  return None


def _layout_error(root: Node) -> Optional[Tuple[Node, str]]:
  """
  Checks the top-level ordering rules the grammar does not enforce.

  The package clause comes first, imports precede every other declaration and
  only declarations appear outside function bodies. A missing package clause
  is accepted.

  Args:
      root: The ``source_file`` node.

  Returns:
      Optional[Tuple[Node, str]]: The offending node and a message, or None.
  """
  seen_package = False
  seen_other = False
  first = True
  for child in root.named_children:
    if child.type == "comment":
      continue
    if child.type == "package_clause":
      if seen_package:
        return child, "duplicate package clause"
      if not first:
        return child, "package clause must come first"
      seen_package = True
    elif child.type == "import_declaration":
      if seen_other:
        return child, "imports must appear before other declarations"
    elif child.type in TOP_LEVEL_DECLARATIONS:
      seen_other = True
    else:
      return child, "non-declaration statement outside function body"
    first = False
  return None


def has_syntax_error(source: bytes) -> bool:
  """
  Checks whether the bytes parse cleanly as Go.

  Args:
      source: Go source bytes.

  Returns:
      bool: True if the parser reported an error or a missing token, or the
      top-level layout is invalid.
  """
  root = Parser(GO_LANGUAGE).parse(source).root_node
  return root.has_error or _layout_error(root) is not None


def parse_unit(filename: str, source: bytes) -> CompilationUnit:
  """
  Parses Go source into a CompilationUnit.

  Args:
      filename: Name of the file, used for error reporting.
      source: The raw file contents.

  Returns:
      CompilationUnit: The hydrated model.

  Raises:
      ParseError: If the source is not valid UTF-8 or has a syntax error.
  """
  try:
    source.decode("utf-8")
  except UnicodeDecodeError as e:
    raise ParseError(f"source is not valid UTF-8: {e}", filename) from e

  tree = Parser(GO_LANGUAGE).parse(source)
  root = tree.root_node

  if root.has_error:
    bad = _first_error(root) or root
    row, col = bad.start_point
    raise ParseError(f"syntax error at {row + 1}:{col + 1} near {_text(bad, source)[:20]!r}", filename)

  misplaced = _layout_error(root)
  if misplaced is not None:
    bad, reason = misplaced
    row, col = bad.start_point
    raise ParseError(f"syntax error at {row + 1}:{col + 1}: {reason}", filename)

  unit = CompilationUnit(filename=filename, source=source)

  for child in root.named_children:
    if child.type == "package_clause":
      unit.package_end = child.end_byte
      for part in child.named_children:
        if part.type == "package_identifier":
          unit.package_name = _text(part, source)
    elif child.type == "import_declaration":
      decl, specs = _read_import_declaration(child, source)
      unit.import_decls.append(decl)
      unit.imports.extend(specs)
    elif child.type in DECLARATION_KINDS:
      unit.declarations.append(_read_declaration(child, source))

  logger.debug(
    "Parsed %s: %d imports, %d declarations",
    filename,
    len(unit.imports),
    len(unit.declarations),
  )
  return unit


def _read_import_declaration(node: Node, source: bytes):
  rparen = None
  specs: List[ImportSpec] = []

  for child in node.children:
    if child.type == "import_spec":
      specs.append(_read_import_spec(child, source))
    elif child.type == "import_spec_list":
      for item in child.children:
        if item.type == "import_spec":
          specs.append(_read_import_spec(item, source))
        elif item.type == ")":
          rparen = item.start_byte

  return ImportDecl(start=node.start_byte, end=node.end_byte, rparen=rparen), specs


def _read_import_spec(node: Node, source: bytes) -> ImportSpec:
  name = node.child_by_field_name("name")
  path = node.child_by_field_name("path")
  return ImportSpec(
    literal=_text(path, source) if path is not None else "",
    alias=_text(name, source) if name is not None else None,
    span=(node.start_byte, node.end_byte),
  )


def _read_declaration(node: Node, source: bytes) -> Declaration:
  name = node.child_by_field_name("name")
  params = node.child_by_field_name("parameters")
  receiver = node.child_by_field_name("receiver")
  block = node.child_by_field_name("body")

  body = None
  if block is not None:
    body = Body(
      lbrace=block.start_byte,
      rbrace=block.end_byte - 1,
      statements=[SourceStatement(_text(s, source), s.start_byte, s.end_byte) for s in _block_statements(block)],
    )

  return Declaration(
    kind=DECLARATION_KINDS[node.type],
    name=_text(name, source) if name is not None else "",
    parameters=_text(params, source) if params is not None else "()",
    receiver=_text(receiver, source) if receiver is not None else None,
    body=body,
    line=node.start_point[0] + 1,
  )


def _block_statements(block: Node) -> Iterator[Node]:
  # Newer grammars wrap the statements of a block in a statement_list node.
  for child in block.named_children:
    if child.type == "comment":
      continue
    if child.type == "statement_list":
      for stmt in child.named_children:
        if stmt.type != "comment":
          yield stmt
    else:
      yield child
