"""
Compilation Unit Model.

A thin, mutable view over one parsed Go source file. The model records the
pieces of the syntax tree the instrumentation passes care about (imports and
top-level function/method declarations) together with their byte offsets in
the original source, so the printer can serialize the mutated unit without
disturbing anything it did not touch.

Nodes that carry no source span were created during the transformation
(appended imports, injected statements).
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple


@dataclass
class ImportSpec:
  """
  A single path / alias pair of an import declaration.

  The path is kept as the raw string literal found in the source; decoding it
  is left to the import resolver, which owns the error reporting.

  Attributes:
      literal: The quoted path literal (e.g. ``'"fmt"'``).
      alias: The explicit local name, ``"."`` or ``"_"``; None when absent.
      span: (start, end) byte offsets in the source, None for added imports.
  """

  literal: str
  alias: Optional[str] = None
  span: Optional[Tuple[int, int]] = None

  @classmethod
  def for_path(cls, path: str, alias: Optional[str] = None) -> "ImportSpec":
    return cls(literal=f'"{path}"', alias=alias)

  @property
  def is_synthetic(self) -> bool:
    return self.span is None

  def to_source(self) -> str:
    return f"{self.alias} {self.literal}" if self.alias else self.literal


@dataclass
class ImportDecl:
  """
  One ``import`` keyword declaration.

  Attributes:
      start: Offset of the ``import`` keyword.
      end: Offset just past the declaration.
      rparen: Offset of the closing parenthesis for grouped declarations.
  """

  start: int
  end: int
  rparen: Optional[int] = None

  @property
  def grouped(self) -> bool:
    return self.rparen is not None


@dataclass
class SourceStatement:
  """A statement present in the original source, kept verbatim."""

  text: str
  start: int
  end: int


@dataclass
class Body:
  """
  The executable block of a declaration.

  Attributes:
      lbrace: Offset of the opening brace.
      rbrace: Offset of the closing brace.
      statements: Ordered statements. Original statements are
          :class:`SourceStatement` objects, injected ones are builder nodes.
  """

  lbrace: int
  rbrace: int
  statements: List[Any] = field(default_factory=list)

  def leading_synthetic(self) -> List[Any]:
    """
    Returns the injected statements placed in front of the original ones.

    Returns:
        List[Any]: Builder statements preceding the first source statement.
    """
    out = []
    for stmt in self.statements:
      if isinstance(stmt, SourceStatement):
        break
      out.append(stmt)
    return out


@dataclass
class Declaration:
  """
  A top-level function or method declaration.

  Attributes:
      kind: ``"function"`` or ``"method"``.
      name: Declared identifier.
      receiver: Receiver list text for methods (e.g. ``"(s *Server)"``).
      parameters: Parameter list text.
      body: The block, None for signatures without one.
      line: 1-based line of the declaration.
  """

  kind: str
  name: str
  parameters: str = "()"
  receiver: Optional[str] = None
  body: Optional[Body] = None
  line: int = 0

  @property
  def display_name(self) -> str:
    if self.receiver:
      return f"{self.receiver} {self.name}"
    return self.name


@dataclass
class CompilationUnit:
  """
  Root of one source file's model.

  Exclusively owned by a single transformation call.
  """

  filename: str
  source: bytes
  package_name: str = ""
  package_end: int = 0
  imports: List[ImportSpec] = field(default_factory=list)
  import_decls: List[ImportDecl] = field(default_factory=list)
  declarations: List[Declaration] = field(default_factory=list)

  def added_imports(self) -> List[ImportSpec]:
    return [spec for spec in self.imports if spec.is_synthetic]

  def is_mutated(self) -> bool:
    """
    Checks whether any pass has changed the unit.

    Returns:
        bool: True if an import was appended or a body received statements.
    """
    if self.added_imports():
      return True
    return any(d.body is not None and d.body.leading_synthetic() for d in self.declarations)
