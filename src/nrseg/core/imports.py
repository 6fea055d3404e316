"""
Import Resolution for the Instrumentation Package.

Finds (or adds) the import of the New Relic Go agent in a compilation unit and
returns the qualifier the injected calls must use:

- imported with an alias ``nr`` -> ``"nr"``
- imported without alias -> ``""`` (callers use the default name ``newrelic``)
- not imported -> an import without alias is appended, ``""`` is returned

The import list is only ever appended to, at most once per call, and never
when the path is already present under any alias.
"""

import ast
import logging
import warnings
from typing import Optional

from nrseg.core.errors import ImportResolutionError
from nrseg.core.model import CompilationUnit, ImportSpec

logger = logging.getLogger(__name__)

NEWRELIC_IMPORT_PATH = "github.com/newrelic/go-agent/v3/newrelic"

# Characters the Go toolchain refuses in import paths.
_ILLEGAL_PATH_CHARS = frozenset("!\"#$%&'()*,:;<=>?[\\]^`{|}�")


def unquote_import_path(literal: str, filename: Optional[str] = None) -> str:
  """
  Decodes a Go import path string literal.

  Args:
      literal: Interpreted (``"..."``) or raw (`` `...` ``) string literal.
      filename: File being processed, for error reporting.

  Returns:
      str: The decoded path.

  Raises:
      ImportResolutionError: If the literal is malformed or the path is not a
          legal import path.
  """
  if len(literal) >= 2 and literal[0] == literal[-1] == "`":
    path = literal[1:-1]
  elif len(literal) >= 2 and literal[0] == literal[-1] == '"':
    try:
      with warnings.catch_warnings():
        # Unknown escapes only warn in Python but are errors in Go.
        warnings.simplefilter("error")
        path = ast.literal_eval(literal)
    except (ValueError, SyntaxError, Warning) as e:
      raise ImportResolutionError(f"invalid import path literal {literal}: {e}", filename) from e
  else:
    raise ImportResolutionError(f"invalid import path literal {literal!r}", filename)

  if not isinstance(path, str) or not path:
    raise ImportResolutionError(f"invalid import path {literal}", filename)
  if any(c.isspace() or not c.isprintable() or c in _ILLEGAL_PATH_CHARS for c in path):
    raise ImportResolutionError(f"invalid import path {literal}", filename)
  return path


class ImportResolver:
  """
  Resolves the qualifier of the instrumentation package for one unit.

  Attributes:
      path (str): Canonical import path to look for.
  """

  def __init__(self, path: str = NEWRELIC_IMPORT_PATH):
    self.path = path

  def find(self, unit: CompilationUnit) -> Optional[ImportSpec]:
    """
    Locates the existing import of the package.

    Every import path of the unit is decoded, so a malformed entry anywhere in
    the list is reported even when the package is imported elsewhere.

    Args:
        unit: The compilation unit.

    Returns:
        Optional[ImportSpec]: The matching spec, if present.
    """
    match = None
    for spec in unit.imports:
      if unquote_import_path(spec.literal, unit.filename) == self.path and match is None:
        match = spec
    return match

  def resolve(self, unit: CompilationUnit) -> str:
    """
    Returns the qualifier, appending the import when it is missing.

    Args:
        unit: The compilation unit. Mutated when the import is absent.

    Returns:
        str: Explicit alias, or ``""`` for the package's default name.

    Raises:
        ImportResolutionError: If an import path cannot be decoded, or the
            package is only imported with the blank identifier.
    """
    spec = self.find(unit)

    if spec is None:
      unit.imports.append(ImportSpec.for_path(self.path))
      logger.debug("Added import %s to %s", self.path, unit.filename)
      return ""

    if spec.alias == "_":
      raise ImportResolutionError(
        f"{self.path} is imported with the blank identifier and cannot qualify calls",
        unit.filename,
      )

    return spec.alias or ""


def resolve(unit: CompilationUnit) -> str:
  """Resolves the New Relic qualifier of ``unit``."""
  return ImportResolver().resolve(unit)
