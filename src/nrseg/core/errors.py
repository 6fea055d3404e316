"""
Error Taxonomy for the Transformation Core.

Every failure of a single ``transform`` call is reported through one of the
exceptions below. A call either returns the complete transformed source or
raises; no partial output is ever produced.

- :class:`ParseError`: the input is not syntactically valid Go.
- :class:`ImportResolutionError`: an existing import entry prevents the
  qualifier from being resolved.
- :class:`FormatError`: the mutated unit cannot be serialized. This points to
  a malformed synthetic statement and should be treated as a defect.
- :class:`ImportReconcileError`: the import reconciliation stage failed.
"""

from typing import Optional


class NrsegError(Exception):
  """
  Base class for all per-file transformation failures.

  Attributes:
      filename (Optional[str]): The file being transformed when the error occurred.
  """

  def __init__(self, message: str, filename: Optional[str] = None):
    self.filename = filename
    self.message = message
    super().__init__(f"{filename}: {message}" if filename else message)


class ParseError(NrsegError):
  """Raised when the source bytes are not a valid Go compilation unit."""


class ImportResolutionError(NrsegError):
  """Raised when an existing import entry cannot be used to resolve the qualifier."""


class FormatError(NrsegError):
  """Raised when the mutated unit cannot be serialized or canonically printed."""


class ImportReconcileError(NrsegError):
  """Raised when the import reconciler rejects the serialized source."""
