"""
Result models returned to batch callers.

`ConversionResult` is what `SegmentEngine.run` produces for one file;
`InspectionReport` is the read-only plan produced by `SegmentEngine.inspect`.
Both are pydantic models so the CLI can dump them as JSON.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class ConversionResult(BaseModel):
  """
  Outcome of instrumenting one file.

  ``code`` is only meaningful when ``success`` is True; a failed run never
  carries partial output.
  """

  filename: str = ""
  code: bytes = Field(default=b"", description="Transformed source; empty on failure.")
  errors: List[str] = Field(default_factory=list, description="'ErrorType: message' entries.")
  success: bool = True
  changed: bool = Field(default=False, description="Output bytes differ from the input bytes.")
  instrumented: List[str] = Field(default_factory=list, description="Display names of instrumented declarations.")
  trace_events: List[Dict[str, Any]] = Field(default_factory=list)

  @classmethod
  def failed(cls, filename: str, error: Exception, trace_events=None) -> "ConversionResult":
    """
    Builds the result of a run that raised.

    Args:
        filename: The file being processed.
        error: The exception. Its ``message`` attribute is used when present.
        trace_events: Events recorded before the failure.

    Returns:
        ConversionResult: A result with ``success=False`` and no code.
    """
    message = getattr(error, "message", None) or str(error)
    return cls(
      filename=filename,
      errors=[f"{type(error).__name__}: {message}"],
      success=False,
      trace_events=trace_events or [],
    )

  @property
  def has_errors(self) -> bool:
    return bool(self.errors)


class InspectionReport(BaseModel):
  """
  What a rewrite would do to a file, computed without producing output.
  """

  filename: str
  qualifier: str = Field(default="", description="Name the injected calls would use.")
  import_added: bool = Field(default=False, description="True if the import would be appended.")
  declarations: List[str] = Field(default_factory=list, description="Declarations that would be instrumented.")
  generated: bool = Field(default=False, description="True if the file carries a 'DO NOT EDIT' marker.")
  errors: List[str] = Field(default_factory=list)

  @property
  def would_change(self) -> bool:
    return not self.errors and (self.import_added or bool(self.declarations))
