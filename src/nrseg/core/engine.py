"""
Orchestration Engine for Segment Injection.

This module provides the `SegmentEngine`, the driver for instrumenting one Go
file, and the functional entry point :func:`transform`.

The pipeline consists of:

1.  **Parsing**: Source bytes are parsed with tree-sitter into a
    `CompilationUnit`.
2.  **Import Resolution**: The New Relic import is located (or appended) and
    the qualifier for injected calls is resolved.
3.  **Injection**: Every function and method with a body receives the two
    deferred segment statements, in source order.
4.  **Output**: The unit is rendered, validated, canonically printed and its
    imports reconciled.

`transform` raises on failure and never returns partial output. `run` wraps it
for batch callers, capturing errors and trace events in a `ConversionResult`.
"""

import logging
from typing import List, Optional, Tuple

from nrseg.config import RuntimeConfig
from nrseg.core import builder, injector, locator
from nrseg.core.conversion_result import ConversionResult, InspectionReport
from nrseg.core.errors import NrsegError
from nrseg.core.imports import ImportResolver
from nrseg.core.model import CompilationUnit
from nrseg.core.pipeline import OutputPipeline
from nrseg.core.syntax import parse_unit
from nrseg.core.tracer import TraceLogger
from nrseg.core.walker import is_generated

logger = logging.getLogger(__name__)


class SegmentEngine:
  """
  Instruments Go compilation units.

  The engine holds configuration only; every call builds and discards its own
  unit, so one engine may serve any number of files.
  """

  def __init__(
    self,
    config: Optional[RuntimeConfig] = None,
    pipeline: Optional[OutputPipeline] = None,
    resolver: Optional[ImportResolver] = None,
  ):
    """
    Initializes the Engine.

    Args:
        config (RuntimeConfig, optional): Runtime configuration. Defaults are used if None.
        pipeline (OutputPipeline, optional): Output stages. Built from config if None.
        resolver (ImportResolver, optional): Import resolver for the instrumentation package.
    """
    self.config = config or RuntimeConfig()
    self.pipeline = pipeline or OutputPipeline.from_config(self.config)
    self.resolver = resolver or ImportResolver()

  def instrument(self, unit: CompilationUnit, tracer: Optional[TraceLogger] = None) -> List[str]:
    """
    Resolves the qualifier and injects segments into the unit.

    Args:
        unit: The parsed unit. Mutated in place.
        tracer: Optional trace recorder.

    Returns:
        List[str]: Display names of the instrumented declarations.
    """
    tracer = tracer or TraceLogger(unit.filename)

    with tracer.phase("Import Resolution", self.resolver.path):
      had_import = self.resolver.find(unit) is not None
      qualifier = self.resolver.resolve(unit)
      tracer.log_import("reused" if had_import else "added", self.resolver.path, qualifier)

    with tracer.phase("Injection"):
      touched = injector.inject_all(unit, qualifier)
      for decl in unit.declarations:
        if decl.body is None:
          tracer.log_skip(decl.display_name, decl.line, "no body")
        else:
          tracer.log_injection(
            decl.display_name, decl.line, [builder.render(s) for s in decl.body.leading_synthetic()]
          )

    return [d.display_name for d in touched]

  def transform(self, filename: str, source: bytes, tracer: Optional[TraceLogger] = None) -> bytes:
    """
    Instruments one file.

    Args:
        filename: Path of the file, used for error reporting and import resolution.
        source: The file contents.
        tracer: Optional trace recorder.

    Returns:
        bytes: The transformed source.

    Raises:
        ParseError: If the source is not valid Go.
        ImportResolutionError: If the existing imports cannot be resolved.
        FormatError: If the mutated unit cannot be printed.
        ImportReconcileError: If import reconciliation fails.
    """
    code, _ = self._process(filename, source, tracer or TraceLogger(filename))
    return code

  def _process(self, filename: str, source: bytes, tracer: TraceLogger) -> Tuple[bytes, List[str]]:
    with tracer.phase("Parsing", filename):
      unit = parse_unit(filename, source)

    instrumented = self.instrument(unit, tracer)

    with tracer.phase("Output", "render, gofmt, goimports"):
      out = self.pipeline.run(unit)
    return out, instrumented

  def run(self, filename: str, source: bytes) -> ConversionResult:
    """
    Executes the full pipeline, capturing failures in the result.

    Args:
        filename: Path of the file.
        source: The file contents.

    Returns:
        ConversionResult: Object containing transformed code and error logs.
    """
    tracer = TraceLogger(filename)
    try:
      with tracer.phase("Segment Injection", filename):
        code, instrumented = self._process(filename, source, tracer)
    except NrsegError as e:
      tracer.log_error(e)
      logger.debug("Transformation of %s failed: %s", filename, e)
      return ConversionResult.failed(filename, e, tracer.export())

    return ConversionResult(
      filename=filename,
      code=code,
      changed=code != source,
      instrumented=instrumented,
      trace_events=tracer.export(),
    )

  def inspect(self, filename: str, source: bytes) -> InspectionReport:
    """
    Reports what `transform` would do, without rendering anything.

    Args:
        filename: Path of the file.
        source: The file contents.

    Returns:
        InspectionReport: Planned declarations, qualifier and import action.
    """
    report = InspectionReport(filename=filename, generated=is_generated(source))
    try:
      unit = parse_unit(filename, source)
      had_import = self.resolver.find(unit) is not None
      qualifier = self.resolver.resolve(unit)
    except NrsegError as e:
      report.errors.append(f"{type(e).__name__}: {e.message}")
      return report

    report.import_added = not had_import
    report.qualifier = qualifier or builder.DEFAULT_PACKAGE_NAME
    report.declarations = [d.display_name for d in locator.select(unit)]
    return report


def transform(filename: str, source: bytes, config: Optional[RuntimeConfig] = None) -> bytes:
  """
  Instruments one Go file.

  Args:
      filename: Path of the file.
      source: The file contents.
      config: Optional runtime configuration (external stages).

  Returns:
      bytes: The transformed source.

  Raises:
      NrsegError: One of ParseError, ImportResolutionError, FormatError or
          ImportReconcileError.
  """
  return SegmentEngine(config=config).transform(filename, source)
