"""
Output Pipeline.

Turns a mutated compilation unit into final source bytes:

1.  **Render**: the unit printer splices the synthetic nodes into the original
    source.
2.  **Validate**: the rendered bytes are parsed again. A syntax error at this
    point means a synthetic node was malformed and is reported as a
    :class:`~nrseg.core.errors.FormatError`.
3.  **Canonical printing**: ``gofmt`` normalizes the layout.
4.  **Import reconciliation**: ``goimports`` groups and orders the import
    declarations and drops unused ones.

Stages 3 and 4 are external programs fed through stdin. Either can be
disabled through :class:`~nrseg.config.RuntimeConfig`, in which case the
rendered bytes pass through unchanged.
"""

import logging
import os
import subprocess
from typing import List, Optional, Type

from nrseg.config import RuntimeConfig
from nrseg.core.errors import FormatError, ImportReconcileError, NrsegError
from nrseg.core.model import CompilationUnit
from nrseg.core.printer import render_unit
from nrseg.core.syntax import has_syntax_error

logger = logging.getLogger(__name__)


class ExternalStage:
  """
  A source-to-source filter backed by an external command.

  The source is written to the command's stdin and the result read from its
  stdout. A non-zero exit status or a missing executable raises ``error_cls``.

  Attributes:
      command (List[str]): Executable and fixed arguments.
  """

  error_cls: Type[NrsegError] = NrsegError

  def __init__(self, command: List[str]):
    if not command:
      raise ValueError(f"{type(self).__name__} requires a command")
    self.command = list(command)

  @property
  def name(self) -> str:
    return os.path.basename(self.command[0])

  def argv(self, filename: str) -> List[str]:
    return list(self.command)

  def __call__(self, filename: str, source: bytes) -> bytes:
    argv = self.argv(filename)
    logger.debug("Running %s for %s", " ".join(argv), filename)
    try:
      proc = subprocess.run(argv, input=source, capture_output=True, check=False)
    except OSError as e:
      raise self.error_cls(f"cannot run {self.name}: {e}", filename) from e

    if proc.returncode != 0:
      detail = proc.stderr.decode("utf-8", errors="replace").strip()
      raise self.error_cls(f"{self.name} exited with status {proc.returncode}: {detail}", filename)
    return proc.stdout


class CanonicalPrinter(ExternalStage):
  """Canonical layout via ``gofmt``."""

  error_cls = FormatError


class ImportReconciler(ExternalStage):
  """
  Import grouping and pruning via ``goimports``.

  ``-srcdir`` points at the directory of the file so that imports are
  resolved relative to the module the file belongs to.
  """

  error_cls = ImportReconcileError

  def argv(self, filename: str) -> List[str]:
    return [*self.command, "-srcdir", os.path.dirname(filename) or "."]


class OutputPipeline:
  """
  Serializes a unit and hands it to the external stages.

  Attributes:
      printer (Optional[CanonicalPrinter]): Canonical printer, None to skip.
      reconciler (Optional[ImportReconciler]): Import reconciler, None to skip.
  """

  def __init__(
    self,
    printer: Optional[CanonicalPrinter] = None,
    reconciler: Optional[ImportReconciler] = None,
  ):
    self.printer = printer
    self.reconciler = reconciler

  @classmethod
  def from_config(cls, config: RuntimeConfig) -> "OutputPipeline":
    """
    Builds the pipeline described by the runtime configuration.

    Args:
        config: The runtime configuration.

    Returns:
        OutputPipeline: Pipeline with the configured external stages.
    """
    return cls(
      printer=CanonicalPrinter(config.printer_command) if config.printer_command else None,
      reconciler=ImportReconciler(config.reconciler_command) if config.reconciler_command else None,
    )

  def render(self, unit: CompilationUnit) -> bytes:
    """
    Renders the unit and checks the result still parses.

    Args:
        unit: The mutated unit.

    Returns:
        bytes: Rendered source.

    Raises:
        FormatError: If the rendered source is not valid Go.
    """
    rendered = render_unit(unit)
    if unit.is_mutated() and has_syntax_error(rendered):
      raise FormatError("rendered source has syntax errors; a synthetic node is malformed", unit.filename)
    return rendered

  def run(self, unit: CompilationUnit) -> bytes:
    """
    Executes every stage on the unit.

    Args:
        unit: The mutated unit.

    Returns:
        bytes: Final source bytes.

    Raises:
        FormatError: If rendering or canonical printing fails.
        ImportReconcileError: If import reconciliation fails.
    """
    out = self.render(unit)
    if self.printer is not None:
      out = self.printer(unit.filename, out)
    if self.reconciler is not None:
      out = self.reconciler(unit.filename, out)
    return out
