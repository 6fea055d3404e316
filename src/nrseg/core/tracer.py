"""
Per-file Trace of a Segment Injection Run.

A `TraceLogger` is created for every file the engine processes. It records:

1. Phases (parsing, import resolution, injection, output), nested by id.
2. How the instrumentation import was resolved (reused or added, qualifier).
3. Each declaration that received statements, and each one that was skipped.
4. The error that aborted the run, if any.

`export()` yields plain dicts; the CLI writes them with ``--json-trace``.
"""

import time
import uuid
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional


class TraceEventType(str, Enum):
  PHASE_START = "phase_start"
  PHASE_END = "phase_end"
  IMPORT_ACTION = "import_action"
  INJECTION = "injection"
  SKIP = "skip"
  ERROR = "error"


@dataclass
class TraceEvent:
  id: str
  type: TraceEventType
  timestamp: float
  description: str
  filename: str = ""
  parent_id: Optional[str] = None
  metadata: Dict[str, Any] = field(default_factory=dict)


class TraceLogger:
  """
  Event recorder for one file.

  Attributes:
      filename (str): The file the events belong to.
  """

  def __init__(self, filename: str = ""):
    self.filename = filename
    self._events: List[TraceEvent] = []
    self._open: List[str] = []

  @property
  def current_phase(self) -> Optional[str]:
    return self._open[-1] if self._open else None

  def _emit(self, kind: TraceEventType, description: str, **metadata: Any) -> str:
    event = TraceEvent(
      id=uuid.uuid4().hex,
      type=kind,
      timestamp=time.time(),
      description=description,
      filename=self.filename,
      parent_id=self.current_phase,
      metadata=metadata,
    )
    self._events.append(event)
    return event.id

  def start_phase(self, name: str, detail: str = "") -> str:
    """Opens a phase nested in the current one and returns its id."""
    phase_id = self._emit(TraceEventType.PHASE_START, name, detail=detail)
    self._open.append(phase_id)
    return phase_id

  def end_phase(self) -> None:
    """Closes the innermost phase. Does nothing when none is open."""
    if not self._open:
      return
    phase_id = self._open.pop()
    self._events.append(
      TraceEvent(
        id=uuid.uuid4().hex,
        type=TraceEventType.PHASE_END,
        timestamp=time.time(),
        description="end",
        filename=self.filename,
        parent_id=phase_id,
      )
    )

  @contextmanager
  def phase(self, name: str, detail: str = "") -> Iterator[str]:
    """
    Wraps a block in a phase. The phase is closed even when the block raises.

    Args:
        name: Phase name.
        detail: Free-form detail stored in the start event.

    Yields:
        str: The phase id.
    """
    phase_id = self.start_phase(name, detail)
    try:
      yield phase_id
    finally:
      while self._open and self._open[-1] != phase_id:
        self.end_phase()
      self.end_phase()

  def log_import(self, action: str, path: str, qualifier: str) -> None:
    """
    Records the import resolution outcome.

    Args:
        action: ``"added"`` or ``"reused"``.
        path: Import path of the instrumentation package.
        qualifier: Name the injected calls use (empty for the default).
    """
    self._emit(TraceEventType.IMPORT_ACTION, f"{action} {path}", action=action, path=path, qualifier=qualifier)

  def log_injection(self, declaration: str, line: int, statements: List[str]) -> None:
    self._emit(
      TraceEventType.INJECTION,
      f"Instrumented {declaration}",
      declaration=declaration,
      line=line,
      statements=list(statements),
    )

  def log_skip(self, declaration: str, line: int, reason: str) -> None:
    self._emit(TraceEventType.SKIP, f"Skipped {declaration}", declaration=declaration, line=line, reason=reason)

  def log_error(self, error: Exception) -> None:
    self._emit(TraceEventType.ERROR, str(error), error=type(error).__name__)

  def export(self) -> List[Dict[str, Any]]:
    """Returns the events as JSON-serializable dicts, in recording order."""
    return [asdict(e) for e in self._events]
