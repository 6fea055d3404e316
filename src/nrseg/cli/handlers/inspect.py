"""
Inspect Command Handler.

Implements ``nrseg inspect``: reports, per file, which declarations a rewrite
would instrument, which qualifier the injected calls would use and whether the
import would be appended. Files carrying a ``Code generated ... DO NOT EDIT.``
marker are flagged. Nothing is written.
"""

from pathlib import Path
from typing import List

from rich.markup import escape
from rich.table import Table

from nrseg.config import RuntimeConfig
from nrseg.core.conversion_result import InspectionReport
from nrseg.core.engine import SegmentEngine
from nrseg.core.walker import iter_source_files
from nrseg.utils.console import console, log_error, log_warning


def handle_inspect(input_path: Path, ignore_dirs: List[str]) -> int:
  """
  Handles the 'inspect' command execution.

  Args:
      input_path: File or directory to inspect.
      ignore_dirs: Extra directory names to skip.

  Returns:
      int: 0 when every file could be analysed, 1 otherwise.
  """
  if not input_path.exists():
    log_error(f"Input not found: {escape(str(input_path))}")
    return 1

  config = RuntimeConfig.load(
    ignore_dirs=ignore_dirs,
    search_path=input_path if input_path.is_dir() else input_path.parent,
  )
  engine = SegmentEngine(config=config)

  reports: List[InspectionReport] = []
  for path in iter_source_files(input_path, config.effective_ignore_dirs):
    try:
      source = path.read_bytes()
    except OSError as e:
      reports.append(InspectionReport(filename=str(path), errors=[str(e)]))
      continue
    reports.append(engine.inspect(str(path), source))

  if not reports:
    log_warning(f"No .go files found in {escape(str(input_path))}")
    return 0

  _print_reports(reports)
  return 1 if any(r.errors for r in reports) else 0


def _print_reports(reports: List[InspectionReport]) -> None:
  table = Table(title="Segment Injection Plan")
  table.add_column("File", style="cyan")
  table.add_column("Declarations")
  table.add_column("Qualifier", justify="center")
  table.add_column("Import", justify="center")
  table.add_column("Generated", justify="center")

  for rep in reports:
    if rep.errors:
      table.add_row(escape(rep.filename), f"[error]{escape('; '.join(rep.errors))}[/error]", "-", "-", "-")
      continue
    table.add_row(
      escape(rep.filename),
      escape(", ".join(rep.declarations)) or "[dim]none[/dim]",
      escape(rep.qualifier),
      "add" if rep.import_added else "keep",
      "yes" if rep.generated else "",
    )

  console.print(table)
  planned = sum(len(r.declarations) for r in reports)
  changing = sum(1 for r in reports if r.would_change)
  console.print(f"\n[bold]Summary:[/bold] {planned} declarations in {len(reports)} files, {changing} would change.")
