"""
Rewrite Command Handler.

This module implements the ``nrseg rewrite`` command (the default command).
It orchestrates:
1. Configuration loading (``[tool.nrseg]`` + CLI overrides).
2. Source discovery with the ignore list.
3. Segment injection via the Engine.
4. Output routing: in place, or mirrored under ``--dist``.
5. Trace dumping and the batch summary.

The run stops at the first file that fails to transform.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional

from rich.markup import escape
from rich.table import Table

from nrseg.config import RuntimeConfig
from nrseg.core.conversion_result import ConversionResult
from nrseg.core.engine import SegmentEngine
from nrseg.core.walker import iter_source_files
from nrseg.utils.console import (
  console,
  log_error,
  log_info,
  log_success,
  log_warning,
)


def handle_rewrite(
  input_path: Path,
  ignore_dirs: List[str],
  dist: Optional[Path] = None,
  use_printer: Optional[bool] = None,
  use_reconciler: Optional[bool] = None,
  json_trace_path: Optional[Path] = None,
) -> int:
  """
  Handles the 'rewrite' command execution.

  Args:
      input_path: File or directory to instrument.
      ignore_dirs: Extra directory names to skip (``testdata`` is always skipped).
      dist: Mirror destination. Files are rewritten in place when None or
          equal to ``input_path``.
      use_printer: False disables gofmt.
      use_reconciler: False disables goimports.
      json_trace_path: Optional path to dump execution traces as JSON.

  Returns:
      int: Exit code (0 for success, 1 for failure).
  """
  if not input_path.exists():
    log_error(f"Input not found: {escape(str(input_path))}")
    return 1

  config = RuntimeConfig.load(
    ignore_dirs=ignore_dirs,
    dist=dist,
    use_printer=use_printer,
    use_reconciler=use_reconciler,
    search_path=input_path if input_path.is_dir() else input_path.parent,
  )
  engine = SegmentEngine(config=config)

  files = list(iter_source_files(input_path, config.effective_ignore_dirs))
  if not files:
    log_warning(f"No .go files found in {escape(str(input_path))}")
    return 0

  log_info(f"Processing {len(files)} files from {escape(str(input_path))}...")

  results: Dict[str, ConversionResult] = {}
  exit_code = 0
  for src_file in files:
    result = _rewrite_single_file(engine, input_path, src_file, config.dist)
    results[_display_name(input_path, src_file)] = result
    if not result.success:
      exit_code = 1
      break

  if json_trace_path:
    _dump_traces(json_trace_path, results)

  _print_batch_summary(results)
  return exit_code


def _display_name(root: Path, path: Path) -> str:
  if root.is_file():
    return path.name
  return str(path.relative_to(root))


def _destination(root: Path, dist: Optional[Path], path: Path) -> Path:
  """
  Resolves where the output of ``path`` is written.

  Args:
      root: The input root given on the command line.
      dist: Mirror destination, if any.
      path: The processed file.

  Returns:
      Path: ``path`` itself, or its mirror under ``dist``.
  """
  if dist is None:
    return path
  if dist.resolve() == root.resolve():
    return path
  rel = Path(path.name) if root.is_file() else path.relative_to(root)
  return dist.resolve() / rel


def _rewrite_single_file(
  engine: SegmentEngine,
  root: Path,
  path: Path,
  dist: Optional[Path],
) -> ConversionResult:
  """
  Transforms one file and writes the result if it changed.

  Args:
      engine: Configured engine.
      root: The input root given on the command line.
      path: File to process.
      dist: Mirror destination, if any.

  Returns:
      ConversionResult: Result object containing status and code.
  """
  try:
    source = path.read_bytes()
  except OSError as e:
    log_error(f"Failed to read {escape(str(path))}: {escape(str(e))}")
    return ConversionResult.failed(str(path), e)

  result = engine.run(str(path), source)
  if not result.success:
    log_error(f"Failed to rewrite [path]{escape(str(path))}[/path]: {escape('; '.join(result.errors))}")
    return result

  if not result.changed:
    return result

  dest = _destination(root, dist, path)
  try:
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(result.code)
  except OSError as e:
    log_error(f"Failed to write {escape(str(dest))}: {escape(str(e))}")
    result.success = False
    result.errors.append(str(e))
    return result

  if dest == path:
    log_success(f"Updated: [path]{escape(str(path))}[/path]")
  else:
    log_success(f"Instrumented: [path]{escape(str(path))}[/path] -> [path]{escape(str(dest))}[/path]")
  return result


def _dump_traces(json_trace_path: Path, results: Dict[str, ConversionResult]) -> None:
  try:
    json_trace_path.parent.mkdir(parents=True, exist_ok=True)
    with open(json_trace_path, "wt", encoding="utf-8") as f:
      json.dump({name: res.trace_events for name, res in results.items()}, f, indent=2)
    log_info(f"Trace saved to [path]{escape(str(json_trace_path))}[/path]")
  except OSError as e:
    log_error(f"Failed to write trace: {escape(str(e))}")


def _print_batch_summary(results: Dict[str, ConversionResult]) -> None:
  """
  Renders a summary table of rewrite results to the console.

  Args:
      results: Dictionary mapping filenames to conversion results.
  """
  total = len(results)
  changed = sum(1 for r in results.values() if r.success and r.changed)
  failures = sum(1 for r in results.values() if not r.success)

  if failures == 0:
    log_success(f"Batch Complete: {changed}/{total} files instrumented.")
    return

  table = Table(title="Segment Injection Report")
  table.add_column("File", style="cyan")
  table.add_column("Status", justify="center")
  table.add_column("Issues", style="red")

  for filename, res in results.items():
    if res.success:
      continue
    issues = "; ".join(res.errors) if res.errors else "Unknown Error"
    table.add_row(escape(filename), "❌ Failed", escape(issues))

  console.print(table)
  console.print(f"\n[bold]Summary:[/bold] {changed} Instrumented, {failures} Failed, {total} Processed.")
