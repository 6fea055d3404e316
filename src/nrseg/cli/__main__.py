"""
Main Entry Point for nrseg CLI.

This module handles argument parsing and dispatches to specific command
handlers defined in `nrseg.cli.commands`.

``rewrite`` is the default command, so ``nrseg ./pkg`` and
``nrseg rewrite ./pkg`` are equivalent.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from nrseg import __revision__, __version__
from nrseg.cli import commands
from nrseg.config import parse_ignore_list
from nrseg.utils.console import set_verbose

COMMANDS = ("rewrite", "inspect")
_GLOBAL_FLAGS = ("--verbose",)
_TOP_LEVEL_ONLY = ("-h", "--help", "-v", "--version")


def _add_common_arguments(cmd: argparse.ArgumentParser) -> None:
  cmd.add_argument(
    "path",
    nargs="?",
    type=Path,
    default=Path("./"),
    help="Execution path (default: current directory)",
  )
  cmd.add_argument(
    "-i",
    "--ignore",
    default="",
    help="ignore directory names. ex: foo,bar,baz (testdata directory is always ignored.)",
  )


def _with_default_command(argv: List[str]) -> List[str]:
  """
  Inserts ``rewrite`` when no command was given.

  Args:
      argv: Raw arguments, without the program name.

  Returns:
      List[str]: Arguments with an explicit command.
  """
  pos = 0
  while pos < len(argv) and argv[pos] in _GLOBAL_FLAGS:
    pos += 1
  if pos < len(argv) and (argv[pos] in COMMANDS or argv[pos] in _TOP_LEVEL_ONLY):
    return argv
  return [*argv[:pos], "rewrite", *argv[pos:]]


def build_parser() -> argparse.ArgumentParser:
  parser = argparse.ArgumentParser(
    prog="nrseg",
    description="Insert function segments into any function/method for Newrelic APM.",
  )
  parser.add_argument("-v", "--version", action="store_true", help="print version information and quit.")
  parser.add_argument("--verbose", action="store_true", help="emit debug logging")

  subparsers = parser.add_subparsers(dest="command")

  # --- Command: REWRITE ---
  cmd_rw = subparsers.add_parser("rewrite", help="Insert segments into Go files (default)")
  _add_common_arguments(cmd_rw)
  cmd_rw.add_argument("-d", "--dist", type=Path, default=None, help="Write results into a mirrored tree")
  cmd_rw.add_argument("--no-gofmt", action="store_true", help="Skip canonical printing with gofmt")
  cmd_rw.add_argument("--no-goimports", action="store_true", help="Skip import reconciliation with goimports")
  cmd_rw.add_argument(
    "--json-trace", type=Path, default=None, help="Dump the execution trace of every file to a JSON file."
  )

  # --- Command: INSPECT ---
  cmd_in = subparsers.add_parser("inspect", help="Report what a rewrite would change")
  _add_common_arguments(cmd_in)

  return parser


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, non-zero for failure).
  """
  raw = list(sys.argv[1:] if argv is None else argv)
  parser = build_parser()
  args = parser.parse_args(_with_default_command(raw))

  if args.version:
    print(f'nrseg version "{__version__}", revision "{__revision__}"', file=sys.stderr)
    return 0

  set_verbose(args.verbose)
  ignore_dirs = parse_ignore_list(args.ignore)

  if args.command == "inspect":
    return commands.handle_inspect(args.path, ignore_dirs)

  return commands.handle_rewrite(
    args.path,
    ignore_dirs,
    dist=args.dist,
    use_printer=False if args.no_gofmt else None,
    use_reconciler=False if args.no_goimports else None,
    json_trace_path=args.json_trace,
  )


if __name__ == "__main__":
  sys.exit(main())
