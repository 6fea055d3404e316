"""
Source File Discovery.

Walks a directory tree and yields the Go files eligible for instrumentation:

- directories whose base name is in the ignore list are not descended into,
- only ``.go`` files are considered,
- test files (``*_test.go``) are skipped.

Also hosts the marker used to recognise mechanically generated files. The
marker is reported by ``inspect`` but never used to skip a file.
"""

import os
import re
from pathlib import Path
from typing import Iterable, Iterator

GO_EXTENSION = ".go"
TEST_SUFFIX = "_test.go"

GENERATED_PATTERN = re.compile(rb"(?m)^// Code generated .* DO NOT EDIT\.$")


def is_generated(source: bytes) -> bool:
  """
  Checks for the standard ``// Code generated ... DO NOT EDIT.`` line.

  Args:
      source: File contents.

  Returns:
      bool: True if the marker is present.
  """
  return GENERATED_PATTERN.search(source) is not None


def is_candidate(path: Path) -> bool:
  return path.suffix == GO_EXTENSION and not path.name.endswith(TEST_SUFFIX)


def iter_source_files(root: Path, ignore_dirs: Iterable[str]) -> Iterator[Path]:
  """
  Yields eligible Go files under ``root`` in a deterministic order.

  Args:
      root: Directory to walk, or a single file.
      ignore_dirs: Directory base names to prune.

  Yields:
      Path: Each eligible file.
  """
  ignored = set(ignore_dirs)

  if root.is_file():
    if is_candidate(root):
      yield root
    return

  if root.name in ignored:
    return

  for dirpath, dirnames, filenames in os.walk(root):
    dirnames[:] = sorted(d for d in dirnames if d not in ignored)
    for name in sorted(filenames):
      path = Path(dirpath) / name
      if is_candidate(path):
        yield path
