"""
Runtime Configuration Store.

Settings are resolved from three layers, later layers winning:
1. Built-in defaults.
2. The ``[tool.nrseg]`` table of the nearest ``pyproject.toml``.
3. Command line arguments.
"""

import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

ALWAYS_IGNORED_DIRS = ("testdata",)


class RuntimeConfig(BaseModel):
  """
  Global configuration container for the instrumentation engine.
  """

  ignore_dirs: List[str] = Field(default_factory=list, description="Directory names skipped while walking.")
  dist: Optional[Path] = Field(None, description="Mirror destination. None rewrites files in place.")
  printer_command: Optional[List[str]] = Field(
    default_factory=lambda: ["gofmt"],
    description="Canonical printer command. None disables the stage.",
  )
  reconciler_command: Optional[List[str]] = Field(
    default_factory=lambda: ["goimports"],
    description="Import reconciler command. None disables the stage.",
  )

  @field_validator("ignore_dirs")
  @classmethod
  def validate_ignore_dirs(cls, v: List[str]) -> List[str]:
    """
    Strips whitespace and drops empty or duplicate names, keeping order.

    Args:
        v (List[str]): Raw directory names.

    Returns:
        List[str]: Cleaned names.
    """
    seen = []
    for name in v:
      name = name.strip()
      if name and name not in seen:
        seen.append(name)
    return seen

  @field_validator("printer_command", "reconciler_command")
  @classmethod
  def validate_command(cls, v: Optional[List[str]]) -> Optional[List[str]]:
    # An empty list means the same as None: the stage is disabled.
    if not v:
      return None
    return v

  @property
  def effective_ignore_dirs(self) -> List[str]:
    """
    Directory names to skip, including the always ignored ones.

    Returns:
        List[str]: ``testdata`` followed by the configured names.
    """
    return list(ALWAYS_IGNORED_DIRS) + [d for d in self.ignore_dirs if d not in ALWAYS_IGNORED_DIRS]

  @classmethod
  def load(
    cls,
    ignore_dirs: Optional[List[str]] = None,
    dist: Optional[Path] = None,
    use_printer: Optional[bool] = None,
    use_reconciler: Optional[bool] = None,
    search_path: Optional[Path] = None,
  ) -> "RuntimeConfig":
    """
    Loads configuration from pyproject.toml and overrides with CLI arguments.

    Args:
        ignore_dirs (Optional[List[str]]): Extra directory names, merged with TOML.
        dist (Optional[Path]): Override for the mirror destination.
        use_printer (Optional[bool]): False disables the canonical printer.
        use_reconciler (Optional[bool]): False disables the import reconciler.
        search_path (Optional[Path]): Directory to start searching for TOML config.

    Returns:
        RuntimeConfig: The fully resolved configuration object.
    """
    start_dir = search_path or Path.cwd()
    toml_config, toml_dir = _load_toml_settings(start_dir)

    # 1. Ignore lists are merged, not replaced
    merged_ignores = list(toml_config.get("ignore_dirs", []))
    merged_ignores.extend(ignore_dirs or [])

    # 2. Destination (relative TOML paths resolve against the TOML location)
    final_dist = dist
    if final_dist is None and toml_config.get("dist"):
      final_dist = Path(toml_config["dist"])
      if toml_dir and not final_dist.is_absolute():
        final_dist = toml_dir / final_dist

    # 3. External stages
    defaults = cls()
    printer = toml_config.get("printer_command", defaults.printer_command)
    reconciler = toml_config.get("reconciler_command", defaults.reconciler_command)
    if use_printer is False:
      printer = None
    if use_reconciler is False:
      reconciler = None

    return cls(
      ignore_dirs=merged_ignores,
      dist=final_dist,
      printer_command=printer,
      reconciler_command=reconciler,
    )


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Recursively searches parents for 'pyproject.toml' and extracts config.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory definition was found in.
  """
  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.exists() and toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)
      except (OSError, tomllib.TOMLDecodeError):
        return {}, None

      tool_section = data.get("tool", {})
      return tool_section.get("nrseg", {}), parent

  return {}, None


def parse_ignore_list(value: Optional[str]) -> List[str]:
  """
  Splits a comma separated list of directory names.

  Args:
      value (Optional[str]): Raw CLI value such as ``"foo,bar,baz"``.

  Returns:
      List[str]: Non-empty names.
  """
  if not value:
    return []
  return [part.strip() for part in value.split(",") if part.strip()]
