"""
Tests for Config Persistence (TOML).

Verifies that:
1. RuntimeConfig.load() picks up [tool.nrseg] from pyproject.toml.
2. CLI ignore lists are merged with TOML ones.
3. CLI switches override TOML settings.
4. File traversal finds toml in parent directories.
"""

from pathlib import Path

import pytest

from nrseg.config import RuntimeConfig, parse_ignore_list


@pytest.fixture
def toml_file(tmp_path):
  """Creates a dummy pyproject.toml in the temp dir."""
  fpath = tmp_path / "pyproject.toml"
  content = """
[tool.nrseg]
ignore_dirs = ["vendor", "mocks"]
dist = "build/instrumented"
printer_command = ["gofmt", "-s"]
"""
  fpath.write_text(content, encoding="utf-8")
  return fpath


def test_defaults_without_toml(tmp_path):
  config = RuntimeConfig.load(search_path=tmp_path)

  assert config.ignore_dirs == []
  assert config.dist is None
  assert config.printer_command == ["gofmt"]
  assert config.reconciler_command == ["goimports"]
  assert config.effective_ignore_dirs == ["testdata"]


def test_load_from_toml(tmp_path, toml_file):
  config = RuntimeConfig.load(search_path=tmp_path)

  assert config.ignore_dirs == ["vendor", "mocks"]
  assert config.dist == tmp_path / "build/instrumented"
  assert config.printer_command == ["gofmt", "-s"]
  assert config.reconciler_command == ["goimports"]


def test_cli_ignore_dirs_are_merged(tmp_path, toml_file):
  config = RuntimeConfig.load(ignore_dirs=["mocks", "gen"], search_path=tmp_path)
  assert config.ignore_dirs == ["vendor", "mocks", "gen"]
  assert config.effective_ignore_dirs == ["testdata", "vendor", "mocks", "gen"]


def test_cli_overrides_toml(tmp_path, toml_file):
  config = RuntimeConfig.load(
    dist=Path("elsewhere"),
    use_printer=False,
    use_reconciler=False,
    search_path=tmp_path,
  )

  assert config.dist == Path("elsewhere")
  assert config.printer_command is None
  assert config.reconciler_command is None


def test_toml_found_in_parent(tmp_path, toml_file):
  nested = tmp_path / "cmd" / "server"
  nested.mkdir(parents=True)

  config = RuntimeConfig.load(search_path=nested)
  assert config.ignore_dirs == ["vendor", "mocks"]
  assert config.dist == tmp_path / "build/instrumented"


def test_toml_without_section(tmp_path):
  (tmp_path / "pyproject.toml").write_text("[project]\nname = 'x'\n", encoding="utf-8")
  config = RuntimeConfig.load(search_path=tmp_path)
  assert config.ignore_dirs == []


def test_invalid_toml_is_ignored(tmp_path):
  (tmp_path / "pyproject.toml").write_text("[tool.nrseg\nbroken", encoding="utf-8")
  config = RuntimeConfig.load(search_path=tmp_path)
  assert config.dist is None


def test_empty_command_disables_stage(tmp_path):
  (tmp_path / "pyproject.toml").write_text("[tool.nrseg]\nreconciler_command = []\n", encoding="utf-8")
  config = RuntimeConfig.load(search_path=tmp_path)
  assert config.reconciler_command is None


def test_ignore_dirs_are_cleaned():
  config = RuntimeConfig(ignore_dirs=[" vendor ", "", "vendor", "testdata"])
  assert config.ignore_dirs == ["vendor", "testdata"]
  assert config.effective_ignore_dirs == ["testdata", "vendor"]


@pytest.mark.parametrize(
  "raw,expected",
  [
    (None, []),
    ("", []),
    ("foo", ["foo"]),
    ("foo,bar,baz", ["foo", "bar", "baz"]),
    (" foo , ,bar ", ["foo", "bar"]),
  ],
)
def test_parse_ignore_list(raw, expected):
  assert parse_ignore_list(raw) == expected
