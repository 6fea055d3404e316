"""
Tests for the Output Pipeline and its external stages.

External programs are mocked, except in the tests marked to require a Go
toolchain on PATH.
"""

import shutil
import subprocess
from unittest.mock import patch

import pytest

from nrseg.config import RuntimeConfig
from nrseg.core.errors import FormatError, ImportReconcileError
from nrseg.core.imports import resolve
from nrseg.core.injector import inject_all
from nrseg.core.pipeline import CanonicalPrinter, ImportReconciler, OutputPipeline
from nrseg.core.syntax import parse_unit

SOURCE = b"package a\n\nfunc A() {}\n"


def _mutated_unit(filename="pkg/a.go"):
  unit = parse_unit(filename, SOURCE)
  inject_all(unit, resolve(unit))
  return unit


def _completed(stdout=b"", returncode=0, stderr=b""):
  return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


def test_from_config_defaults():
  pipeline = OutputPipeline.from_config(RuntimeConfig())
  assert pipeline.printer.command == ["gofmt"]
  assert pipeline.reconciler.command == ["goimports"]


def test_from_config_disabled(offline_config):
  pipeline = OutputPipeline.from_config(offline_config)
  assert pipeline.printer is None
  assert pipeline.reconciler is None


def test_stages_run_in_order():
  calls = []

  def fake_run(argv, input, capture_output, check):
    calls.append((argv, input))
    return _completed(stdout=input + f"// {argv[0]}\n".encode())

  pipeline = OutputPipeline(CanonicalPrinter(["gofmt"]), ImportReconciler(["goimports"]))
  with patch("nrseg.core.pipeline.subprocess.run", side_effect=fake_run):
    out = pipeline.run(_mutated_unit())

  assert [argv for argv, _ in calls] == [["gofmt"], ["goimports", "-srcdir", "pkg"]]
  assert out.endswith(b"// gofmt\n// goimports\n")
  assert calls[1][1].endswith(b"// gofmt\n")


def test_reconciler_srcdir_defaults_to_cwd():
  assert ImportReconciler(["goimports"]).argv("a.go") == ["goimports", "-srcdir", "."]


def test_printer_failure_is_format_error():
  pipeline = OutputPipeline(printer=CanonicalPrinter(["gofmt"]))
  failed = _completed(returncode=2, stderr=b"<standard input>:1: bad")
  with patch("nrseg.core.pipeline.subprocess.run", return_value=failed):
    with pytest.raises(FormatError) as exc:
      pipeline.run(_mutated_unit())
  assert "bad" in str(exc.value)
  assert exc.value.filename == "pkg/a.go"


def test_missing_printer_executable_is_format_error():
  pipeline = OutputPipeline(printer=CanonicalPrinter(["gofmt"]))
  with patch("nrseg.core.pipeline.subprocess.run", side_effect=FileNotFoundError("gofmt")):
    with pytest.raises(FormatError):
      pipeline.run(_mutated_unit())


def test_reconciler_failure_is_reconcile_error():
  pipeline = OutputPipeline(reconciler=ImportReconciler(["goimports"]))
  with patch("nrseg.core.pipeline.subprocess.run", return_value=_completed(returncode=1, stderr=b"oops")):
    with pytest.raises(ImportReconcileError):
      pipeline.run(_mutated_unit())


def test_malformed_synthetic_node_is_format_error():
  """A statement that renders to invalid Go is caught before any stage runs."""
  unit = _mutated_unit()
  with patch("nrseg.core.printer.builder.render", return_value="defer (("):
    with patch("nrseg.core.pipeline.subprocess.run") as run:
      with pytest.raises(FormatError):
        OutputPipeline(CanonicalPrinter(["gofmt"])).run(unit)
  run.assert_not_called()


def test_empty_command_rejected():
  with pytest.raises(ValueError):
    CanonicalPrinter([])


@pytest.mark.skipif(shutil.which("gofmt") is None, reason="gofmt not installed")
def test_real_gofmt_accepts_rendered_source():
  out = OutputPipeline(printer=CanonicalPrinter(["gofmt"])).run(_mutated_unit())
  assert b'defer newrelic.FromContext(ctx).StartSegment("slow").End()' in out
  assert b'import "github.com/newrelic/go-agent/v3/newrelic"' in out


@pytest.mark.skipif(shutil.which("goimports") is None, reason="goimports not installed")
def test_real_goimports_keeps_used_import(tmp_path):
  out = OutputPipeline(reconciler=ImportReconciler(["goimports"])).run(_mutated_unit(str(tmp_path / "a.go")))
  assert b'"github.com/newrelic/go-agent/v3/newrelic"' in out
