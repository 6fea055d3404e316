"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- An engine with the external stages disabled, so tests do not need a Go toolchain.
- Console isolation for tests that capture log output.
"""

import sys
from pathlib import Path

import pytest

# Add src to path so we can import 'nrseg' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from nrseg.config import RuntimeConfig  # noqa: E402
from nrseg.core.engine import SegmentEngine  # noqa: E402
from nrseg.utils.console import reset_console  # noqa: E402


@pytest.fixture
def offline_config():
  """Configuration with gofmt and goimports disabled."""
  return RuntimeConfig(printer_command=None, reconciler_command=None)


@pytest.fixture
def engine(offline_config):
  return SegmentEngine(config=offline_config)


@pytest.fixture(autouse=True)
def cleanup_console():
  reset_console()
  yield
  reset_console()
