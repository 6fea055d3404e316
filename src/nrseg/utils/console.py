"""
Console and Logging Utilities.

Every message of the tool goes through the ``nrseg`` logger and is rendered by
`rich` on stderr, leaving stdout free for piping. Core modules log with
``logging.getLogger(__name__)`` and therefore inherit the handler installed
here.

- `log_info`, `log_success`, `log_warning`, `log_error` are the CLI's
  user-facing messages. ``SUCCESS`` sits between INFO and WARNING. Their
  text is rich markup, so callers escape interpolated paths and errors.
- `console` is a stable proxy whose backend can be swapped with `set_console`
  (tests install a recording console). The log handler follows the swap.
- `set_verbose` switches the ``nrseg`` logger to DEBUG.

Attributes:
    console (_ConsoleProxy): Proxy to the active Rich Console.
    logger (logging.Logger): The ``nrseg`` package logger.
"""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

SUCCESS_LEVEL_NUM = 25
logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")

LOGGER_NAME = "nrseg"
logger = logging.getLogger(LOGGER_NAME)
logger.propagate = False

# Only the log_* helpers render markup; core records are printed verbatim.
_MARKUP = {"markup": True}

_THEME = Theme(
  {
    "logging.level.success": "green",
    "info": "dim cyan",
    "warning": "yellow",
    "error": "bold red",
    "path": "bold blue",
    "code": "bold magenta",
  }
)


def _new_console() -> Console:
  return Console(theme=_THEME, stderr=True)


def _install_handler(target: Console) -> RichHandler:
  """
  Points the ``nrseg`` logger at ``target``, replacing any earlier handler.

  Args:
      target: Console that renders the records.

  Returns:
      RichHandler: The installed handler.
  """
  for old in [h for h in logger.handlers if isinstance(h, RichHandler)]:
    logger.removeHandler(old)

  handler = RichHandler(
    console=target,
    show_time=False,
    show_path=False,
    markup=False,
    rich_tracebacks=True,
  )
  logger.addHandler(handler)
  if logger.level == logging.NOTSET:
    logger.setLevel(logging.INFO)
  return handler


class _ConsoleProxy:
  """
  Stable reference to a swappable Rich Console.

  Handlers import ``console`` once at module load; replacing the backend keeps
  those references valid and re-routes log records to the new backend.
  """

  def __init__(self) -> None:
    self._backend = _new_console()
    _install_handler(self._backend)

  @property
  def backend(self) -> Console:
    return self._backend

  def swap(self, target: Console) -> None:
    self._backend = target
    _install_handler(target)

  def print(self, *args: Any, **kwargs: Any) -> None:
    self._backend.print(*args, **kwargs)

  def __getattr__(self, name: str) -> Any:
    return getattr(self._backend, name)


console = _ConsoleProxy()


def set_console(new_console: Console) -> None:
  """
  Routes table output and log records to ``new_console``.

  Args:
      new_console (Console): Replacement backend, e.g. ``Console(record=True)``.
  """
  console.swap(new_console)


def reset_console() -> None:
  """Restores a fresh stderr console at the default INFO level."""
  logger.setLevel(logging.INFO)
  console.swap(_new_console())


def get_console() -> Console:
  return console.backend


def set_verbose(verbose: bool) -> None:
  """
  Enables or disables debug records of the core modules.

  Args:
      verbose (bool): True for DEBUG, False for INFO.
  """
  logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def log_info(msg: str) -> None:
  logger.info(f"ℹ️  {msg}", extra=_MARKUP)


def log_success(msg: str) -> None:
  logger.log(SUCCESS_LEVEL_NUM, f"✅ {msg}", extra=_MARKUP)


def log_warning(msg: str) -> None:
  logger.warning(f"⚠️  {msg}", extra=_MARKUP)


def log_error(msg: str) -> None:
  logger.error(f"❌ {msg}", extra=_MARKUP)
