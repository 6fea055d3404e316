"""
CLI Command Handlers Facade.

Re-exports the handlers from `nrseg.cli.handlers` so the dispatcher and tests
have a single place to reach (and patch) them.
"""

from nrseg.cli.handlers.rewrite import (
  handle_rewrite,
  _rewrite_single_file,
  _print_batch_summary,
)
from nrseg.cli.handlers.inspect import handle_inspect

__all__ = [
  "_print_batch_summary",
  "_rewrite_single_file",
  "handle_inspect",
  "handle_rewrite",
]
