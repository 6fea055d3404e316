from .rewrite import handle_rewrite, _rewrite_single_file, _print_batch_summary
from .inspect import handle_inspect

__all__ = [
  "_print_batch_summary",
  "_rewrite_single_file",
  "handle_inspect",
  "handle_rewrite",
]
