"""
Entry point for module execution (``python -m nrseg``).

This module delegates execution to the CLI handler in ``nrseg.cli.__main__``.
"""

import sys
from nrseg.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
