"""
Entry point for module execution (``python -m codetoggle``).

This module delegates execution to the CLI handler in ``codetoggle.cli.__main__``.
"""

import sys

from codetoggle.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
