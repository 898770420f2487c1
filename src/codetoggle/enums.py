"""
Enumerations for codetoggle.

This module defines the small closed sets of values shared across the engine:
source dialects and the per-block decision outcomes.
"""

from enum import Enum


class Dialect(str, Enum):
  """
  Language dialect a snippet is formatted as.
  """

  TS = "ts"
  JS = "js"


class BlockOutcome(str, Enum):
  """
  Result of comparing the TypeScript and JavaScript renderings of a block.
  """

  UNCHANGED = "unchanged"  # Original fence passes through untouched
  DIVERGED = "diverged"  # Fence is replaced by a dual-view toggle
  SKIPPED = "skipped"  # Fence passed through without evaluation (over the size limit)
