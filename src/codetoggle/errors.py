"""
Exception Hierarchy.

Every failure the engine knows how to recover from derives from `ToggleError`.
The Block Rewriter catches these at the per-block boundary and downgrades them
to a pass-through plus a diagnostic; nothing here is fatal to a document build.
"""

from typing import Optional


class ToggleError(Exception):
  """
  Base class for recoverable engine errors.

  Attributes:
      detail (str): Human readable description of the failure.
      line (Optional[int]): 1-based line inside the snippet, when known.
  """

  kind = "error"

  def __init__(self, detail: str, line: Optional[int] = None) -> None:
    self.detail = detail
    self.line = line
    location = f" (line {line})" if line is not None else ""
    super().__init__(f"{detail}{location}")


class FormatError(ToggleError):
  """Raised when a snippet is not syntactically valid for the requested dialect."""

  kind = "format"


class TranspileError(ToggleError):
  """Raised when TypeScript cannot be downleveled to JavaScript."""

  kind = "transpile"


class MetadataLookupError(ToggleError, LookupError):
  """Raised when a metadata registry has no entry for a referenced name."""

  kind = "lookup"


class BlockTimeoutError(ToggleError):
  """Raised when a block pipeline exceeds its time limit."""

  kind = "timeout"
