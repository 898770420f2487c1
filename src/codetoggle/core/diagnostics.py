"""
Build Diagnostics.

Records the recoverable failures of a rewrite pass (a block that did not format,
a snippet that did not transpile, a metadata lookup that missed) so the caller
can inspect them after the fact. Every record is also logged as a warning on
the console channel as it is made.
"""

from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from codetoggle.errors import ToggleError
from codetoggle.utils.console import log_warning


class Diagnostic(BaseModel):
  """
  One recoverable failure.
  """

  kind: str = Field(description="Failure category: 'format', 'transpile', 'timeout', 'lookup', ...")
  message: str
  block_index: Optional[int] = Field(None, description="Position of the block in document order.")
  line: Optional[int] = Field(None, description="1-based line of the block's fence in the document.")
  source: Optional[str] = Field(None, description="Document path, when known.")

  def render(self) -> str:
    location = ""
    if self.source:
      location = self.source
    if self.line is not None:
      location = f"{location}:{self.line}" if location else f"line {self.line}"
    prefix = f"{location}: " if location else ""
    return f"{prefix}[{self.kind}] {self.message}"


class DiagnosticLog:
  """
  Collects diagnostics for a single pass.
  Designed to be created per document so that passes share nothing.
  """

  def __init__(self, source: Optional[str] = None) -> None:
    self.source = source
    self._entries: List[Diagnostic] = []
    self._errors: List[Tuple[int, ToggleError]] = []

  def record(
    self,
    kind: str,
    message: str,
    block_index: Optional[int] = None,
    line: Optional[int] = None,
  ) -> Diagnostic:
    """Adds an entry and logs it as a warning."""
    entry = Diagnostic(kind=kind, message=message, block_index=block_index, line=line, source=self.source)
    self._entries.append(entry)
    log_warning(entry.render())
    return entry

  def record_error(self, error: ToggleError, block_index: Optional[int] = None, line: Optional[int] = None) -> Diagnostic:
    self._errors.append((block_index if block_index is not None else -1, error))
    return self.record(error.kind, str(error), block_index=block_index, line=line)

  def first_error(self) -> Optional[ToggleError]:
    """
    Returns:
        Optional[ToggleError]: The failure of the earliest block in document order.
    """
    if not self._errors:
      return None
    return min(self._errors, key=lambda item: item[0])[1]

  @property
  def entries(self) -> List[Diagnostic]:
    return sorted(self._entries, key=lambda d: -1 if d.block_index is None else d.block_index)

  def __len__(self) -> int:
    return len(self._entries)
