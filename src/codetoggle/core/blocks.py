"""
Data structures flowing through the block pipeline.

This module defines the immutable `CodeBlock` extracted from a document, the
per-block `Decision` (`Unchanged` or `Diverged`), the canonical `Rendering` pair
and the `RewriteResult` returned for a whole document.
"""

from typing import List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from codetoggle.core.diagnostics import Diagnostic
from codetoggle.enums import BlockOutcome

INSPECTION_FLAG = "twoslash"


class CodeBlock(BaseModel):
  """
  A fenced TypeScript snippet located in a document.
  """

  model_config = ConfigDict(frozen=True)

  meta: str = Field("", description="Raw fence annotation including its leading space, or ''.")
  language: str = Field("ts", description="Fence language tag.")
  body: str = Field(description="Raw snippet between the fence lines.")
  start: int = Field(0, ge=0, description="Offset of the match in the original document.")
  end: int = Field(0, ge=0, description="Offset one past the match in the original document.")

  @property
  def meta_tokens(self) -> List[str]:
    return self.meta.split()

  @property
  def has_inspection_annotations(self) -> bool:
    """
    Returns:
        bool: True if the fence requests type-inspection annotations (`twoslash`).
    """
    return any(token.lower() == INSPECTION_FLAG for token in self.meta_tokens)


class Rendering(BaseModel):
  """
  The pair of canonical forms compared by the equivalence decider.
  """

  model_config = ConfigDict(frozen=True)

  canonical_ts: str
  canonical_js: str

  @property
  def equivalent(self) -> bool:
    return self.canonical_js == self.canonical_ts


class Unchanged(BaseModel):
  """The original fence passes through untouched."""

  model_config = ConfigDict(frozen=True)

  outcome: Literal[BlockOutcome.UNCHANGED] = BlockOutcome.UNCHANGED


class Diverged(BaseModel):
  """The fence is replaced by a dual-view toggle."""

  model_config = ConfigDict(frozen=True)

  outcome: Literal[BlockOutcome.DIVERGED] = BlockOutcome.DIVERGED
  ts_pane: str = Field(description="Original snippet, verbatim.")
  js_pane: str = Field(description="Canonical JavaScript.")


class Skipped(BaseModel):
  """The fence passes through without being evaluated."""

  model_config = ConfigDict(frozen=True)

  outcome: Literal[BlockOutcome.SKIPPED] = BlockOutcome.SKIPPED
  reason: str = ""


Decision = Union[Unchanged, Diverged, Skipped]


class RewriteResult(BaseModel):
  """
  Container for the results of rewriting one document.
  """

  document: str = Field(description="The rewritten document.")
  decisions: List[Decision] = Field(default_factory=list, description="Per-block decisions in document order.")
  diagnostics: List[Diagnostic] = Field(default_factory=list, description="Recoverable failures, in block order.")

  @property
  def changed(self) -> bool:
    return any(d.outcome == BlockOutcome.DIVERGED for d in self.decisions)

  @property
  def has_diagnostics(self) -> bool:
    return len(self.diagnostics) > 0
