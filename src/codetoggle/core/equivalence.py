"""
Equivalence Decider.

Decides whether a TypeScript block needs a JavaScript twin. Both renderings go
through the same Formatter, so they can only differ where the Downleveler
changed something:

1. Strip inspection annotations if the fence requests them.
2. Canonicalize the displayed snippet (validates what the reader sees).
3. Canonicalize the transpile-ready snippet -> `canonical_ts`.
4. Downlevel `canonical_ts` and canonicalize -> `canonical_js`.
5. Equal -> `Unchanged`; otherwise `Diverged(original body, canonical_js)`.
"""

from typing import Optional

from codetoggle.backends import get_backend
from codetoggle.config import RuntimeConfig
from codetoggle.core.annotations import strip_inspection_annotations
from codetoggle.core.blocks import CodeBlock, Decision, Diverged, Rendering, Unchanged
from codetoggle.core.diagnostics import DiagnosticLog
from codetoggle.core.downleveler import Downleveler
from codetoggle.core.formatter import Formatter
from codetoggle.enums import Dialect
from codetoggle.errors import ToggleError
from codetoggle.utils.console import log_warning


class EquivalenceDecider:
  """
  Produces a `Decision` for one block. Holds no per-block state.
  """

  def __init__(
    self,
    formatter: Optional[Formatter] = None,
    downleveler: Optional[Downleveler] = None,
    config: Optional[RuntimeConfig] = None,
  ) -> None:
    self.config = config or RuntimeConfig()
    backend = None
    if formatter is None or downleveler is None:
      backend = get_backend(self.config.backend, self.config)
    self.formatter = formatter or Formatter(backend=backend, config=self.config)
    self.downleveler = downleveler or Downleveler(backend=backend, config=self.config)

  async def render(self, block: CodeBlock) -> Rendering:
    """
    Computes both canonical forms of a block.

    Raises:
        FormatError: If the displayed or transpile-ready snippet is invalid.
        TranspileError: If the snippet cannot be downleveled.
    """
    displayed = await self.formatter.format(block.body, Dialect.TS)

    if block.has_inspection_annotations:
      canonical_ts = await self.formatter.format(strip_inspection_annotations(block.body), Dialect.TS)
    else:
      canonical_ts = displayed

    js = await self.downleveler.to_javascript(canonical_ts)
    canonical_js = await self.formatter.format(js, Dialect.JS)
    return Rendering(canonical_ts=canonical_ts, canonical_js=canonical_js)

  async def decide(self, block: CodeBlock) -> Decision:
    """
    Returns:
        Decision: `Unchanged` when the JavaScript equals the TypeScript, else `Diverged`.

    Raises:
        ToggleError: Any formatter or downleveler failure, unchanged.
    """
    rendering = await self.render(block)
    if rendering.equivalent:
      return Unchanged()
    return Diverged(ts_pane=block.body, js_pane=rendering.canonical_js)

  async def decide_safely(
    self,
    block: CodeBlock,
    log: Optional[DiagnosticLog] = None,
    block_index: Optional[int] = None,
    line: Optional[int] = None,
  ) -> Decision:
    """
    Fail-open wrapper around `decide`.

    A `ToggleError` becomes `Unchanged` plus a diagnostic (recorded in `log`, or
    logged directly when no log is given).
    """
    try:
      return await self.decide(block)
    except ToggleError as e:
      if log is not None:
        log.record_error(e, block_index=block_index, line=line)
      else:
        log_warning(f"[{e.kind}] {e}")
      return Unchanged()
