"""
Block Rewriter.

Finds every fenced TypeScript block in a document, decides each one
concurrently, and rebuilds the document in a single left-to-right pass.

Contract:

- Blocks are matched with the fence pattern ``\\n```ts( [^\\n]+)?\\n(.+?)\\n```\\n``
  (dot matches newline, non-greedy) and collected before any work starts.
- Matches inside an existing toggle container are skipped, so a document that
  was already rewritten comes back unchanged.
- Each block runs in its own task: concurrency is capped by `max_concurrency`,
  each task may be bounded by `block_timeout`, and oversized bodies are never
  evaluated. A failing block passes through untouched with a diagnostic.
- Replacements are applied by list position against the original spans, so the
  output is independent of the order in which tasks finish.
"""

import asyncio
import re
from typing import Dict, List, Optional

from codetoggle.config import RuntimeConfig
from codetoggle.core.blocks import CodeBlock, Decision, Diverged, RewriteResult, Skipped, Unchanged
from codetoggle.core.diagnostics import DiagnosticLog
from codetoggle.core.equivalence import EquivalenceDecider
from codetoggle.errors import BlockTimeoutError

FENCE_RE = re.compile(r"\n```ts( [^\n]+)?\n(.+?)\n```\n", re.DOTALL)


class BlockRewriter:
  """
  Rewrites the TypeScript fences of a document into dual-view toggles where needed.
  """

  def __init__(self, config: Optional[RuntimeConfig] = None, decider: Optional[EquivalenceDecider] = None) -> None:
    self.config = config or RuntimeConfig()
    self.decider = decider or EquivalenceDecider(config=self.config)
    tag = re.escape(self.config.toggle_tag)
    self._toggle_re = re.compile(rf"<{tag}>.*?</{tag}>", re.DOTALL)

  # --- Matching ---

  def find_blocks(self, document: str) -> List[CodeBlock]:
    """
    Collects all eligible fences in document order.

    Args:
        document (str): Markdown source.

    Returns:
        List[CodeBlock]: Blocks outside existing toggle containers.
    """
    containers = [(m.start(), m.end()) for m in self._toggle_re.finditer(document)]

    blocks: List[CodeBlock] = []
    for match in FENCE_RE.finditer(document):
      if any(start <= match.start() < end for start, end in containers):
        continue
      blocks.append(
        CodeBlock(
          meta=match.group(1) or "",
          body=match.group(2),
          start=match.start(),
          end=match.end(),
        )
      )
    return blocks

  # --- Emission ---

  def render_dual_view(self, block: CodeBlock, decision: Diverged) -> str:
    """
    Builds the toggle that replaces a diverged fence, including the newlines
    the fence pattern consumed on either side.
    """
    tag = self.config.toggle_tag
    return (
      f"\n<{tag}>\n"
      f'<div class="{self.config.ts_pane_class}">\n\n'
      f"```ts{block.meta}\n{decision.ts_pane}\n```\n\n"
      f"</div>\n"
      f'<div class="{self.config.js_pane_class}">\n\n'
      f"```js\n{decision.js_pane}\n```\n\n"
      f"</div>\n"
      f"</{tag}>\n"
    )

  # --- Execution ---

  async def rewrite(self, document: str, source: Optional[str] = None) -> RewriteResult:
    """
    Rewrites one document.

    Args:
        document (str): Markdown source.
        source (Optional[str]): Document path, used in diagnostics.

    Returns:
        RewriteResult: The new document, per-block decisions and diagnostics.

    Raises:
        ToggleError: In strict mode, the first block failure (after all blocks finished).
    """
    log = DiagnosticLog(source)
    blocks = self.find_blocks(document)
    semaphore = asyncio.Semaphore(self.config.max_concurrency)

    decisions: List[Decision] = list(
      await asyncio.gather(*(self._evaluate(i, block, document, semaphore, log) for i, block in enumerate(blocks)))
    )

    pieces: List[str] = []
    cursor = 0
    for block, decision in zip(blocks, decisions):
      pieces.append(document[cursor : block.start])
      if isinstance(decision, Diverged):
        pieces.append(self.render_dual_view(block, decision))
      else:
        pieces.append(document[block.start : block.end])
      cursor = block.end
    pieces.append(document[cursor:])

    if self.config.strict_mode:
      error = log.first_error()
      if error is not None:
        raise error

    return RewriteResult(document="".join(pieces), decisions=decisions, diagnostics=log.entries)

  def rewrite_sync(self, document: str, source: Optional[str] = None) -> RewriteResult:
    """Blocking convenience wrapper around `rewrite`."""
    return asyncio.run(self.rewrite(document, source=source))

  async def rewrite_many(self, documents: Dict[str, str]) -> Dict[str, RewriteResult]:
    """
    Rewrites independent documents concurrently.

    Args:
        documents (Dict[str, str]): Document path -> source.

    Returns:
        Dict[str, RewriteResult]: Results keyed like the input, in input order.
    """
    names = list(documents)
    results = await asyncio.gather(*(self.rewrite(documents[name], source=name) for name in names))
    return dict(zip(names, results))

  async def _evaluate(
    self,
    index: int,
    block: CodeBlock,
    document: str,
    semaphore: asyncio.Semaphore,
    log: DiagnosticLog,
  ) -> Decision:
    # The match starts at the newline before the opening fence.
    line = document.count("\n", 0, block.start) + 2

    if len(block.body) > self.config.max_block_chars:
      log.record(
        "skipped",
        f"Block body has {len(block.body)} characters (limit {self.config.max_block_chars}); passed through.",
        block_index=index,
        line=line,
      )
      return Skipped(reason="size")

    async with semaphore:
      work = self.decider.decide_safely(block, log=log, block_index=index, line=line)
      if self.config.block_timeout is None:
        return await work
      try:
        return await asyncio.wait_for(work, timeout=self.config.block_timeout)
      except asyncio.TimeoutError:
        error = BlockTimeoutError(f"Block did not finish within {self.config.block_timeout}s; passed through.")
        log.record_error(error, block_index=index, line=line)
        return Unchanged()

