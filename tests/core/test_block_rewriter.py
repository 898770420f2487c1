"""
Tests for the Block Rewriter.

Verifies that:
1. Only `ts` fences (with optional meta) outside existing toggles are matched.
2. Blocks without type syntax leave the document byte-identical.
3. Typed blocks become dual-view toggles with the exact expected layout.
4. A failing block passes through with a diagnostic while its neighbours are rewritten.
5. Rewriting is idempotent (including a TS pane rewritten on its own) and strict mode
   re-raises the first failure.
6. Oversized blocks are skipped.
"""

import asyncio
import re

import pytest

from codetoggle.config import RuntimeConfig
from codetoggle.core.blocks import Diverged
from codetoggle.core.rewriter import BlockRewriter
from codetoggle.enums import BlockOutcome
from codetoggle.errors import FormatError

TYPED_DOC = "Intro\n\n```ts\nconst a: Ref<number> = ref(1)\n```\n\nOutro\n"
BROKEN_DOC = "# T\n\n```ts\nconst a = {\n```\n"


def rewrite(document: str, **settings):
  return BlockRewriter(config=RuntimeConfig(**settings)).rewrite_sync(document)


def test_find_blocks_meta_and_body():
  doc = "x\n```ts twoslash\nconst a = 1\n```\n\n```js\nconst b = 2\n```\n\n```tsx\nconst c = 3\n```\n"
  blocks = BlockRewriter().find_blocks(doc)

  assert len(blocks) == 1
  assert blocks[0].meta == " twoslash"
  assert blocks[0].body == "const a = 1"
  assert blocks[0].has_inspection_annotations
  assert doc[blocks[0].start : blocks[0].end] == "\n```ts twoslash\nconst a = 1\n```\n"


def test_fence_needs_trailing_newline():
  assert BlockRewriter().find_blocks("x\n```ts\nconst a: number = 1\n```") == []


def test_untyped_block_leaves_document_identical():
  doc = "# Title\n\n```ts\nconst a = 1\n```\n"
  result = rewrite(doc)

  assert result.document == doc
  assert not result.changed
  assert [d.outcome for d in result.decisions] == [BlockOutcome.UNCHANGED]


def test_typed_block_becomes_toggle(snapshot):
  result = rewrite(TYPED_DOC)

  assert result.changed
  assert isinstance(result.decisions[0], Diverged)
  snapshot.assert_match(result.document, extension="md")


def test_toggle_markup():
  result = rewrite(TYPED_DOC)
  expected = (
    "Intro\n"
    "\n<CodeToggle>\n"
    '<div class="code-block-ts">\n\n'
    "```ts\nconst a: Ref<number> = ref(1)\n```\n\n"
    "</div>\n"
    '<div class="code-block-js">\n\n'
    "```js\nconst a = ref(1)\n```\n\n"
    "</div>\n"
    "</CodeToggle>\n"
    "\nOutro\n"
  )
  assert result.document == expected


def test_inspection_fence_keeps_meta_and_original_body():
  body = "const double = (n: number) => n * 2\nconst x = double(2)\n//    ^?"
  doc = f"# Title\n\n```ts twoslash\n{body}\n```\n"
  out = rewrite(doc).document

  assert f"```ts twoslash\n{body}\n```" in out
  assert "```js\nconst double = (n) => n * 2\nconst x = double(2)\n```" in out


def test_custom_toggle_markup():
  out = rewrite(TYPED_DOC, toggle_tag="Toggle", ts_pane_class="ts", js_pane_class="js").document
  assert '\n<Toggle>\n<div class="ts">' in out
  assert '<div class="js">' in out
  assert out.endswith("</Toggle>\n\nOutro\n")


def test_syntax_error_passes_through():
  result = rewrite(BROKEN_DOC)

  assert result.document == BROKEN_DOC
  assert len(result.diagnostics) == 1
  diagnostic = result.diagnostics[0]
  assert diagnostic.kind == "format"
  assert diagnostic.block_index == 0
  assert diagnostic.line == 3


def test_failure_isolated_to_its_block():
  doc = (
    "# T\n\n"
    "```ts\nconst a: number = 1\n```\n\n"
    "```ts\nconst b = {\n```\n\n"
    "```ts\nconst c: number = 3\n```\n"
  )
  result = rewrite(doc)

  assert [d.outcome for d in result.decisions] == [
    BlockOutcome.DIVERGED,
    BlockOutcome.UNCHANGED,
    BlockOutcome.DIVERGED,
  ]
  assert "```js\nconst a = 1\n```" in result.document
  assert "```ts\nconst b = {\n```" in result.document
  assert "```js\nconst c = 3\n```" in result.document
  assert [(d.block_index, d.line) for d in result.diagnostics] == [(1, 7)]


def test_rewrite_is_idempotent():
  once = rewrite(TYPED_DOC).document
  again = rewrite(once)

  assert again.document == once
  assert again.decisions == []


def test_rewrite_is_deterministic():
  doc = TYPED_DOC + "\n```ts\nlet n: number = 2\n```\n" + BROKEN_DOC
  first = rewrite(doc)
  second = rewrite(doc, max_concurrency=1)

  assert first.document == second.document
  assert [d.render() for d in first.diagnostics] == [d.render() for d in second.diagnostics]


def test_strict_mode_raises_first_failure():
  with pytest.raises(FormatError):
    rewrite(BROKEN_DOC, strict_mode=True)


def test_oversized_block_skipped():
  result = rewrite(TYPED_DOC, max_block_chars=5)

  assert result.document == TYPED_DOC
  assert result.decisions[0].outcome == BlockOutcome.SKIPPED
  assert result.diagnostics[0].kind == "skipped"


def test_rewrite_many_keeps_keys_and_sources():
  documents = {"a.md": TYPED_DOC, "b.md": "plain\n", "bad.md": BROKEN_DOC}
  results = asyncio.run(BlockRewriter().rewrite_many(documents))

  assert list(results) == ["a.md", "b.md", "bad.md"]
  assert results["a.md"].changed
  assert results["b.md"].document == "plain\n"
  assert results["bad.md"].diagnostics[0].render().startswith("bad.md:3: [format]")


PANE_RE = re.compile(r"\n```ts([^\n]*)\n(.*?)\n```\n", re.DOTALL)


@pytest.mark.parametrize(
  "meta, body",
  [
    ("", "const a: Ref<number> = ref(1)"),
    (" twoslash", "const a: Ref<number> = ref(1)\n//    ^?"),
  ],
)
def test_ts_pane_alone_gives_same_decision(meta, body):
  first = rewrite(f"# T\n\n```ts{meta}\n{body}\n```\n")
  assert isinstance(first.decisions[0], Diverged)

  pane = PANE_RE.search(first.document)
  assert pane.group(1) == meta
  assert pane.group(2) == body

  second = rewrite(f"\n```ts{pane.group(1)}\n{pane.group(2)}\n```\n")
  assert second.decisions == first.decisions
  assert second.decisions[0].js_pane == "const a = ref(1)"


def test_prefix_assertion_block_gets_js_pane():
  out = rewrite("# T\n\n```ts\nconst v = <HTMLElement>document.body\n```\n").document

  assert "```ts\nconst v = <HTMLElement>document.body\n```" in out
  assert "```js\nconst v = document.body\n```" in out
