"""
codetoggle Package.

A documentation-build-time transformer for markdown API pages. TypeScript code
samples are paired with their JavaScript equivalent whenever the two differ,
and function pages get generated reference sections.

Usage
-----

Simple String Conversion
^^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    import codetoggle
    doc = "# useFoo\\n\\n```ts\\nconst a: number = 1\\n```\\n"
    print(codetoggle.rewrite(doc))
    # ... <CodeToggle> with a `ts` pane and a `js` pane holding `const a = 1`

Advanced Usage
^^^^^^^^^^^^^^

.. code-block:: python

    from codetoggle import BlockRewriter, RuntimeConfig

    config = RuntimeConfig(backend="node", max_concurrency=4)
    result = BlockRewriter(config=config).rewrite_sync(doc)

    for diagnostic in result.diagnostics:
        print(diagnostic.render())
"""

from typing import Optional

from codetoggle.assembler import DocumentAssembler, FunctionRegistry, PackageRegistry
from codetoggle.config import RuntimeConfig
from codetoggle.core.blocks import CodeBlock, Diverged, RewriteResult, Unchanged
from codetoggle.core.rewriter import BlockRewriter

__version__ = "0.1.0"


def rewrite(document: str, backend: Optional[str] = None, strict: bool = False) -> str:
  """
  Rewrites the TypeScript fences of a markdown document.

  Args:
      document (str): Markdown source.
      backend (Optional[str]): Toolchain backend ('builtin' or 'node'). Defaults to config.
      strict (bool): If True, raise the first block failure instead of passing the block through.

  Returns:
      str: The rewritten document.
  """
  config = RuntimeConfig.load(backend=backend, strict_mode=strict)
  return BlockRewriter(config=config).rewrite_sync(document).document


__all__ = [
  "BlockRewriter",
  "CodeBlock",
  "Diverged",
  "DocumentAssembler",
  "FunctionRegistry",
  "PackageRegistry",
  "RewriteResult",
  "RuntimeConfig",
  "Unchanged",
  "__version__",
  "rewrite",
]
