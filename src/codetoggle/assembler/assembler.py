"""
Document Assembler.

The external-facing entry point used by a documentation build: given the raw
markdown of a page and its path, it links function references, rewrites code
blocks, and injects the generated sections of function pages.

Demo paths and type declarations are supplied by the caller; the assembler
never touches the file system.
"""

import asyncio
import re
from typing import Optional, Tuple

from codetoggle.assembler.links import linkify_functions, relativize_site_links
from codetoggle.assembler.metadata import FunctionRegistry, PackageRegistry
from codetoggle.assembler.sections import build_function_markdown, replacer
from codetoggle.config import RuntimeConfig
from codetoggle.core.blocks import RewriteResult
from codetoggle.core.diagnostics import DiagnosticLog
from codetoggle.core.rewriter import BlockRewriter
from codetoggle.errors import MetadataLookupError

_MARKDOWN_PATH_RE = re.compile(r"\.md\b")
_FIRST_SUBHEADING_RE = re.compile(r"\n#{2,6}\s.+")
_FRONTMATTER_END = "---\n\n"
_TITLE_RE = re.compile(r"^(# \w+)\n", re.MULTILINE)
_COMPONENTS_RE = re.compile(r"## (Components?(?:\sUsage)?)", re.IGNORECASE)
_DIRECTIVES_RE = re.compile(r"## (Directives?(?:\sUsage)?)", re.IGNORECASE)

FUNCTION_PAGE = "index.md"


def split_doc_path(doc_path: str) -> Tuple[str, str, str]:
  """
  Returns:
      Tuple[str, str, str]: The last three path segments `(package, name, file)`,
      padded with empty strings for short paths.
  """
  parts = [p for p in doc_path.replace("\\", "/").split("/") if p]
  parts = [""] * max(0, 3 - len(parts)) + parts
  return parts[-3], parts[-2], parts[-1]


def header_insert_index(code: str) -> int:
  """
  Where the generated header goes: before the first `##`-`######` heading, else
  after the front matter, else at the start.
  """
  heading = _FIRST_SUBHEADING_RE.search(code)
  if heading:
    return heading.start()
  frontmatter_end = code.find(_FRONTMATTER_END)
  if frontmatter_end >= 0:
    return frontmatter_end + 4
  return 0


class DocumentAssembler:
  """
  Transforms documentation pages.
  """

  def __init__(
    self,
    functions: FunctionRegistry,
    packages: PackageRegistry,
    config: Optional[RuntimeConfig] = None,
    rewriter: Optional[BlockRewriter] = None,
  ) -> None:
    self.functions = functions
    self.packages = packages
    self.config = config or RuntimeConfig()
    self.rewriter = rewriter or BlockRewriter(config=self.config)

  async def transform(
    self, code: str, doc_path: str, demo_path: Optional[str] = None, types: Optional[str] = None
  ) -> str:
    """
    Args:
        code (str): Page markdown.
        doc_path (str): Page path; its last three segments name package, function and file.
        demo_path (Optional[str]): Demo file next to the page (e.g. 'demo.vue').
        types (Optional[str]): Type declarations of the function, if available.

    Returns:
        str: The transformed page.
    """
    result = await self.transform_document(code, doc_path, demo_path=demo_path, types=types)
    return result.document

  def transform_sync(
    self, code: str, doc_path: str, demo_path: Optional[str] = None, types: Optional[str] = None
  ) -> str:
    return asyncio.run(self.transform(code, doc_path, demo_path=demo_path, types=types))

  async def transform_document(
    self, code: str, doc_path: str, demo_path: Optional[str] = None, types: Optional[str] = None
  ) -> RewriteResult:
    """
    Like `transform`, but also returns block decisions and diagnostics.
    """
    if not _MARKDOWN_PATH_RE.search(doc_path):
      return RewriteResult(document=code)

    code = linkify_functions(code, self.functions)
    code = relativize_site_links(code, self.config.site_host)

    package, raw_name, file_name = split_doc_path(doc_path)
    name = self.functions.resolve(raw_name) or raw_name

    if name not in self.functions or file_name != FUNCTION_PAGE:
      return RewriteResult(document=code)

    rewritten = await self.rewriter.rewrite(code, source=doc_path)
    code = rewritten.document

    log = DiagnosticLog(doc_path)
    try:
      addon = self.packages.is_addon(package)
    except MetadataLookupError as e:
      log.record_error(e)
      addon = False

    sections = build_function_markdown(
      package, name, demo_path=demo_path, types=types, addon=addon, source_url=self.config.source_url
    )

    if types is not None:
      code = replacer(code, sections.footer, "FOOTER", "tail")
    if sections.header:
      index = header_insert_index(code)
      code = code[:index] + sections.header + code[index:]

    code = _TITLE_RE.sub(lambda m: f'{m.group(1)}\n\n<FunctionInfo fn="{name}"/>\n', code, count=1)
    code = _COMPONENTS_RE.sub(lambda m: f"## {m.group(1)}\n<LearnMoreComponents />\n\n", code, count=1)
    code = _DIRECTIVES_RE.sub(lambda m: f"## {m.group(1)}\n<LearnMoreDirectives />\n\n", code, count=1)

    return RewriteResult(
      document=code,
      decisions=rewritten.decisions,
      diagnostics=[*rewritten.diagnostics, *log.entries],
    )
