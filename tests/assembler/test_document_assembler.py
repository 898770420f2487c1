"""
Tests for the Document Assembler.

Verifies that:
1. Function pages get linked references, rewritten code blocks, the demo header,
   the FunctionInfo badge and the footer, each in the right place.
2. Other markdown pages only get link rewriting; non-markdown paths pass through.
3. Add-on packages get the add-on note; unknown packages yield a lookup diagnostic.
"""

import asyncio

import pytest

from codetoggle.assembler import DocumentAssembler, FunctionRegistry, PackageRegistry
from codetoggle.assembler.assembler import header_insert_index, split_doc_path
from codetoggle.assembler.metadata import FunctionEntry, PackageEntry

PAGE = (
  "---\ncategory: State\n---\n\n"
  "# useFoo\n\n"
  "Wraps `useFoo` for you. See https://vueuse.org/core/useFoo/\n\n"
  "## Usage\n\n"
  "```ts\nconst a: number = 1\n```\n"
)
TYPES = "export declare function useFoo(): void\n"


@pytest.fixture
def assembler():
  functions = FunctionRegistry([FunctionEntry(name="useFoo", docs="/core/useFoo/", package="core")])
  packages = PackageRegistry([PackageEntry(name="core"), PackageEntry(name="firebase", addon=True)])
  return DocumentAssembler(functions, packages)


def test_split_doc_path():
  assert split_doc_path("packages/core/useFoo/index.md") == ("core", "useFoo", "index.md")
  assert split_doc_path("index.md") == ("", "", "index.md")


def test_header_insert_index():
  assert header_insert_index("# t\n\ntext\n## Usage\n") == len("# t\n\ntext")
  frontmatter = "---\ncategory: x\n---\n\n# t\n"
  assert header_insert_index(frontmatter) == frontmatter.index("---\n\n") + 4
  assert header_insert_index("# t\n") == 0


def test_function_page_fully_assembled(assembler):
  out = assembler.transform_sync(PAGE, "packages/core/useFoo/index.md", demo_path="demo.vue", types=TYPES)

  assert out.startswith(
    "---\ncategory: State\n---\n\n"
    "# useFoo\n\n"
    '<FunctionInfo fn="useFoo"/>\n\n'
    "Wraps [`useFoo`](/core/useFoo/) for you. See /core/useFoo/\n"
  )
  assert out.index("## Demo") < out.index("## Usage")
  assert "import Demo from './demo.vue'" in out
  assert "```js\nconst a = 1\n```" in out
  assert out.index("## Usage") < out.index("## Type Declarations")
  assert "[Demo](https://github.com/vueuse/vueuse/blob/main/packages/core/useFoo/demo.vue)" in out
  assert out.endswith("<!--FOOTER_ENDS-->")
  assert "add-on" not in out


def test_footer_only_with_types(assembler):
  out = assembler.transform_sync(PAGE, "packages/core/useFoo/index.md")
  assert "FOOTER_STARTS" not in out
  assert '<FunctionInfo fn="useFoo"/>' in out


def test_function_name_resolved_case_insensitively(assembler):
  out = assembler.transform_sync(PAGE, "packages/core/usefoo/index.md")
  assert '<FunctionInfo fn="useFoo"/>' in out


def test_learn_more_sections(assembler):
  page = "# useFoo\n\n## Component Usage\n\ntext\n\n## Directive Usage\n\ntext\n"
  out = assembler.transform_sync(page, "packages/core/useFoo/index.md")

  assert "## Component Usage\n<LearnMoreComponents />\n\n" in out
  assert "## Directive Usage\n<LearnMoreDirectives />\n\n" in out


def test_addon_note(assembler):
  out = assembler.transform_sync(PAGE, "packages/firebase/useFoo/index.md")
  assert '/core/useFoo/\nAvailable in the <a href="/firebase/README">@vueuse/firebase</a> add-on.\n\n## Usage' in out


def test_unknown_package_reports_lookup(assembler):
  result = asyncio.run(assembler.transform_document(PAGE, "packages/mystery/useFoo/index.md"))

  assert [d.kind for d in result.diagnostics] == ["lookup"]
  assert "Unknown package 'mystery'" in result.diagnostics[0].message
  assert '<FunctionInfo fn="useFoo"/>' in result.document


def test_other_pages_only_linked(assembler):
  page = "# Guide\n\nUse `useFoo` x\n\n```ts\nconst a: number = 1\n```\n"
  out = assembler.transform_sync(page, "packages/guide/index.md")

  assert out == "# Guide\n\nUse [`useFoo`](/core/useFoo/) x\n\n```ts\nconst a: number = 1\n```\n"


def test_non_function_file_in_function_dir(assembler):
  out = assembler.transform_sync(PAGE, "packages/core/useFoo/notes.md")
  assert "<CodeToggle>" not in out
  assert "FunctionInfo" not in out


def test_non_markdown_untouched(assembler):
  assert assembler.transform_sync(PAGE, "packages/core/useFoo/index.ts") == PAGE
