"""
Generated sections of a function page.

`build_function_markdown` produces the header (demo embed and add-on note) and
the footer (type declarations, source links, contributors and changelog).
`replacer` places generated text between `<!--KEY_STARTS-->` and
`<!--KEY_ENDS-->` markers.
"""

from typing import Optional

from pydantic import BaseModel

DEFAULT_SOURCE_URL = "https://github.com/vueuse/vueuse/blob/main/packages"
COLLAPSE_TYPES_OVER = 1000

_CLIENT_DEMO_SUFFIX = ".client.vue"


class FunctionMarkdown(BaseModel):
  header: str = ""
  footer: str = ""


def _typing_section(types: Optional[str]) -> str:
  if not types:
    return ""
  code = f"```typescript twoslash\n// @include: imports\n{types.strip()}\n```"
  if len(types) > COLLAPSE_TYPES_OVER:
    return (
      "\n## Type Declarations\n\n"
      "<details>\n"
      "<summary op50 italic cursor-pointer select-none>Show Type Declarations</summary>\n\n"
      f"{code}\n\n"
      "</details>\n"
    )
  return f"\n## Type Declarations\n\n{code}"


def _demo_section(url: str, demo_path: Optional[str]) -> str:
  if not demo_path:
    return ""
  source_link = f'<p class="demo-source-link"><a href="{url}/{demo_path}" target="_blank">source</a></p>\n'

  if demo_path.endswith(_CLIENT_DEMO_SUFFIX):
    return (
      "\n<script setup>\n"
      "import { defineAsyncComponent } from 'vue'\n"
      f"const Demo = defineAsyncComponent(() => import('./{demo_path}'))\n"
      "</script>\n\n"
      "## Demo\n\n"
      "<DemoContainer>\n"
      f"{source_link}"
      "<ClientOnly>\n"
      "  <Suspense>\n"
      "    <Demo/>\n"
      "    <template #fallback>\n"
      "      Loading demo...\n"
      "    </template>\n"
      "  </Suspense>\n"
      "</ClientOnly>\n"
      "</DemoContainer>\n"
    )
  return (
    "\n<script setup>\n"
    f"import Demo from './{demo_path}'\n"
    "</script>\n\n"
    "## Demo\n\n"
    "<DemoContainer>\n"
    f"{source_link}"
    "<Demo/>\n"
    "</DemoContainer>\n"
  )


def build_function_markdown(
  package: str,
  name: str,
  demo_path: Optional[str] = None,
  types: Optional[str] = None,
  addon: bool = False,
  source_url: str = DEFAULT_SOURCE_URL,
) -> FunctionMarkdown:
  """
  Builds the generated header and footer of a function page.

  Args:
      package (str): Package the function belongs to (e.g. 'core').
      name (str): Function name.
      demo_path (Optional[str]): Demo file name relative to the page, if any.
      types (Optional[str]): Type declarations, if available.
      addon (bool): Whether the package is an add-on.
      source_url (str): Blob URL prefix for source links.

  Returns:
      FunctionMarkdown: Header and footer text.
  """
  url = f"{source_url}/{package}/{name}"

  links = [("Source", f"{url}/index.ts")]
  if demo_path:
    links.append(("Demo", f"{url}/{demo_path}"))
  links.append(("Docs", f"{url}/index.md"))
  source_section = "## Source\n\n" + " • ".join(f"[{label}]({href})" for label, href in links) + "\n"

  contributors_section = f'\n## Contributors\n\n<Contributors fn="{name}" />\n  '
  changelog_section = f'\n## Changelog\n\n<Changelog fn="{name}" />\n'

  footer = f"{_typing_section(types)}\n\n{source_section}\n{contributors_section}\n{changelog_section}\n"

  package_note = f'Available in the <a href="/{package}/README">@vueuse/{package}</a> add-on.\n' if addon else ""
  header = _demo_section(url, demo_path) + package_note

  return FunctionMarkdown(header=header, footer=footer)


def replacer(code: str, value: str, key: str, insert: str = "none") -> str:
  """
  Replaces the region between `<!--{key}_STARTS-->` and `<!--{key}_ENDS-->`.

  Args:
      code (str): Document text.
      value (str): New region content; empty leaves just the markers.
      key (str): Marker key, e.g. 'FOOTER'.
      insert (str): Where to add the region when the markers are absent:
          'head', 'tail' or 'none' (leave the document unchanged).

  Returns:
      str: The updated document.
  """
  start = f"<!--{key}_STARTS-->"
  end = f"<!--{key}_ENDS-->"
  target = f"{start}\n{value}\n{end}" if value else f"{start}{end}"

  lowered = code.lower()
  begin = lowered.find(start.lower())
  finish = lowered.find(end.lower(), begin + len(start)) if begin >= 0 else -1

  if begin < 0 or finish < 0:
    if insert == "head":
      return f"{target}\n\n{code}"
    if insert == "tail":
      return f"{code}\n\n{target}"
    return code

  return code[:begin] + target + code[finish + len(end) :]
