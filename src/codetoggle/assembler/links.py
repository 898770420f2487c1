"""
Link rewriting for function pages.
"""

import re

from codetoggle.assembler.metadata import FunctionRegistry


def linkify_functions(code: str, functions: FunctionRegistry) -> str:
  """
  Turns inline code spans naming a registered function into links.

  A span followed by `]` is already a link label and is left alone. The
  character following the span is consumed and replaced by a space.

  Args:
      code (str): Markdown source.
      functions (FunctionRegistry): Known functions.

  Returns:
      str: Markdown with function references linked.
  """
  if not len(functions):
    return code

  # Longest first so `useFooBar` is not shadowed by `useFoo`.
  names = sorted(functions.names, key=len, reverse=True)
  pattern = re.compile(r"`(" + "|".join(re.escape(n) for n in names) + r")`(.)")

  def _link(match: "re.Match[str]") -> str:
    if match.group(2) == "]":
      return match.group(0)
    fn = functions.get(match.group(1))
    return f"[`{fn.name}`]({fn.docs}) "

  return pattern.sub(_link, code)


def relativize_site_links(code: str, host: str) -> str:
  """
  Rewrites absolute links to `host` as root-relative links.

  >>> relativize_site_links("see https://vueuse.org/core/useFoo/", "vueuse.org")
  'see /core/useFoo/'
  """
  return re.sub(rf"https?://{re.escape(host)}/", "/", code)
