"""
Annotation Stripper.

Removes type-inspection (twoslash) notation from a snippet so that only code the
reader would actually run is transpiled:

- query and highlight lines: `// ^?`, `// ^|`, `// ^^^`
- compiler and handbook flags: `// @errors: 2322`, `// @noErrors`, `// @log: x`
- cut markers: `// ---cut---` (and `---cut-before---`) drop everything above,
  `// ---cut-after---` drops everything below, and
  `// ---cut-start---` ... `// ---cut-end---` drop the enclosed lines.

`// @include: name` and `// @filename: x.ts` directives and TypeScript's own
`// @ts-...` pragmas are kept. The displayed snippet is never stripped.
"""

import re
from typing import List

_QUERY_RE = re.compile(r"^\s*//\s*\^")
_FLAG_RE = re.compile(r"^\s*//\s*@([A-Za-z][\w-]*)")
_CUT_RE = re.compile(r"^\s*//\s*---(cut(?:-before|-after|-start|-end)?)---\s*$")

PRESERVED_DIRECTIVES = frozenset({"include", "filename"})


def _cut_kind(line: str) -> str:
  match = _CUT_RE.match(line)
  return match.group(1) if match else ""


def _is_flag(line: str) -> bool:
  match = _FLAG_RE.match(line)
  if not match:
    return False
  name = match.group(1)
  return name not in PRESERVED_DIRECTIVES and not name.startswith("ts-")


def strip_inspection_annotations(code: str) -> str:
  """
  Args:
      code (str): Snippet carrying twoslash notation.

  Returns:
      str: The snippet without inspection notation.
  """
  lines = code.split("\n")

  # Everything up to the last cut marker is setup the reader never sees.
  last_cut = -1
  for i, line in enumerate(lines):
    if _cut_kind(line) in ("cut", "cut-before"):
      last_cut = i
  lines = lines[last_cut + 1 :]

  for i, line in enumerate(lines):
    if _cut_kind(line) == "cut-after":
      lines = lines[:i]
      break

  kept: List[str] = []
  hidden = False
  for line in lines:
    kind = _cut_kind(line)
    if kind == "cut-start":
      hidden = True
      continue
    if kind == "cut-end":
      hidden = False
      continue
    if hidden or _QUERY_RE.match(line) or _is_flag(line):
      continue
    kept.append(line)

  return "\n".join(kept)
