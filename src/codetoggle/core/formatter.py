"""
Formatter.

Canonicalizes snippets before they are compared or displayed: runs of newlines
are collapsed, the configured backend pretty prints the result in the house
style (no statement terminators, single quotes), and surrounding whitespace is
trimmed. The output depends only on the input and the backend.
"""

import re
from typing import Optional

from codetoggle.backends import ToolchainBackend, get_backend
from codetoggle.config import RuntimeConfig
from codetoggle.enums import Dialect

_NEWLINE_RUN_RE = re.compile(r"\n+")


def collapse_newlines(code: str) -> str:
  return _NEWLINE_RUN_RE.sub("\n", code)


class Formatter:
  """
  Pretty printer bound to one toolchain backend.
  """

  def __init__(self, backend: Optional[ToolchainBackend] = None, config: Optional[RuntimeConfig] = None) -> None:
    self.config = config or RuntimeConfig()
    self.backend = backend or get_backend(self.config.backend, self.config)

  async def format(self, code: str, dialect: Dialect) -> str:
    """
    Args:
        code (str): Snippet source.
        dialect (Dialect): Grammar the snippet must satisfy.

    Returns:
        str: Canonical text without leading or trailing whitespace.

    Raises:
        FormatError: If `code` is not valid for `dialect`.
    """
    formatted = await self.backend.format(collapse_newlines(code), Dialect(dialect))
    return formatted.strip()
