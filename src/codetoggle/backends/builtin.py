"""
Builtin Backend.

Formats and transpiles with the pure Python toolkit in `codetoggle.typescript`.
Both dialects are parsed with the TypeScript grammar, which is a superset of
the JavaScript the downleveler produces. Work is CPU bound and runs in a worker
thread so that concurrent block pipelines keep the event loop responsive.
"""

import asyncio
from typing import Optional

from codetoggle.backends.base import register_backend
from codetoggle.config import RuntimeConfig
from codetoggle.enums import Dialect
from codetoggle.errors import FormatError, TranspileError
from codetoggle.typescript import EraseError, LexError, erase_types, print_canonical


@register_backend("builtin")
class BuiltinBackend:
  """
  Toolchain backend with no external dependencies.
  """

  def __init__(self, config: Optional[RuntimeConfig] = None) -> None:
    self.config = config or RuntimeConfig()

  def available(self) -> bool:
    return True

  async def format(self, code: str, dialect: Dialect) -> str:
    return await asyncio.to_thread(self._format_sync, code, dialect)

  async def transpile(self, code: str) -> str:
    return await asyncio.to_thread(self._transpile_sync, code)

  @staticmethod
  def _format_sync(code: str, dialect: Dialect) -> str:
    try:
      return print_canonical(code)
    except LexError as e:
      raise FormatError(f"Invalid {Dialect(dialect).value} syntax: {e.message}", line=e.line) from e

  @staticmethod
  def _transpile_sync(code: str) -> str:
    try:
      return erase_types(code)
    except LexError as e:
      raise TranspileError(e.message, line=e.line) from e
    except EraseError as e:
      raise TranspileError(str(e)) from e
