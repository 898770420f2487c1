"""
Dialect Downleveler.

Transpiles TypeScript to modern (ESNext) JavaScript through the configured
backend. Only type-only syntax is removed; runtime statements keep their order.
"""

from typing import Optional

from codetoggle.backends import ToolchainBackend, get_backend
from codetoggle.config import RuntimeConfig


class Downleveler:
  def __init__(self, backend: Optional[ToolchainBackend] = None, config: Optional[RuntimeConfig] = None) -> None:
    self.config = config or RuntimeConfig()
    self.backend = backend or get_backend(self.config.backend, self.config)

  async def to_javascript(self, ts_code: str) -> str:
    """
    Args:
        ts_code (str): TypeScript source, usually already canonical.

    Returns:
        str: JavaScript source (not yet canonicalized).

    Raises:
        TranspileError: If the snippet cannot be transpiled.
    """
    return await self.backend.transpile(ts_code)
