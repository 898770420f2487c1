"""
Node.js Backend.

Delegates to the real toolchain: `prettier` (semi: false, singleQuote: true,
parser: typescript) for formatting and `typescript.transpileModule` (ESNext
target) for downleveling. Each call spawns `node node_bridge.mjs` and exchanges
one JSON request/response over stdin/stdout.

The packages are resolved from `node_project_dir` (default: the working
directory), so the documentation project's own `node_modules` is used.
"""

import asyncio
import json
import shutil
from pathlib import Path
from typing import Optional, Type

from codetoggle.backends.base import register_backend
from codetoggle.config import RuntimeConfig
from codetoggle.enums import Dialect
from codetoggle.errors import FormatError, ToggleError, TranspileError

BRIDGE_SCRIPT = Path(__file__).resolve().parent / "node_bridge.mjs"


@register_backend("node")
class NodeBackend:
  """
  Toolchain backend running prettier and typescript in a Node.js subprocess.
  """

  def __init__(self, config: Optional[RuntimeConfig] = None) -> None:
    self.config = config or RuntimeConfig()

  def available(self) -> bool:
    return shutil.which(self.config.node_executable) is not None

  async def format(self, code: str, dialect: Dialect) -> str:
    return await self._call("format", code, FormatError, dialect=Dialect(dialect).value)

  async def transpile(self, code: str) -> str:
    return await self._call("transpile", code, TranspileError)

  async def _call(self, op: str, code: str, error_cls: Type[ToggleError], **extra: str) -> str:
    """
    Runs one bridge request.

    Args:
        op (str): 'format' or 'transpile'.
        code (str): Snippet to process.
        error_cls (Type[ToggleError]): Error raised on any failure.

    Returns:
        str: The processed snippet.
    """
    payload = json.dumps({"op": op, "code": code, **extra}).encode("utf-8")
    cwd = str(self.config.node_project_dir) if self.config.node_project_dir else None

    try:
      proc = await asyncio.create_subprocess_exec(
        self.config.node_executable,
        str(BRIDGE_SCRIPT),
        cwd=cwd,
        stdin=asyncio.subprocess.PIPE,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
      )
    except OSError as e:
      raise error_cls(f"Could not start '{self.config.node_executable}': {e}") from e

    try:
      stdout, stderr = await proc.communicate(payload)
    except asyncio.CancelledError:
      # Timed out by the rewriter; do not leave the child running.
      if proc.returncode is None:
        proc.kill()
      raise

    if proc.returncode != 0:
      message = stderr.decode("utf-8", errors="replace").strip() or f"exit code {proc.returncode}"
      raise error_cls(f"Node bridge failed: {message}")

    try:
      response = json.loads(stdout.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
      raise error_cls(f"Malformed response from node bridge: {e}") from e

    if not response.get("ok"):
      raise error_cls(response.get("error") or f"{op} failed", line=response.get("line"))
    return response["code"]
