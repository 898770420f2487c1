"""
Base Protocol and Registry for Toolchain Backends.

A backend supplies the two external capabilities the engine needs: pretty
printing a snippet in the house style and transpiling TypeScript to JavaScript.
The engine never talks to a toolchain directly; the Formatter and Downleveler
resolve a backend by name from the registry populated here.
"""

from typing import Dict, List, Optional, Protocol, Type

from codetoggle.config import RuntimeConfig
from codetoggle.enums import Dialect


class ToolchainBackend(Protocol):
  """
  Protocol definition for a Toolchain Backend.
  """

  def __init__(self, config: Optional[RuntimeConfig] = None): ...

  async def format(self, code: str, dialect: Dialect) -> str:
    """
    Pretty prints `code` with no statement terminators and single quotes.

    Raises:
        FormatError: If `code` is not valid for `dialect`.
    """
    ...

  async def transpile(self, code: str) -> str:
    """
    Transpiles TypeScript to ESNext JavaScript, erasing type-only syntax.

    Raises:
        TranspileError: If `code` cannot be transpiled.
    """
    ...

  def available(self) -> bool:
    """
    Returns:
        bool: True if the backend's toolchain can be used on this machine.
    """
    ...


_BACKEND_REGISTRY: Dict[str, Type[ToolchainBackend]] = {}


def register_backend(name: str):
  def wrapper(cls):
    _BACKEND_REGISTRY[name] = cls
    return cls

  return wrapper


def get_backend(name: str, config: Optional[RuntimeConfig] = None) -> ToolchainBackend:
  """
  Instantiates a registered backend.

  Args:
      name (str): Registry key (e.g. 'builtin', 'node').
      config (Optional[RuntimeConfig]): Configuration passed to the backend.

  Returns:
      ToolchainBackend: A fresh backend instance.

  Raises:
      ValueError: If no backend is registered under `name`.
  """
  cls = _BACKEND_REGISTRY.get(name)
  if cls is None:
    known = ", ".join(sorted(_BACKEND_REGISTRY)) or "none"
    raise ValueError(f"Unknown backend '{name}'. Registered backends: {known}.")
  return cls(config)


def registered_backends() -> List[str]:
  return list(_BACKEND_REGISTRY.keys())
