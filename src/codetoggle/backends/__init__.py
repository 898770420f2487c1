"""
Toolchain Backends Package.

Automatically discovers and registers backends by scanning this directory for
modules. Importing a module triggers its `@register_backend` decorator, which
populates the internal `_BACKEND_REGISTRY`.

This module exposes the registry helpers (`get_backend`, `available_backends`).
"""

import importlib
import logging
import pkgutil
from pathlib import Path
from typing import List

from codetoggle.backends.base import (
  ToolchainBackend,
  _BACKEND_REGISTRY,
  get_backend,
  register_backend,
  registered_backends,
)

_EXCLUDED_MODULES = {"base", "__init__"}


def _auto_register_backends() -> None:
  """
  Imports every module in this package so that its backends register themselves.
  """
  pkg_path = str(Path(__file__).parent)

  for _, module_name, _ in pkgutil.iter_modules([pkg_path]):
    if module_name in _EXCLUDED_MODULES:
      continue

    try:
      importlib.import_module(f".{module_name}", package=__name__)
    except Exception as e:
      # One broken backend must not take the others down with it.
      logging.getLogger("codetoggle").warning(f"Failed to load backend module '{module_name}': {e}")


_auto_register_backends()


def available_backends() -> List[str]:
  """
  Returns the registered backend keys.

  >>> "builtin" in available_backends()
  True

  Returns:
      List[str]: Keys passed to `@register_backend`.
  """
  return registered_backends()


__all__ = [
  "ToolchainBackend",
  "available_backends",
  "get_backend",
  "register_backend",
]
