"""
Tests for the Toolchain Backend Registry.

Verifies that:
1. Bundled backends are auto-registered on package import.
2. `register_backend` adds new backends that `get_backend` instantiates with the config.
3. Unknown names raise a ValueError listing the registered backends.
"""

import pytest

from codetoggle.backends import available_backends, get_backend, register_backend
from codetoggle.backends.builtin import BuiltinBackend
from codetoggle.backends.node import NodeBackend
from codetoggle.config import RuntimeConfig


def test_bundled_backends_registered():
  assert "builtin" in available_backends()
  assert "node" in available_backends()


def test_get_backend_instantiates_with_config():
  config = RuntimeConfig(node_executable="nodejs")
  backend = get_backend("node", config)

  assert isinstance(backend, NodeBackend)
  assert backend.config is config
  assert isinstance(get_backend("builtin"), BuiltinBackend)


def test_register_custom_backend():
  @register_backend("echo")
  class EchoBackend:
    def __init__(self, config=None):
      self.config = config

    def available(self):
      return True

    async def format(self, code, dialect):
      return code

    async def transpile(self, code):
      return code

  assert "echo" in available_backends()
  assert isinstance(get_backend("echo"), EchoBackend)


def test_custom_backend_does_not_leak():
  """Runs after the registration test; the registry is restored between tests."""
  assert "echo" not in available_backends()


def test_unknown_backend():
  with pytest.raises(ValueError) as excinfo:
    get_backend("deno")
  assert "Unknown backend 'deno'" in str(excinfo.value)
  assert "builtin" in str(excinfo.value)
