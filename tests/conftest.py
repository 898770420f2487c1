"""
Shared pytest fixtures.

- Puts `src/` on the import path so the suite runs without an install.
- `snapshot`: compares rendered documents against files in `__snapshots__/`.
- `recorded_console`: collects log output for assertions.
- Restores the backend registry after every test.
"""

import sys
from pathlib import Path
from typing import Callable, Optional

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

# Bundled backends must be registered before the registry baseline is taken.
import codetoggle.backends
from codetoggle.backends.base import _BACKEND_REGISTRY
from codetoggle.utils.console import capture_console


def pytest_addoption(parser):
  parser.addoption("--update-snapshots", action="store_true", default=False, help="Rewrite stored snapshots")


class SnapshotAssert:
  """
  Stores one snapshot per test, named after the test, next to the test module.

  A missing snapshot is written on first run. With `--update-snapshots` every
  snapshot is rewritten and nothing is compared.
  """

  def __init__(self, request: pytest.FixtureRequest):
    self.directory = Path(request.node.fspath).parent / "__snapshots__"
    self.name = request.node.name
    self.update = request.config.getoption("--update-snapshots")

  def assert_match(self, content: str, extension: str = "md", normalizer: Optional[Callable[[str], str]] = None):
    """
    Args:
        content: Rendered output.
        extension: Snapshot file suffix.
        normalizer: Applied to both sides before comparing.
    """
    normalize = normalizer or (lambda text: text)
    actual = normalize(content.replace("\r\n", "\n"))
    path = self.directory / f"{self.name}.{extension}"

    if self.update or not path.exists():
      self.directory.mkdir(parents=True, exist_ok=True)
      path.write_text(actual, encoding="utf-8")
      return

    stored = normalize(path.read_text(encoding="utf-8").replace("\r\n", "\n"))
    assert actual == stored, f"{path.name} differs from the rendered output; rerun with --update-snapshots to accept."


@pytest.fixture
def snapshot(request):
  return SnapshotAssert(request)


@pytest.fixture
def recorded_console():
  """Log records and console prints of the test, readable via `export_text()`."""
  with capture_console(width=200) as recorder:
    yield recorder


@pytest.fixture(autouse=True)
def isolate_backend_registry():
  """Fake backends registered by a test are dropped afterwards."""
  baseline = dict(_BACKEND_REGISTRY)
  yield
  _BACKEND_REGISTRY.clear()
  _BACKEND_REGISTRY.update(baseline)
