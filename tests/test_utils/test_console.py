"""
Tests for the Build Log Channel.

Verifies:
1. Prints and log records follow the console installed with `set_console`.
2. `capture_console` collects one block of output and restores the previous console.
3. `reset_console` returns to a fresh stderr console.
4. The logger keeps a single Rich handler and stays off the root logger.
"""

import logging

import pytest
from rich.console import Console
from rich.logging import RichHandler

from codetoggle.utils.console import (
  capture_console,
  console,
  get_console,
  log_error,
  log_info,
  log_success,
  log_warning,
  logger,
  reset_console,
  set_console,
)


@pytest.fixture(autouse=True)
def fresh_console():
  reset_console()
  yield
  reset_console()


def test_levels_and_prints_reach_injected_console():
  page_log = Console(record=True, width=200)
  set_console(page_log)

  log_info("Rewriting guide.md")
  log_success("2 toggles emitted")
  log_warning("Block 3 passed through")
  log_error("Could not write out.md")
  console.print("summary table")

  output = page_log.export_text()
  for text in ["Rewriting guide.md", "2 toggles emitted", "Block 3 passed through", "Could not write out.md"]:
    assert text in output
  assert "summary table" in output
  assert "SUCCESS" in output
  assert "ERROR" in output


def test_brackets_printed_literally():
  page_log = Console(record=True, width=200)
  set_console(page_log)

  log_warning("[transpile] Ref<number> at line 3")

  assert "[transpile] Ref<number> at line 3" in page_log.export_text()


def test_capture_console_restores_previous():
  outer = Console(record=True, width=200)
  set_console(outer)

  with capture_console(width=120) as inner:
    log_warning("inside")
    assert get_console() is inner
  log_warning("outside")

  assert get_console() is outer
  assert "inside" in inner.export_text()
  assert "outside" not in inner.export_text()
  assert "outside" in outer.export_text()


def test_reset_gives_fresh_stderr_console():
  before = get_console()
  set_console(Console())

  reset_console()

  assert get_console() is not before
  assert get_console().stderr


def rich_handlers(target: logging.Logger):
  return [h for h in target.handlers if isinstance(h, RichHandler)]


def test_single_rich_handler_after_swaps():
  set_console(Console(record=True))
  set_console(Console(record=True))

  assert len(rich_handlers(logger)) == 1
  assert logger.propagate is False


def test_root_logger_untouched():
  class Collector(logging.Handler):
    def __init__(self):
      super().__init__()
      self.records = []

    def emit(self, record):
      self.records.append(record)

  root = logging.getLogger()
  collector = Collector()
  root.addHandler(collector)
  try:
    log_warning("Stays on the build channel")
  finally:
    root.removeHandler(collector)

  assert collector.records == []
  assert rich_handlers(root) == []


def test_unknown_attributes_forwarded():
  assert console.width == get_console().width
