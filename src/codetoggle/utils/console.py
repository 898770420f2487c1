"""
Build Log Channel.

Block diagnostics and CLI progress are reported here, never in the rewritten
document. Records go through the `codetoggle` logger and are rendered by a
`RichHandler` bound to whatever Rich Console is currently active.

Modules import `console` once; the proxy lets the CLI write to stderr while a
test or a docs builder swaps in a recording console to collect the warnings of
one page.

Attributes:
    console (_ConsoleProxy): Stable handle on the active Rich Console.
    logger (logging.Logger): The `codetoggle` logger every helper writes to.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

LOGGER_NAME = "codetoggle"

# Reported above INFO, below WARNING.
SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

_THEME = Theme(
  {
    "logging.level.success": "bold green",
    "logging.level.warning": "yellow",
  }
)

logger = logging.getLogger(LOGGER_NAME)


def _stderr_console() -> Console:
  return Console(theme=_THEME, stderr=True)


def _bind_handler(target: Console) -> None:
  """Replaces the logger's Rich handler with one writing to `target`."""
  for old in [h for h in logger.handlers if isinstance(h, RichHandler)]:
    logger.removeHandler(old)

  logger.addHandler(
    RichHandler(
      console=target,
      show_time=False,
      show_path=False,
      omit_repeated_times=False,
      # Snippet text such as `[format]` or `Ref<T>` must print literally.
      markup=False,
      rich_tracebacks=True,
    )
  )
  logger.setLevel(logging.INFO)
  # Docs builders usually own the root logger.
  logger.propagate = False


class _ConsoleProxy:
  """
  Delegates to the active Rich Console and keeps the log handler pointed at it.
  """

  def __init__(self) -> None:
    self._target: Console = _stderr_console()
    _bind_handler(self._target)

  @property
  def target(self) -> Console:
    return self._target

  def redirect(self, target: Console) -> None:
    self._target = target
    _bind_handler(target)

  def restore(self) -> None:
    self.redirect(_stderr_console())

  def print(self, *args: Any, **kwargs: Any) -> None:
    self._target.print(*args, **kwargs)

  def __getattr__(self, name: str) -> Any:
    return getattr(self._target, name)


console = _ConsoleProxy()


def set_console(new_console: Console) -> None:
  """
  Sends console output and log records to `new_console`.

  Args:
      new_console (Console): For example `Console(record=True)`.
  """
  console.redirect(new_console)


def reset_console() -> None:
  """Sends output back to a fresh stderr console."""
  console.restore()


def get_console() -> Console:
  return console.target


@contextmanager
def capture_console(width: Optional[int] = None) -> Iterator[Console]:
  """
  Records everything logged inside the block.

  Args:
      width (Optional[int]): Fixed width for the recording console. Long diagnostics wrap otherwise.

  Yields:
      Console: The recording console; read it with `export_text()`.
  """
  previous = console.target
  recorder = Console(theme=_THEME, record=True, width=width)
  console.redirect(recorder)
  try:
    yield recorder
  finally:
    console.redirect(previous)


def log_info(msg: str) -> None:
  logger.info(msg)


def log_success(msg: str) -> None:
  logger.log(SUCCESS, msg)


def log_warning(msg: str) -> None:
  logger.warning(msg)


def log_error(msg: str) -> None:
  logger.error(msg)
