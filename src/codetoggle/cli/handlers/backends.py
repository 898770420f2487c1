"""CLI handler for the backends listing."""

from rich.table import Table

from codetoggle.backends import available_backends, get_backend
from codetoggle.utils.console import console


def handle_backends() -> int:
  """Handles 'backends' command."""
  table = Table(title="Toolchain Backends")
  table.add_column("Name", style="cyan")
  table.add_column("Available", justify="center")

  for name in sorted(available_backends()):
    ok = get_backend(name).available()
    table.add_row(name, "yes" if ok else "no")

  console.print(table)
  return 0
