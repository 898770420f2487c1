"""
Main Entry Point for the codetoggle CLI.

This module handles argument parsing and dispatches to specific command
handlers defined in `codetoggle.cli.commands`.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from codetoggle import __version__
from codetoggle.cli import commands
from codetoggle.config import parse_cli_key_values


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, non-zero for failure).
  """
  parser = argparse.ArgumentParser(description="codetoggle: TypeScript/JavaScript dual views for markdown docs")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

  subparsers = parser.add_subparsers(dest="command", required=True)

  # --- Command: REWRITE ---
  cmd_rw = subparsers.add_parser("rewrite", help="Add JavaScript toggles to TypeScript code blocks")
  cmd_rw.add_argument("path", type=Path, help="Markdown file or directory")
  cmd_rw.add_argument("--out", type=Path, help="Output destination (file or dir); stdout for a single file")
  cmd_rw.add_argument("--backend", default=None, help="Toolchain backend (default: from toml, else 'builtin')")
  cmd_rw.add_argument("--check", action="store_true", help="Write nothing; exit 1 if any file would change")
  cmd_rw.add_argument(
    "--strict",
    action="store_true",
    default=None,
    help="Fail on the first block that cannot be processed (Overrides config)",
  )
  cmd_rw.add_argument("--config", nargs="*", help="Settings in key=value format (e.g. max_concurrency=4)")

  # --- Command: ASSEMBLE ---
  cmd_as = subparsers.add_parser("assemble", help="Build complete function pages")
  cmd_as.add_argument("path", type=Path, help="Function page (<package>/<name>/index.md) or directory")
  cmd_as.add_argument("--functions", type=Path, required=True, help="JSON function registry")
  cmd_as.add_argument("--packages", type=Path, required=True, help="JSON package registry")
  cmd_as.add_argument("--types-dir", type=Path, default=None, help="Root of generated .d.ts files")
  cmd_as.add_argument("--out", type=Path, help="Output destination (file or dir); stdout for a single file")
  cmd_as.add_argument("--backend", default=None, help="Toolchain backend (default: from toml, else 'builtin')")
  cmd_as.add_argument("--config", nargs="*", help="Settings in key=value format")

  # --- Command: BACKENDS ---
  subparsers.add_parser("backends", help="List toolchain backends and whether they can run here")

  args = parser.parse_args(argv)

  if args.command == "rewrite":
    settings = parse_cli_key_values(args.config)
    return commands.handle_rewrite(args.path, args.out, args.backend, args.check, settings, args.strict)

  elif args.command == "assemble":
    settings = parse_cli_key_values(args.config)
    return commands.handle_assemble(
      args.path, args.functions, args.packages, args.types_dir, args.out, args.backend, settings
    )

  elif args.command == "backends":
    return commands.handle_backends()

  return 0


if __name__ == "__main__":
  sys.exit(main())
