"""
Rewrite Command Handler.

Implements `codetoggle rewrite`: loads configuration, rewrites the TypeScript
fences of one markdown file or of every `*.md` file under a directory, and
writes the results (or, with `--check`, only reports which files would change).
"""

import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from rich.table import Table

from codetoggle.config import RuntimeConfig
from codetoggle.core.blocks import RewriteResult
from codetoggle.core.rewriter import BlockRewriter
from codetoggle.errors import ToggleError
from codetoggle.utils.console import console, log_error, log_info, log_success, log_warning


def collect_markdown(input_path: Path) -> List[Path]:
  if input_path.is_file():
    return [input_path]
  return sorted(input_path.rglob("*.md"))


def load_config(
  input_path: Path, backend: Optional[str], settings: Dict[str, Any], strict: Optional[bool] = None
) -> Optional[RuntimeConfig]:
  """
  Resolves configuration for a command, logging validation problems.

  Returns:
      Optional[RuntimeConfig]: None if the settings are invalid.
  """
  try:
    return RuntimeConfig.load(
      backend=backend,
      strict_mode=strict,
      overrides=settings,
      search_path=input_path if input_path.is_dir() else input_path.parent,
    )
  except ValidationError as e:
    log_error(f"Invalid configuration: {e}")
    return None


def handle_rewrite(
  input_path: Path,
  output_path: Optional[Path],
  backend: Optional[str],
  check: bool,
  settings: Dict[str, Any],
  strict: Optional[bool] = None,
) -> int:
  """
  Handles the 'rewrite' command execution.

  Args:
      input_path: Markdown file or directory.
      output_path: Destination file (or directory, for directory input).
      backend: Toolchain backend override.
      check: If True, write nothing and fail when any file would change.
      settings: Extra configuration overrides from `--config`.
      strict: Strict mode override.

  Returns:
      int: Exit code (0 for success, 1 for failure).
  """
  if not input_path.exists():
    log_error(f"Input not found: {input_path}")
    return 1
  if input_path.is_dir() and not output_path and not check:
    log_error("Directory rewriting requires --out destination directory (or --check).")
    return 1

  config = load_config(input_path, backend, settings, strict)
  if config is None:
    return 1

  try:
    rewriter = BlockRewriter(config=config)
  except ValueError as e:
    log_error(str(e))
    return 1

  files = collect_markdown(input_path)
  if not files:
    log_warning(f"No .md files found in {input_path}")
    return 0

  documents: Dict[str, str] = {}
  unreadable: List[Path] = []
  for path in files:
    try:
      with open(path, "rt", encoding="utf-8") as f:
        documents[str(path)] = f.read()
    except (OSError, UnicodeDecodeError) as e:
      log_error(f"Skipping {path}: {e}")
      unreadable.append(path)
  files = [path for path in files if path not in unreadable]
  if not files:
    return 1

  if len(files) > 1:
    log_info(f"Processing {len(files)} files from {input_path} with the '{config.backend}' backend...")

  try:
    results = asyncio.run(rewriter.rewrite_many(documents))
  except ToggleError as e:
    log_error(f"Strict mode: {e}")
    return 1

  changed = [name for name, result in results.items() if result.document != documents[name]]

  if check:
    _print_summary(results, changed)
    if changed:
      log_error(f"{len(changed)} file(s) would be rewritten.")
      return 1
    if unreadable:
      return 1
    log_success("All code blocks are up to date.")
    return 0

  for path in files:
    result = results[str(path)]
    if input_path.is_file():
      destination = output_path
    else:
      destination = output_path / path.relative_to(input_path)

    if destination is None:
      print(result.document, end="")
      continue
    destination.parent.mkdir(parents=True, exist_ok=True)
    with open(destination, "wt", encoding="utf-8") as f:
      f.write(result.document)

  _print_summary(results, changed)
  return 1 if unreadable else 0


def _print_summary(results: Dict[str, RewriteResult], changed: List[str]) -> None:
  """
  Renders a per-file report when anything changed or went wrong.
  """
  flagged = {name: r for name, r in results.items() if name in changed or r.has_diagnostics}
  if not flagged:
    log_success(f"Rewrite complete: {len(results)} file(s), nothing to change.")
    return

  table = Table(title="Code Block Report")
  table.add_column("File", style="cyan")
  table.add_column("Toggles", justify="right")
  table.add_column("Issues", style="yellow")

  for name, result in flagged.items():
    toggles = sum(1 for d in result.decisions if d.outcome == "diverged")
    issues = "; ".join(d.render() for d in result.diagnostics) or "-"
    table.add_row(name, str(toggles), issues)

  console.print(table)
  log_success(f"Rewrite complete: {len(changed)} of {len(results)} file(s) changed.")
