"""
Assemble Command Handler.

Implements `codetoggle assemble`: runs the full Document Assembler over function
pages. The handler is the caller the assembler expects, so it is the one place
that looks at the file system for demo components and type declarations.
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from codetoggle.assembler import DocumentAssembler, FunctionRegistry, PackageRegistry
from codetoggle.assembler.assembler import split_doc_path
from codetoggle.cli.handlers.rewrite import collect_markdown, load_config
from codetoggle.utils.console import log_error, log_success, log_warning

DEMO_CANDIDATES = ("demo.vue", "demo.client.vue")


def find_demo(page_dir: Path) -> Optional[str]:
  for candidate in DEMO_CANDIDATES:
    if (page_dir / candidate).is_file():
      return candidate
  return None


def read_types(types_dir: Optional[Path], package: str, name: str) -> Optional[str]:
  """
  Looks for `<package>/<name>.d.ts`, then `<package>/<name>/index.d.ts`.
  """
  if types_dir is None:
    return None
  for candidate in (types_dir / package / f"{name}.d.ts", types_dir / package / name / "index.d.ts"):
    if candidate.is_file():
      with open(candidate, "rt", encoding="utf-8") as f:
        return f.read()
  log_warning(f"No types found for {package}/{name}")
  return None


def load_registries(functions_path: Path, packages_path: Path) -> Optional[Tuple[FunctionRegistry, PackageRegistry]]:
  try:
    return FunctionRegistry.from_json(functions_path), PackageRegistry.from_json(packages_path)
  except (OSError, json.JSONDecodeError, ValidationError) as e:
    log_error(f"Could not load metadata: {e}")
    return None


def handle_assemble(
  input_path: Path,
  functions_path: Path,
  packages_path: Path,
  types_dir: Optional[Path],
  output_path: Optional[Path],
  backend: Optional[str],
  settings: Dict[str, Any],
) -> int:
  """
  Handles the 'assemble' command execution.

  Args:
      input_path: A function page or a directory of pages.
      functions_path: JSON function registry.
      packages_path: JSON package registry.
      types_dir: Root of generated type declarations.
      output_path: Destination file, or directory for directory input.
      backend: Toolchain backend override.
      settings: Extra configuration overrides from `--config`.

  Returns:
      int: Exit code (0 for success, 1 for failure).
  """
  if not input_path.exists():
    log_error(f"Input not found: {input_path}")
    return 1
  if input_path.is_dir() and not output_path:
    log_error("Directory assembly requires --out destination directory.")
    return 1
  if types_dir is not None and not types_dir.is_dir():
    log_warning(f"Types directory not found: {types_dir}")
    types_dir = None

  registries = load_registries(functions_path, packages_path)
  if registries is None:
    return 1
  functions, packages = registries

  config = load_config(input_path, backend, settings)
  if config is None:
    return 1
  try:
    assembler = DocumentAssembler(functions, packages, config=config)
  except ValueError as e:
    log_error(str(e))
    return 1

  files = collect_markdown(input_path)
  sources: Dict[Path, str] = {}
  for path in files:
    try:
      with open(path, "rt", encoding="utf-8") as f:
        sources[path] = f.read()
    except (OSError, UnicodeDecodeError) as e:
      log_error(f"Skipping {path}: {e}")
  skipped = len(files) - len(sources)

  pages = asyncio.run(_assemble_all(assembler, functions, sources, types_dir))

  for path, page in zip(sources, pages):
    if input_path.is_file():
      destination = output_path
    else:
      destination = output_path / path.relative_to(input_path)
    if destination is None:
      print(page, end="")
      continue
    destination.parent.mkdir(parents=True, exist_ok=True)
    with open(destination, "wt", encoding="utf-8") as f:
      f.write(page)

  log_success(f"Assembled {len(sources)} page(s).")
  return 1 if skipped else 0


async def _assemble_all(
  assembler: DocumentAssembler, functions: FunctionRegistry, sources: Dict[Path, str], types_dir: Optional[Path]
) -> List[str]:
  async def _one(path: Path, code: str) -> str:
    package, raw_name, _ = split_doc_path(path.as_posix())
    name = functions.resolve(raw_name) or raw_name
    types = read_types(types_dir, package, name) if name in functions else None
    return await assembler.transform(code, path.as_posix(), demo_path=find_demo(path.parent), types=types)

  return list(await asyncio.gather(*(_one(path, code) for path, code in sources.items())))
