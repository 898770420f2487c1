"""
Runtime Configuration Store.

Settings are read from the `[tool.codetoggle]` table of the nearest
`pyproject.toml` and overridden by explicit arguments (typically the CLI).
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

if sys.version_info >= (3, 11):
  import tomllib
else:
  import tomli as tomllib

from codetoggle.utils.console import log_warning

TOOL_SECTION = "codetoggle"


class RuntimeConfig(BaseModel):
  """
  Configuration container for the block rewriter and document assembler.
  """

  backend: str = Field("builtin", description="Toolchain backend used to format and transpile snippets.")
  max_concurrency: int = Field(8, ge=1, description="Upper bound on block pipelines in flight per document.")
  block_timeout: Optional[float] = Field(
    None, gt=0, description="Seconds a single block may take before it is passed through unchanged."
  )
  max_block_chars: int = Field(20_000, ge=1, description="Blocks with longer bodies are not evaluated.")
  strict_mode: bool = Field(False, description="If True, re-raise the first block failure after the pass completes.")

  toggle_tag: str = Field("CodeToggle", description="Component wrapping the two panes.")
  ts_pane_class: str = Field("code-block-ts", description="CSS class of the TypeScript pane.")
  js_pane_class: str = Field("code-block-js", description="CSS class of the JavaScript pane.")

  site_host: str = Field("vueuse.org", description="Host whose absolute links are rewritten to root-relative.")
  source_url: str = Field(
    "https://github.com/vueuse/vueuse/blob/main/packages",
    description="Blob URL prefix used for Source/Demo/Docs links.",
  )

  node_executable: str = Field("node", description="Node.js binary used by the 'node' backend.")
  node_project_dir: Optional[Path] = Field(
    None, description="Directory whose node_modules provide prettier and typescript."
  )

  @field_validator("backend")
  @classmethod
  def normalize_backend(cls, v: str) -> str:
    """
    Lower-cases and strips the backend key.

    Whether the backend exists is only checked by `get_backend`, once the
    bundled backends have been imported.
    """
    name = v.strip().lower()
    if not name:
      raise ValueError("Backend name must not be empty.")
    return name

  @classmethod
  def load(
    cls,
    backend: Optional[str] = None,
    strict_mode: Optional[bool] = None,
    overrides: Optional[Dict[str, Any]] = None,
    search_path: Optional[Path] = None,
  ) -> "RuntimeConfig":
    """
    Loads configuration from pyproject.toml and applies explicit overrides.

    Precedence (highest first): `backend` / `strict_mode` arguments, `overrides`,
    the TOML table, field defaults.

    Args:
        backend (Optional[str]): Backend override.
        strict_mode (Optional[bool]): Strict mode override.
        overrides (Optional[Dict]): Any other field overrides (e.g. parsed `--config k=v`).
        search_path (Optional[Path]): Directory to start searching for pyproject.toml.

    Returns:
        RuntimeConfig: The resolved configuration.
    """
    table, table_dir = _find_tool_table(search_path or Path.cwd())
    if table_dir is not None and table.get("node_project_dir") is not None:
      # Relative paths in pyproject.toml are relative to that file.
      table["node_project_dir"] = (table_dir / Path(table["node_project_dir"])).resolve()

    settings: Dict[str, Any] = {**table, **(overrides or {})}
    explicit = {"backend": backend, "strict_mode": strict_mode}
    settings.update({key: value for key, value in explicit.items() if value is not None})

    for key in sorted(set(settings) - set(cls.model_fields)):
      log_warning(f"Ignoring unknown setting '{key}'.")
      del settings[key]

    return cls(**settings)


def _find_tool_table(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Returns the `[tool.codetoggle]` table of the closest pyproject.toml that has one.

  Args:
      start_path (Path): Directory the upward search begins in.

  Returns:
      Tuple[Dict, Optional[Path]]: The table (empty if none) and the directory holding it.
  """
  here = start_path.resolve()
  for directory in (here, *here.parents):
    candidate = directory / "pyproject.toml"
    if not candidate.is_file():
      continue
    try:
      document = tomllib.loads(candidate.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
      log_warning(f"Could not read {candidate}: {e}")
      return {}, None
    table = document.get("tool", {}).get(TOOL_SECTION)
    if table is not None:
      return dict(table), directory
  return {}, None


def _coerce(raw: str) -> Any:
  """Turns 'true'/'false' into bools and numeric text into int or float."""
  lowered = raw.lower()
  if lowered in ("true", "false"):
    return lowered == "true"
  for cast in (int, float):
    try:
      return cast(raw)
    except ValueError:
      continue
  return raw


def parse_cli_key_values(items: Optional[List[str]]) -> Dict[str, Any]:
  """
  Parses repeated `--config key=value` arguments.

  Args:
      items (Optional[List[str]]): Raw strings from argparse.

  Returns:
      Dict[str, Any]: Settings with values coerced by `_coerce`.
  """
  settings: Dict[str, Any] = {}
  for item in items or []:
    key, sep, value = item.partition("=")
    if not sep:
      log_warning(f"Ignoring invalid config format: '{item}'. Expected 'key=value'.")
      continue
    settings[key.strip()] = _coerce(value.strip())
  return settings
