"""
Metadata Registries.

Read-only lookups injected into the Document Assembler: which functions exist
(and where their docs live) and which packages are add-ons. Both can be built
in memory or loaded from JSON exports of the documentation site's metadata.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from codetoggle.errors import MetadataLookupError


class FunctionEntry(BaseModel):
  name: str
  docs: str = Field(description="Link to the function's documentation page.")
  package: str = ""


class PackageEntry(BaseModel):
  name: str
  addon: bool = Field(False, description="True for add-on packages published separately.")
  display: str = ""


def _load_json(path: Path) -> Any:
  with open(path, "rt", encoding="utf-8") as f:
    return json.load(f)


class FunctionRegistry:
  """
  Function name -> documentation link.
  """

  def __init__(self, entries: Iterable[FunctionEntry]) -> None:
    self._entries: Dict[str, FunctionEntry] = {e.name: e for e in entries}
    self._folded: Dict[str, str] = {}
    for name in self._entries:
      self._folded.setdefault(name.lower(), name)

  @classmethod
  def from_json(cls, path: Path) -> "FunctionRegistry":
    """
    Loads a registry from a JSON list of entries, or from an object whose
    `functions` key holds that list.
    """
    data = _load_json(path)
    if isinstance(data, dict):
      data = data.get("functions", [])
    return cls(FunctionEntry.model_validate(item) for item in data)

  @property
  def names(self) -> List[str]:
    return list(self._entries)

  def __contains__(self, name: object) -> bool:
    return name in self._entries

  def __len__(self) -> int:
    return len(self._entries)

  def get(self, name: str) -> FunctionEntry:
    """
    Raises:
        MetadataLookupError: If `name` is not registered.
    """
    try:
      return self._entries[name]
    except KeyError:
      raise MetadataLookupError(f"Unknown function '{name}'") from None

  def resolve(self, name: str) -> Optional[str]:
    """
    Case-insensitive lookup.

    Returns:
        Optional[str]: The registered spelling of `name`, or None.
    """
    return self._folded.get(name.lower())


class PackageRegistry:
  """
  Package name -> add-on flag.
  """

  def __init__(self, entries: Iterable[PackageEntry]) -> None:
    self._entries: Dict[str, PackageEntry] = {e.name: e for e in entries}

  @classmethod
  def from_json(cls, path: Path) -> "PackageRegistry":
    """
    Accepts a list of entries, an object whose `packages` key holds such a list,
    or an object mapping package names to entries.
    """
    data = _load_json(path)
    if isinstance(data, dict) and "packages" in data:
      data = data["packages"]
    if isinstance(data, dict):
      data = [{"name": name, **(value or {})} for name, value in data.items()]
    return cls(PackageEntry.model_validate(item) for item in data)

  def __contains__(self, name: object) -> bool:
    return name in self._entries

  def get(self, name: str) -> PackageEntry:
    """
    Raises:
        MetadataLookupError: If `name` is not registered.
    """
    try:
      return self._entries[name]
    except KeyError:
      raise MetadataLookupError(f"Unknown package '{name}'") from None

  def is_addon(self, name: str) -> bool:
    return self.get(name).addon
