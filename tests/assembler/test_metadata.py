"""
Tests for the metadata registries.

Verifies that:
1. Registries load from the supported JSON shapes.
2. Lookups raise MetadataLookupError for unknown names.
3. Function names resolve case-insensitively.
"""

import json

import pytest

from codetoggle.assembler import FunctionRegistry, PackageRegistry
from codetoggle.assembler.metadata import FunctionEntry, PackageEntry
from codetoggle.errors import MetadataLookupError


@pytest.fixture
def functions():
  return FunctionRegistry(
    [
      FunctionEntry(name="useFoo", docs="/core/useFoo/", package="core"),
      FunctionEntry(name="useFooBar", docs="/core/useFooBar/", package="core"),
    ]
  )


def test_function_lookup(functions):
  assert "useFoo" in functions
  assert "usefoo" not in functions
  assert len(functions) == 2
  assert functions.get("useFooBar").docs == "/core/useFooBar/"


def test_function_resolve_ignores_case(functions):
  assert functions.resolve("USEFOO") == "useFoo"
  assert functions.resolve("useBaz") is None


def test_unknown_function(functions):
  with pytest.raises(MetadataLookupError, match="Unknown function 'useBaz'"):
    functions.get("useBaz")


def test_functions_from_json_list_and_object(tmp_path):
  entries = [{"name": "useFoo", "docs": "/core/useFoo/"}]
  as_list = tmp_path / "list.json"
  as_list.write_text(json.dumps(entries))
  as_object = tmp_path / "object.json"
  as_object.write_text(json.dumps({"functions": entries}))

  assert FunctionRegistry.from_json(as_list).names == ["useFoo"]
  assert FunctionRegistry.from_json(as_object).names == ["useFoo"]


def test_packages_from_json_shapes(tmp_path):
  as_list = tmp_path / "list.json"
  as_list.write_text(json.dumps([{"name": "firebase", "addon": True}]))
  as_object = tmp_path / "object.json"
  as_object.write_text(json.dumps({"packages": [{"name": "core"}]}))
  as_mapping = tmp_path / "mapping.json"
  as_mapping.write_text(json.dumps({"core": {"display": "Core"}, "rxjs": {"addon": True}}))

  assert PackageRegistry.from_json(as_list).is_addon("firebase")
  assert not PackageRegistry.from_json(as_object).is_addon("core")
  mapping = PackageRegistry.from_json(as_mapping)
  assert mapping.get("core").display == "Core"
  assert mapping.is_addon("rxjs")


def test_unknown_package():
  packages = PackageRegistry([PackageEntry(name="core")])
  assert "core" in packages
  with pytest.raises(MetadataLookupError, match="Unknown package 'shared'"):
    packages.is_addon("shared")
