# tests/test_catalog.py

import pytest

from core.errors import CatalogMismatchError
from handlers import verify_catalog
from tools.catalog import TOOL_CATALOG, function_declarations


def test_every_catalog_entry_has_a_handler(handlers):
    assert set(handlers) == set(TOOL_CATALOG)
    assert len(handlers) == 25


def test_missing_handler_is_reported(handlers):
    partial = dict(handlers)
    partial.pop("reminder_set")

    with pytest.raises(CatalogMismatchError) as excinfo:
        verify_catalog(partial)
    assert excinfo.value.missing_handlers == ["reminder_set"]
    assert excinfo.value.missing_entries == []


def test_extra_handler_is_reported(handlers):
    catalog = {name: entry for name, entry in TOOL_CATALOG.items() if name != "speak_text"}

    with pytest.raises(CatalogMismatchError) as excinfo:
        verify_catalog(handlers, catalog)
    assert excinfo.value.missing_entries == ["speak_text"]


def test_declarations_are_object_schemas():
    declarations = function_declarations()
    assert len(declarations) == len(TOOL_CATALOG)
    for decl in declarations:
        assert set(decl) == {"name", "description", "parameters"}
        assert decl["parameters"]["type"] == "OBJECT"

    by_name = {d["name"]: d for d in declarations}
    assert "ageRange" in by_name["find_users"]["parameters"]["properties"]
    assert by_name["connect_user"]["parameters"]["required"] == ["userid", "friendName"]


def test_changing_declarations_leaves_the_catalog_intact():
    declarations = function_declarations()
    first = declarations[0]
    first["parameters"]["properties"]["name"]["type"] = "INTEGER"
    first["parameters"]["required"].append("bogus")

    assert TOOL_CATALOG[first["name"]]["parameters"]["properties"]["name"]["type"] == "STRING"
    assert "bogus" not in TOOL_CATALOG[first["name"]]["parameters"]["required"]
    assert TOOL_CATALOG["send_message"]["parameters"]["properties"]["name"]["type"] == "STRING"
    assert function_declarations()[0]["parameters"]["properties"]["name"]["type"] == "STRING"


def test_properties_do_not_share_schema_objects():
    properties = TOOL_CATALOG["send_message"]["parameters"]["properties"]
    assert properties["name"] is not properties["content"]
    assert properties["name"] is not TOOL_CATALOG["find_users"]["parameters"]["properties"]["interests"]["items"]
