from pathlib import Path

import pytest

from slashgram.docs import load_docs, normalize_key, resolve_argument, resolve_entry
from slashgram.errors import ConfigError, NotDeclaredError
from slashgram.model import ArgumentSpec, CommandPath, CommandSpec, SubcommandNode, SubgroupNode


def _spec() -> CommandSpec:
    spec = CommandSpec(name="cmd", description="Command")
    add = SubcommandNode(name="add", description="x", arguments={"name": ArgumentSpec("name")})
    spec.subgroups["group"] = SubgroupNode(
        name="group", description="x", subcommands={"add": add}
    )
    spec.subcommands["set"] = SubcommandNode(
        name="set", description="x", arguments={"color": ArgumentSpec("color")}
    )
    return spec


def test_normalize_key() -> None:
    assert normalize_key("group  add <*name>") == ("group", "add", "name")
    assert normalize_key("set [color: int]") == ("set", "color", "int")
    assert normalize_key("größe-1_x") == ("größe-1_x",)


def test_resolve_entry() -> None:
    spec = _spec()
    assert resolve_entry(spec, "group").name == "group"
    assert resolve_entry(spec, "group add").name == "add"
    assert isinstance(resolve_entry(spec, "group add <name>"), ArgumentSpec)
    assert resolve_entry(spec, "set").name == "set"
    assert resolve_entry(spec, "set color").name == "color"


def test_resolve_entry_rejects_unknown() -> None:
    spec = _spec()
    for key in ("nope", "group nope", "set color extra", ""):
        with pytest.raises(NotDeclaredError):
            resolve_entry(spec, key)


def test_resolve_argument() -> None:
    path, arg = resolve_argument(_spec(), "group add <*name>")
    assert path == CommandPath("group", "add")
    assert arg.name == "name"
    with pytest.raises(NotDeclaredError):
        resolve_argument(_spec(), "group add")


def test_load_docs_from_file(tmp_path: Path) -> None:
    path = tmp_path / "docs.json"
    path.write_text('{"set": "Set it", "set color": {"default": "Colour", "de": "Farbe"}}')
    assert load_docs(path) == {
        "set": "Set it",
        "set color": {"default": "Colour", "de": "Farbe"},
    }


def test_load_docs_errors(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Failed to read"):
        load_docs(tmp_path / "missing.json")
    bad = tmp_path / "bad.json"
    bad.write_text('{"set": 3}')
    with pytest.raises(ConfigError, match="Malformed"):
        load_docs(bad)
