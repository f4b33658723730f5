"""Tests for the declaration file loader."""

import json

import pytest

from config.package import PackageSpec
from config.user_config import Declaration, load_declaration, parse_declaration, save_declaration
from constants import BinstallChoice, Commands, Constants
from errors import DeclarationError
from versioning.parser import parse_constraint

TOML = """
[packages]
cargo-expand = "*"
bat = { version = "0.24", locked = true }
tool = { git = "https://example.com/tool.git", branch = "main" }

[defaults.ship]
no-fail-fast = true
binstall = "never"

[defaults.jettison]
no-confirm = true
"""


def test_load_toml_keeps_order(tmp_path):
    path = tmp_path / "liner.toml"
    path.write_text(TOML, encoding="utf-8")

    declaration = load_declaration(path)

    assert declaration.names == ["cargo-expand", "bat", "tool"]
    assert declaration.get("bat").locked is True
    assert declaration.defaults_for(Commands.SHIP) == {
        "no_fail_fast": True,
        "binstall": BinstallChoice.NEVER,
    }
    assert declaration.defaults_for(Commands.JETTISON) == {"no_confirm": True}


def test_load_yaml(tmp_path):
    path = tmp_path / "liner.yaml"
    path.write_text("packages:\n  bat: '*'\n  ripgrep:\n    version: '14'\n", encoding="utf-8")

    declaration = load_declaration(path)

    assert declaration.names == ["bat", "ripgrep"]
    assert declaration.defaults_for(Commands.SHIP) == {}


def test_json_duplicates_rejected(tmp_path):
    path = tmp_path / "liner.json"
    path.write_text('{"packages": {"bat": "*", "bat": "0.24"}}', encoding="utf-8")

    with pytest.raises(DeclarationError, match="Duplicate"):
        load_declaration(path)


def test_yaml_duplicates_rejected(tmp_path):
    path = tmp_path / "liner.yaml"
    path.write_text("packages:\n  bat: '0.23'\n  bat: '*'\n", encoding="utf-8")

    with pytest.raises(DeclarationError, match="Duplicate"):
        load_declaration(path)


def test_yaml_same_key_in_different_tables(tmp_path):
    path = tmp_path / "liner.yaml"
    path.write_text(
        "packages:\n  bat:\n    version: '1'\n  fd-find:\n    version: '2'\n",
        encoding="utf-8",
    )
    assert load_declaration(path).names == ["bat", "fd-find"]


def test_json_ok(tmp_path):
    path = tmp_path / "liner.json"
    path.write_text(json.dumps({"packages": {"bat": "*"}}), encoding="utf-8")
    assert load_declaration(path).names == ["bat"]


def test_missing_file(tmp_path):
    with pytest.raises(DeclarationError, match="not found"):
        load_declaration(tmp_path / "liner.toml")


def test_unsupported_extension(tmp_path):
    path = tmp_path / "liner.ini"
    path.write_text("", encoding="utf-8")
    with pytest.raises(DeclarationError):
        load_declaration(path)


def test_malformed_toml(tmp_path):
    path = tmp_path / "liner.toml"
    path.write_text("[packages\n", encoding="utf-8")
    with pytest.raises(DeclarationError, match="parse"):
        load_declaration(path)


@pytest.mark.parametrize(
    "raw",
    [
        {},
        {"packages": []},
        {"packages": {}, "extra": 1},
        {"packages": {}, "defaults": {"build": {}}},
        {"packages": {}, "defaults": {"import": {}}},
        {"packages": {}, "defaults": {"ship": {"no-confirm": True}}},
        {"packages": {}, "defaults": {"ship": {"dry-run": "yes"}}},
        {"packages": {}, "defaults": {"ship": {"binstall": "maybe"}}},
    ],
)
def test_invalid_documents(raw):
    with pytest.raises(DeclarationError):
        parse_declaration(raw)


def test_empty_packages_table():
    assert parse_declaration({"packages": None}).packages == []


class TestSelfPackage:
    def test_synthesized_first_with_star(self):
        declaration = Declaration(packages=[PackageSpec("bat")])
        result = declaration.self_update(True)
        assert result.names == [Constants.SELF_PACKAGE, "bat"]
        assert str(result.packages[0].constraint) == "*"

    def test_explicit_entry_kept_in_place(self):
        own = parse_declaration({"packages": {"bat": "*", "cargo-liner": "0.8"}})
        result = own.self_update(True)
        assert result.names == ["bat", "cargo-liner"]
        assert result.get("cargo-liner").constraint.raw == "0.8"

    def test_disabled_removes_entry(self):
        own = parse_declaration({"packages": {"bat": "*", "cargo-liner": "*"}})
        assert own.self_update(False).names == ["bat"]

    def test_only_self(self):
        own = parse_declaration({"packages": {"bat": "*", "cargo-liner": "0.8"}})
        result = own.only_self()
        assert result.names == ["cargo-liner"]
        assert result.packages[0].constraint.raw == "0.8"

    def test_only_self_synthesizes(self):
        assert Declaration(packages=[PackageSpec("bat")]).only_self().names == ["cargo-liner"]


def _imported():
    return Declaration(packages=[
        PackageSpec("bat", constraint=parse_constraint("=0.24.0")),
        PackageSpec("ripgrep"),
    ])


@pytest.mark.parametrize("filename", ["liner.toml", "liner.yaml", "liner.json"])
def test_saved_declaration_loads_back(tmp_path, filename):
    path = tmp_path / filename
    save_declaration(_imported(), path)

    loaded = load_declaration(path)

    assert loaded.names == ["bat", "ripgrep"]
    assert loaded.get("bat").constraint.raw == "=0.24.0"
    assert loaded.get("ripgrep").constraint.raw == "*"


def test_save_refuses_existing_file(tmp_path):
    path = tmp_path / "liner.toml"
    path.write_text("[packages]\n", encoding="utf-8")
    with pytest.raises(DeclarationError, match="already exists"):
        save_declaration(_imported(), path)
    assert path.read_text(encoding="utf-8") == "[packages]\n"


def test_save_overwrites_when_asked(tmp_path):
    path = tmp_path / "liner.toml"
    path.write_text("[packages]\n", encoding="utf-8")
    save_declaration(_imported(), path, overwrite=True)
    assert load_declaration(path).names == ["bat", "ripgrep"]
