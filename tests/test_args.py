"""Tests for command-line parsing and the CLI option layer."""

import pytest

from args import normalize_argv, parse_args
from cli_config import cli_layer, declaration_path, verbosity
from constants import BinstallChoice, Commands


def test_ship_is_default_command():
    ns = parse_args([])
    assert ns.command == "ship"
    assert ns.DRY_RUN is None
    assert ns.ORACLE == "sparse"


def test_cargo_subcommand_token_dropped():
    assert normalize_argv(["liner", "jettison"]) == ["jettison"]
    assert normalize_argv(["liner", "--no-self"]) == ["ship", "--no-self"]
    assert normalize_argv(["--help"]) == ["--help"]


def test_flags_without_command_go_to_ship():
    ns = parse_args(["--no-self", "--dry-run", "--binstall", "Never"])
    assert ns.command == "ship"
    assert ns.NO_SELF is True
    assert ns.DRY_RUN is True
    assert ns.BINSTALL == "never"


@pytest.mark.parametrize(
    "argv,expected",
    [
        (["ship", "--force"], True),
        (["ship", "--no-force"], False),
        (["ship", "--force", "--no-force"], False),
        (["ship", "--no-force", "--force"], True),
    ],
)
def test_last_toggle_wins(argv, expected):
    assert parse_args(argv).FORCE is expected


def test_jettison_flags():
    ns = parse_args(["jettison", "--no-confirm", "--fail-fast", "-vv"])
    assert ns.command == "jettison"
    assert ns.NO_CONFIRM is True
    assert ns.NO_FAIL_FAST is False
    assert ns.VERBOSE == 2


def test_jettison_rejects_ship_flags():
    with pytest.raises(SystemExit):
        parse_args(["jettison", "--only-self"])


def test_cli_layer():
    ns = parse_args(["ship", "--with-self", "--binstall", "always", "--skip-check"])
    layer = cli_layer(ns, Commands.SHIP)
    assert layer["no_self"] is False
    assert layer["skip_check"] is True
    assert layer["binstall"] is BinstallChoice.ALWAYS
    assert layer["force"] is None


def test_verbosity_balance():
    assert verbosity(parse_args(["-vv", "-q"])) == 1


def test_declaration_path(tmp_path):
    ns = parse_args(["--config", str(tmp_path / "mine.yaml")])
    assert declaration_path(ns) == tmp_path / "mine.yaml"
    assert declaration_path(parse_args([]), {"CARGO_HOME": str(tmp_path)}) == tmp_path / "liner.toml"
