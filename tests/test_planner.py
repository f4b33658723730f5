"""Tests for the reconciliation planner."""

import pytest

from config.options import EffectiveOptions
from config.package import GitSource, PackageSpec, PathSource
from oracle.base import LookupResult
from oracle.client import fetch_latest_versions
from reconcile.models import DecisionKind
from reconcile.planner import plan_jettison, plan_ship
from conftest import FakeOracle, installed, v


def found(name, version):
    return LookupResult(name=name, version=v(version))


def failed(name):
    return LookupResult(name=name, error="lookup failed")


class TestPlanShip:
    @pytest.mark.parametrize(
        "results",
        [{}, {"bat": failed("bat")}, {"bat": found("bat", "0.1.0")}, {"bat": found("bat", "9.9.9")}],
    )
    def test_not_installed_is_always_install(self, options, results):
        [decision] = plan_ship([PackageSpec("bat")], {}, results, options)
        assert decision.kind is DecisionKind.INSTALL
        assert decision.previous is None

    def test_scenario_a_install_with_known_version(self, options):
        specs = [PackageSpec("bat")]
        latest = fetch_latest_versions(specs, options, FakeOracle({"bat": "0.24.0"}))

        [decision] = plan_ship(specs, {}, latest, options)

        assert decision.kind is DecisionKind.INSTALL
        assert decision.prospective == v("0.24.0")

    def test_scenario_b_up_to_date(self, options):
        specs = [PackageSpec("cargo-expand")]
        inventory = {"cargo-expand": installed("cargo-expand", "1.0.78")}
        latest = {"cargo-expand": found("cargo-expand", "1.0.78")}

        [decision] = plan_ship(specs, inventory, latest, options)

        assert decision.kind is DecisionKind.NO_ACTION_UP_TO_DATE
        assert not decision.needs_action

    def test_update_when_strictly_newer(self, options):
        inventory = {"bat": installed("bat", "0.23.0")}
        [decision] = plan_ship([PackageSpec("bat")], inventory, {"bat": found("bat", "0.24.0")}, options)
        assert decision.kind is DecisionKind.UPDATE
        assert decision.previous == v("0.23.0")
        assert decision.prospective == v("0.24.0")

    def test_installed_newer_than_latest_is_up_to_date(self, options):
        inventory = {"bat": installed("bat", "0.25.0-rc.1")}
        [decision] = plan_ship([PackageSpec("bat")], inventory, {"bat": found("bat", "0.24.0")}, options)
        assert decision.kind is DecisionKind.NO_ACTION_UP_TO_DATE

    def test_prerelease_is_older_than_release(self, options):
        inventory = {"bat": installed("bat", "0.24.0-rc.1")}
        [decision] = plan_ship([PackageSpec("bat")], inventory, {"bat": found("bat", "0.24.0")}, options)
        assert decision.kind is DecisionKind.UPDATE

    def test_failed_lookup_degrades_to_unknown(self, options):
        inventory = {"bat": installed("bat", "0.23.0")}
        [decision] = plan_ship([PackageSpec("bat")], inventory, {"bat": failed("bat")}, options)
        assert decision.kind is DecisionKind.UNKNOWN_NEEDS_ATTEMPT
        assert decision.previous == v("0.23.0")
        assert decision.prospective is None

    def test_git_and_path_are_unknown_without_oracle_calls(self, options):
        specs = [
            PackageSpec("tool", source=GitSource(url="https://x")),
            PackageSpec("local", source=PathSource(dir="/p")),
        ]
        inventory = {"tool": installed("tool", "0.1.0", source="git+https://x#abc")}
        oracle = FakeOracle({"tool": "9.0.0", "local": "9.0.0"})

        latest = fetch_latest_versions(specs, options, oracle)
        decisions = plan_ship(specs, inventory, latest, options)

        assert [d.kind for d in decisions] == [DecisionKind.UNKNOWN_NEEDS_ATTEMPT] * 2
        assert decisions[0].previous == v("0.1.0")
        assert oracle.calls == []

    def test_skip_check_is_unknown(self):
        options = EffectiveOptions(skip_check=True)
        inventory = {"bat": installed("bat", "0.24.0")}
        [decision] = plan_ship([PackageSpec("bat")], inventory, {"bat": found("bat", "0.24.0")}, options)
        assert decision.kind is DecisionKind.UNKNOWN_NEEDS_ATTEMPT

    def test_declaration_order_kept(self, options):
        names = ["zeta", "alpha", "cargo-binstall", "mid"]
        decisions = plan_ship([PackageSpec(name) for name in names], {}, {}, options)
        assert [d.name for d in decisions] == names

    def test_idempotent_when_up_to_date(self, options):
        specs = [PackageSpec("bat"), PackageSpec("ripgrep")]
        inventory = {"bat": installed("bat", "0.24.0"), "ripgrep": installed("ripgrep", "14.1.0")}
        latest = {"bat": found("bat", "0.24.0"), "ripgrep": found("ripgrep", "14.1.0")}

        first = plan_ship(specs, inventory, latest, options)
        second = plan_ship(specs, inventory, latest, options)

        assert first == second
        assert not any(d.needs_action for d in first)


class TestPlanJettison:
    def test_scenario_d(self):
        inventory = {"x": installed("x", "1.0.0"), "y": installed("y", "2.0.0")}
        decisions = plan_jettison(inventory, ["y"])
        assert [(d.kind, d.name) for d in decisions] == [(DecisionKind.UNINSTALL, "x")]
        assert decisions[0].previous == v("1.0.0")

    def test_self_is_never_uninstalled(self):
        inventory = {"cargo-liner": installed("cargo-liner", "0.8.0"), "x": installed("x", "1.0.0")}
        assert [d.name for d in plan_jettison(inventory, [])] == ["x"]

    def test_inventory_order(self):
        inventory = {name: installed(name, "1.0.0") for name in ["c", "a", "b"]}
        assert [d.name for d in plan_jettison(inventory, [])] == ["c", "a", "b"]

    def test_nothing_to_remove(self):
        assert plan_jettison({"x": installed("x", "1.0.0")}, ["x"]) == []
