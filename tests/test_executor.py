"""Tests for sequential execution and the fail-fast policy."""

import pytest

from config.options import EffectiveOptions
from config.package import PackageSpec
from errors import ExecutionFailedError
from reconcile.executor import execute
from reconcile.models import Decision, DecisionKind, OutcomeKind
from conftest import FakeBackend, installed, v


def install(name, prospective=None):
    return Decision(DecisionKind.INSTALL, PackageSpec(name), prospective=prospective)


def kinds(report):
    return [outcome.kind for outcome in report.outcomes]


def test_scenario_a_success_records_new_version(options):
    backend = FakeBackend()
    report = execute([install("bat", v("0.24.0"))], options, backend)

    [outcome] = report.outcomes
    assert outcome.kind is OutcomeKind.SUCCEEDED
    assert outcome.new_version == v("0.24.0")
    assert report.ok


def test_scenario_c_fail_fast(options):
    backend = FakeBackend(failing={"a"})
    report = execute([install("a"), install("b")], options, backend)

    assert kinds(report) == [OutcomeKind.FAILED, OutcomeKind.SKIPPED_DUE_TO_EARLIER_FAILURE]
    assert len(backend.calls) == 1
    assert report.halted
    with pytest.raises(ExecutionFailedError) as excinfo:
        report.raise_for_failures()
    assert excinfo.value.failed_names == ["a"]
    assert "'a'" in str(excinfo.value)
    assert "--no-fail-fast" in str(excinfo.value)


@pytest.mark.parametrize("k", [1, 2, 5])
def test_fail_fast_invokes_backend_k_times(options, k):
    names = [f"p{i}" for i in range(1, 6)]
    backend = FakeBackend(failing={f"p{k}"})

    report = execute([install(name) for name in names], options, backend)

    assert len(backend.calls) == k
    assert kinds(report)[k - 1] is OutcomeKind.FAILED
    assert all(kind is OutcomeKind.SKIPPED_DUE_TO_EARLIER_FAILURE for kind in kinds(report)[k:])


def test_no_fail_fast_attempts_everything():
    names = ["a", "b", "c", "d"]
    backend = FakeBackend(failing={"a", "c"})

    report = execute([install(name) for name in names], EffectiveOptions(no_fail_fast=True), backend)

    assert len(backend.calls) == len(names)
    assert kinds(report) == [
        OutcomeKind.FAILED, OutcomeKind.SUCCEEDED, OutcomeKind.FAILED, OutcomeKind.SUCCEEDED
    ]
    assert report.failed == ["a", "c"]
    assert not report.halted


def test_no_fail_fast_without_failure_is_ok():
    report = execute([install("a"), install("b")], EffectiveOptions(no_fail_fast=True), FakeBackend())
    assert report.ok
    report.raise_for_failures()


def test_package_level_no_fail_fast(options):
    backend = FakeBackend(failing={"a"})
    decisions = [
        Decision(DecisionKind.INSTALL, PackageSpec("a", no_fail_fast=True)),
        install("b"),
    ]
    report = execute(decisions, options, backend)
    assert kinds(report) == [OutcomeKind.FAILED, OutcomeKind.SUCCEEDED]


def test_up_to_date_is_not_attempted(options):
    backend = FakeBackend()
    decisions = [
        Decision(DecisionKind.NO_ACTION_UP_TO_DATE, PackageSpec("a"), v("1.0.0"), v("1.0.0")),
        install("b"),
    ]
    report = execute(decisions, options, backend)
    assert [outcome.name for outcome in report.outcomes] == ["b"]
    assert backend.calls == [("install", "b", False)]


def test_dry_run_without_native_simulation():
    backend = FakeBackend()
    decisions = [
        install("a"),
        Decision(DecisionKind.UNKNOWN_NEEDS_ATTEMPT, PackageSpec("b")),
        Decision(DecisionKind.UNINSTALL, installed("c", "1.0.0"), previous=v("1.0.0")),
    ]
    report = execute(decisions, EffectiveOptions(dry_run=True), backend)
    assert kinds(report) == [OutcomeKind.SIMULATED] * 3
    assert backend.calls == []


def test_dry_run_with_native_simulation_uses_backend_result():
    backend = FakeBackend(simulate=True, failing={"b"})
    report = execute([install("a"), install("b")], EffectiveOptions(dry_run=True), backend)
    assert backend.calls == [("install", "a", True), ("install", "b", True)]
    assert kinds(report) == [OutcomeKind.SIMULATED, OutcomeKind.FAILED]


def test_backend_exception_is_failure(options):
    backend = FakeBackend(raising={"a"})
    report = execute([install("a"), install("b")], options, backend)
    assert kinds(report) == [OutcomeKind.FAILED, OutcomeKind.SKIPPED_DUE_TO_EARLIER_FAILURE]
    assert "cargo not found" in report.outcomes[0].reason


def test_uninstall_follows_run_wide_fail_fast():
    backend = FakeBackend(failing={"x"})
    decisions = [
        Decision(DecisionKind.UNINSTALL, installed(name, "1.0.0"), previous=v("1.0.0"))
        for name in ["x", "y"]
    ]
    fail_fast = execute(decisions, EffectiveOptions(), backend)
    assert kinds(fail_fast) == [OutcomeKind.FAILED, OutcomeKind.SKIPPED_DUE_TO_EARLIER_FAILURE]

    keep_going = execute(decisions, EffectiveOptions(no_fail_fast=True), FakeBackend(failing={"x"}))
    assert kinds(keep_going) == [OutcomeKind.FAILED, OutcomeKind.SUCCEEDED]


def test_failure_message_without_halt_has_no_hint():
    report = execute([install("a"), install("b")], EffectiveOptions(no_fail_fast=True), FakeBackend(failing={"a"}))
    with pytest.raises(ExecutionFailedError) as excinfo:
        report.raise_for_failures()
    assert "--no-fail-fast" not in str(excinfo.value)
