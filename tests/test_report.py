"""Tests for plan and report rows."""

import io

from rich.console import Console

from cli_report import render_plan, render_report
from config.package import PackageSpec
from reconcile.models import Decision, DecisionKind, Outcome, OutcomeKind
from reconcile.report import build_plan, build_report
from conftest import installed, v


def _decisions():
    return [
        Decision(DecisionKind.NO_ACTION_UP_TO_DATE, PackageSpec("a"), v("1.0.0"), v("1.0.0")),
        Decision(DecisionKind.INSTALL, PackageSpec("b"), prospective=v("0.24.0")),
        Decision(DecisionKind.UPDATE, PackageSpec("c"), v("1.0.0"), v("1.1.0")),
        Decision(DecisionKind.UNKNOWN_NEEDS_ATTEMPT, PackageSpec("d")),
    ]


def test_plan_rows_and_markers():
    rows = build_plan(_decisions())
    assert [(r.name, r.previous, r.prospective, r.action) for r in rows] == [
        ("a", "1.0.0", "1.0.0", "Up to date"),
        ("b", "ø", "0.24.0", "Install"),
        ("c", "1.0.0", "1.1.0", "Update"),
        ("d", "ø", "?", "Unknown"),
    ]


def test_plan_uninstall_row():
    decision = Decision(DecisionKind.UNINSTALL, installed("x", "2.0.0"), previous=v("2.0.0"))
    [row] = build_plan([decision])
    assert (row.previous, row.prospective, row.action) == ("2.0.0", "ø", "Uninstall")


def test_report_excludes_up_to_date():
    outcomes = [
        Outcome("b", OutcomeKind.SUCCEEDED, new_version=v("0.24.0")),
        Outcome("c", OutcomeKind.FAILED, reason="exit status 101"),
        Outcome("d", OutcomeKind.SKIPPED_DUE_TO_EARLIER_FAILURE),
    ]
    rows = build_report(_decisions(), outcomes)
    assert [(r.name, r.previous, r.new, r.status) for r in rows] == [
        ("b", "ø", "0.24.0", "Succeeded"),
        ("c", "1.0.0", "1.0.0", "Failed"),
        ("d", "ø", "ø", "Skipped"),
    ]
    assert rows[1].reason == "exit status 101"


def test_report_omitted_when_nothing_attempted():
    decisions = [Decision(DecisionKind.NO_ACTION_UP_TO_DATE, PackageSpec("a"), v("1.0.0"), v("1.0.0"))]
    assert build_report(decisions, []) is None


def test_rows_serialize():
    [row] = build_plan([Decision(DecisionKind.INSTALL, PackageSpec("b"))])
    assert row.to_dict()["prospective"] == "?"


def _console():
    return Console(file=io.StringIO(), width=120, no_color=True, highlight=False)


def test_plan_table_shows_action_labels():
    console = _console()
    render_plan(console, build_plan(_decisions()))
    text = console.file.getvalue()
    for label in ("Up to date", "Install", "Update", "Unknown"):
        assert label in text


def test_report_table_shows_status_labels():
    console = _console()
    outcomes = [Outcome("b", OutcomeKind.SUCCEEDED, new_version=v("0.24.0"))]
    render_report(console, build_report(_decisions(), outcomes))
    assert "Succeeded" in console.file.getvalue()
