"""Structured rows of the pre-run plan and the post-run report.

Both views are derived from the same decision records; rendering them is
left to ``cli_report``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, List, Optional, Sequence

import semantic_version

from constants import Constants

from .models import Decision, DecisionKind, Outcome, OutcomeKind

_ACTION_LABELS = {
    DecisionKind.NO_ACTION_UP_TO_DATE: (Constants.ICON_OK, "Up to date"),
    DecisionKind.INSTALL: (Constants.ICON_NEW, "Install"),
    DecisionKind.UPDATE: (Constants.ICON_TODO, "Update"),
    DecisionKind.UNKNOWN_NEEDS_ATTEMPT: (Constants.ICON_UNKNOWN, "Unknown"),
    DecisionKind.UNINSTALL: (Constants.ICON_ERR, "Uninstall"),
}

_OUTCOME_LABELS = {
    OutcomeKind.SUCCEEDED: (Constants.ICON_OK, "Succeeded"),
    OutcomeKind.FAILED: (Constants.ICON_ERR, "Failed"),
    OutcomeKind.SKIPPED_DUE_TO_EARLIER_FAILURE: (Constants.ICON_SKIPPED, "Skipped"),
    OutcomeKind.SIMULATED: (Constants.ICON_SIMULATED, "Simulated"),
}


def _fmt(version: Optional[semantic_version.Version], missing: str) -> str:
    return str(version) if version is not None else missing


@dataclass(frozen=True)
class PlanRow:
    """One line of the pre-run plan."""

    name: str
    previous: str
    prospective: str
    action: str
    icon: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class ReportRow:
    """One line of the post-run report."""

    name: str
    previous: str
    new: str
    status: str
    icon: str
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return asdict(self)


def plan_row(decision: Decision) -> PlanRow:
    """Describe a decision before anything runs."""
    icon, label = _ACTION_LABELS[decision.kind]
    if decision.kind is DecisionKind.UNINSTALL:
        prospective = Constants.ICON_NONE
    else:
        prospective = _fmt(decision.prospective, Constants.ICON_UNKNOWN)
    return PlanRow(
        name=decision.name,
        previous=_fmt(decision.previous, Constants.ICON_NONE),
        prospective=prospective,
        action=label,
        icon=icon,
    )


def build_plan(decisions: Sequence[Decision]) -> List[PlanRow]:
    """Rows of the pre-run plan, one per decision, in decision order."""
    return [plan_row(decision) for decision in decisions]


def report_row(decision: Decision, outcome: Outcome) -> ReportRow:
    """Describe what happened to an attempted decision."""
    icon, label = _OUTCOME_LABELS[outcome.kind]
    if outcome.kind is OutcomeKind.SUCCEEDED:
        if decision.kind is DecisionKind.UNINSTALL:
            new = Constants.ICON_NONE
        else:
            new = _fmt(outcome.new_version or decision.prospective, Constants.ICON_UNKNOWN)
    else:
        new = _fmt(decision.previous, Constants.ICON_NONE)
    return ReportRow(
        name=decision.name,
        previous=_fmt(decision.previous, Constants.ICON_NONE),
        new=new,
        status=label,
        icon=icon,
        reason=outcome.reason,
    )


def build_report(
    decisions: Sequence[Decision], outcomes: Sequence[Outcome]
) -> Optional[List[ReportRow]]:
    """Rows of the post-run report, or None when nothing was attempted.

    Up-to-date decisions are left out. Outcomes are matched to decisions by
    package name.
    """
    by_name = {outcome.name: outcome for outcome in outcomes}
    rows = [
        report_row(decision, by_name[decision.name])
        for decision in decisions
        if decision.needs_action and decision.name in by_name
    ]
    return rows or None
