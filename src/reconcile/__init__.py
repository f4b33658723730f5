"""Reconciliation engine: planning, execution and reporting."""

from .executor import ExecutionReport, execute
from .models import Decision, DecisionKind, Outcome, OutcomeKind
from .planner import plan_jettison, plan_ship
from .report import build_plan, build_report

__all__ = [
    "ExecutionReport",
    "execute",
    "Decision",
    "DecisionKind",
    "Outcome",
    "OutcomeKind",
    "plan_jettison",
    "plan_ship",
    "build_plan",
    "build_report",
]
