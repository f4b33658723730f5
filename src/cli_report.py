"""Rendering of the plan and report tables, and their file export.

Tables go to stderr through ``rich`` so that Cargo's own output and any
piping of stdout are left alone.
"""

from __future__ import annotations

import csv
import json
import logging
from typing import List, Optional, Sequence

from rich.console import Console
from rich.table import Table

from errors import LinerError
from reconcile.report import PlanRow, ReportRow

logger = logging.getLogger(__name__)

_STATUS_STYLES = {
    "Succeeded": "green",
    "Failed": "bold red",
    "Skipped": "yellow",
    "Simulated": "cyan",
    "Up to date": "green",
    "Install": "blue",
    "Update": "blue",
    "Unknown": "magenta",
    "Uninstall": "red",
}


def make_console(color: str = "auto") -> Console:
    """Console writing to stderr, honouring ``--color``."""
    if color == "never":
        return Console(stderr=True, no_color=True, highlight=False)
    if color == "always":
        return Console(stderr=True, force_terminal=True, highlight=False)
    return Console(stderr=True, highlight=False)


def _status_cell(icon: str, label: str) -> str:
    style = _STATUS_STYLES.get(label, "")
    status = f"{icon} {label}"
    return f"[{style}]{status}[/{style}]" if style else status


def plan_table(rows: Sequence[PlanRow], title: str) -> Table:
    table = Table(title=title, show_lines=False)
    table.add_column("Name", style="bold")
    table.add_column("Old version")
    table.add_column("New version")
    table.add_column("Status")
    for row in rows:
        table.add_row(row.name, row.previous, row.prospective, _status_cell(row.icon, row.action))
    return table


def report_table(rows: Sequence[ReportRow], title: str) -> Table:
    table = Table(title=title, show_lines=False)
    table.add_column("Name", style="bold")
    table.add_column("Old version")
    table.add_column("New version")
    table.add_column("Status")
    for row in rows:
        table.add_row(row.name, row.previous, row.new, _status_cell(row.icon, row.status))
    return table


def render_plan(console: Console, rows: Sequence[PlanRow], title: str = "Plan") -> None:
    """Print the pre-run plan."""
    console.print(plan_table(rows, title))


def render_report(console: Console, rows: Optional[Sequence[ReportRow]], title: str = "Results") -> None:
    """Print the post-run report; nothing when no package needed action."""
    if not rows:
        return
    console.print(report_table(rows, title))


def output_format(path: str, explicit: Optional[str] = None) -> str:
    """``explicit`` if given, else inferred from the extension, else JSON."""
    if explicit:
        return explicit.lower()
    if path.lower().endswith(".csv"):
        return "csv"
    return "json"


def export_json(plan: Sequence[PlanRow], report: Optional[Sequence[ReportRow]], path: str) -> None:
    """Exports the plan and report to a JSON file.

    Args:
        plan (list): Rows of the pre-run plan.
        report (list): Rows of the post-run report, or None.
        path (str): File path to export the JSON.
    """
    data = {
        "plan": [row.to_dict() for row in plan],
        "report": None if report is None else [row.to_dict() for row in report],
    }
    try:
        with open(path, 'w', encoding='utf-8') as file:
            json.dump(data, file, ensure_ascii=False, indent=4)
        logger.info("JSON file has been successfully exported at: %s", path)
    except OSError as e:
        raise LinerError(f"JSON file couldn't be written to disk: {e}") from e


def export_csv(plan: Sequence[PlanRow], report: Optional[Sequence[ReportRow]], path: str) -> None:
    """Exports one row per planned package to a CSV file.

    Report columns are left blank for packages that were not attempted.

    Args:
        plan (list): Rows of the pre-run plan.
        report (list): Rows of the post-run report, or None.
        path (str): File path to export the CSV.
    """
    headers = ["Package Name", "Old Version", "Prospective Version", "Action",
               "New Version", "Outcome", "Reason"]
    by_name = {row.name: row for row in (report or [])}
    rows: List[list] = [headers]
    for row in plan:
        done = by_name.get(row.name)
        rows.append([
            row.name,
            row.previous,
            row.prospective,
            row.action,
            done.new if done else "",
            done.status if done else "",
            (done.reason or "") if done else "",
        ])
    try:
        with open(path, 'w', newline='', encoding='utf-8') as file:
            export = csv.writer(file)
            export.writerows(rows)
        logger.info("CSV file has been successfully exported at: %s", path)
    except (OSError, csv.Error) as e:
        raise LinerError(f"CSV file couldn't be written to disk: {e}") from e


def export(args, plan: Sequence[PlanRow], report: Optional[Sequence[ReportRow]]) -> None:
    """Write ``--output`` when requested."""
    path = getattr(args, "OUTPUT", None)
    if not path:
        return
    if output_format(path, getattr(args, "OUTPUT_FORMAT", None)) == "csv":
        export_csv(plan, report, path)
    else:
        export_json(plan, report, path)
