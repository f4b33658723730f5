"""The ``jettison`` command: uninstall packages that are not declared."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from backend.base import InstallerBackend
from backend.cargo import CargoBackend
from cli_config import declaration_path, resolve_run_options, verbosity
from cli_report import export, make_console, render_plan, render_report
from config.crates_toml import InstalledPackage, read_inventory
from config.options import EffectiveOptions
from config.paths import crates_file_path
from config.user_config import Declaration, load_declaration
from constants import Commands
from reconcile.executor import ExecutionReport, execute
from reconcile.models import Decision
from reconcile.planner import plan_jettison
from reconcile.report import build_plan, build_report

logger = logging.getLogger(__name__)

PROMPT = "Uninstall the packages listed above? [Y/n] "


def confirm(input_fn: Callable[[str], str] = input) -> bool:
    """Ask until the answer is empty, ``y`` or ``n``.

    Returns True to go on. End of input counts as a refusal.
    """
    while True:
        try:
            answer = input_fn(PROMPT)
        except EOFError:
            return False
        answer = answer.strip().lower()
        if answer in ("", "y", "yes"):
            return True
        if answer in ("n", "no"):
            return False
        logger.warning("Please answer 'y' or 'n'.")


def jettison(
    declaration: Declaration,
    options: EffectiveOptions,
    inventory: Dict[str, InstalledPackage],
    backend: InstallerBackend,
    args: Optional[Any] = None,
    input_fn: Callable[[str], str] = input,
) -> Optional[ExecutionReport]:
    """Plan, confirm and run the uninstalls.

    Returns None when there is nothing to do or the user declined.
    """
    decisions: List[Decision] = plan_jettison(inventory, declaration.names)
    if not decisions:
        logger.info("No unconfigured package installed: nothing to do.")
        return None

    console = make_console(getattr(args, "COLOR", "auto"))
    plan = build_plan(decisions)
    render_plan(console, plan)

    # A dry run changes nothing, so there is nothing to confirm.
    if not options.no_confirm and not options.dry_run and not confirm(input_fn):
        logger.info("Aborting.")
        return None

    report = execute(decisions, options, backend)
    rows = build_report(decisions, report.outcomes)
    render_report(console, rows)
    if args is not None:
        export(args, plan, rows)
    return report


def run_jettison(args: Any) -> None:
    """Entry point of the ``jettison`` command.

    Raises:
        LinerError: On configuration, inventory or execution failure.
    """
    declaration = load_declaration(declaration_path(args))
    options = resolve_run_options(args, Commands.JETTISON, declaration)
    inventory = read_inventory(crates_file_path())

    backend = CargoBackend(
        verbosity=verbosity(args),
        color=getattr(args, "COLOR", "auto"),
        installed_names=inventory.keys(),
    )
    report = jettison(declaration, options, inventory, backend, args)
    if report is not None:
        report.raise_for_failures()
