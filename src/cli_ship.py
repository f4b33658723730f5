"""The ``ship`` command: install and update the declared packages."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from backend.base import InstallerBackend
from backend.cargo import CargoBackend, cargo_executable
from cli_config import declaration_path, resolve_run_options, verbosity
from cli_report import export, make_console, render_plan, render_report
from common.logging_utils import extra_context, is_debug_enabled
from config.crates_toml import InstalledPackage, read_inventory
from config.options import EffectiveOptions
from config.paths import crates_file_path
from config.user_config import Declaration, load_declaration
from constants import Commands
from oracle.base import VersionOracle
from oracle.cargo_search import CargoSearchOracle
from oracle.client import fetch_latest_versions
from oracle.sparse_index import SparseIndexOracle
from reconcile.executor import ExecutionReport, execute
from reconcile.planner import plan_ship
from reconcile.report import build_plan, build_report

logger = logging.getLogger(__name__)


def select_packages(declaration: Declaration, options: EffectiveOptions) -> Declaration:
    """Apply the self-update tunables to the declared packages."""
    if options.only_self:
        return declaration.only_self()
    return declaration.self_update(not options.no_self)


def needs_inventory(declaration: Declaration, options: EffectiveOptions) -> bool:
    """The inventory is read only if some package gets its version checked."""
    return any(not options.for_package(spec).skip_check for spec in declaration.packages)


def make_oracle(args: Any) -> VersionOracle:
    if getattr(args, "ORACLE", "sparse") == "search":
        return CargoSearchOracle(cargo_executable())
    return SparseIndexOracle()


def ship(
    declaration: Declaration,
    options: EffectiveOptions,
    inventory: Dict[str, InstalledPackage],
    oracle: VersionOracle,
    backend: InstallerBackend,
    args: Optional[Any] = None,
) -> ExecutionReport:
    """Plan, show, execute and report; failures are left for the caller."""
    console = make_console(getattr(args, "COLOR", "auto"))
    latest = fetch_latest_versions(declaration.packages, options, oracle)
    decisions = plan_ship(declaration.packages, inventory, latest, options)
    plan = build_plan(decisions)
    render_plan(console, plan)

    if not any(decision.needs_action for decision in decisions):
        logger.info("Everything is up to date.")

    report = execute(decisions, options, backend)
    rows = build_report(decisions, report.outcomes)
    render_report(console, rows)
    if args is not None:
        export(args, plan, rows)

    if is_debug_enabled(logger):
        logger.debug(
            "Ship finished",
            extra=extra_context(
                event="function_exit",
                component="cli",
                action="ship",
                outcome="failure" if report.failed else "success",
                count=len(report.outcomes),
            ),
        )
    return report


def run_ship(args: Any) -> None:
    """Entry point of the ``ship`` command.

    Raises:
        LinerError: On configuration, inventory or execution failure.
    """
    declaration = load_declaration(declaration_path(args))
    options = resolve_run_options(args, Commands.SHIP, declaration)
    declaration = select_packages(declaration, options)

    inventory: Dict[str, InstalledPackage] = {}
    if needs_inventory(declaration, options):
        inventory = read_inventory(crates_file_path())
    else:
        logger.debug("Version check skipped for every package: not reading the inventory.")

    backend = CargoBackend(
        verbosity=verbosity(args),
        color=getattr(args, "COLOR", "auto"),
        installed_names=inventory.keys(),
    )
    report = ship(declaration, options, inventory, make_oracle(args), backend, args)
    report.raise_for_failures()
    if options.dry_run:
        logger.info("Dry run finished: nothing was installed.")
    else:
        logger.info("Done.")
