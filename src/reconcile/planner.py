"""Pure decision logic turning declaration and inventory into actions."""

from __future__ import annotations

import logging
from typing import Iterable, List, Mapping, Optional

from config.crates_toml import InstalledPackage
from config.options import EffectiveOptions
from config.package import PackageSpec
from constants import Constants
from oracle.base import LookupResult

from .models import Decision, DecisionKind

logger = logging.getLogger(__name__)


def decide_ship(
    spec: PackageSpec,
    installed: Optional[InstalledPackage],
    latest: Optional[LookupResult],
    options: EffectiveOptions,
) -> Decision:
    """Classify a single declared package."""
    previous = installed.version if installed is not None else None

    if options.for_package(spec).skip_check:
        return Decision(DecisionKind.UNKNOWN_NEEDS_ATTEMPT, spec, previous=previous)

    found = latest.version if latest is not None and latest.ok else None
    if installed is None:
        return Decision(DecisionKind.INSTALL, spec, prospective=found)
    if found is None:
        return Decision(DecisionKind.UNKNOWN_NEEDS_ATTEMPT, spec, previous=previous)
    if found > installed.version:
        return Decision(DecisionKind.UPDATE, spec, previous=previous, prospective=found)
    return Decision(
        DecisionKind.NO_ACTION_UP_TO_DATE, spec, previous=previous, prospective=found
    )


def plan_ship(
    specs: Iterable[PackageSpec],
    inventory: Mapping[str, InstalledPackage],
    latest: Mapping[str, LookupResult],
    options: EffectiveOptions,
) -> List[Decision]:
    """Build the ship decision list, in declaration order.

    Args:
        specs: Declared packages, already made unique by name.
        inventory: Installed packages by name; empty when not read.
        latest: Lookup results by name; packages never looked up are absent.
        options: Effective options of the run.
    """
    decisions = [
        decide_ship(spec, inventory.get(spec.name), latest.get(spec.name), options)
        for spec in specs
    ]
    logger.debug(
        "Planned %d decision(s), %d needing action.",
        len(decisions),
        sum(1 for decision in decisions if decision.needs_action),
    )
    return decisions


def plan_jettison(
    inventory: Mapping[str, InstalledPackage], declared_names: Iterable[str]
) -> List[Decision]:
    """Uninstall every installed package absent from the declaration.

    The tool's own package is never removed. Order follows the inventory.
    """
    keep = set(declared_names)
    keep.add(Constants.SELF_PACKAGE)
    return [
        Decision(DecisionKind.UNINSTALL, installed, previous=installed.version)
        for name, installed in inventory.items()
        if name not in keep
    ]
