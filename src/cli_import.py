"""Import command: write a configuration file from Cargo's installed packages."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from cli_config import declaration_path
from config.crates_toml import InstalledPackage, read_inventory
from config.package import PackageSpec
from config.paths import crates_file_path
from config.user_config import Declaration, save_declaration
from constants import Constants, RequirementStyle
from versioning.models import STAR, VersionConstraint
from versioning.parser import constraint_from_version

logger = logging.getLogger(__name__)

_OPERATORS = {
    RequirementStyle.EXACT: "=",
    RequirementStyle.COMPATIBLE: "^",
    RequirementStyle.PATCH: "~",
}


def requirement_for(pkg: InstalledPackage, style: RequirementStyle) -> VersionConstraint:
    """Requirement of ``style`` on the installed version of ``pkg``."""
    if style is RequirementStyle.STAR:
        return STAR
    return constraint_from_version(pkg.version, _OPERATORS[style])


def imported_declaration(
    inventory: Mapping[str, InstalledPackage],
    style: RequirementStyle = RequirementStyle.STAR,
    *,
    keep_self: bool = False,
    keep_local: bool = False,
) -> Declaration:
    """Declaration listing the installed packages, sorted by name.

    The tool's own package and packages installed from a local path are left
    out unless ``keep_self`` or ``keep_local`` ask for them.
    """
    specs = []
    for name in sorted(inventory):
        pkg = inventory[name]
        if name == Constants.SELF_PACKAGE and not keep_self:
            logger.debug("Leaving out %s itself.", name)
            continue
        if pkg.is_local and not keep_local:
            logger.debug("Leaving out %s, installed from %s.", name, pkg.source)
            continue
        specs.append(PackageSpec(name=name, constraint=requirement_for(pkg, style)))
    return Declaration(packages=specs)


def run_import(args: Any) -> None:
    """Entry point of ``cargo liner import``."""
    path = declaration_path(args)
    overwrite = bool(getattr(args, "FORCE", False))
    if overwrite and path.exists():
        logger.warning("Configuration file %s will be overwritten.", path)

    logger.info("Importing Cargo installed crates as a new configuration file...")
    inventory = read_inventory(crates_file_path())
    declaration = imported_declaration(
        inventory,
        RequirementStyle(getattr(args, "REQUIREMENT", RequirementStyle.STAR.value)),
        keep_self=bool(getattr(args, "KEEP_SELF", False)),
        keep_local=bool(getattr(args, "KEEP_LOCAL", False)),
    )
    save_declaration(declaration, path, overwrite=overwrite)
    logger.info("Wrote %d package(s) to %s.", len(declaration.packages), path)
