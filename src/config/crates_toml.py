"""Snapshot of installed packages from Cargo's ``.crates.toml`` record.

The file holds a single ``[v1]`` table whose keys look like
``"name 1.2.3 (registry+https://github.com/rust-lang/crates.io-index)"``
and whose values list the installed binaries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Tuple

import semantic_version

from errors import InventoryReadError
from versioning.parser import parse_version

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstalledPackage:
    """One package as recorded by Cargo."""

    name: str
    version: semantic_version.Version
    source: str
    bins: Tuple[str, ...] = field(default=())

    @property
    def is_local(self) -> bool:
        """True when installed from a local path."""
        return self.source.startswith("path+")


def parse_crates_key(key: str) -> InstalledPackage:
    """Split a ``v1`` key into name, version and source.

    Raises ``ValueError`` when a part is missing or the version is invalid.
    """
    parts = key.split(" ", 2)
    if len(parts) < 2 or not parts[0]:
        raise ValueError(f"Missing name or version in {key!r}")
    if len(parts) < 3:
        raise ValueError(f"Missing source in {key!r}")
    name, version, source = parts
    return InstalledPackage(
        name=name,
        version=parse_version(version),
        source=source.strip().lstrip("(").rstrip(")"),
    )


def parse_inventory(data: dict) -> Dict[str, InstalledPackage]:
    """Build the name-to-package mapping, keeping the file's order."""
    table = data.get("v1")
    if not isinstance(table, dict):
        raise InventoryReadError("Missing the 'v1' table in Cargo's .crates.toml file.")

    inventory: Dict[str, InstalledPackage] = {}
    for key, bins in table.items():
        try:
            pkg = parse_crates_key(key)
        except ValueError as exc:
            raise InventoryReadError(f"Malformed .crates.toml entry: {exc}.") from exc
        inventory[pkg.name] = InstalledPackage(
            name=pkg.name,
            version=pkg.version,
            source=pkg.source,
            bins=tuple(bins) if isinstance(bins, list) else (),
        )
    return inventory


def read_inventory(path: Path) -> Dict[str, InstalledPackage]:
    """Read Cargo's record of installed packages once.

    Raises:
        InventoryReadError: If the file is absent, unreadable or malformed.
    """
    try:
        import tomllib as toml  # type: ignore
    except ImportError:
        import tomli as toml  # type: ignore

    logger.debug("Reading installed packages from %s...", path)
    try:
        with open(path, "rb") as f:
            data = toml.load(f)
    except FileNotFoundError as exc:
        raise InventoryReadError(
            f"Cargo's .crates.toml file not found at {path}; use --skip-check to bypass it."
        ) from exc
    except OSError as exc:
        raise InventoryReadError(f"Failed to read {path}: {exc}.") from exc
    except ValueError as exc:
        raise InventoryReadError(f"Failed to parse {path}: {exc}.") from exc

    inventory = parse_inventory(data)
    logger.debug("Got %d installed package(s).", len(inventory))
    return inventory
