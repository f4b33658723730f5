"""Version oracle that asks ``cargo search`` for the newest version."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Optional, Sequence

import semantic_version

from config.package import PackageSource
from errors import VersionLookupError
from versioning.models import VersionConstraint
from versioning.parser import parse_version

from .base import VersionOracle

logger = logging.getLogger(__name__)


def parse_search_output(name: str, stdout: str) -> semantic_version.Version:
    """Extract ``name``'s version from the first line of search output.

    The expected line shape is ``name = "1.2.3"    # description``.

    Raises:
        VersionLookupError: If the first line does not describe ``name``.
    """
    lines = stdout.splitlines()
    if not lines:
        raise VersionLookupError(f"Empty search output for {name!r}; does it exist?")
    match = re.match(
        rf'^{re.escape(name)}\s=\s"([0-9a-zA-Z.+-]+)"\s+#.*', lines[0]
    )
    if match is None:
        raise VersionLookupError(f"Package {name!r} not found by the search.")
    try:
        return parse_version(match.group(1))
    except ValueError as exc:
        raise VersionLookupError(f"Invalid version received for {name!r}: {exc}") from exc


class CargoSearchOracle(VersionOracle):
    """Runs one ``cargo search --limit=1`` process per lookup.

    The search only reports the newest version, so a package whose newest
    release falls outside its requirement is reported as undeterminable.
    """

    def __init__(self, cargo: str, extra_args: Optional[Sequence[str]] = None):
        self._cargo = cargo
        self._extra_args = list(extra_args or [])

    def command(self, name: str) -> list:
        """Argument vector of the search for ``name``."""
        return [self._cargo, "--color=never", "search", *self._extra_args, "--limit=1", "--", name]

    async def latest(
        self, name: str, constraint: VersionConstraint, source: PackageSource
    ) -> semantic_version.Version:
        cmd = self.command(name)
        logger.debug("Running %r...", cmd)
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await proc.communicate()
        except OSError as exc:
            raise VersionLookupError(f"Failed to run Cargo: {exc}") from exc

        if proc.returncode != 0:
            raise VersionLookupError(
                f"Search for {name!r} failed with status {proc.returncode}: "
                f"{stderr.decode('utf-8', 'replace').strip()}"
            )

        version = parse_search_output(name, stdout.decode("utf-8", "replace"))
        logger.debug("Search for %r got %s.", name, version)
        if not constraint.satisfied_by(version):
            raise VersionLookupError(
                f"Newest version {version} of {name!r} does not satisfy {constraint.raw!r}."
            )
        return version
