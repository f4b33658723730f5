"""Version oracle backed by a Cargo sparse registry index over HTTP.

Each package has one index file made of newline-delimited JSON records, one
per published version, e.g.::

    {"name":"bat","vers":"0.24.0","yanked":false, ...}
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Iterable, List, Optional

import aiohttp
import semantic_version

from common.logging_utils import Timer, extra_context, is_debug_enabled
from config.package import PackageSource, RegistrySource
from constants import Constants
from errors import VersionLookupError
from versioning.models import VersionConstraint
from versioning.parser import parse_version

from .base import VersionOracle

logger = logging.getLogger(__name__)


def index_path(name: str) -> str:
    """Relative path of ``name``'s file inside a sparse index."""
    lowered = name.lower()
    if len(lowered) <= 2:
        return f"{len(lowered)}/{lowered}"
    if len(lowered) == 3:
        return f"3/{lowered[0]}/{lowered}"
    return f"{lowered[0:2]}/{lowered[2:4]}/{lowered}"


def parse_index_lines(lines: Iterable[str]) -> List[semantic_version.Version]:
    """Published, non-yanked versions listed in an index file."""
    versions = []
    for line in lines:
        line = line.strip()
        if not line:
            continue
        try:
            record = json.loads(line)
            if record.get("yanked", False):
                continue
            versions.append(parse_version(record["vers"]))
        except (ValueError, KeyError, TypeError, AttributeError):
            logger.debug("Skipping malformed index record: %r", line[:200])
            continue
    return versions


def pick_latest(
    versions: Iterable[semantic_version.Version], constraint: VersionConstraint
) -> Optional[semantic_version.Version]:
    """Greatest version satisfying ``constraint``, if any."""
    matching = [version for version in versions if constraint.satisfied_by(version)]
    return max(matching) if matching else None


class SparseIndexOracle(VersionOracle):
    """Looks versions up in crates.io's (or a custom) sparse index."""

    def __init__(self, index_url: str = Constants.SPARSE_INDEX_URL, timeout: int = Constants.REQUEST_TIMEOUT):
        self._index_url = index_url.rstrip("/") + "/"
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    async def start(self) -> None:
        """Open the shared HTTP session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=self._timeout,
                headers={"User-Agent": Constants.USER_AGENT},
            )

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    def base_url_for(self, source: PackageSource) -> str:
        """Index URL to query for ``source``.

        Raises:
            VersionLookupError: If the source is not a sparse-index registry.
        """
        if not isinstance(source, RegistrySource):
            raise VersionLookupError("Only registry packages have a checkable version.")
        if source.registry:
            raise VersionLookupError(
                f"Named registry {source.registry!r} cannot be queried directly."
            )
        if source.index:
            if not source.index.startswith(Constants.SPARSE_PREFIX):
                raise VersionLookupError(f"Index {source.index!r} is not a sparse index.")
            return source.index[len(Constants.SPARSE_PREFIX):].rstrip("/") + "/"
        return self._index_url

    async def fetch_versions(self, name: str, base_url: str) -> List[semantic_version.Version]:
        """Download and parse ``name``'s index file."""
        if self._session is None:
            await self.start()
        assert self._session is not None

        url = base_url + index_path(name)
        with Timer() as timer:
            try:
                async with self._session.get(url) as response:
                    status = response.status
                    body = await response.text() if status == 200 else ""
            except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
                raise VersionLookupError(f"Request to {url} failed: {exc}") from exc

        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response",
                extra=extra_context(
                    event="http_response",
                    component="sparse_index",
                    action="GET",
                    status_code=status,
                    duration_ms=timer.duration_ms(),
                    target=url,
                ),
            )

        if status == 404:
            raise VersionLookupError(f"Package {name!r} not found in the index.")
        if status != 200:
            raise VersionLookupError(f"Index answered HTTP {status} for {name!r}.")
        return parse_index_lines(body.splitlines())

    async def latest(
        self, name: str, constraint: VersionConstraint, source: PackageSource
    ) -> semantic_version.Version:
        versions = await self.fetch_versions(name, self.base_url_for(source))
        best = pick_latest(versions, constraint)
        if best is None:
            raise VersionLookupError(
                f"No published version of {name!r} satisfies {constraint.raw!r}."
            )
        return best
