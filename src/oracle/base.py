"""Abstract version oracle and per-package lookup result."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import semantic_version

from config.package import PackageSource
from versioning.models import VersionConstraint


@dataclass(frozen=True)
class LookupResult:
    """Outcome of one lookup: a version, or the reason there is none."""

    name: str
    version: Optional[semantic_version.Version] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        """True when a version was found."""
        return self.version is not None


class VersionOracle(ABC):
    """Answers "what is the newest version of P satisfying C?".

    Implementations must be safe to call concurrently from one event loop
    and must not touch installed state.
    """

    async def __aenter__(self) -> "VersionOracle":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    async def close(self) -> None:
        """Release held resources."""

    @abstractmethod
    async def latest(
        self, name: str, constraint: VersionConstraint, source: PackageSource
    ) -> semantic_version.Version:
        """Return the newest version of ``name`` satisfying ``constraint``.

        Raises:
            VersionLookupError: If no such version can be determined.
        """
