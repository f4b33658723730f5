"""Data models for versions and version requirements."""

from dataclasses import dataclass
from functools import lru_cache
from typing import FrozenSet, Tuple

import semantic_version


@lru_cache(maxsize=256)
def _compile(expression: str) -> semantic_version.SimpleSpec:
    return semantic_version.SimpleSpec(expression)


@dataclass(frozen=True)
class VersionConstraint:
    """A Cargo-style version requirement.

    ``raw`` is kept as written by the user for display and for passing to
    ``cargo install --version``; ``expression`` is its normalized
    ``SimpleSpec`` form used for matching. A pre-release only matches when
    the requirement names a pre-release of the same ``major.minor.patch``,
    listed in ``prerelease_bases``.
    """
    raw: str
    expression: str
    prerelease_bases: FrozenSet[Tuple[int, int, int]] = frozenset()

    def satisfied_by(self, version: semantic_version.Version) -> bool:
        """Return True when ``version`` meets this requirement."""
        if version.prerelease and (
            (version.major, version.minor, version.patch) not in self.prerelease_bases
        ):
            return False
        return version in _compile(self.expression)

    def __str__(self) -> str:
        return self.raw


STAR = VersionConstraint(raw="*", expression="*")
