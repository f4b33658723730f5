"""Decision and outcome records shared by the planner, executor and reports."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

import semantic_version

from config.crates_toml import InstalledPackage
from config.package import PackageSpec


class DecisionKind(Enum):
    """Verdict of the planner for one package."""

    NO_ACTION_UP_TO_DATE = "up-to-date"
    INSTALL = "install"
    UPDATE = "update"
    UNKNOWN_NEEDS_ATTEMPT = "unknown"
    UNINSTALL = "uninstall"


class OutcomeKind(Enum):
    """Terminal state of an attempted decision."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED_DUE_TO_EARLIER_FAILURE = "skipped"
    SIMULATED = "simulated"


@dataclass(frozen=True)
class Decision:
    """What to do with one package, plus the versions involved.

    ``subject`` is the declared spec for ship decisions and the installed
    package for uninstall decisions. ``prospective`` is None when the target
    version is unknown.
    """

    kind: DecisionKind
    subject: Union[PackageSpec, InstalledPackage]
    previous: Optional[semantic_version.Version] = None
    prospective: Optional[semantic_version.Version] = None

    @property
    def name(self) -> str:
        """Name of the package the decision is about."""
        return self.subject.name

    @property
    def needs_action(self) -> bool:
        """False only for packages already up to date."""
        return self.kind is not DecisionKind.NO_ACTION_UP_TO_DATE

    @property
    def spec(self) -> Optional[PackageSpec]:
        """The declared spec, if the decision is about one."""
        return self.subject if isinstance(self.subject, PackageSpec) else None


@dataclass(frozen=True)
class Outcome:
    """Result of attempting, simulating or skipping one decision."""

    name: str
    kind: OutcomeKind
    new_version: Optional[semantic_version.Version] = None
    reason: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.kind is OutcomeKind.FAILED
