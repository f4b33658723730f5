"""Interface of the installer backends driven by the execution engine."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import semantic_version

from config.options import PackageFlags
from config.package import PackageSpec


@dataclass(frozen=True)
class InstallResult:
    """Definitive status reported by a backend for one operation."""

    success: bool
    version: Optional[semantic_version.Version] = None
    reason: Optional[str] = None


class InstallerBackend(ABC):
    """Installs, updates and uninstalls packages one at a time.

    Results are trusted as reported. ``InstallerError`` or ``OSError`` may be
    raised when the backend cannot run at all.
    """

    def supports_simulation(self, spec: Optional[PackageSpec], flags: Optional[PackageFlags]) -> bool:
        """Whether a native dry-run exists for this operation.

        ``spec`` and ``flags`` are None for uninstalls.
        """
        return False

    @abstractmethod
    def install(
        self,
        spec: PackageSpec,
        flags: PackageFlags,
        *,
        target: Optional[semantic_version.Version] = None,
        simulate: bool = False,
    ) -> InstallResult:
        """Install or update ``spec``; ``target`` is the expected version, if known."""

    @abstractmethod
    def uninstall(self, name: str, *, simulate: bool = False) -> InstallResult:
        """Remove the installed package ``name``."""
