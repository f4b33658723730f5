"""Exception hierarchy shared by every layer of the reconciler."""

from __future__ import annotations

from typing import Iterable, List

from constants import ExitCodes


class LinerError(Exception):
    """Base class for all expected failures of a run."""

    exit_code = ExitCodes.FILE_ERROR


class ConfigurationError(LinerError):
    """Invalid or contradictory configuration; raised before anything runs."""

    exit_code = ExitCodes.CONFIG_ERROR


class DeclarationError(ConfigurationError):
    """The declaration file is malformed or fails validation."""


class InventoryReadError(LinerError):
    """The installed packages record could not be read."""

    exit_code = ExitCodes.FILE_ERROR


class VersionLookupError(LinerError):
    """The latest version of a single package could not be determined."""


class InstallerError(LinerError):
    """The installer backend could not be run at all."""

    exit_code = ExitCodes.EXECUTION_ERROR


class ExecutionFailedError(LinerError):
    """At least one package failed to install, update or uninstall."""

    exit_code = ExitCodes.EXECUTION_ERROR

    def __init__(self, failed_names: Iterable[str], *, halted: bool = False):
        self.failed_names: List[str] = list(failed_names)
        self.halted = halted
        which = ", ".join(repr(name) for name in self.failed_names)
        message = f"Failed to process {len(self.failed_names)} package(s): {which}."
        if halted:
            message += " The remaining packages were skipped; use --no-fail-fast to keep going."
        super().__init__(message)
