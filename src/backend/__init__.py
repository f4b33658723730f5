"""Installer backends."""

from .base import InstallerBackend, InstallResult
from .cargo import CargoBackend

__all__ = ["InstallerBackend", "InstallResult", "CargoBackend"]
