"""Installer backend running ``cargo install``, ``cargo binstall`` and
``cargo uninstall`` as child processes.

Cargo's output is passed through to the terminal; only the exit status is
used to decide success.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from typing import Callable, Dict, Iterable, List, Mapping, Optional

import semantic_version

from config.options import PackageFlags
from config.package import GitSource, PackageSpec, PathSource, RegistrySource
from constants import BinstallChoice, Constants
from errors import InstallerError

from .base import InstallerBackend, InstallResult

logger = logging.getLogger(__name__)

_BINSTALL_LOG_LEVELS = {-2: "error", -1: "warn", 0: "info", 1: "info", 2: "debug"}


def cargo_executable(environ: Optional[Mapping[str, str]] = None) -> str:
    """``$CARGO`` when set (as under ``cargo liner``), else ``cargo``."""
    env = os.environ if environ is None else environ
    return env.get(Constants.ENV_CARGO) or Constants.DEFAULT_CARGO


def verbosity_args(verbosity: int) -> List[str]:
    """Cargo's own ``-v``/``-q`` flags for the given balance."""
    if verbosity > 0:
        return ["-" + "v" * verbosity]
    if verbosity < 0:
        return ["-q"]
    return []


def binstall_log_level(verbosity: int) -> str:
    if verbosity <= -3:
        return "off"
    if verbosity >= 3:
        return "trace"
    return _BINSTALL_LOG_LEVELS[verbosity]


def install_args(spec: PackageSpec, force: bool) -> List[str]:
    """Arguments of ``cargo install`` for ``spec``, after global options."""
    # pylint: disable=too-many-branches
    args = ["install", "--version", spec.constraint.raw]
    if not spec.default_features:
        args.append("--no-default-features")
    if spec.all_features:
        args.append("--all-features")
    if spec.features:
        args.extend(["--features", ",".join(spec.features)])

    source = spec.source
    if isinstance(source, RegistrySource):
        if source.index:
            args.extend(["--index", source.index])
        if source.registry:
            args.extend(["--registry", source.registry])
    elif isinstance(source, GitSource):
        args.extend(["--git", source.url])
        for ref in ("branch", "tag", "rev"):
            value = getattr(source, ref)
            if value:
                args.extend([f"--{ref}", value])
    elif isinstance(source, PathSource):
        args.extend(["--path", source.dir])

    for binary in spec.bins:
        args.extend(["--bin", binary])
    if spec.all_bins:
        args.append("--bins")
    for example in spec.examples:
        args.extend(["--example", example])
    if spec.all_examples:
        args.append("--examples")
    if spec.ignore_rust_version:
        args.append("--ignore-rust-version")
    if force:
        args.append("--force")
    if spec.frozen:
        args.append("--frozen")
    if spec.locked:
        args.append("--locked")
    if spec.offline:
        args.append("--offline")

    # Extra arguments go last, right before the separator.
    args.extend(spec.extra_arguments)
    args.extend(["--", spec.name])
    return args


def binstall_args(spec: PackageSpec, force: bool, dry_run: bool, verbosity: int) -> List[str]:
    """Arguments of ``cargo binstall`` for ``spec``."""
    args = [
        "binstall",
        "--disable-telemetry",
        "--no-confirm",
        "--log-level",
        binstall_log_level(verbosity),
        "--version",
        spec.constraint.raw,
    ]
    source = spec.source
    if isinstance(source, RegistrySource):
        if source.index:
            args.extend(["--index", source.index])
        if source.registry:
            args.extend(["--registry", source.registry])
    elif isinstance(source, GitSource):
        args.extend(["--git", source.url])
    if force:
        args.append("--force")
    if dry_run:
        args.append("--dry-run")
    if spec.locked:
        args.append("--locked")
    args.extend(spec.extra_arguments)
    args.extend(["--", spec.name])
    return args


class CargoBackend(InstallerBackend):
    """Drives Cargo, choosing ``cargo binstall`` when asked or available.

    Args:
        cargo: Cargo executable; defaults to :func:`cargo_executable`.
        verbosity: ``-v``/``-q`` balance forwarded to Cargo.
        color: Value of Cargo's ``--color`` option.
        installed_names: Names from the inventory, used to detect
            ``cargo-binstall``; when empty, ``cargo binstall -V`` is probed.
        runner: ``subprocess.run``-compatible callable.
    """

    def __init__(
        self,
        cargo: Optional[str] = None,
        *,
        verbosity: int = 0,
        color: str = "auto",
        installed_names: Iterable[str] = (),
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        self.cargo = cargo or cargo_executable()
        self.verbosity = verbosity
        self.color = color
        self._installed = frozenset(installed_names)
        self._run = runner
        self._binstall_available: Optional[bool] = None

    def binstall_available(self) -> bool:
        """Heuristic detection of ``cargo-binstall``, computed once."""
        if self._binstall_available is None:
            if self._installed:
                found = Constants.BINSTALL_PACKAGE in self._installed
            else:
                found = self._probe_binstall()
            logger.debug("Considering cargo-binstall as %savailable.", "" if found else "not ")
            self._binstall_available = found
        return self._binstall_available

    def _probe_binstall(self) -> bool:
        try:
            proc = self._run(
                [self.cargo, "binstall", "-V"],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                check=False,
            )
        except OSError as exc:
            logger.debug("cargo-binstall automatic detection failed: %s", exc)
            return False
        if proc.returncode != 0:
            return False
        try:
            version = semantic_version.Version((proc.stdout or "").strip())
        except ValueError:
            logger.debug("cargo binstall -V returned something else than a version.")
            return False
        logger.debug("cargo-binstall successfully reports: %s", version)
        return True

    def uses_binstall(self, spec: PackageSpec, flags: PackageFlags) -> bool:
        """Whether ``spec`` is installed through ``cargo binstall``."""
        if isinstance(spec.source, PathSource):
            return False
        if flags.binstall is BinstallChoice.ALWAYS:
            return True
        if flags.binstall is BinstallChoice.AUTO:
            return self.binstall_available()
        return False

    def supports_simulation(self, spec, flags) -> bool:
        return spec is not None and flags is not None and self.uses_binstall(spec, flags)

    def _environment(self, overrides: Mapping[str, str]) -> Optional[Dict[str, str]]:
        if not overrides:
            return None
        env = dict(os.environ)
        env.update(overrides)
        return env

    def _call(self, cmd: List[str], env: Optional[Dict[str, str]] = None) -> int:
        logger.debug("Running: %s", shlex.join(cmd))
        try:
            proc = self._run(cmd, env=env, check=False)
        except OSError as exc:
            raise InstallerError(f"Failed to execute Cargo ({self.cargo}): {exc}") from exc
        return proc.returncode

    def build_install_command(
        self, spec: PackageSpec, flags: PackageFlags, *, simulate: bool = False
    ) -> List[str]:
        """Full argument vector installing ``spec``."""
        if self.uses_binstall(spec, flags):
            return [self.cargo, *binstall_args(spec, flags.force, simulate, self.verbosity)]
        return [
            self.cargo,
            "--color",
            self.color,
            *verbosity_args(self.verbosity),
            *install_args(spec, flags.force),
        ]

    def install(self, spec, flags, *, target=None, simulate=False) -> InstallResult:
        logger.info("%s %r...", "Updating" if spec.name in self._installed else "Installing", spec.name)
        cmd = self.build_install_command(spec, flags, simulate=simulate)
        status = self._call(cmd, self._environment(spec.environment))
        if status != 0:
            return InstallResult(
                success=False, reason=f"Cargo process finished unsuccessfully: status {status}"
            )
        return InstallResult(success=True, version=target)

    def build_uninstall_command(self, name: str) -> List[str]:
        return [
            self.cargo,
            "--color",
            self.color,
            *verbosity_args(self.verbosity),
            "uninstall",
            "--",
            name,
        ]

    def uninstall(self, name, *, simulate=False) -> InstallResult:
        logger.info("Uninstalling %r...", name)
        status = self._call(self.build_uninstall_command(name))
        if status != 0:
            return InstallResult(
                success=False, reason=f"Cargo process finished unsuccessfully: status {status}"
            )
        return InstallResult(success=True)
