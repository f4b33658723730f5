"""Shared fakes and builders for the reconciler tests."""

import pytest
import semantic_version

from backend.base import InstallerBackend, InstallResult
from config.crates_toml import InstalledPackage
from config.options import EffectiveOptions
from errors import VersionLookupError
from oracle.base import VersionOracle


def v(text):
    return semantic_version.Version(text)


def installed(name, version, source="registry+https://github.com/rust-lang/crates.io-index"):
    return InstalledPackage(name=name, version=v(version), source=source)


class FakeOracle(VersionOracle):
    """Answers from a name-to-version table; unknown names fail."""

    def __init__(self, versions=None, errors=None):
        self.versions = dict(versions or {})
        self.errors = dict(errors or {})
        self.calls = []
        self.closed = False

    async def latest(self, name, constraint, source):
        self.calls.append(name)
        if name in self.errors:
            raise self.errors[name]
        if name not in self.versions:
            raise VersionLookupError(f"unknown package {name}")
        return v(self.versions[name])

    async def close(self):
        self.closed = True


class FakeBackend(InstallerBackend):
    """Records calls; packages named in ``failing`` report a failure."""

    def __init__(self, failing=(), simulate=False, raising=()):
        self.failing = set(failing)
        self.raising = set(raising)
        self.simulate = simulate
        self.calls = []

    def supports_simulation(self, spec, flags):
        return self.simulate and spec is not None

    def install(self, spec, flags, *, target=None, simulate=False):
        self.calls.append(("install", spec.name, simulate))
        if spec.name in self.raising:
            raise OSError("cargo not found")
        if spec.name in self.failing:
            return InstallResult(success=False, reason="exit status 101")
        return InstallResult(success=True, version=target)

    def uninstall(self, name, *, simulate=False):
        self.calls.append(("uninstall", name, simulate))
        if name in self.failing:
            return InstallResult(success=False, reason="exit status 101")
        return InstallResult(success=True)


@pytest.fixture
def options():
    return EffectiveOptions()
