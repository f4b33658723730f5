"""Declared package requirements: sources, build options and overrides."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from constants import BinstallChoice
from errors import DeclarationError
from versioning.models import STAR, VersionConstraint
from versioning.parser import parse_constraint

NAME_RE = re.compile(r"^[A-Za-z0-9_-]+$")


@dataclass(frozen=True)
class RegistrySource:
    """Package fetched from a registry: crates.io unless overridden."""

    index: Optional[str] = None
    registry: Optional[str] = None
    has_remote_version = True


@dataclass(frozen=True)
class GitSource:
    """Package built from a git repository."""

    url: str
    branch: Optional[str] = None
    tag: Optional[str] = None
    rev: Optional[str] = None
    has_remote_version = False


@dataclass(frozen=True)
class PathSource:
    """Package built from a local directory."""

    dir: str
    has_remote_version = False


PackageSource = Union[RegistrySource, GitSource, PathSource]


@dataclass(frozen=True)
class PackageSpec:  # pylint: disable=too-many-instance-attributes
    """One entry of the declaration, immutable for the whole run."""

    name: str
    constraint: VersionConstraint = STAR
    source: PackageSource = field(default_factory=RegistrySource)
    features: Tuple[str, ...] = ()
    all_features: bool = False
    default_features: bool = True
    bins: Tuple[str, ...] = ()
    all_bins: bool = False
    examples: Tuple[str, ...] = ()
    all_examples: bool = False
    ignore_rust_version: bool = False
    frozen: bool = False
    locked: bool = False
    offline: bool = False
    extra_arguments: Tuple[str, ...] = ()
    environment: Mapping[str, str] = field(default_factory=dict)
    # Per-package overrides of run-wide flags; None defers to the run.
    skip_check: Optional[bool] = None
    no_fail_fast: Optional[bool] = None
    force: Optional[bool] = None
    binstall: Optional[BinstallChoice] = None


_BOOL_KEYS = {
    "all-features": "all_features",
    "default-features": "default_features",
    "all-bins": "all_bins",
    "all-examples": "all_examples",
    "ignore-rust-version": "ignore_rust_version",
    "frozen": "frozen",
    "locked": "locked",
    "offline": "offline",
}
_LIST_KEYS = {
    "features": "features",
    "bins": "bins",
    "examples": "examples",
    "extra-arguments": "extra_arguments",
}
_OVERRIDE_KEYS = {
    "skip-check": "skip_check",
    "no-fail-fast": "no_fail_fast",
    "force": "force",
}
_SOURCE_KEYS = ("index", "registry", "git", "branch", "tag", "rev", "path")
KNOWN_KEYS = frozenset(
    ["version", "environment", "binstall", *_BOOL_KEYS, *_LIST_KEYS, *_OVERRIDE_KEYS, *_SOURCE_KEYS]
)


def _expect(name: str, key: str, value: Any, kind: type) -> Any:
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise DeclarationError(
            f"Package {name!r}: {key!r} must be of type {kind.__name__}, got {value!r}."
        )
    return value


def _str_list(name: str, key: str, value: Any) -> Tuple[str, ...]:
    _expect(name, key, value, list)
    for item in value:
        _expect(name, key, item, str)
    return tuple(value)


def _parse_constraint(name: str, raw: Any) -> VersionConstraint:
    _expect(name, "version", raw, str)
    try:
        return parse_constraint(raw)
    except ValueError as exc:
        raise DeclarationError(f"Package {name!r}: {exc}") from exc


def _parse_source(name: str, table: Mapping[str, Any]) -> PackageSource:
    values = {key: _expect(name, key, table[key], str) for key in _SOURCE_KEYS if key in table}
    git, path = values.get("git"), values.get("path")
    refs = [key for key in ("branch", "tag", "rev") if key in values]

    if git is not None and path is not None:
        raise DeclarationError(f"Package {name!r}: 'git' and 'path' are mutually exclusive.")
    if refs and git is None:
        raise DeclarationError(f"Package {name!r}: {refs[0]!r} requires 'git'.")
    if len(refs) > 1:
        raise DeclarationError(
            f"Package {name!r}: only one of 'branch', 'tag' and 'rev' may be given."
        )
    if "index" in values and "registry" in values:
        raise DeclarationError(f"Package {name!r}: 'index' and 'registry' are mutually exclusive.")
    if (git is not None or path is not None) and ("index" in values or "registry" in values):
        raise DeclarationError(
            f"Package {name!r}: 'index'/'registry' cannot be combined with 'git' or 'path'."
        )

    if git is not None:
        return GitSource(url=git, branch=values.get("branch"), tag=values.get("tag"), rev=values.get("rev"))
    if path is not None:
        return PathSource(dir=path)
    return RegistrySource(index=values.get("index"), registry=values.get("registry"))


def parse_binstall(value: Any) -> BinstallChoice:
    """Parse an ``auto``/``always``/``never`` choice."""
    try:
        return BinstallChoice(str(value).strip().lower())
    except ValueError as exc:
        choices = ", ".join(choice.value for choice in BinstallChoice)
        raise DeclarationError(f"Invalid binstall choice {value!r}: expected one of {choices}.") from exc


def parse_package(name: str, value: Any) -> PackageSpec:
    """Build a ``PackageSpec`` from its declared simple or detailed form.

    The simple form is a bare requirement string, the detailed form a table
    whose keys mirror ``cargo install`` options.
    """
    if not isinstance(name, str) or not NAME_RE.match(name):
        raise DeclarationError(f"Invalid package name: {name!r}.")

    if isinstance(value, str):
        return PackageSpec(name=name, constraint=_parse_constraint(name, value))
    if not isinstance(value, Mapping):
        raise DeclarationError(
            f"Package {name!r}: expected a version string or a table, got {value!r}."
        )

    unknown = sorted(set(value) - KNOWN_KEYS)
    if unknown:
        raise DeclarationError(f"Package {name!r}: unknown key(s): {', '.join(unknown)}.")

    kwargs: Dict[str, Any] = {"name": name}
    if "version" in value:
        kwargs["constraint"] = _parse_constraint(name, value["version"])
    kwargs["source"] = _parse_source(name, value)

    for key, attr in _BOOL_KEYS.items():
        if key in value:
            kwargs[attr] = _expect(name, key, value[key], bool)
    for key, attr in _LIST_KEYS.items():
        if key in value:
            kwargs[attr] = _str_list(name, key, value[key])
    for key, attr in _OVERRIDE_KEYS.items():
        if key in value:
            kwargs[attr] = _expect(name, key, value[key], bool)

    if "environment" in value:
        env = _expect(name, "environment", value["environment"], dict)
        for env_key, env_val in env.items():
            _expect(name, "environment", env_val, str)
            _expect(name, "environment", env_key, str)
        kwargs["environment"] = dict(env)

    if "binstall" in value:
        kwargs["binstall"] = parse_binstall(value["binstall"])

    return PackageSpec(**kwargs)
