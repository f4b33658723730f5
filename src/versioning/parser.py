"""Parsing utilities for versions and Cargo version requirements."""

import re
from typing import FrozenSet, List, Tuple

import semantic_version

from .models import STAR, VersionConstraint

_PRERELEASE_RE = re.compile(r"(\d+)\.(\d+)\.(\d+)-[0-9A-Za-z]")
_X_WILDCARD_RE = re.compile(r"(?:^|(?<=[=^~<>])|(?<=\d\.))[xX](?=\.|$)")
_WILDCARD_RE = re.compile(r"(^|\.)\*(\.|$)")


def parse_version(text: str) -> semantic_version.Version:
    """Parse a full semantic version.

    Pre-release and build-metadata suffixes are accepted. Raises
    ``ValueError`` on anything else than ``MAJOR.MINOR.PATCH[-pre][+build]``.
    """
    return semantic_version.Version(str(text).strip())


def _split_clauses(raw: str) -> List[str]:
    clauses = [re.sub(r"\s+", "", part) for part in raw.split(",")]
    # ``x`` and ``X`` are spelled ``*`` by SimpleSpec.
    return [_X_WILDCARD_RE.sub("*", clause) for clause in clauses if clause]


def _caret(body: str) -> str:
    """Caret requirement on ``body``, expanding the all-zero partial forms.

    ``^0`` means ``<1.0.0`` and ``^0.0`` means ``<0.1.0`` for Cargo.
    """
    parts = body.split(".")
    if all(part.isdigit() for part in parts) and int(parts[0]) == 0:
        if len(parts) == 1:
            return ">=0.0.0,<1.0.0"
        if len(parts) == 2 and int(parts[1]) == 0:
            return ">=0.0.0,<0.1.0"
    return "^" + body


def _normalize_clause(clause: str) -> str:
    """Translate one Cargo comparator to the ``SimpleSpec`` grammar."""
    if _WILDCARD_RE.search(clause.lstrip("=^~")):
        return clause.lstrip("=^")
    if clause[0].isdigit():
        # Cargo treats a bare version as a caret requirement.
        return _caret(clause)
    if clause.startswith("^"):
        return _caret(clause[1:])
    if clause.startswith("=") and not clause.startswith("=="):
        return "==" + clause[1:]
    return clause


def _prerelease_bases(raw: str) -> FrozenSet[Tuple[int, int, int]]:
    return frozenset(
        (int(major), int(minor), int(patch))
        for major, minor, patch in _PRERELEASE_RE.findall(raw)
    )


def parse_constraint(raw: str) -> VersionConstraint:
    """Parse a Cargo version requirement such as ``^1.2``, ``~1``, ``1.*``.

    Raises ``ValueError`` when the requirement is empty or not understood.
    """
    if raw is None or not str(raw).strip():
        raise ValueError("Empty version requirement")
    raw = str(raw).strip()
    if raw == "*":
        return STAR

    clauses = _split_clauses(raw)
    if not clauses:
        raise ValueError(f"Invalid version requirement: {raw!r}")

    expression = ",".join(_normalize_clause(clause) for clause in clauses)
    try:
        semantic_version.SimpleSpec(expression)
    except ValueError as exc:
        raise ValueError(f"Invalid version requirement {raw!r}: {exc}") from exc

    return VersionConstraint(
        raw=raw,
        expression=expression,
        prerelease_bases=_prerelease_bases(raw),
    )


def constraint_from_version(version: semantic_version.Version, operator: str = "=") -> VersionConstraint:
    """Build the requirement ``<operator>X.Y.Z`` from an installed ``version``.

    Build metadata is dropped; a pre-release suffix is kept.
    """
    return parse_constraint(f"{operator}{version.truncate('prerelease')}")
