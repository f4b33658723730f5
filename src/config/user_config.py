"""Loading and validation of the user's declaration file.

The default file is ``$CARGO_HOME/liner.toml``; ``--config`` may point at a
TOML, YAML or JSON file of the same shape::

    [packages]
    bat = "*"
    ripgrep = { version = "14", features = ["pcre2"] }

    [defaults.ship]
    no-fail-fast = true
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import tomli_w
import yaml

from constants import Commands, Constants
from errors import DeclarationError, LinerError

from .options import TUNABLES
from .package import PackageSpec, parse_binstall, parse_package

logger = logging.getLogger(__name__)

_TOP_LEVEL_KEYS = frozenset(["packages", "defaults"])


@dataclass(frozen=True)
class Declaration:
    """Ordered package specs plus the persisted per-command defaults."""

    packages: List[PackageSpec] = field(default_factory=list)
    defaults: Mapping[Commands, Mapping[str, Any]] = field(default_factory=dict)

    @property
    def names(self) -> List[str]:
        """Declared package names, in declaration order."""
        return [spec.name for spec in self.packages]

    def get(self, name: str) -> Optional[PackageSpec]:
        """Return the spec declared for ``name``, if any."""
        for spec in self.packages:
            if spec.name == name:
                return spec
        return None

    def defaults_for(self, command: Commands) -> Mapping[str, Any]:
        """Persisted defaults layer of ``command``."""
        return self.defaults.get(command, {})

    def self_update(self, enabled: bool) -> "Declaration":
        """Add or remove the tool's own package.

        When enabled and not already declared, the self package is
        synthesized first in the list with a star requirement; an explicit
        entry is kept as is, in place.
        """
        others = [spec for spec in self.packages if spec.name != Constants.SELF_PACKAGE]
        if not enabled:
            logger.debug("Self-updating disabled.")
            return Declaration(packages=others, defaults=self.defaults)
        logger.debug("Self-updating enabled.")
        if self.get(Constants.SELF_PACKAGE) is not None:
            return self
        return Declaration(
            packages=[PackageSpec(name=Constants.SELF_PACKAGE), *self.packages],
            defaults=self.defaults,
        )

    def only_self(self) -> "Declaration":
        """Reduce the packages to the tool's own entry."""
        own = self.get(Constants.SELF_PACKAGE) or PackageSpec(name=Constants.SELF_PACKAGE)
        logger.debug("Updating of other packages disabled.")
        return Declaration(packages=[own], defaults=self.defaults)


def _reject_duplicates(pairs):
    seen = {}
    for key, value in pairs:
        if key in seen:
            raise DeclarationError(f"Duplicate key in declaration: {key!r}.")
        seen[key] = value
    return seen


class _UniqueKeyLoader(yaml.SafeLoader):  # pylint: disable=too-many-ancestors
    """Safe YAML loader refusing repeated mapping keys."""


def _construct_unique_mapping(loader, node, deep=False):
    seen = set()
    for key_node, _ in node.value:
        if not isinstance(key_node, yaml.ScalarNode) or key_node.tag == "tag:yaml.org,2002:merge":
            continue
        key = (key_node.tag, key_node.value)
        if key in seen:
            raise DeclarationError(f"Duplicate key in declaration: {key_node.value!r}.")
        seen.add(key)
    return loader.construct_mapping(node, deep=deep)


_UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG, _construct_unique_mapping
)


def _config_suffix(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix not in Constants.SUPPORTED_CONFIG_EXTENSIONS:
        raise DeclarationError(
            f"Unsupported configuration file extension {suffix!r}: "
            f"expected one of {', '.join(Constants.SUPPORTED_CONFIG_EXTENSIONS)}."
        )
    return suffix


def _load_raw(path: Path) -> Any:
    suffix = _config_suffix(path)
    try:
        if suffix == ".toml":
            try:
                import tomllib as toml  # type: ignore
            except ImportError:
                import tomli as toml  # type: ignore
            with open(path, "rb") as f:
                return toml.load(f)
        with open(path, "r", encoding="utf-8") as f:
            if suffix == ".json":
                return json.load(f, object_pairs_hook=_reject_duplicates)
            return yaml.load(f, Loader=_UniqueKeyLoader)
    except FileNotFoundError as exc:
        raise DeclarationError(f"Configuration file not found: {path}.") from exc
    except OSError as exc:
        raise DeclarationError(f"Failed to read {path}: {exc}.") from exc
    except (ValueError, yaml.YAMLError) as exc:
        # tomllib.TOMLDecodeError and json.JSONDecodeError derive from ValueError.
        raise DeclarationError(f"Failed to parse {path}: {exc}") from exc


def parse_defaults(raw: Any) -> Dict[Commands, Dict[str, Any]]:
    """Validate the ``[defaults]`` table into typed per-command layers."""
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise DeclarationError("'defaults' must be a table.")

    by_name = {command.value: command for command in TUNABLES}
    result: Dict[Commands, Dict[str, Any]] = {}
    for section, table in raw.items():
        command = by_name.get(section)
        if command is None:
            raise DeclarationError(f"Unknown defaults section: {section!r}.")
        if not isinstance(table, Mapping):
            raise DeclarationError(f"'defaults.{section}' must be a table.")

        tunables = {tunable.key: tunable for tunable in TUNABLES[command]}
        layer: Dict[str, Any] = {}
        for key, value in table.items():
            tunable = tunables.get(key)
            if tunable is None:
                raise DeclarationError(f"Unknown key in 'defaults.{section}': {key!r}.")
            if tunable.choices is not None:
                layer[tunable.name] = parse_binstall(value)
            elif isinstance(value, bool):
                layer[tunable.name] = value
            else:
                raise DeclarationError(
                    f"'defaults.{section}.{key}' must be a boolean, got {value!r}."
                )
        result[command] = layer
    return result


def parse_declaration(raw: Any) -> Declaration:
    """Validate an already-deserialized document."""
    if not isinstance(raw, Mapping):
        raise DeclarationError("The configuration must be a table.")
    unknown = sorted(set(raw) - _TOP_LEVEL_KEYS)
    if unknown:
        raise DeclarationError(f"Unknown top-level key(s): {', '.join(unknown)}.")
    if "packages" not in raw:
        raise DeclarationError("Missing the 'packages' table.")

    packages = raw["packages"]
    if packages is None:
        packages = {}
    if not isinstance(packages, Mapping):
        raise DeclarationError("'packages' must be a table.")

    return Declaration(
        packages=[parse_package(name, value) for name, value in packages.items()],
        defaults=parse_defaults(raw.get("defaults")),
    )


def load_declaration(path: Path) -> Declaration:
    """Read and validate the declaration file at ``path``.

    Raises:
        DeclarationError: If the file is missing, unreadable or malformed.
    """
    logger.debug("Reading configuration from %s...", path)
    declaration = parse_declaration(_load_raw(Path(path)))
    logger.debug("Got %d declared package(s).", len(declaration.packages))
    return declaration


def declaration_document(declaration: Declaration) -> Dict[str, Any]:
    """Plain document holding each package's version requirement."""
    return {"packages": {spec.name: spec.constraint.raw for spec in declaration.packages}}


def save_declaration(declaration: Declaration, path: Path, *, overwrite: bool = False) -> None:
    """Write ``declaration`` to ``path`` in the format of its extension.

    Only the version requirements are written. Without ``overwrite``, an
    existing file is left untouched.

    Raises:
        DeclarationError: If the extension is unsupported or the file exists.
        LinerError: If the file could not be written.
    """
    path = Path(path)
    suffix = _config_suffix(path)

    document = declaration_document(declaration)
    mode = "w" if overwrite else "x"
    logger.debug("Writing %d package(s) to %s...", len(declaration.packages), path)
    try:
        if suffix == ".toml":
            with open(path, mode + "b") as f:
                tomli_w.dump(document, f)
            return
        with open(path, mode, encoding="utf-8") as f:
            if suffix == ".json":
                json.dump(document, f, indent=2)
                f.write("\n")
            else:
                yaml.safe_dump(document, f, sort_keys=False)
    except FileExistsError as exc:
        raise DeclarationError(
            f"Configuration file {path} already exists, use -f/--force to overwrite."
        ) from exc
    except OSError as exc:
        raise LinerError(f"Failed to save {path}: {exc}.") from exc
