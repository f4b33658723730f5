"""Resolution of run-wide tunables into one immutable ``EffectiveOptions``.

Every tunable is looked up in four layers, highest precedence first:

1. the command line, where a negation flag (``--no-dry-run``) is recorded
   as an explicit default value and is therefore as final as the positive
   flag;
2. the ``CARGO_LINER_<COMMAND>_<TUNABLE>`` environment variable;
3. the ``[defaults.<command>]`` table of the declaration file;
4. the hard-coded default.

The first layer holding a value wins; lower layers are not consulted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple, Type

from constants import BinstallChoice, Commands
from errors import ConfigurationError

from .package import PackageSpec


@dataclass(frozen=True)
class Tunable:
    """A resolvable flag: boolean unless ``choices`` names an enum."""

    name: str
    default: Any = False
    choices: Optional[Type[BinstallChoice]] = None

    @property
    def key(self) -> str:
        """Spelling used in the declaration file."""
        return self.name.replace("_", "-")

    @property
    def env_suffix(self) -> str:
        """Suffix of the environment variable name."""
        return self.name.upper()


NO_SELF = Tunable("no_self")
ONLY_SELF = Tunable("only_self")
SKIP_CHECK = Tunable("skip_check")
NO_FAIL_FAST = Tunable("no_fail_fast")
FORCE = Tunable("force")
DRY_RUN = Tunable("dry_run")
BINSTALL = Tunable("binstall", BinstallChoice.AUTO, BinstallChoice)
NO_CONFIRM = Tunable("no_confirm")

TUNABLES: Dict[Commands, Tuple[Tunable, ...]] = {
    Commands.SHIP: (NO_SELF, ONLY_SELF, SKIP_CHECK, NO_FAIL_FAST, FORCE, DRY_RUN, BINSTALL),
    Commands.JETTISON: (NO_CONFIRM, NO_FAIL_FAST, DRY_RUN),
}

# Pairs that may not both be requested.
MUTUALLY_EXCLUSIVE: Tuple[Tuple[str, str], ...] = (("only_self", "no_self"),)


@dataclass(frozen=True)
class PackageFlags:
    """Flags as they apply to one package after per-package overrides."""

    skip_check: bool
    no_fail_fast: bool
    force: bool
    binstall: BinstallChoice


@dataclass(frozen=True)
class EffectiveOptions:  # pylint: disable=too-many-instance-attributes
    """Fully-resolved tunables of one command invocation."""

    command: Commands = Commands.SHIP
    no_self: bool = False
    only_self: bool = False
    skip_check: bool = False
    no_fail_fast: bool = False
    force: bool = False
    dry_run: bool = False
    binstall: BinstallChoice = BinstallChoice.AUTO
    no_confirm: bool = False
    # Names of the tunables given on the command line.
    cli_explicit: FrozenSet[str] = field(default_factory=frozenset)

    def _pick(self, name: str, local: Optional[Any]) -> Any:
        if name in self.cli_explicit or local is None:
            return getattr(self, name)
        return local

    def for_package(self, spec: PackageSpec) -> PackageFlags:
        """Combine run-wide values with the overrides declared by ``spec``.

        An explicit CLI value beats the package-local one, which beats any
        other run-wide layer. Git and path sources always skip the check.
        """
        skip_check = self._pick("skip_check", spec.skip_check)
        if not spec.source.has_remote_version:
            skip_check = True
        return PackageFlags(
            skip_check=skip_check,
            no_fail_fast=self._pick("no_fail_fast", spec.no_fail_fast),
            force=self._pick("force", spec.force),
            binstall=self._pick("binstall", spec.binstall),
        )


def parse_bool(text: str) -> bool:
    """Parse a boolean-like string, raising ``ValueError`` otherwise."""
    value = str(text).strip().lower()
    if value in ("true", "1", "yes", "on"):
        return True
    if value in ("false", "0", "no", "off"):
        return False
    raise ValueError(f"not a boolean: {text!r}")


def parse_value(tunable: Tunable, text: str) -> Any:
    """Parse the textual value of ``tunable``."""
    if tunable.choices is not None:
        return tunable.choices(str(text).strip().lower())
    return parse_bool(text)


def fold_layers(*layers: Optional[Any]) -> Optional[Any]:
    """Return the first value that is not ``None``."""
    for value in layers:
        if value is not None:
            return value
    return None


def validate_exclusive(layer: Mapping[str, Optional[Any]], origin: str) -> None:
    """Reject mutually exclusive tunables both set to true in ``layer``."""
    for first, second in MUTUALLY_EXCLUSIVE:
        if layer.get(first) and layer.get(second):
            raise ConfigurationError(
                f"{origin}: '{first.replace('_', '-')}' and "
                f"'{second.replace('_', '-')}' are mutually exclusive."
            )


def resolve_options(
    command: Commands,
    cli: Mapping[str, Optional[Any]],
    env: Mapping[str, Optional[Any]],
    defaults: Mapping[str, Any],
) -> EffectiveOptions:
    """Resolve every tunable of ``command`` from its layers.

    Args:
        command: The command being run; selects the relevant tunables.
        cli: Values given on the command line, ``None`` when absent.
        env: Values parsed from the environment, ``None`` when absent.
        defaults: Values from the declaration's ``[defaults.<command>]``.

    Raises:
        ConfigurationError: If mutually exclusive tunables are requested.
    """
    validate_exclusive(cli, "Command line")

    values: Dict[str, Any] = {}
    explicit = set()
    for tunable in TUNABLES[command]:
        cli_value = cli.get(tunable.name)
        if cli_value is not None:
            explicit.add(tunable.name)
        values[tunable.name] = fold_layers(
            cli_value,
            env.get(tunable.name),
            defaults.get(tunable.name),
            tunable.default,
        )

    validate_exclusive(values, "Effective configuration")
    return EffectiveOptions(command=command, cli_explicit=frozenset(explicit), **values)
