"""Command-line layer of the run options and file locations.

Extracted from the command modules to keep them slim: turns the parsed
arguments into the highest-precedence option layer and resolves it against
the environment and the declaration's defaults.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from config.env import env_layer
from config.options import TUNABLES, EffectiveOptions, parse_value, resolve_options
from config.paths import config_file_path
from config.user_config import Declaration
from constants import Commands
from errors import ConfigurationError

logger = logging.getLogger(__name__)


def cli_layer(args: Any, command: Commands) -> Dict[str, Optional[Any]]:
    """Values of ``command``'s tunables given on the command line.

    Absent flags map to None; a negation flag maps to the tunable's default.
    """
    layer: Dict[str, Optional[Any]] = {}
    for tunable in TUNABLES[command]:
        value = getattr(args, tunable.name.upper(), None)
        if value is not None and tunable.choices is not None:
            try:
                value = parse_value(tunable, value)
            except ValueError as exc:
                raise ConfigurationError(f"Invalid value for --{tunable.key}: {value!r}.") from exc
        layer[tunable.name] = value
    return layer


def verbosity(args: Any) -> int:
    """Balance of ``-v`` and ``-q`` occurrences."""
    return int(getattr(args, "VERBOSE", 0) or 0) - int(getattr(args, "QUIET", 0) or 0)


def declaration_path(args: Any, environ: Optional[Mapping[str, str]] = None) -> Path:
    """``--config`` when given, else ``$CARGO_HOME/liner.toml``."""
    explicit = getattr(args, "CONFIG", None)
    if explicit:
        return Path(explicit).expanduser()
    return config_file_path(environ)


def resolve_run_options(
    args: Any,
    command: Commands,
    declaration: Declaration,
    environ: Optional[Mapping[str, str]] = None,
) -> EffectiveOptions:
    """Resolve the effective options of this invocation, once."""
    options = resolve_options(
        command,
        cli_layer(args, command),
        env_layer(command, environ),
        declaration.defaults_for(command),
    )
    logger.debug("Effective options: %r", options)
    return options
