"""Run arguments fetched from the environment."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Mapping, Optional

from constants import Commands, Constants
from errors import ConfigurationError

from .options import TUNABLES, Tunable, parse_value

logger = logging.getLogger(__name__)


def env_var_name(command: Commands, tunable: Tunable) -> str:
    """Name such as ``CARGO_LINER_SHIP_SKIP_CHECK``."""
    return f"{Constants.ENV_PREFIX}_{command.value.upper()}_{tunable.env_suffix}"


def env_layer(
    command: Commands, environ: Optional[Mapping[str, str]] = None
) -> Dict[str, Optional[Any]]:
    """Read the environment layer of ``command``'s tunables.

    Unset variables map to ``None``. A set but unparseable variable is a
    configuration error rather than being ignored.
    """
    env = os.environ if environ is None else environ
    layer: Dict[str, Optional[Any]] = {}
    for tunable in TUNABLES[command]:
        name = env_var_name(command, tunable)
        raw = env.get(name)
        if raw is None:
            layer[tunable.name] = None
            continue
        try:
            layer[tunable.name] = parse_value(tunable, raw)
        except ValueError as exc:
            raise ConfigurationError(f"Invalid value for ${name}: {raw!r}.") from exc
        logger.debug("Environment sets %s=%r.", tunable.name, layer[tunable.name])
    return layer
