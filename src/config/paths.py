"""Locations of the files living in Cargo's home directory."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional

from constants import Constants


def cargo_home(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Return ``$CARGO_HOME``, defaulting to ``~/.cargo`` like Cargo does."""
    env = os.environ if environ is None else environ
    home = env.get(Constants.ENV_CARGO_HOME)
    if home:
        return Path(home)
    return Path.home() / ".cargo"


def config_file_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Default location of the declaration file."""
    return cargo_home(environ) / Constants.CONFIG_FILE_NAME


def crates_file_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Location of Cargo's own record of installed packages."""
    return cargo_home(environ) / Constants.CRATES_FILE_NAME
