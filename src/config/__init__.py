"""User configuration, installed inventory and run options.

- package.py: declared package requirements and their sources
- user_config.py: the declaration file loader
- crates_toml.py: Cargo's record of installed packages
- options.py / env.py: layered resolution of run-wide tunables
"""

from .crates_toml import InstalledPackage, read_inventory
from .options import EffectiveOptions, PackageFlags, resolve_options
from .package import GitSource, PackageSpec, PathSource, RegistrySource
from .user_config import Declaration, load_declaration

__all__ = [
    "InstalledPackage",
    "read_inventory",
    "EffectiveOptions",
    "PackageFlags",
    "resolve_options",
    "GitSource",
    "PackageSpec",
    "PathSource",
    "RegistrySource",
    "Declaration",
    "load_declaration",
]
