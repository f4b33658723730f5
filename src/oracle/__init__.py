"""Latest-version discovery.

- base.py: the oracle interface and per-package lookup result
- client.py: concurrent fan-out/fan-in over the declared packages
- sparse_index.py: HTTP oracle over a Cargo sparse index (default)
- cargo_search.py: oracle running ``cargo search``
"""

from .base import LookupResult, VersionOracle
from .cargo_search import CargoSearchOracle
from .client import fetch_latest_versions, lookup_latest_all
from .sparse_index import SparseIndexOracle

__all__ = [
    "LookupResult",
    "VersionOracle",
    "CargoSearchOracle",
    "fetch_latest_versions",
    "lookup_latest_all",
    "SparseIndexOracle",
]
