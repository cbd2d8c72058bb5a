"""Environment discovery across conda and well-known virtualenv locations."""
from cython_forge.environments.discovery import (
    DiscoveryCoordinator,
    discover_environments,
    merge_results,
    search_roots,
)

__all__ = [
    "DiscoveryCoordinator",
    "discover_environments",
    "merge_results",
    "search_roots",
]
