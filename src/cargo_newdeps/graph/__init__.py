"""
Resolved dependency graph snapshots and per-snapshot edge collection.

Public API::

    from cargo_newdeps.graph import (
        # Snapshot models
        Metadata,
        Package,
        DependencyRequirement,
        ResolveNode,
        # Lookup and matching
        PackageIndex,
        resolve_requirement,
        # Edges
        DependencyEdge,
        collect_edges,
    )
"""

from cargo_newdeps.graph.edges import (
    DependencyEdge,
    collect_edges,
    first_level_dependencies,
)
from cargo_newdeps.graph.features import propagate_features
from cargo_newdeps.graph.index import PackageIndex
from cargo_newdeps.graph.matching import (
    best_match,
    is_equivalent,
    normalize_source,
    resolve_requirement,
    version_matches,
)
from cargo_newdeps.graph.schema import (
    DependencyRequirement,
    Metadata,
    Package,
    Resolve,
    ResolveNode,
)

__all__ = [
    # Models
    "DependencyRequirement",
    "Metadata",
    "Package",
    "Resolve",
    "ResolveNode",
    # Lookup and matching
    "PackageIndex",
    "best_match",
    "is_equivalent",
    "normalize_source",
    "resolve_requirement",
    "version_matches",
    # Features and edges
    "propagate_features",
    "DependencyEdge",
    "collect_edges",
    "first_level_dependencies",
]
