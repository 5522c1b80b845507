"""
Dependency edge collection for one snapshot.

An edge ``(parent_id, features, dependency_id)`` says that the package
``parent_id`` depends on ``dependency_id`` and, through its own enabled
features, turns on ``features`` in it.  Only edges whose parent is a
first-level dependency (a direct dependency of a workspace member) are
kept, so the report covers what the project's own dependencies pull in.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

from cargo_newdeps.graph.features import propagate_features
from cargo_newdeps.graph.index import PackageIndex
from cargo_newdeps.graph.matching import resolve_requirement
from cargo_newdeps.graph.schema import Metadata

logger = logging.getLogger(__name__)

__all__ = ["DependencyEdge", "first_level_dependencies", "collect_edges"]


class DependencyEdge(NamedTuple):
    parent_id: str
    features: frozenset[str]
    dependency_id: str


def first_level_dependencies(metadata: Metadata) -> set[str]:
    """Ids the workspace members depend on directly in the resolve graph."""
    members = set(metadata.workspace_members)
    return {
        dep_id
        for node in metadata.nodes
        if node.id in members
        for dep_id in node.dependencies
    }


def collect_edges(metadata: Metadata, index: PackageIndex) -> list[DependencyEdge]:
    """Collect the first-level edges of a snapshot.

    Every declared dependency of every resolved package is matched against
    the snapshot's packages; requirements that resolve to nothing (a
    disabled optional dependency, another platform's dependency) are
    skipped.  Edges keep resolve-graph order and may repeat.

    Args:
        metadata: Snapshot to walk
        index: Package lookup built from the same snapshot

    Returns:
        List of ``DependencyEdge``
    """
    first_level = first_level_dependencies(metadata)
    edges: list[DependencyEdge] = []

    for node in metadata.nodes:
        parent = index[node.id]
        if parent.id not in first_level:
            continue
        enabled = frozenset(node.features)
        for requirement in parent.dependencies:
            dependency = resolve_requirement(requirement, metadata.packages)
            if dependency is None:
                continue
            edges.append(
                DependencyEdge(
                    parent_id=parent.id,
                    features=propagate_features(parent, enabled, dependency),
                    dependency_id=dependency.id,
                )
            )

    logger.debug(
        "Collected %d edges from %d first-level dependencies",
        len(edges),
        len(first_level),
    )
    return edges
