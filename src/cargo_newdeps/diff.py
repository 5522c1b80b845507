"""
New dependency detection between two resolved dependency graphs.

Compares the first-level edges of an old and a new ``cargo metadata``
snapshot and reports every (dependency, feature set) the new graph pulls
in that the old graph did not already cover, together with the
first-level packages responsible for it.

An edge of the new graph is already covered when some old edge reaches a
dependency with the same crate name and enabled a superset of its
features.  Versions and package ids are not compared across snapshots,
so a version bump alone is never reported.

Usage::

    from cargo_newdeps.diff import MetadataDiff

    diff = MetadataDiff(old_metadata, new_metadata)
    report = diff.collect_new_dependencies()
    for entry in report.entries:
        logger.info("%s pulled by %s", entry.dependency_name, entry.parent_names)
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import AbstractSet, Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field

from cargo_newdeps.graph.edges import DependencyEdge, collect_edges
from cargo_newdeps.graph.index import PackageIndex
from cargo_newdeps.graph.schema import Metadata

logger = logging.getLogger(__name__)

__all__ = ["ReportEntry", "NewDependencyReport", "MetadataDiff", "is_covered"]


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class ReportEntry(BaseModel):
    """A newly pulled dependency with one feature set."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    dependency_id: str
    dependency_name: str
    dependency_version: str
    features: list[str] = Field(default_factory=list)
    parent_ids: list[str] = Field(default_factory=list)
    parent_names: list[str] = Field(default_factory=list)

    @property
    def key(self) -> tuple[str, tuple[str, ...]]:
        return self.dependency_id, tuple(self.features)


class NewDependencyReport(BaseModel):
    """Ordered report of new dependencies."""

    model_config = ConfigDict(extra="forbid")

    entries: list[ReportEntry] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def as_mapping(self) -> dict[tuple[str, tuple[str, ...]], list[str]]:
        """``{(dependency_id, features): parent_ids}`` in report order."""
        return {entry.key: list(entry.parent_ids) for entry in self.entries}


# ---------------------------------------------------------------------------
# Suppression rule
# ---------------------------------------------------------------------------


def is_covered(
    dependency_name: str,
    features: AbstractSet[str],
    known_features: Mapping[str, Iterable[AbstractSet[str]]],
) -> bool:
    """Whether an old edge to ``dependency_name`` enabled at least ``features``.

    Args:
        dependency_name: Crate name of the new edge's dependency
        features: Features the new edge enables
        known_features: Crate name to the feature sets old edges enabled

    Returns:
        True if some old feature set is a superset of (or equal to) ``features``
    """
    return any(
        old_features >= features
        for old_features in known_features.get(dependency_name, ())
    )


# ---------------------------------------------------------------------------
# Diff
# ---------------------------------------------------------------------------


class MetadataDiff:
    """Diff of two snapshots of the same workspace.

    Attributes:
        old_metadata: Baseline snapshot
        new_metadata: Snapshot under review
        old_index: Package lookup for the baseline
        new_index: Package lookup for the snapshot under review
    """

    def __init__(self, old_metadata: Metadata, new_metadata: Metadata):
        self.old_metadata = old_metadata
        self.new_metadata = new_metadata
        self.old_index = PackageIndex.build(old_metadata)
        self.new_index = PackageIndex.build(new_metadata)

    def collect_new_dependencies(self) -> NewDependencyReport:
        """Compute the sorted report of new (dependency, features) pairs.

        Returns:
            ``NewDependencyReport`` sorted by dependency name then features
        """
        old_edges = collect_edges(self.old_metadata, self.old_index)
        new_edges = collect_edges(self.new_metadata, self.new_index)

        fresh = self._filter_known(old_edges, new_edges)
        groups = self._group(fresh)

        entries = [
            self._make_entry(dep_id, features, parent_ids)
            for (dep_id, features), parent_ids in groups.items()
        ]
        entries.sort(key=lambda e: (e.dependency_name, e.features, e.dependency_id))

        logger.info(
            "Found %d new dependency entries (%d of %d edges not covered by old metadata)",
            len(entries),
            len(fresh),
            len(new_edges),
        )
        return NewDependencyReport(entries=entries)

    # -- internal ------------------------------------------------------------

    def _filter_known(
        self,
        old_edges: list[DependencyEdge],
        new_edges: list[DependencyEdge],
    ) -> list[DependencyEdge]:
        known: dict[str, list[frozenset[str]]] = defaultdict(list)
        for edge in old_edges:
            known[self.old_index[edge.dependency_id].name].append(edge.features)

        fresh = [
            edge
            for edge in new_edges
            if not is_covered(
                self.new_index[edge.dependency_id].name, edge.features, known
            )
        ]
        logger.debug(
            "Suppressed %d of %d new edges already covered",
            len(new_edges) - len(fresh),
            len(new_edges),
        )
        return fresh

    @staticmethod
    def _group(
        edges: list[DependencyEdge],
    ) -> dict[tuple[str, tuple[str, ...]], list[str]]:
        groups: dict[tuple[str, tuple[str, ...]], list[str]] = {}
        for edge in edges:
            key = (edge.dependency_id, tuple(sorted(edge.features)))
            parents = groups.setdefault(key, [])
            if edge.parent_id not in parents:
                parents.append(edge.parent_id)
        return groups

    def _make_entry(
        self,
        dependency_id: str,
        features: tuple[str, ...],
        parent_ids: list[str],
    ) -> ReportEntry:
        dependency = self.new_index[dependency_id]
        return ReportEntry(
            dependency_id=dependency_id,
            dependency_name=dependency.name,
            dependency_version=str(dependency.version),
            features=list(features),
            parent_ids=parent_ids,
            parent_names=[self.new_index[p].name for p in parent_ids],
        )
