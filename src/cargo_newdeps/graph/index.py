"""Package id lookup for a single snapshot."""

from __future__ import annotations

from typing import Iterator, Mapping

from cargo_newdeps.errors import SnapshotIntegrityError
from cargo_newdeps.graph.schema import Metadata, Package

__all__ = ["PackageIndex"]


class PackageIndex(Mapping[str, Package]):
    """Read-only mapping from package id to package.

    Lookups are expected to succeed: every id a resolve node or edge
    refers to must be defined in the same snapshot.  A miss raises
    ``SnapshotIntegrityError`` rather than ``KeyError``.
    """

    def __init__(self, packages: Mapping[str, Package]):
        self._packages = dict(packages)

    @classmethod
    def build(cls, metadata: Metadata) -> "PackageIndex":
        return cls({package.id: package for package in metadata.packages})

    def __getitem__(self, package_id: str) -> Package:
        try:
            return self._packages[package_id]
        except KeyError:
            raise SnapshotIntegrityError(
                f"package id '{package_id}' is referenced but not defined in metadata"
            ) from None

    def get(self, package_id: str, default=None):
        return self._packages.get(package_id, default)

    def __contains__(self, package_id: object) -> bool:
        return package_id in self._packages

    def __iter__(self) -> Iterator[str]:
        return iter(self._packages)

    def __len__(self) -> int:
        return len(self._packages)
