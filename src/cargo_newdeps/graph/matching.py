"""
Matching declared dependency requirements to packages of a snapshot.

A requirement ``{name, source, req}`` is equivalent to a package when the
names are equal, the sources are equal once the URL fragment is dropped
(git sources carry the locked commit as ``#<sha>``), and the package
version satisfies ``req``.  When several packages qualify, the highest
version wins; equal versions keep the earliest package in snapshot order.

Usage::

    from cargo_newdeps.graph.matching import resolve_requirement

    package = resolve_requirement(requirement, metadata.packages)
    if package is None:
        ...  # not present in this snapshot
"""

from __future__ import annotations

from functools import lru_cache
from typing import Iterable, Optional
from urllib.parse import urldefrag

from semantic_version import NpmSpec, Version

from cargo_newdeps.errors import SnapshotIntegrityError
from cargo_newdeps.graph.schema import DependencyRequirement, Package

__all__ = [
    "normalize_source",
    "parse_requirement",
    "version_matches",
    "is_equivalent",
    "best_match",
    "resolve_requirement",
]


def normalize_source(source: Optional[str]) -> Optional[str]:
    """Drop the ``#fragment`` of a source location."""
    if source is None:
        return None
    return urldefrag(source).url


def _to_npm_comparator(comparator: str) -> str:
    comparator = "".join(comparator.split())
    numbers = comparator.partition("-")[0].partition("+")[0]
    if numbers[:1].isdigit() and not any(w in numbers for w in "*xX"):
        # Cargo reads a bare version as a caret requirement.
        return f"^{comparator}"
    return comparator


@lru_cache(maxsize=1024)
def parse_requirement(req: str) -> NpmSpec:
    """Parse a Cargo version requirement such as ``"^1.2, <1.5"``.

    Cargo and npm share caret, tilde, wildcard and prerelease rules; the
    requirement only needs its comma separators and bare versions mapped.

    Raises:
        SnapshotIntegrityError: If the requirement is not valid Cargo syntax.
    """
    comparators = [c for c in req.split(",") if c.strip()]
    try:
        return NpmSpec(" ".join(_to_npm_comparator(c) for c in comparators) or "*")
    except ValueError as exc:
        raise SnapshotIntegrityError(f"invalid version requirement {req!r}: {exc}") from exc


def version_matches(req: str, version: Version) -> bool:
    return parse_requirement(req).match(version)


def is_equivalent(requirement: DependencyRequirement, package: Package) -> bool:
    """Whether ``package`` satisfies ``requirement`` by name, source and version."""
    return (
        package.name == requirement.name
        and normalize_source(package.source) == normalize_source(requirement.source)
        and version_matches(requirement.req, package.version)
    )


def best_match(candidates: Iterable[Package]) -> Optional[Package]:
    """Highest-versioned candidate; the first one wins a tie."""
    return max(candidates, key=lambda package: package.version, default=None)


def resolve_requirement(
    requirement: DependencyRequirement,
    candidates: Iterable[Package],
) -> Optional[Package]:
    """Find the package a declared dependency resolved to, if any."""
    return best_match(c for c in candidates if is_equivalent(requirement, c))
