"""Feature propagation from a parent package onto one of its dependencies."""

from __future__ import annotations

from typing import AbstractSet

from cargo_newdeps.graph.schema import Package

__all__ = ["propagate_features"]


def propagate_features(
    parent: Package,
    parent_features: AbstractSet[str],
    dependency: Package,
) -> frozenset[str]:
    """Features that ``parent``'s enabled features turn on in ``dependency``.

    Only activations of the form ``"<crate>/<feature>"`` naming the
    dependency count.  Plain feature names, ``dep:`` entries and
    activations of other crates contribute nothing.

    Args:
        parent: Package declaring the feature table
        parent_features: Features enabled on the parent in the resolve graph
        dependency: Package the parent depends on

    Returns:
        The propagated feature names, possibly empty
    """
    propagated = set()
    for feature, activations in parent.features.items():
        if feature not in parent_features:
            continue
        for activation in activations:
            crate_name, sep, dep_feature = activation.partition("/")
            if sep and crate_name == dependency.name:
                propagated.add(dep_feature)
    return frozenset(propagated)
