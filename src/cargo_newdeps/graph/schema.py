"""Dependency graph snapshot models for cargo-newdeps.

A snapshot is the document printed by ``cargo metadata --format-version 1``:
the full package list, the workspace member ids, and the ``resolve`` tree
recording which features are enabled on each package instance and which
packages it actually depends on.  Only the keys the diff needs are
modelled; everything else cargo emits is ignored.

Package ids are opaque and local to one snapshot.  Comparing packages
across snapshots goes through name, source and version instead.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from semantic_version import Version

from cargo_newdeps.errors import SnapshotIntegrityError

__all__ = [
    "DependencyRequirement",
    "Package",
    "ResolveNode",
    "Resolve",
    "Metadata",
]


class DependencyRequirement(BaseModel):
    """A dependency as declared in a package manifest."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str
    source: Optional[str] = None
    req: str = Field(default="*", description="Cargo version requirement")
    kind: Optional[str] = None
    rename: Optional[str] = None
    optional: bool = False
    uses_default_features: bool = True
    features: list[str] = Field(default_factory=list)
    target: Optional[str] = None


class Package(BaseModel):
    """One package of a snapshot.

    Attributes:
        id: Snapshot-local package id
        name: Crate name
        version: Resolved semantic version
        source: Registry or git location, ``None`` for path packages
        dependencies: Declared dependency requirements
        features: Feature name to the activations it enables, where an
            activation may be ``"crate/feature"``
    """

    model_config = ConfigDict(extra="ignore", frozen=True, arbitrary_types_allowed=True)

    id: str
    name: str
    version: Version
    source: Optional[str] = None
    dependencies: list[DependencyRequirement] = Field(default_factory=list)
    features: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator("version", mode="before")
    @classmethod
    def parse_version(cls, v: object) -> object:
        if isinstance(v, str):
            return Version(v)
        return v

    @field_serializer("version")
    def serialize_version(self, v: Version) -> str:
        return str(v)

    def __str__(self) -> str:
        return f"{self.name} v{self.version}"


class ResolveNode(BaseModel):
    """A package instance in the resolved graph."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    features: list[str] = Field(default_factory=list)
    dependencies: list[str] = Field(default_factory=list)


class Resolve(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    nodes: list[ResolveNode] = Field(default_factory=list)
    root: Optional[str] = None


class Metadata(BaseModel):
    """A full graph snapshot."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    packages: list[Package] = Field(default_factory=list)
    workspace_members: list[str] = Field(default_factory=list)
    resolve: Optional[Resolve] = None
    workspace_root: Optional[str] = None
    version: int = 1

    @classmethod
    def from_json(cls, text: str | bytes) -> "Metadata":
        """Parse a ``cargo metadata`` JSON document."""
        return cls.model_validate_json(text)

    @property
    def nodes(self) -> list[ResolveNode]:
        """Resolved nodes; a snapshot without a resolve section is unusable."""
        if self.resolve is None:
            raise SnapshotIntegrityError(
                "metadata has no resolve section (was it produced with --no-deps?)"
            )
        return self.resolve.nodes
