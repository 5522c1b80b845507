"""
cargo-newdeps - Report the crates a change newly pulls into a Cargo build.

Compares two resolved dependency graphs (``cargo metadata`` snapshots) and
lists every third-party crate, or feature set of an already present crate,
that the second graph adds, together with the direct dependencies that
pulled it in.

Example usage:
    from cargo_newdeps import MetadataDiff
    from cargo_newdeps.sources import read_metadata_from_json

    old = read_metadata_from_json("before.json")
    new = read_metadata_from_json("after.json")
    for entry in MetadataDiff(old, new).collect_new_dependencies().entries:
        print(entry.dependency_name, entry.features, entry.parent_names)
"""

__version__ = "0.1.0"
__all__ = [
    "MetadataDiff",
    "NewDependencyReport",
    "ReportEntry",
    "Metadata",
    "__version__",
]


# Lazy imports to avoid loading heavy dependencies at import time
def __getattr__(name: str):
    if name in ("MetadataDiff", "NewDependencyReport", "ReportEntry"):
        from cargo_newdeps import diff
        return getattr(diff, name)
    if name == "Metadata":
        from cargo_newdeps.graph.schema import Metadata
        return Metadata
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
