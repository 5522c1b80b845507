"""Tests for new dependency detection between two snapshots."""

from __future__ import annotations

from typing import Dict, List, Optional

import pytest

from builders import dep, metadata, node, package
from cargo_newdeps.diff import MetadataDiff, NewDependencyReport, ReportEntry, is_covered
from cargo_newdeps.graph.schema import Metadata


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _workspace(
    parents: Dict[str, List[tuple]],
    versions: Optional[Dict[str, str]] = None,
) -> Metadata:
    """Build a snapshot where ``app`` depends on every key of ``parents``.

    Each parent maps to ``(dependency_name, features)`` pairs: the parent
    depends on that crate and enables ``features`` on it through a feature
    of its own that is switched on.
    """
    versions = versions or {}
    app = package("app", "0.1.0", source=None, dependencies=[dep(p) for p in parents])
    packages = {"app": app}
    nodes = []

    for parent_name, children in parents.items():
        feature_table = {}
        enabled = []
        for index, (child, features) in enumerate(children):
            if features:
                feature_table[f"f{index}"] = [f"{child}/{f}" for f in features]
                enabled.append(f"f{index}")
            if child not in packages:
                packages[child] = package(child, versions.get(child, "1.0.0"))
        packages[parent_name] = package(
            parent_name,
            versions.get(parent_name, "1.0.0"),
            dependencies=[dep(child) for child, _ in children],
            features=feature_table,
        )
        nodes.append(
            node(
                packages[parent_name],
                [packages[child] for child, _ in children],
                enabled,
            )
        )

    nodes.insert(0, node(app, [packages[p] for p in parents]))
    leaf_nodes = [node(p) for name, p in packages.items() if name != "app" and name not in parents]
    return Metadata.model_validate(metadata(list(packages.values()), nodes + leaf_nodes, [app]))


def _summary(report: NewDependencyReport) -> list:
    return [(e.dependency_name, e.features, e.parent_names) for e in report.entries]


# ---------------------------------------------------------------------------
# Suppression rule
# ---------------------------------------------------------------------------


class TestIsCovered:
    def test_subset_is_covered(self):
        assert is_covered("serde", frozenset({"std"}), {"serde": [frozenset({"std", "derive"})]})

    def test_equal_is_covered(self):
        assert is_covered("serde", frozenset({"std"}), {"serde": [frozenset({"std"})]})

    def test_empty_is_covered_by_any(self):
        assert is_covered("serde", frozenset(), {"serde": [frozenset({"std"})]})

    def test_superset_not_covered(self):
        assert not is_covered(
            "serde", frozenset({"std", "derive", "rc"}), {"serde": [frozenset({"std", "derive"})]}
        )

    def test_any_old_set_suffices(self):
        known = {"serde": [frozenset({"std"}), frozenset({"derive"})]}
        assert is_covered("serde", frozenset({"derive"}), known)
        assert not is_covered("serde", frozenset({"std", "derive"}), known)

    def test_unknown_name_not_covered(self):
        assert not is_covered("tokio", frozenset(), {"serde": [frozenset()]})


# ---------------------------------------------------------------------------
# Diff
# ---------------------------------------------------------------------------


class TestMetadataDiff:
    def test_identical_snapshots_report_nothing(self):
        snapshot = _workspace({"router": [("http", []), ("logger", ["json"])]})
        report = MetadataDiff(snapshot, snapshot).collect_new_dependencies()
        assert report.is_empty
        assert report.total == 0

    def test_new_dependency_reported(self):
        old = _workspace({"router": [("http", [])]})
        new = _workspace({"router": [("http", []), ("logger", [])]})
        report = MetadataDiff(old, new).collect_new_dependencies()
        assert _summary(report) == [("logger", [], ["router"])]

    def test_shrinking_features_suppressed(self):
        old = _workspace({"router": [("serde", ["a", "b"])]})
        for features in (["a"], []):
            new = _workspace({"router": [("serde", features)]})
            assert MetadataDiff(old, new).collect_new_dependencies().is_empty

    def test_growing_features_report_full_set(self):
        old = _workspace({"router": [("serde", ["a", "b"])]})
        new = _workspace({"router": [("serde", ["a", "b", "c"])]})
        report = MetadataDiff(old, new).collect_new_dependencies()
        assert _summary(report) == [("serde", ["a", "b", "c"], ["router"])]

    def test_version_bump_alone_not_reported(self):
        old = _workspace({"router": [("http", ["std"])]}, versions={"http": "0.2.9"})
        new = _workspace({"router": [("http", ["std"])]}, versions={"http": "1.0.0"})
        assert MetadataDiff(old, new).collect_new_dependencies().is_empty

    def test_old_match_ignores_parent(self):
        old = _workspace({"router": [("http", [])]})
        new = _workspace({"router": [("http", [])], "client": [("http", [])]})
        assert MetadataDiff(old, new).collect_new_dependencies().is_empty

    def test_transitive_parent_not_reported(self):
        old = _workspace({"router": []})
        new = _workspace({"router": [("http", [])]})
        # http now pulls bytes, but http is not a direct dependency of app
        bytes_ = package("bytes")
        data = new.model_dump(mode="json")
        http = next(p for p in data["packages"] if p["name"] == "http")
        http["dependencies"] = [dep("bytes")]
        data["packages"].append(bytes_)
        for n in data["resolve"]["nodes"]:
            if n["id"] == http["id"]:
                n["dependencies"] = [bytes_["id"]]
        data["resolve"]["nodes"].append(node(bytes_))
        new = Metadata.model_validate(data)

        report = MetadataDiff(old, new).collect_new_dependencies()
        assert [e.dependency_name for e in report.entries] == ["http"]

    def test_parents_grouped_in_first_seen_order(self):
        old = _workspace({"router": []})
        new = _workspace(
            {
                "zeta": [("logger", ["json"])],
                "alpha": [("logger", ["json"])],
                "router": [("logger", ["json"])],
            }
        )
        report = MetadataDiff(old, new).collect_new_dependencies()
        assert _summary(report) == [("logger", ["json"], ["zeta", "alpha", "router"])]

    def test_duplicate_edges_list_parent_once(self):
        old = _workspace({"router": []})
        new = _workspace({"router": [("logger", []), ("logger", [])]})
        report = MetadataDiff(old, new).collect_new_dependencies()
        assert _summary(report) == [("logger", [], ["router"])]

    def test_distinct_feature_sets_are_separate_entries(self):
        old = _workspace({"router": []})
        new = _workspace({"router": [("logger", ["json"])], "client": [("logger", [])]})
        report = MetadataDiff(old, new).collect_new_dependencies()
        assert _summary(report) == [
            ("logger", [], ["client"]),
            ("logger", ["json"], ["router"]),
        ]

    def test_sorted_by_name_then_features(self):
        old = _workspace({"router": []})
        new = _workspace(
            {
                "router": [("zstd", []), ("bytes", ["std"])],
                "client": [("http", ["b", "a"]), ("bytes", [])],
            }
        )
        report = MetadataDiff(old, new).collect_new_dependencies()
        assert [(e.dependency_name, e.features) for e in report.entries] == [
            ("bytes", []),
            ("bytes", ["std"]),
            ("http", ["a", "b"]),
            ("zstd", []),
        ]

    def test_deterministic(self):
        old = _workspace({"router": [("http", [])]})
        new = _workspace(
            {"router": [("http", ["a"]), ("logger", ["json", "trace"])], "client": [("http", ["a"])]}
        )
        first = MetadataDiff(old, new).collect_new_dependencies().model_dump_json()
        for _ in range(5):
            assert MetadataDiff(old, new).collect_new_dependencies().model_dump_json() == first

    def test_as_mapping(self):
        old = _workspace({"router": []})
        new = _workspace({"router": [("logger", ["json"])]})
        report = MetadataDiff(old, new).collect_new_dependencies()
        entry = report.entries[0]
        assert report.as_mapping() == {
            (entry.dependency_id, ("json",)): [entry.parent_ids[0]]
        }

    def test_prerelease_requirement_resolves_release(self):
        app = package("app", "0.1.0", source=None, dependencies=[dep("router", "^1")])
        old_router = package("router", "1.0.0")
        new_router = package("router", "1.1.0", dependencies=[dep("logger", "^1.0.0-rc.1")])
        logger = package("logger", "1.0.0")
        old = Metadata.model_validate(
            metadata([app, old_router], [node(app, [old_router]), node(old_router)], [app])
        )
        new = Metadata.model_validate(
            metadata(
                [app, new_router, logger],
                [node(app, [new_router]), node(new_router, [logger]), node(logger)],
                [app],
            )
        )
        report = MetadataDiff(old, new).collect_new_dependencies()
        assert _summary(report) == [("logger", [], ["router"])]

    def test_same_crate_two_versions_ordered_by_id(self):
        bytes_1 = package("bytes", "1.5.0")
        bytes_0 = package("bytes", "0.5.6")
        router = package("router", dependencies=[dep("bytes", "^1")])
        client = package("client", dependencies=[dep("bytes", "^0.5")])
        app = package(
            "app", "0.1.0", source=None, dependencies=[dep("router"), dep("client")]
        )
        old = _workspace({"router": [], "client": []})
        new = Metadata.model_validate(
            metadata(
                [app, router, client, bytes_1, bytes_0],
                [
                    node(app, [router, client]),
                    node(router, [bytes_1]),
                    node(client, [bytes_0]),
                    node(bytes_1),
                    node(bytes_0),
                ],
                [app],
            )
        )
        report = MetadataDiff(old, new).collect_new_dependencies()
        assert [(e.dependency_version, e.parent_names) for e in report.entries] == [
            ("0.5.6", ["client"]),
            ("1.5.0", ["router"]),
        ]


class TestScenario:
    """The router 2 -> 3 upgrade pulls in logger with its json feature."""

    def test_router_upgrade(self, main_json, router_3_json):
        old = Metadata.from_json(main_json.read_text())
        new = Metadata.from_json(router_3_json.read_text())

        report = MetadataDiff(old, new).collect_new_dependencies()

        assert report.entries == [
            ReportEntry(
                dependency_id="registry+https://github.com/rust-lang/crates.io-index#logger@0.4.2",
                dependency_name="logger",
                dependency_version="0.4.2",
                features=["json"],
                parent_ids=["registry+https://github.com/rust-lang/crates.io-index#router@3.0.0"],
                parent_names=["router"],
            )
        ]

    def test_reverse_direction(self, main_json, router_3_json):
        old = Metadata.from_json(router_3_json.read_text())
        new = Metadata.from_json(main_json.read_text())
        assert MetadataDiff(old, new).collect_new_dependencies().is_empty
