"""Unit tests for lockfile_lint.normalizer module.

Covers:
- lockfileVersion defaulting
- v2/v3 packages maps (root entry removal, link and dev flags)
- v1 dependency tree flattening and key construction
- Key-space equivalence between v1 and v2 encodings of the same tree
- Defensive handling of malformed entries
"""

from __future__ import annotations

from typing import Any

import pytest

from lockfile_lint.normalizer import lockfile_version, normalize

REGISTRY = "https://registry.npmjs.org"


def _tgz(name: str, version: str) -> str:
    return f"{REGISTRY}/{name}/-/{name}-{version}.tgz"


V1_LOCKFILE: dict[str, Any] = {
    "name": "app",
    "version": "1.0.0",
    "lockfileVersion": 1,
    "dependencies": {
        "express": {
            "version": "4.18.2",
            "resolved": _tgz("express", "4.18.2"),
            "integrity": "sha512-aaa",
            "dependencies": {
                "debug": {
                    "version": "2.6.9",
                    "resolved": _tgz("debug", "2.6.9"),
                    "integrity": "sha512-bbb",
                    "dependencies": {
                        "ms": {
                            "version": "2.0.0",
                            "resolved": _tgz("ms", "2.0.0"),
                            "integrity": "sha512-ccc",
                        }
                    },
                }
            },
        },
        "jest": {
            "version": "29.0.0",
            "resolved": _tgz("jest", "29.0.0"),
            "integrity": "sha512-ddd",
            "dev": True,
        },
    },
}

V2_LOCKFILE: dict[str, Any] = {
    "name": "app",
    "version": "1.0.0",
    "lockfileVersion": 2,
    "packages": {
        "": {"name": "app", "version": "1.0.0"},
        "node_modules/express": {
            "version": "4.18.2",
            "resolved": _tgz("express", "4.18.2"),
            "integrity": "sha512-aaa",
        },
        "node_modules/express/node_modules/debug": {
            "version": "2.6.9",
            "resolved": _tgz("debug", "2.6.9"),
            "integrity": "sha512-bbb",
        },
        "node_modules/express/node_modules/debug/node_modules/ms": {
            "version": "2.0.0",
            "resolved": _tgz("ms", "2.0.0"),
            "integrity": "sha512-ccc",
        },
        "node_modules/jest": {
            "version": "29.0.0",
            "resolved": _tgz("jest", "29.0.0"),
            "integrity": "sha512-ddd",
            "dev": True,
        },
    },
    # npm 7+ keeps the legacy tree alongside packages in v2 files
    "dependencies": {"express": {"version": "4.18.2"}},
}


class TestLockfileVersion:
    """Tests for lockfile_version() defaulting."""

    @pytest.mark.parametrize(
        "doc, expected",
        [
            ({}, 1),
            ({"lockfileVersion": 0}, 1),
            ({"lockfileVersion": None}, 1),
            ({"lockfileVersion": "3"}, 3),
            ({"lockfileVersion": " 2 "}, 2),
            ({"lockfileVersion": 2.0}, 2),
            ({"lockfileVersion": 2.5}, 1),
            ({"lockfileVersion": "abc"}, 1),
            ({"lockfileVersion": -2}, 1),
            ({"lockfileVersion": True}, 1),
            ({"lockfileVersion": 1}, 1),
            ({"lockfileVersion": 2}, 2),
            ({"lockfileVersion": 3}, 3),
        ],
    )
    def test_defaulting(self, doc: dict[str, Any], expected: int) -> None:
        assert lockfile_version(doc) == expected

    def test_unrecognised_value_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level("WARNING", logger="lockfile_lint.normalizer"):
            assert lockfile_version({"lockfileVersion": "latest"}) == 1
        assert "Ignoring unrecognised lockfileVersion 'latest'" in caplog.text

    def test_missing_value_not_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level("WARNING", logger="lockfile_lint.normalizer"):
            assert lockfile_version({}) == 1
        assert caplog.text == ""

    def test_string_version_reads_packages_map(self) -> None:
        doc = dict(V2_LOCKFILE, lockfileVersion="2")
        records = normalize(doc)
        assert "node_modules/jest" in records
        assert records == normalize(V2_LOCKFILE)


class TestPackagesFormat:
    """Tests for v2/v3 packages-map normalization."""

    def test_root_entry_removed(self) -> None:
        records = normalize(V2_LOCKFILE)
        assert "" not in records

    def test_keys_preserved(self) -> None:
        records = normalize(V2_LOCKFILE)
        assert set(records) == {
            "node_modules/express",
            "node_modules/express/node_modules/debug",
            "node_modules/express/node_modules/debug/node_modules/ms",
            "node_modules/jest",
        }

    def test_fields_mapped(self) -> None:
        record = normalize(V2_LOCKFILE)["node_modules/express"]
        assert record.key == "node_modules/express"
        assert record.version == "4.18.2"
        assert record.resolved_url == _tgz("express", "4.18.2")
        assert record.integrity == "sha512-aaa"
        assert record.is_link is False
        assert record.is_dev is False

    def test_dev_flag(self) -> None:
        assert normalize(V2_LOCKFILE)["node_modules/jest"].is_dev is True

    def test_link_flag(self) -> None:
        lockfile = {
            "lockfileVersion": 3,
            "packages": {
                "": {"name": "mono"},
                "node_modules/shared": {"resolved": "packages/shared", "link": True},
                "packages/shared": {"version": "0.1.0"},
            },
        }
        records = normalize(lockfile)
        assert records["node_modules/shared"].is_link is True
        assert records["packages/shared"].resolved_url is None

    def test_packages_preferred_over_dependencies(self) -> None:
        records = normalize(V2_LOCKFILE)
        # the legacy tree has no integrity; the packages map wins
        assert records["node_modules/express"].integrity == "sha512-aaa"

    def test_empty_packages_map(self) -> None:
        lockfile = {"lockfileVersion": 3, "packages": {}, "dependencies": {"a": {}}}
        assert normalize(lockfile) == {}

    def test_only_root_entry(self) -> None:
        assert normalize({"lockfileVersion": 3, "packages": {"": {"name": "x"}}}) == {}

    def test_v1_with_packages_uses_dependencies(self) -> None:
        lockfile = {
            "lockfileVersion": 1,
            "packages": {"node_modules/a": {}},
            "dependencies": {"b": {"version": "1.0.0"}},
        }
        assert set(normalize(lockfile)) == {"node_modules/b"}

    def test_non_dict_entries_skipped(self) -> None:
        lockfile = {
            "lockfileVersion": 2,
            "packages": {"node_modules/a": "oops", "node_modules/b": {"version": "1.0.0"}},
        }
        assert set(normalize(lockfile)) == {"node_modules/b"}

    def test_wrongly_typed_fields_treated_as_absent(self) -> None:
        lockfile = {
            "lockfileVersion": 2,
            "packages": {
                "node_modules/a": {"resolved": 42, "integrity": "", "link": "yes", "dev": 1}
            },
        }
        record = normalize(lockfile)["node_modules/a"]
        assert record.resolved_url is None
        assert record.integrity is None
        assert record.is_link is False
        assert record.is_dev is False


class TestDependencyTree:
    """Tests for v1 dependency-tree flattening."""

    def test_nested_keys(self) -> None:
        records = normalize(V1_LOCKFILE)
        assert list(records) == [
            "node_modules/express",
            "node_modules/express/node_modules/debug",
            "node_modules/express/node_modules/debug/node_modules/ms",
            "node_modules/jest",
        ]

    def test_fields_carried(self) -> None:
        record = normalize(V1_LOCKFILE)["node_modules/express/node_modules/debug/node_modules/ms"]
        assert record.version == "2.0.0"
        assert record.resolved_url == _tgz("ms", "2.0.0")
        assert record.integrity == "sha512-ccc"

    def test_dev_flag(self) -> None:
        records = normalize(V1_LOCKFILE)
        assert records["node_modules/jest"].is_dev is True
        assert records["node_modules/express"].is_dev is False

    def test_v1_never_marks_links(self) -> None:
        lockfile = {"dependencies": {"a": {"version": "file:../a", "link": True}}}
        assert normalize(lockfile)["node_modules/a"].is_link is False

    def test_missing_version_defaults_to_v1(self) -> None:
        lockfile = {"dependencies": {"a": {"version": "1.0.0"}}}
        assert set(normalize(lockfile)) == {"node_modules/a"}

    def test_same_name_at_two_depths(self) -> None:
        lockfile = {
            "dependencies": {
                "ms": {"version": "2.1.3"},
                "debug": {"version": "2.6.9", "dependencies": {"ms": {"version": "2.0.0"}}},
            }
        }
        records = normalize(lockfile)
        assert records["node_modules/ms"].version == "2.1.3"
        assert records["node_modules/debug/node_modules/ms"].version == "2.0.0"

    def test_scoped_names(self) -> None:
        lockfile = {
            "dependencies": {
                "@babel/core": {
                    "version": "7.0.0",
                    "dependencies": {"@babel/types": {"version": "7.0.0"}},
                }
            }
        }
        assert set(normalize(lockfile)) == {
            "node_modules/@babel/core",
            "node_modules/@babel/core/node_modules/@babel/types",
        }

    def test_deep_tree_does_not_recurse(self) -> None:
        depth = 2000
        tree: dict[str, Any] = {}
        node = tree
        for i in range(depth):
            child: dict[str, Any] = {"version": "1.0.0"}
            node[f"p{i}"] = child
            child["dependencies"] = {}
            node = child["dependencies"]
        records = normalize({"dependencies": tree})
        assert len(records) == depth

    def test_no_dependencies(self) -> None:
        assert normalize({"name": "empty"}) == {}

    def test_non_dict_dependencies(self) -> None:
        assert normalize({"dependencies": ["a", "b"]}) == {}


class TestKeySpaceEquivalence:
    """v1 and v2 encodings of one tree normalize to the same key set."""

    def test_same_keys(self) -> None:
        assert set(normalize(V1_LOCKFILE)) == set(normalize(V2_LOCKFILE))

    def test_same_records(self) -> None:
        assert normalize(V1_LOCKFILE) == normalize(V2_LOCKFILE)

    def test_idempotent(self) -> None:
        assert list(normalize(V1_LOCKFILE).items()) == list(normalize(V1_LOCKFILE).items())
