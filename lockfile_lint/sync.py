"""Cross-check package.json against package-lock.json.

The comparison is one-directional: a dependency declared in the manifest but
absent from the lockfile means someone edited package.json without running
``npm install``. Lockfile entries missing from the manifest are expected
(transitive dependencies) and are never reported.

A declared name counts as present if it appears at any nesting depth of the
normalized key space, so a transitive package that happens to share the name
of a missing direct dependency satisfies the check.
"""

from __future__ import annotations

from typing import Any, Mapping

from lockfile_lint.models import Finding, PackageRecord, RuleId, Severity

_MANIFEST_DEPENDENCY_KEYS: tuple[str, ...] = ("dependencies", "devDependencies")


def check_sync(
    records: Mapping[str, PackageRecord],
    lockfile: Mapping[str, Any],
    manifest: Mapping[str, Any],
) -> list[Finding]:
    """Compare a manifest against a lockfile and its normalized records.

    Args:
        records: Normalized records of the lockfile.
        lockfile: The raw lockfile document (for name, version and the legacy
            top-level ``dependencies`` map).
        manifest: The raw package.json document.

    Returns:
        Findings for name mismatch (error), version mismatch (warning), and
        each declared dependency missing from the lockfile (error).
    """
    findings: list[Finding] = []

    lock_name = lockfile.get("name")
    pkg_name = manifest.get("name")
    if lock_name and pkg_name and lock_name != pkg_name:
        findings.append(
            Finding(
                severity=Severity.ERROR,
                rule=RuleId.SYNC_CHECK,
                message=(
                    f'Package name mismatch: lockfile has "{lock_name}" '
                    f'but package.json has "{pkg_name}"'
                ),
            )
        )

    lock_version = lockfile.get("version")
    pkg_version = manifest.get("version")
    if lock_version and pkg_version and lock_version != pkg_version:
        findings.append(
            Finding(
                severity=Severity.WARNING,
                rule=RuleId.SYNC_CHECK,
                message=(
                    f'Version mismatch: lockfile has "{lock_version}" '
                    f'but package.json has "{pkg_version}"'
                ),
            )
        )

    # A one-entry (or empty) lockfile is too degenerate to compare against.
    # A raw packages map is counted with its "" root entry.
    raw_packages = lockfile.get("packages")
    entry_count = len(raw_packages) if isinstance(raw_packages, dict) else len(records)
    if entry_count <= 1:
        return findings

    legacy_deps = lockfile.get("dependencies")
    if not isinstance(legacy_deps, dict):
        legacy_deps = {}

    for name in declared_dependencies(manifest):
        if in_key_space(name, records) or name in legacy_deps:
            continue
        findings.append(
            Finding(
                severity=Severity.ERROR,
                rule=RuleId.SYNC_CHECK,
                message=f'"{name}" is in package.json but not in lockfile',
                details="Run 'npm install' to sync",
            )
        )

    return findings


def declared_dependencies(manifest: Mapping[str, Any]) -> list[str]:
    """Return dependency and devDependency names, deduplicated, in order."""
    names: dict[str, None] = {}
    for key in _MANIFEST_DEPENDENCY_KEYS:
        deps = manifest.get(key)
        if isinstance(deps, dict):
            for name in deps:
                if isinstance(name, str) and name:
                    names.setdefault(name, None)
    return list(names)


def in_key_space(name: str, keys: Mapping[str, Any] | list[str]) -> bool:
    """Return True if ``name`` is installed at any depth of ``keys``."""
    direct = f"node_modules/{name}"
    nested = f"/node_modules/{name}"
    return any(key == direct or key.endswith(nested) for key in keys)
