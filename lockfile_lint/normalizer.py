"""Normalize package-lock.json documents into a flat map of PackageRecords.

npm has written three lockfile shapes:

- v1: a recursive ``dependencies`` tree keyed by package name
- v2/v3: a flat ``packages`` map keyed by ``node_modules/...`` paths, with
  the project root stored under the empty-string key

Both are converted to the same key space (``node_modules/a/node_modules/b``)
so the rules never need to know which version they are looking at.

Public API:
    normalize: Convert a decoded lockfile into ``{key: PackageRecord}``
    lockfile_version: Read the effective lockfileVersion of a document
"""

from __future__ import annotations

import logging
from typing import Any

from lockfile_lint.models import PackageRecord

logger = logging.getLogger(__name__)

_NODE_MODULES = "node_modules/"


def lockfile_version(lockfile: dict[str, Any]) -> int:
    """Return the lockfileVersion of a document.

    Integral floats and digit strings are accepted as written by some tools.
    Missing and zero values count as version 1, as does anything else, which
    is logged as a warning.
    """
    raw = lockfile.get("lockfileVersion")
    version = _parse_version(raw)
    if version is None:
        if raw is not None:
            logger.warning("Ignoring unrecognised lockfileVersion %r; treating as 1", raw)
        return 1
    return version


def _parse_version(raw: Any) -> int | None:
    """Coerce a raw lockfileVersion value, or return None if it is unusable."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        version = raw
    elif isinstance(raw, float) and raw.is_integer():
        version = int(raw)
    elif isinstance(raw, str) and raw.strip().isdecimal():
        version = int(raw.strip())
    else:
        return None
    if version == 0:
        return 1
    return version if version > 0 else None


def normalize(lockfile: dict[str, Any]) -> dict[str, PackageRecord]:
    """Convert a decoded lockfile into a flat mapping of package records.

    Args:
        lockfile: The JSON-decoded package-lock.json document.

    Returns:
        Dict mapping each record key to its PackageRecord. The root entry of
        a v2/v3 lockfile is never included.
    """
    version = _parse_version(lockfile.get("lockfileVersion")) or 1
    packages = lockfile.get("packages")
    dependencies = lockfile.get("dependencies")

    if version >= 2 and isinstance(packages, dict):
        records = _from_packages(packages)
        logger.debug("Normalized %d record(s) from v%d packages map", len(records), version)
    elif isinstance(dependencies, dict):
        records = _flatten_dependencies(dependencies)
        logger.debug("Normalized %d record(s) from v1 dependency tree", len(records))
    else:
        records = {}
        logger.debug("Lockfile has no packages or dependencies to normalize")
    return records


def _from_packages(packages: dict[str, Any]) -> dict[str, PackageRecord]:
    records: dict[str, PackageRecord] = {}
    for key, entry in packages.items():
        # "" is the project itself, not a dependency
        if key == "" or not isinstance(entry, dict):
            continue
        records[key] = _build_record(key, entry, with_link=True)
    return records


def _flatten_dependencies(dependencies: dict[str, Any]) -> dict[str, PackageRecord]:
    """Flatten a v1 dependency tree in pre-order using an explicit stack.

    Each stack frame is ``(prefix, iterator over (name, entry))``; a nested
    ``dependencies`` map is pushed right after its parent is emitted so key
    order matches a depth-first recursive walk.
    """
    records: dict[str, PackageRecord] = {}
    stack: list[tuple[str, Any]] = [("", iter(dependencies.items()))]

    while stack:
        prefix, entries = stack[-1]
        item = next(entries, None)
        if item is None:
            stack.pop()
            continue

        name, entry = item
        if not isinstance(entry, dict):
            continue
        key = f"{prefix}/{_NODE_MODULES}{name}" if prefix else f"{_NODE_MODULES}{name}"
        records[key] = _build_record(key, entry, with_link=False)

        nested = entry.get("dependencies")
        if isinstance(nested, dict) and nested:
            stack.append((key, iter(nested.items())))

    return records


def _build_record(key: str, entry: dict[str, Any], with_link: bool) -> PackageRecord:
    return PackageRecord(
        key=key,
        version=_optional_str(entry.get("version")),
        resolved_url=_optional_str(entry.get("resolved")),
        integrity=_optional_str(entry.get("integrity")),
        is_link=with_link and entry.get("link") is True,
        is_dev=entry.get("dev") is True,
    )


def _optional_str(value: Any) -> str | None:
    """Return ``value`` if it is a non-empty string, else None."""
    if isinstance(value, str) and value:
        return value
    return None
