"""Linter orchestrator that runs the full lockfile audit into a LintReport.

This module is the entry point for lockfile_lint. It locates and loads the
lockfile and its sibling package.json, normalizes the lockfile, runs every
engine rule, appends the linter's own advisories, and hands the result to
the aggregator.

The linter handles:
- Locating ``package-lock.json`` from a file or directory target
- Failing fast on a missing or malformed lockfile
- Degrading gracefully when package.json exists but cannot be parsed
  (a single sync-check warning replaces the sync comparison)
- The lockfile-version advisory for v1 lockfiles

Public API:
    Linter: Main orchestrator class
    lint_path: Convenience function to lint a path in one call
    find_lockfile: Locate package-lock.json for a target path
    find_manifest: Locate the package.json next to a lockfile
    load_json_document: Read a JSON object from disk
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from lockfile_lint.aggregator import aggregate
from lockfile_lint.exceptions import LockfileNotFoundError, LockfileParseError
from lockfile_lint.models import Finding, LintConfig, LintReport, RuleId, Severity
from lockfile_lint.normalizer import lockfile_version, normalize
from lockfile_lint.rules import run_rules

logger = logging.getLogger(__name__)

LOCKFILE_NAME = "package-lock.json"
MANIFEST_NAME = "package.json"


class Linter:
    """Runs every lockfile check and aggregates the findings.

    Attributes:
        config: The LintConfig applied to every run

    Example::

        linter = Linter(LintConfig(strict=True))
        report = linter.lint(Path("./my-project"))
        print(f"{report.errors} error(s), passed={report.passed}")
    """

    def __init__(self, config: LintConfig | None = None) -> None:
        self.config: LintConfig = config or LintConfig()

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def lint(self, target: Path | str) -> LintReport:
        """Lint the lockfile found at ``target``.

        Args:
            target: A ``package-lock.json`` file or a directory containing one.

        Returns:
            The LintReport for the run.

        Raises:
            LockfileNotFoundError: If no lockfile can be located.
            LockfileParseError: If the lockfile is unreadable or not a JSON
                object.
        """
        lockfile_path = find_lockfile(Path(target))
        lockfile = load_json_document(lockfile_path)

        manifest: dict[str, Any] | None = None
        manifest_unreadable = False
        manifest_path = find_manifest(lockfile_path)
        if manifest_path is not None:
            try:
                manifest = load_json_document(manifest_path)
            except LockfileParseError as exc:
                logger.warning("Skipping sync check: %s", exc)
                manifest_unreadable = True

        return self.lint_documents(
            lockfile,
            manifest,
            lockfile_path=lockfile_path,
            manifest_unreadable=manifest_unreadable,
        )

    def lint_documents(
        self,
        lockfile: dict[str, Any],
        manifest: dict[str, Any] | None = None,
        *,
        lockfile_path: Path | None = None,
        manifest_unreadable: bool = False,
    ) -> LintReport:
        """Lint already-decoded documents.

        Args:
            lockfile: The decoded package-lock.json.
            manifest: The decoded package.json, or None when there is none.
            lockfile_path: Recorded on the report for display.
            manifest_unreadable: True when a package.json exists but could
                not be parsed. The sync comparison is replaced by a single
                warning.

        Returns:
            The LintReport for the run.
        """
        records = normalize(lockfile)
        version = lockfile_version(lockfile)

        findings: list[Finding] = run_rules(
            records,
            self.config,
            lockfile=lockfile,
            manifest=None if manifest_unreadable else manifest,
        )

        if manifest_unreadable:
            findings.append(
                Finding(
                    severity=Severity.WARNING,
                    rule=RuleId.SYNC_CHECK,
                    message="Could not parse package.json for sync check",
                )
            )

        if version < 2:
            findings.append(
                Finding(
                    severity=Severity.INFO,
                    rule=RuleId.LOCKFILE_VERSION,
                    message=(
                        f"Lockfile version {version} detected. "
                        f"Consider upgrading to v3 (npm 7+)"
                    ),
                )
            )

        report = aggregate(
            findings,
            strict=self.config.strict,
            lockfile_path=lockfile_path,
            lockfile_version=version,
            package_count=len(records),
        )
        logger.debug(
            "Linted %d package(s): %d error(s), %d warning(s), %d info",
            report.package_count,
            report.errors,
            report.warnings,
            report.info,
        )
        return report


# ---------------------------------------------------------------------------
# Filesystem / parsing helpers
# ---------------------------------------------------------------------------


def find_lockfile(target: Path) -> Path:
    """Locate the lockfile for a target path.

    Args:
        target: Either a path to a ``package-lock.json`` file or a directory
            that contains one.

    Returns:
        The lockfile path.

    Raises:
        LockfileNotFoundError: If no lockfile exists for the target.
    """
    if target.is_file() and target.name.endswith(LOCKFILE_NAME):
        return target
    if target.is_dir():
        candidate = target / LOCKFILE_NAME
        if candidate.is_file():
            return candidate
    raise LockfileNotFoundError(f"No {LOCKFILE_NAME} found in {target}")


def find_manifest(lockfile_path: Path) -> Path | None:
    """Return the package.json beside ``lockfile_path``, if there is one."""
    candidate = lockfile_path.parent / MANIFEST_NAME
    return candidate if candidate.is_file() else None


def load_json_document(path: Path) -> dict[str, Any]:
    """Read and decode a JSON object from ``path``.

    Raises:
        LockfileParseError: If the file cannot be read, is not valid JSON,
            or does not hold a JSON object at the top level.
    """
    try:
        text = path.read_text(encoding="utf-8")
        data: Any = json.loads(text)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise LockfileParseError(f"Failed to parse {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise LockfileParseError(f"Failed to parse {path}: top level is not a JSON object")
    return data


# ---------------------------------------------------------------------------
# Convenience function
# ---------------------------------------------------------------------------


def lint_path(
    target: Path | str = ".",
    allowed_registries: list[str] | tuple[str, ...] | None = None,
    allow_git: bool = False,
    allow_github: bool = False,
    strict: bool = False,
    lookalike_threshold: int | None = None,
) -> LintReport:
    """Convenience function to lint a path with keyword options.

    Equivalent to::

        Linter(LintConfig.from_options(...)).lint(target)

    Raises:
        LockfileNotFoundError: If no lockfile can be located.
        LockfileParseError: If the lockfile cannot be parsed.
        ConfigError: If ``lookalike_threshold`` is out of range.

    Example::

        from lockfile_lint.linter import lint_path

        report = lint_path(".", strict=True)
        if not report.passed:
            print("Lockfile problems detected!")
    """
    config = LintConfig.from_options(
        allowed_registries=allowed_registries,
        allow_git=allow_git,
        allow_github=allow_github,
        strict=strict,
        lookalike_threshold=lookalike_threshold,
    )
    return Linter(config).lint(target)
