"""Collect findings into a LintReport, applying strict-mode escalation."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Iterable

from lockfile_lint.models import Finding, LintReport, Severity


def escalate(findings: Iterable[Finding]) -> tuple[Finding, ...]:
    """Return a copy of ``findings`` with every warning relabelled as an error.

    Info findings are left alone. The input findings are not modified.
    """
    return tuple(
        replace(f, severity=Severity.ERROR) if f.severity == Severity.WARNING else f
        for f in findings
    )


def aggregate(
    findings: Iterable[Finding],
    strict: bool = False,
    *,
    lockfile_path: Path | None = None,
    lockfile_version: int = 1,
    package_count: int = 0,
) -> LintReport:
    """Build the final report for a lint run.

    Args:
        findings: Findings in emission order.
        strict: Escalate warnings to errors before counting.
        lockfile_path: Path of the checked lockfile, if any.
        lockfile_version: Effective lockfileVersion.
        package_count: Number of normalized package records.

    Returns:
        A LintReport whose ``passed`` flag reflects the escalated severities.
    """
    final = escalate(findings) if strict else tuple(findings)
    return LintReport(
        findings=final,
        lockfile_path=lockfile_path,
        lockfile_version=lockfile_version,
        package_count=package_count,
    )
