"""The lockfile rule engine.

Six rules, each a pure function of the normalized records and the run
configuration. The set is closed: ``ENGINE_RULES`` fixes both membership and
evaluation order, and ``evaluate`` dispatches through a table keyed by
``RuleId``. Rules share no state and never look at each other's output.

| Rule         | Severity        | Skips links |
|--------------|-----------------|-------------|
| registry-url | error           | yes         |
| git-protocol | error / warning | no          |
| https-only   | error           | yes         |
| integrity    | warning         | yes         |
| no-file-refs | warning         | no          |
| sync-check   | error / warning | n/a         |

Public API:
    ENGINE_RULES: The six rules in evaluation order
    evaluate: Run a single rule
    run_rules: Run every rule and concatenate the findings
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from lockfile_lint.lookalike import RegistryLookalikeDetector
from lockfile_lint.models import Finding, LintConfig, PackageRecord, RuleId, Severity
from lockfile_lint.sync import check_sync

logger = logging.getLogger(__name__)

Records = Mapping[str, PackageRecord]

ENGINE_RULES: tuple[RuleId, ...] = (
    RuleId.REGISTRY_URL,
    RuleId.GIT_PROTOCOL,
    RuleId.HTTPS_ONLY,
    RuleId.INTEGRITY,
    RuleId.NO_FILE_REFS,
    RuleId.SYNC_CHECK,
)

# Maximum number of package keys listed in the integrity finding
INTEGRITY_LIST_LIMIT = 10


# ---------------------------------------------------------------------------
# Individual rules
# ---------------------------------------------------------------------------


def check_registry_urls(records: Records, config: LintConfig) -> list[Finding]:
    """Flag resolved URLs that do not start with a trusted registry prefix."""
    trusted = config.trusted_registries
    detector = RegistryLookalikeDetector(threshold=config.lookalike_threshold)
    findings: list[Finding] = []

    for key, record in records.items():
        url = record.resolved_url
        if not url or record.is_link:
            continue
        if url.startswith(trusted):
            continue

        details = f"Resolved: {url}"
        metadata: dict[str, Any] = {}
        match = detector.check_url(url)
        if match is not None:
            details += f" (host resembles {match.matched_host})"
            metadata["lookalike"] = match.to_dict()

        findings.append(
            Finding(
                severity=Severity.ERROR,
                rule=RuleId.REGISTRY_URL,
                message="Unofficial registry URL detected",
                package=key,
                details=details,
                metadata=metadata,
            )
        )
    return findings


def check_git_protocol(records: Records, config: LintConfig) -> list[Finding]:
    """Flag git://, git+ssh:// and direct GitHub references.

    The three sub-checks are independent; one record can trigger several.
    """
    findings: list[Finding] = []

    for key, record in records.items():
        url = record.resolved_url
        if not url:
            continue

        if url.startswith("git://") and not config.allow_git:
            findings.append(
                Finding(
                    severity=Severity.ERROR,
                    rule=RuleId.GIT_PROTOCOL,
                    message="git:// protocol is insecure (no encryption)",
                    package=key,
                    details=f"Use git+https:// instead. Resolved: {url}",
                )
            )

        if url.startswith("git+ssh://") and not config.allow_git:
            findings.append(
                Finding(
                    severity=Severity.WARNING,
                    rule=RuleId.GIT_PROTOCOL,
                    message="git+ssh:// protocol dependency detected",
                    package=key,
                    details=f"Resolved: {url}",
                )
            )

        if (
            "github.com" in url
            and not url.startswith("https://registry.")
            and not config.allow_github
        ):
            findings.append(
                Finding(
                    severity=Severity.WARNING,
                    rule=RuleId.GIT_PROTOCOL,
                    message="GitHub direct dependency (not from npm registry)",
                    package=key,
                    details=f"Resolved: {url}",
                )
            )
    return findings


def check_https_only(records: Records, config: LintConfig) -> list[Finding]:
    """Flag plain http:// resolved URLs."""
    return [
        Finding(
            severity=Severity.ERROR,
            rule=RuleId.HTTPS_ONLY,
            message="HTTP (non-encrypted) resolved URL",
            package=key,
            details=f"Resolved: {record.resolved_url}",
        )
        for key, record in records.items()
        if record.resolved_url
        and not record.is_link
        and record.resolved_url.startswith("http://")
    ]


def check_integrity(records: Records, config: LintConfig) -> list[Finding]:
    """Emit one aggregate warning for packages without an integrity hash."""
    missing = [
        key
        for key, record in records.items()
        if record.resolved_url and not record.is_link and not record.integrity
    ]
    if not missing:
        return []

    listed = ", ".join(missing[:INTEGRITY_LIST_LIMIT])
    overflow = len(missing) - INTEGRITY_LIST_LIMIT
    suffix = f" and {overflow} more" if overflow > 0 else ""
    return [
        Finding(
            severity=Severity.WARNING,
            rule=RuleId.INTEGRITY,
            message=f"{len(missing)} package(s) missing integrity hash",
            details=f"Packages: {listed}{suffix}",
            metadata={"missing_count": len(missing)},
        )
    ]


def check_file_refs(records: Records, config: LintConfig) -> list[Finding]:
    """Flag file: references, including on link records."""
    return [
        Finding(
            severity=Severity.WARNING,
            rule=RuleId.NO_FILE_REFS,
            message="file: protocol reference (local path dependency)",
            package=key,
            details=f"Resolved: {record.resolved_url}",
        )
        for key, record in records.items()
        if record.resolved_url and record.resolved_url.startswith("file:")
    ]


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

_RECORD_RULES: dict[RuleId, Callable[[Records, LintConfig], list[Finding]]] = {
    RuleId.REGISTRY_URL: check_registry_urls,
    RuleId.GIT_PROTOCOL: check_git_protocol,
    RuleId.HTTPS_ONLY: check_https_only,
    RuleId.INTEGRITY: check_integrity,
    RuleId.NO_FILE_REFS: check_file_refs,
}


def evaluate(
    rule: RuleId,
    records: Records,
    config: LintConfig,
    lockfile: Mapping[str, Any] | None = None,
    manifest: Mapping[str, Any] | None = None,
) -> list[Finding]:
    """Run a single engine rule.

    Args:
        rule: Which rule to run. Must be one of ``ENGINE_RULES``.
        records: Normalized package records.
        config: The run configuration.
        lockfile: Raw lockfile document, used by sync-check only.
        manifest: Raw package.json document. sync-check yields nothing
            without it.

    Returns:
        The rule's findings, in record order.

    Raises:
        ValueError: If ``rule`` is not an engine rule.
    """
    if rule is RuleId.SYNC_CHECK:
        if manifest is None:
            return []
        return check_sync(records, lockfile or {}, manifest)

    check = _RECORD_RULES.get(rule)
    if check is None:
        raise ValueError(f"{rule.value!r} is not an engine rule")
    return check(records, config)


def run_rules(
    records: Records,
    config: LintConfig,
    lockfile: Mapping[str, Any] | None = None,
    manifest: Mapping[str, Any] | None = None,
) -> list[Finding]:
    """Run every engine rule in ``ENGINE_RULES`` order.

    Returns:
        Concatenated findings of all rules.
    """
    findings: list[Finding] = []
    for rule in ENGINE_RULES:
        produced = evaluate(rule, records, config, lockfile=lockfile, manifest=manifest)
        logger.debug("Rule %s produced %d finding(s)", rule.value, len(produced))
        findings.extend(produced)
    return findings
