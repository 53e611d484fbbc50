"""Data models for lockfile_lint records, findings, configuration and reports.

This module defines the core dataclasses and enumerations used throughout
the lockfile_lint package. Every value here is immutable once built; a lint
run creates fresh instances from parsed input and never mutates them.

Classes:
    Severity: Enumeration of finding severity levels (error, warning, info)
    RuleId: Enumeration of rule identifiers a finding can carry
    PackageRecord: One resolved dependency occurrence from a lockfile
    Finding: A single observation produced by a rule
    LintConfig: Caller-supplied options for one lint run
    LintReport: Aggregated findings plus summary counts
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from lockfile_lint.exceptions import ConfigError

# Registry prefixes that are always trusted, in addition to any configured ones
OFFICIAL_REGISTRIES: tuple[str, ...] = (
    "https://registry.npmjs.org/",
    "https://registry.yarnpkg.com/",
)

DEFAULT_LOOKALIKE_THRESHOLD: int = 85


class Severity(str, Enum):
    """Severity levels for lint findings.

    - ERROR: Fails the run
    - WARNING: Worth fixing; becomes an error in strict mode
    - INFO: Advisory only, never escalated
    """

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    def __lt__(self, other: object) -> bool:
        """Enable ordering of severity levels from most to least severe."""
        if not isinstance(other, Severity):
            return NotImplemented
        return _SEVERITY_ORDER.index(self) > _SEVERITY_ORDER.index(other)

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self == other or self < other

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return _SEVERITY_ORDER.index(self) < _SEVERITY_ORDER.index(other)

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self == other or self > other

    @property
    def rich_style(self) -> str:
        """Return a Rich markup style string for this severity level."""
        styles: dict[Severity, str] = {
            Severity.ERROR: "bold red",
            Severity.WARNING: "yellow",
            Severity.INFO: "green",
        }
        return styles.get(self, "white")


_SEVERITY_ORDER: list[Severity] = [Severity.ERROR, Severity.WARNING, Severity.INFO]


class RuleId(str, Enum):
    """Identifiers carried by findings.

    The first six are the engine rules. LOCKFILE_VERSION is an advisory
    emitted by the linter itself, outside the rule engine.
    """

    REGISTRY_URL = "registry-url"
    GIT_PROTOCOL = "git-protocol"
    HTTPS_ONLY = "https-only"
    INTEGRITY = "integrity"
    NO_FILE_REFS = "no-file-refs"
    SYNC_CHECK = "sync-check"
    LOCKFILE_VERSION = "lockfile-version"

    @property
    def description(self) -> str:
        """Return a one-line description of what the rule checks."""
        return _RULE_DESCRIPTIONS[self]


_RULE_DESCRIPTIONS: dict[RuleId, str] = {
    RuleId.REGISTRY_URL: "All resolved URLs use an official npm registry",
    RuleId.GIT_PROTOCOL: "No git:// protocol (use https:// instead)",
    RuleId.HTTPS_ONLY: "All URLs use HTTPS",
    RuleId.INTEGRITY: "All packages have integrity hashes",
    RuleId.NO_FILE_REFS: "No file: protocol references to local paths",
    RuleId.SYNC_CHECK: "Lockfile synced with package.json",
    RuleId.LOCKFILE_VERSION: "Lockfile uses a current format version",
}


@dataclass(frozen=True)
class PackageRecord:
    """One resolved dependency occurrence from a lockfile.

    The same package can appear several times at different depths of the
    tree; each occurrence gets its own key.

    Attributes:
        key: Nesting path such as ``node_modules/foo/node_modules/bar``
        version: Declared version string, not validated
        resolved_url: Where the artifact is fetched from, if recorded
        integrity: The integrity digest, if recorded
        is_link: True for workspace or symlinked entries
        is_dev: True for development-only dependencies
    """

    key: str
    version: str | None = None
    resolved_url: str | None = None
    integrity: str | None = None
    is_link: bool = False
    is_dev: bool = False


@dataclass(frozen=True)
class Finding:
    """A single observation produced by a lint rule.

    Attributes:
        severity: How severe the finding is
        rule: The rule that produced it
        message: Human-readable description
        package: Key of the offending package record, when there is one
        details: Supplementary text such as the offending URL
        metadata: Optional structured extras for machine consumers
    """

    severity: Severity
    rule: RuleId
    message: str
    package: str | None = None
    details: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> dict[str, Any]:
        """Serialize this finding to a JSON-serializable dictionary.

        Optional fields are omitted when unset.
        """
        data: dict[str, Any] = {
            "severity": self.severity.value,
            "rule": self.rule.value,
            "message": self.message,
        }
        if self.package is not None:
            data["package"] = self.package
        if self.details is not None:
            data["details"] = self.details
        if self.metadata:
            data["metadata"] = dict(self.metadata)
        return data


@dataclass(frozen=True)
class LintConfig:
    """Options for one lint run.

    Attributes:
        allowed_registries: Extra registry URL prefixes to trust
        allow_git: Permit git:// and git+ssh:// dependencies
        allow_github: Permit direct GitHub references
        strict: Escalate warnings to errors
        lookalike_threshold: Similarity score (0-100) at which an unofficial
            registry host is reported as resembling an official one
    """

    allowed_registries: tuple[str, ...] = ()
    allow_git: bool = False
    allow_github: bool = False
    strict: bool = False
    lookalike_threshold: int = DEFAULT_LOOKALIKE_THRESHOLD

    def __post_init__(self) -> None:
        if not (0 <= self.lookalike_threshold <= 100):
            raise ConfigError(
                f"lookalike_threshold must be between 0 and 100, "
                f"got {self.lookalike_threshold}"
            )
        registries = tuple(r for r in self.allowed_registries if r)
        object.__setattr__(self, "allowed_registries", registries)

    @property
    def trusted_registries(self) -> tuple[str, ...]:
        """Return official registries followed by the configured ones."""
        return OFFICIAL_REGISTRIES + self.allowed_registries

    @classmethod
    def from_options(
        cls,
        allowed_registries: list[str] | tuple[str, ...] | None = None,
        allow_git: bool = False,
        allow_github: bool = False,
        strict: bool = False,
        lookalike_threshold: int | None = None,
    ) -> LintConfig:
        """Build a LintConfig from loosely typed CLI-style options.

        Raises:
            ConfigError: If ``lookalike_threshold`` is out of range.
        """
        return cls(
            allowed_registries=tuple(allowed_registries or ()),
            allow_git=bool(allow_git),
            allow_github=bool(allow_github),
            strict=bool(strict),
            lookalike_threshold=(
                DEFAULT_LOOKALIKE_THRESHOLD
                if lookalike_threshold is None
                else lookalike_threshold
            ),
        )


@dataclass(frozen=True)
class LintReport:
    """Aggregated result of a full lint run.

    Attributes:
        findings: All findings in emission order, after strict escalation
        lockfile_path: The lockfile that was checked, if read from disk
        lockfile_version: The effective lockfileVersion (defaults to 1)
        package_count: Number of normalized package records
    """

    findings: tuple[Finding, ...] = ()
    lockfile_path: Path | None = None
    lockfile_version: int = 1
    package_count: int = 0

    def _count(self, severity: Severity) -> int:
        return sum(1 for f in self.findings if f.severity == severity)

    @property
    def total(self) -> int:
        """Return the total number of findings."""
        return len(self.findings)

    @property
    def errors(self) -> int:
        return self._count(Severity.ERROR)

    @property
    def warnings(self) -> int:
        return self._count(Severity.WARNING)

    @property
    def info(self) -> int:
        return self._count(Severity.INFO)

    @property
    def passed(self) -> bool:
        """Return True when the run produced no error findings."""
        return self.errors == 0

    @property
    def severity_counts(self) -> dict[str, int]:
        """Return a mapping of severity value to finding count."""
        return {sev.value: self._count(sev) for sev in _SEVERITY_ORDER}

    def findings_by_rule(self) -> dict[RuleId, list[Finding]]:
        """Group findings by rule, keeping first-appearance order."""
        grouped: dict[RuleId, list[Finding]] = {}
        for finding in self.findings:
            grouped.setdefault(finding.rule, []).append(finding)
        return grouped

    def exit_code(self, ci: bool = False) -> int:
        """Compute the process exit code.

        Args:
            ci: When True a failed run maps to exit code 1.

        Returns:
            1 if ``ci`` is set and the run did not pass, else 0.
        """
        return 1 if ci and not self.passed else 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize this report to a JSON-serializable dictionary."""
        return {
            "lockfile_path": str(self.lockfile_path) if self.lockfile_path else None,
            "lockfile_version": self.lockfile_version,
            "package_count": self.package_count,
            "findings": [f.to_dict() for f in self.findings],
            "summary": {
                "total": self.total,
                "errors": self.errors,
                "warnings": self.warnings,
                "info": self.info,
                "passed": self.passed,
            },
        }
