"""Exception hierarchy for lockfile_lint.

Only input and configuration problems raise. The rule engine itself is total
over its input and reports everything as findings.
"""

from __future__ import annotations


class LockfileLintError(Exception):
    """Base class for all lockfile_lint errors."""


class LockfileNotFoundError(LockfileLintError, FileNotFoundError):
    """Raised when no package-lock.json can be located for a target."""


class LockfileParseError(LockfileLintError, ValueError):
    """Raised when a lockfile cannot be read or is not a JSON object."""


class ConfigError(LockfileLintError, ValueError):
    """Raised when lint configuration is invalid."""
