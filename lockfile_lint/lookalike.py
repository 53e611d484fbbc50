"""Fuzzy-match detection of registry hosts that imitate the official ones.

A resolved URL pointing at ``registry.npmjs.com`` or ``registry.npmjs.org.evil.io``
is already an unofficial-registry error. This module tells the user *why* it
is suspicious: the host was probably chosen to be mistaken for a real
registry. It uses rapidfuzz to score the URL host against the official
registry hosts.

Public API:
    RegistryLookalikeDetector: Scores URL hosts against the official hosts
    LookalikeMatch: Dataclass representing a single fuzzy match result
    OFFICIAL_HOSTS: Host names of the official registries
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit

from rapidfuzz import fuzz, process, utils as rf_utils

from lockfile_lint.models import DEFAULT_LOOKALIKE_THRESHOLD, OFFICIAL_REGISTRIES

OFFICIAL_HOSTS: tuple[str, ...] = tuple(
    urlsplit(registry).hostname or "" for registry in OFFICIAL_REGISTRIES
)


@dataclass(frozen=True)
class LookalikeMatch:
    """A host that closely resembles an official registry host.

    Attributes:
        candidate: The host taken from the resolved URL
        matched_host: The official registry host it resembles
        score: Similarity score in the range 0-100
    """

    candidate: str
    matched_host: str
    score: float

    def to_dict(self) -> dict[str, Any]:
        """Serialize this match result to a JSON-serializable dictionary."""
        return {
            "candidate": self.candidate,
            "matched_host": self.matched_host,
            "score": round(self.score, 2),
        }


class RegistryLookalikeDetector:
    """Scores resolved-URL hosts against the official registry hosts.

    Example::

        detector = RegistryLookalikeDetector(threshold=85)
        match = detector.check_url("https://registry.npmjs.com/foo/-/foo-1.0.0.tgz")
        print(match.matched_host)  # registry.npmjs.org
    """

    def __init__(
        self,
        threshold: int = DEFAULT_LOOKALIKE_THRESHOLD,
        official_hosts: tuple[str, ...] = OFFICIAL_HOSTS,
    ) -> None:
        """Initialise the detector.

        Args:
            threshold: Similarity score (0-100) at or above which a host is
                reported. Defaults to 85.
            official_hosts: Override the official host list.

        Raises:
            ValueError: If threshold is not in the range 0-100.
        """
        if not (0 <= threshold <= 100):
            raise ValueError(f"threshold must be between 0 and 100, got {threshold}")
        self.threshold: int = threshold
        self.official_hosts: tuple[str, ...] = official_hosts

    def check_url(self, url: str) -> LookalikeMatch | None:
        """Check the host of ``url``.

        Returns:
            A LookalikeMatch when the host resembles, but is not, an official
            host. None for official hosts, unparsable URLs, URLs without a
            host (``file:``, scp-style git refs) and dissimilar hosts.
        """
        host = _url_host(url)
        if not host:
            return None
        return self.check_host(host)

    def check_host(self, host: str) -> LookalikeMatch | None:
        """Check a bare host name against the official hosts."""
        host = host.strip().lower()
        if not host or host in self.official_hosts:
            return None

        best = process.extractOne(
            host,
            self.official_hosts,
            scorer=fuzz.ratio,
            processor=rf_utils.default_process,
        )
        if best is None:
            return None
        best_host: str = best[0]

        # partial_ratio catches hosts that embed an official one
        # (e.g. registry.npmjs.org.attacker.io)
        score = max(float(best[1]), fuzz.partial_ratio(best_host, host))
        if score < self.threshold:
            return None
        return LookalikeMatch(candidate=host, matched_host=best_host, score=score)


def _url_host(url: str) -> str | None:
    try:
        return urlsplit(url).hostname
    except ValueError:
        return None
