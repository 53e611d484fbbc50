"""Unit tests for lockfile_lint.lookalike module."""

from __future__ import annotations

import pytest

from lockfile_lint.lookalike import OFFICIAL_HOSTS, LookalikeMatch, RegistryLookalikeDetector


class TestOfficialHosts:
    def test_hosts_derived_from_registries(self) -> None:
        assert OFFICIAL_HOSTS == ("registry.npmjs.org", "registry.yarnpkg.com")


class TestLookalikeMatch:
    def test_to_dict(self) -> None:
        match = LookalikeMatch(candidate="registry.npmjs.com", matched_host="registry.npmjs.org", score=88.888)
        assert match.to_dict() == {
            "candidate": "registry.npmjs.com",
            "matched_host": "registry.npmjs.org",
            "score": 88.89,
        }


class TestRegistryLookalikeDetector:
    """Tests for RegistryLookalikeDetector."""

    def test_default_threshold(self) -> None:
        assert RegistryLookalikeDetector().threshold == 85

    @pytest.mark.parametrize("threshold", [-1, 101])
    def test_invalid_threshold(self, threshold: int) -> None:
        with pytest.raises(ValueError, match="threshold"):
            RegistryLookalikeDetector(threshold=threshold)

    def test_official_host_not_reported(self) -> None:
        detector = RegistryLookalikeDetector()
        assert detector.check_url("https://registry.npmjs.org/foo/-/foo-1.0.0.tgz") is None
        assert detector.check_url("http://REGISTRY.YARNPKG.COM/foo.tgz") is None

    def test_tld_swap_reported(self) -> None:
        match = RegistryLookalikeDetector().check_url("https://registry.npmjs.com/foo.tgz")
        assert match is not None
        assert match.candidate == "registry.npmjs.com"
        assert match.matched_host == "registry.npmjs.org"
        assert match.score >= 85

    def test_embedded_official_host_reported(self) -> None:
        match = RegistryLookalikeDetector().check_url(
            "https://registry.npmjs.org.attacker.io/foo/-/foo-1.0.0.tgz"
        )
        assert match is not None
        assert match.matched_host == "registry.npmjs.org"

    def test_yarn_typo_reported(self) -> None:
        match = RegistryLookalikeDetector().check_host("registry.yarnpkg.co")
        assert match is not None
        assert match.matched_host == "registry.yarnpkg.com"

    def test_unrelated_host_not_reported(self) -> None:
        detector = RegistryLookalikeDetector()
        assert detector.check_url("https://npm.mycompany.com/foo.tgz") is None
        assert detector.check_url("https://evil.example/foo.tgz") is None

    def test_hostless_urls(self) -> None:
        detector = RegistryLookalikeDetector()
        assert detector.check_url("file:../local") is None
        assert detector.check_url("packages/shared") is None
        assert detector.check_url("") is None

    def test_malformed_url(self) -> None:
        assert RegistryLookalikeDetector().check_url("https://[::1/foo") is None

    def test_threshold_zero_matches_everything_unofficial(self) -> None:
        assert RegistryLookalikeDetector(threshold=0).check_host("evil.example") is not None
