"""Test suite for lockfile_lint.

This package contains unit and integration tests for all lockfile_lint modules:
- test_normalizer: v1 tree flattening and v2/v3 packages maps
- test_rules: each engine rule plus the dispatch table
- test_sync: package.json / lockfile drift detection
- test_lookalike: fuzzy registry-host matching
- test_aggregator: strict escalation and summary counts
- test_linter: end-to-end runs against projects written to tmp_path
- test_renderer / test_cli: output formats and exit codes
"""
