"""lockfile_lint - A CLI security tool for auditing npm package-lock.json files.

This package checks a lockfile for supply chain integrity risks:
- Dependencies resolved from unofficial (or lookalike) registries
- Insecure transport (http://, git://, git+ssh://, direct GitHub refs)
- Missing integrity hashes and local file: references
- Drift between package-lock.json and package.json

Public API:
    __version__: Current package version string
    __all__: Exported public symbols

Example usage::

    from lockfile_lint.linter import lint_path
    report = lint_path("./my-project")
    print(report.passed)
"""

__version__ = "0.1.0"
__author__ = "lockfile-lint contributors"
__license__ = "MIT"

__all__ = ["__version__", "__author__", "__license__"]
