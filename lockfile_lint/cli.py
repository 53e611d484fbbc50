"""Command-line entry point for lockfile_lint."""

from __future__ import annotations

import argparse
import logging
import sys

from rich.console import Console

from lockfile_lint import __version__
from lockfile_lint.exceptions import ConfigError, LockfileLintError
from lockfile_lint.linter import Linter
from lockfile_lint.models import LintConfig
from lockfile_lint.renderer import render_report
from lockfile_lint.rules import ENGINE_RULES

_RULES_EPILOG = "rules checked:\n" + "\n".join(
    f"  {rule.value:<14} {rule.description}" for rule in ENGINE_RULES
)


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="lockfile-lint",
        description="Verify package-lock.json integrity and security.",
        epilog=_RULES_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "target",
        nargs="?",
        default=".",
        help="package-lock.json file or directory containing one (default: .)",
    )
    output = parser.add_mutually_exclusive_group()
    output.add_argument(
        "--json",
        dest="output_format",
        action="store_const",
        const="json",
        help="Output results as JSON",
    )
    output.add_argument(
        "--format",
        dest="output_format",
        choices=["text", "json", "compact"],
        help="Output format (default: text)",
    )
    parser.add_argument("--ci", action="store_true", help="Exit with code 1 if any errors found")
    parser.add_argument("--strict", action="store_true", help="Treat warnings as errors")
    parser.add_argument(
        "--allow-registry",
        dest="allowed_registries",
        action="append",
        default=[],
        metavar="URL",
        help="Allow an additional registry URL prefix (repeatable)",
    )
    parser.add_argument("--allow-git", action="store_true", help="Allow git:// and git+ssh:// dependencies")
    parser.add_argument("--allow-github", action="store_true", help="Allow direct GitHub dependencies")
    parser.add_argument(
        "--lookalike-threshold",
        type=int,
        default=None,
        metavar="N",
        help="Similarity (0-100) at which a registry host is reported as a lookalike (default: 85)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show finding details and debug logs")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint. Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = LintConfig.from_options(
            allowed_registries=args.allowed_registries,
            allow_git=args.allow_git,
            allow_github=args.allow_github,
            strict=args.strict,
            lookalike_threshold=args.lookalike_threshold,
        )
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    try:
        report = Linter(config).lint(args.target)
    except LockfileLintError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    render_report(
        report,
        output_format=args.output_format or "text",
        verbose=args.verbose,
        console=Console(highlight=False, no_color=args.no_color),
    )
    return report.exit_code(ci=args.ci)


if __name__ == "__main__":
    raise SystemExit(main())
