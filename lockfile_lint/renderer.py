"""Rich-based terminal output renderer for lockfile_lint reports.

The renderer produces:
- A header panel showing the lockfile path, format version and package count
- One findings table per rule, in the order rules first reported something,
  most severe findings first
- A summary panel with error/warning/info counts and PASSED / FAILED
- Alternatively, pretty-printed JSON or a single compact line for CI logs

Public API:
    Renderer: Main class implementing all rendering modes
    render_report: Convenience function to render a LintReport to the console
"""

from __future__ import annotations

import json
from typing import Any

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from lockfile_lint.models import Finding, LintReport, RuleId, Severity

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Maximum details length shown in the findings table
_DETAILS_TRUNCATE = 160

_SEVERITY_LABEL: dict[Severity, str] = {
    Severity.ERROR: "ERROR",
    Severity.WARNING: "WARNING",
    Severity.INFO: "INFO",
}

OUTPUT_FORMATS: frozenset[str] = frozenset({"text", "json", "compact"})


class Renderer:
    """Rich-based renderer for LintReport output.

    Attributes:
        console: The Rich Console instance used for output
        verbose: Whether to include finding details in tables

    Example::

        renderer = Renderer(verbose=True)
        renderer.render(report)
    """

    def __init__(
        self,
        console: Console | None = None,
        verbose: bool = False,
        no_color: bool = False,
    ) -> None:
        """Initialise the Renderer.

        Args:
            console: Optional Rich Console instance. When None, a new Console
                is created writing to stdout.
            verbose: When True, show each finding's details text.
            no_color: When True, disable Rich colour and styling.
        """
        self.console: Console = console or Console(
            highlight=False,
            no_color=no_color,
        )
        self.verbose: bool = verbose

    # ------------------------------------------------------------------
    # Primary rendering entry points
    # ------------------------------------------------------------------

    def render(self, report: LintReport) -> None:
        """Render a full LintReport with Rich formatting."""
        self._render_header(report)
        if report.total == 0:
            self.console.print(
                "  [bold green]✅  All checks passed![/bold green]  "
                f"[dim]({report.package_count} package(s) scanned)[/dim]"
            )
            self.console.print()
            return
        self._render_rule_groups(report)
        self._render_summary(report)

    def render_json(self, report: LintReport) -> None:
        """Render a LintReport as pretty-printed JSON with no styling."""
        output = json.dumps(report.to_dict(), indent=2, default=str)
        self.console.print(output, highlight=False, markup=False, soft_wrap=True)

    def render_compact(self, report: LintReport) -> None:
        """Render a one-line summary suitable for CI log output.

        Outputs a single line like:
            [PASS] lockfile-lint: 0 error(s), 1 warning(s), 0 info in 42 package(s)
        """
        status = "PASS" if report.passed else "FAIL"
        style = "bold green" if report.passed else "bold red"
        counts = report.severity_counts
        line = (
            f"[{style}][{status}][/{style}] lockfile-lint: "
            f"{counts['error']} error(s), {counts['warning']} warning(s), "
            f"{counts['info']} info in {report.package_count} package(s)"
        )
        if report.lockfile_path is not None:
            line += f" - {escape(str(report.lockfile_path))}"
        self.console.print(line)

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def _render_header(self, report: LintReport) -> None:
        from lockfile_lint import __version__

        target = (
            escape(str(report.lockfile_path))
            if report.lockfile_path is not None
            else "<document>"
        )
        lines: list[str] = [
            f"[bold]lockfile-lint[/bold] v{__version__} - Lockfile Integrity Audit",
            "",
            f"[dim]Lockfile:[/dim]   [cyan]{target}[/cyan]",
            f"[dim]Format:[/dim]     v{report.lockfile_version}",
            f"[dim]Packages:[/dim]   {report.package_count} package(s) examined",
        ]
        panel = Panel(
            "\n".join(lines),
            title="[bold blue]lockfile-lint[/bold blue]",
            border_style="blue",
            padding=(1, 2),
        )
        self.console.print()
        self.console.print(panel)
        self.console.print()

    def _render_rule_groups(self, report: LintReport) -> None:
        for rule, findings in report.findings_by_rule().items():
            self.console.rule(f"[bold]{rule.value}[/bold]", style="blue")
            self.console.print(f"  [dim]{rule.description}[/dim]")
            self.console.print(self._build_findings_table(rule, findings))
            self.console.print()

    def _build_findings_table(self, rule: RuleId, findings: list[Finding]) -> Table:
        table = Table(
            box=box.ROUNDED,
            show_header=True,
            header_style="bold dim",
            border_style="dim",
            expand=True,
            padding=(0, 1),
        )
        table.add_column("Severity", width=9, no_wrap=True)
        table.add_column("Package", min_width=20)
        table.add_column("Message", min_width=30)
        if self.verbose:
            table.add_column("Details", min_width=30)

        for finding in sorted(findings, key=lambda f: f.severity, reverse=True):
            row: list[Any] = [
                self._severity_badge(finding.severity),
                Text(finding.package or "-", style="cyan"),
                Text(finding.message),
            ]
            if self.verbose:
                row.append(
                    Text(_truncate(finding.details or "", _DETAILS_TRUNCATE), style="dim")
                )
            table.add_row(*row)
        return table

    def _render_summary(self, report: LintReport) -> None:
        self.console.rule("[bold]Summary[/bold]", style="blue")
        self.console.print()

        counts = (
            f"  [red]Errors: {report.errors}[/red]  "
            f"[yellow]Warnings: {report.warnings}[/yellow]  "
            f"[green]Info: {report.info}[/green]"
        )
        if report.passed:
            status = "[bold green]✅  PASSED[/bold green] (no errors)"
            border_style = "green"
        else:
            status = f"[bold red]❌  FAILED[/bold red] ({report.errors} error(s))"
            border_style = "red"

        panel = Panel(
            f"  [dim]Packages checked:[/dim] {report.package_count}\n\n"
            f"{counts}\n\n"
            f"  Status: {status}",
            title="[bold]Results[/bold]",
            border_style=border_style,
            padding=(1, 2),
        )
        self.console.print(panel)
        self.console.print()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _severity_badge(severity: Severity) -> Text:
        return Text(_SEVERITY_LABEL[severity], style=severity.rich_style, no_wrap=True)


def _truncate(text: str, max_chars: int) -> str:
    """Truncate a string to a maximum length, appending '…' if truncated."""
    if len(text) <= max_chars:
        return text
    return text[:max_chars].rstrip() + "…"


# ---------------------------------------------------------------------------
# Convenience function
# ---------------------------------------------------------------------------


def render_report(
    report: LintReport,
    output_format: str = "text",
    verbose: bool = False,
    console: Console | None = None,
    no_color: bool = False,
) -> None:
    """Render a LintReport in the requested format.

    Args:
        report: The LintReport to render.
        output_format: One of 'text', 'json', or 'compact'. Defaults to 'text'.
        verbose: Show finding details in 'text' mode.
        console: Optional Rich Console instance to use.
        no_color: When True, disable Rich styling.

    Raises:
        ValueError: If output_format is not one of the accepted values.
    """
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(
            f"output_format must be one of {sorted(OUTPUT_FORMATS)}, "
            f"got '{output_format}'"
        )

    renderer = Renderer(console=console, verbose=verbose, no_color=no_color)
    if output_format == "json":
        renderer.render_json(report)
    elif output_format == "compact":
        renderer.render_compact(report)
    else:
        renderer.render(report)
