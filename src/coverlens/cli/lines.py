"""coverlens lines command - per-line coverage of one source file."""

import asyncio
import json
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from coverlens.cli.utils import open_provider
from coverlens.coverage.models import UNBOUNDED, CoverageState, FileCoverage

_STATE_STYLES = {
    CoverageState.COVERED: "green",
    CoverageState.UNCOVERED: "red",
    CoverageState.MIXED: "yellow",
}


@click.command()
@click.argument("report", type=click.Path(exists=True, path_type=Path))
@click.argument("source_file")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def lines_command(ctx: click.Context, report: Path, source_file: str, as_json: bool) -> None:
    """Show line coverage of SOURCE_FILE in REPORT.

    REPORT is an OpenCover XML file or a directory containing one.
    SOURCE_FILE is matched against the report's file paths ignoring case.
    Line numbers are 1-based in the output.
    """
    with open_provider(ctx, report) as provider:
        coverage = asyncio.run(provider.get_file_coverage(source_file))

    if as_json:
        click.echo(json.dumps(file_coverage_to_dict(coverage), indent=2))
        return

    console = Console()
    if coverage.is_empty:
        console.print(f"[yellow]No coverage data[/yellow] for {source_file}")
        return
    console.print(_make_lines_table(coverage))


def file_coverage_to_dict(coverage: FileCoverage) -> dict[str, Any]:
    """JSON-ready form of ``coverage`` with 1-based line numbers."""
    lines = []
    for line in sorted(coverage.lines):
        cov = coverage.lines[line]
        lines.append(
            {
                "line": line + 1,
                "visit_count": cov.visit_count,
                "sequence_state": cov.sequence_state.value,
                "branch_state": cov.branch_state.value,
                "branches": [list(group) for group in cov.branches_visited],
                "unvisited_sections": [
                    [s.start, None if s.end == UNBOUNDED else s.end]
                    for s in cov.unvisited_sections
                ],
            }
        )
    return {
        "lines": lines,
        "uncovered_lines": [line + 1 for line in coverage.uncovered_lines],
        "partial_lines": [line + 1 for line in coverage.partial_lines],
    }


def _make_lines_table(coverage: FileCoverage) -> Table:
    table = Table(box=None, padding=(0, 1), pad_edge=False)
    table.add_column("Line", justify="right")
    table.add_column("Visits", justify="right")
    table.add_column("Sequence")
    table.add_column("Branches")

    for line in sorted(coverage.lines):
        cov = coverage.lines[line]
        branches = " ".join(
            "".join("+" if visited else "-" for visited in group) for group in cov.branches_visited
        )
        seq_style = _STATE_STYLES[cov.sequence_state]
        branch_style = _STATE_STYLES[cov.branch_state]
        table.add_row(
            str(line + 1),
            str(cov.visit_count),
            f"[{seq_style}]{cov.sequence_state.value}[/{seq_style}]",
            f"[{branch_style}]{branches}[/{branch_style}]" if branches else "",
        )
    return table
