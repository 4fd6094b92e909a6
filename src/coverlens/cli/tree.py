"""coverlens tree command - coverage tree of a report."""

import asyncio
import json
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from coverlens.cli.utils import open_provider
from coverlens.coverage.models import CodeItemKind, CoverageNode


@click.command()
@click.argument("report", type=click.Path(exists=True, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def tree_command(ctx: click.Context, report: Path, as_json: bool) -> None:
    """Show the solution/project/namespace/class/method tree of REPORT.

    REPORT is an OpenCover XML file or a directory containing one.
    """
    with open_provider(ctx, report) as provider:
        root = asyncio.run(provider.get_coverage_tree())

    if root is None:
        raise click.ClickException("No coverage report loaded")

    if as_json:
        click.echo(json.dumps(root.to_dict(), indent=2))
        return

    Console().print(_make_rich_tree(root))


def _label(node: CoverageNode) -> str:
    name = escape(node.name) if node.name is not None else "Solution"
    label = f"[bold]{name}[/bold]" if node.kind is not CodeItemKind.METHOD else name
    if node.summary is not None and node.summary.num_sequence_points:
        label += f" [dim]{node.summary.sequence_coverage:.1f}%[/dim]"
    return label


def _make_rich_tree(root: CoverageNode) -> Tree:
    tree = Tree(_label(root))
    stack: list[tuple[CoverageNode, Tree]] = [(root, tree)]
    while stack:
        node, branch = stack.pop()
        for child in node.children:
            stack.append((child, branch.add(_label(child))))
    return tree
