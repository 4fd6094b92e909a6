"""CLI utilities."""

from pathlib import Path

import click

from coverlens.config.models import CoverLensConfig
from coverlens.core.errors import ReportError
from coverlens.coverage.provider import CoverageProvider
from coverlens.report.opencover import load_report


def open_provider(ctx: click.Context, report_path: Path) -> CoverageProvider:
    """Load the OpenCover report at ``report_path`` into a fresh provider.

    Raises:
        click.ClickException: If the report cannot be read.
    """
    config: CoverLensConfig = ctx.obj["config"]
    try:
        report = load_report(
            report_path,
            skip_compiler_generated=config.report.skip_compiler_generated,
        )
    except ReportError as e:
        raise click.ClickException(e.message) from e

    provider = CoverageProvider(config=config.provider)
    provider.on_tests_finished(report)
    return provider
