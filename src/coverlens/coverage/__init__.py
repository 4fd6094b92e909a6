"""Line coverage and coverage tree projections of a report.

Usage:
    from coverlens.coverage import CoverageProvider

    provider = CoverageProvider()
    provider.subscribe(refresh_views)
    provider.on_tests_finished(report)

    file_coverage = await provider.get_file_coverage("/src/Foo.cs")
    tree = await provider.get_coverage_tree()
"""

from coverlens.coverage.lines import compute_file_coverage
from coverlens.coverage.models import (
    UNBOUNDED,
    CodeItemKind,
    CoverageNode,
    CoverageState,
    FileCoverage,
    LineCoverage,
    LineSection,
)
from coverlens.coverage.provider import CoverageListener, CoverageProvider, ReportSource
from coverlens.coverage.signature import MethodSignature, parse_method_name
from coverlens.coverage.tree import build_coverage_tree

__all__ = [
    # Models
    "UNBOUNDED",
    "CodeItemKind",
    "CoverageNode",
    "CoverageState",
    "FileCoverage",
    "LineCoverage",
    "LineSection",
    # Signatures
    "MethodSignature",
    "parse_method_name",
    # Projections
    "build_coverage_tree",
    "compute_file_coverage",
    # Provider
    "CoverageListener",
    "CoverageProvider",
    "ReportSource",
]
