"""Per-line coverage for a single source file.

Several sequence points can touch the same line (a statement ending where
the next begins, a lambda inside a call, a multi-line point) and several
branch points can sit on it. They are folded into one LineCoverage per line:

- visit count: max over the sequence points touching the line
- sequence state: tri-state over "visit count > 0" of those points
- unvisited sections: column ranges of the zero-visit points
- branches: one boolean tuple per decision site (branch offset), ordered by
  path index; the branch state is tri-state over all of them

A line carrying only branch points, or only sequence points, classifies the
missing group as an empty one (COVERED, visit count 0).
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass

from coverlens.core.errors import InvalidArgumentError
from coverlens.core.logging import get_logger
from coverlens.coverage.models import (
    UNBOUNDED,
    CoverageState,
    FileCoverage,
    LineCoverage,
    LineSection,
)
from coverlens.report.models import BranchPoint, MethodReport, Module, Report

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class _LineEntry:
    """Slice of one sequence point on one line."""

    visit_count: int
    start: int
    end: int


def compute_file_coverage(report: Report | None, file_path: str | None) -> FileCoverage:
    """Fold every sequence and branch point of ``file_path`` into line coverage.

    Args:
        report: Report to read. None means no report is loaded.
        file_path: Absolute path of the source file, matched ignoring case.

    Returns:
        FileCoverage keyed by zero-based line; empty when there is no report
        or no module lists the file.

    Raises:
        InvalidArgumentError: If ``file_path`` is None.
    """
    if file_path is None:
        raise InvalidArgumentError.missing("file_path")

    if report is None:
        return FileCoverage.empty()

    for module in report.modules:
        record = module.find_file(file_path)
        if record is None:
            continue

        # Only the first module listing the file is used
        methods = _methods_in_file(module, record.id)
        sequence_groups = _group_sequence_points(methods)
        branch_groups = _group_branch_points(methods)

        lines: dict[int, LineCoverage] = {}
        for line in sequence_groups.keys() | branch_groups.keys():
            lines[line] = _line_coverage(
                sequence_groups.get(line, []),
                branch_groups.get(line, []),
            )

        logger.debug(
            "file_coverage_computed",
            file=record.full_path,
            module=module.name,
            methods=len(methods),
            lines=len(lines),
        )
        return FileCoverage(lines=lines)

    return FileCoverage.empty()


def _methods_in_file(module: Module, file_id: int) -> list[MethodReport]:
    return [
        method
        for cls in module.classes
        for method in cls.methods
        if method.file_id is not None and method.file_id == file_id
    ]


def _group_sequence_points(methods: list[MethodReport]) -> dict[int, list[_LineEntry]]:
    groups: dict[int, list[_LineEntry]] = defaultdict(list)
    for method in methods:
        for point in method.sequence_points:
            for line in range(point.start_line, point.end_line + 1):
                groups[line - 1].append(
                    _LineEntry(
                        visit_count=point.visit_count,
                        start=point.start_column if line == point.start_line else 0,
                        end=point.end_column if line == point.end_line else UNBOUNDED,
                    )
                )
    return groups


def _group_branch_points(methods: list[MethodReport]) -> dict[int, list[BranchPoint]]:
    groups: dict[int, list[BranchPoint]] = defaultdict(list)
    for method in methods:
        for point in method.branch_points:
            groups[point.line - 1].append(point)
    return groups


def _line_coverage(entries: list[_LineEntry], branches: list[BranchPoint]) -> LineCoverage:
    visit_count = max((entry.visit_count for entry in entries), default=0)
    sequence_state = CoverageState.classify(entry.visit_count > 0 for entry in entries)
    unvisited = tuple(
        LineSection(entry.start, entry.end) for entry in entries if entry.visit_count == 0
    )

    # dict preserves first-seen offset order
    by_offset: dict[int, list[BranchPoint]] = defaultdict(list)
    for point in branches:
        by_offset[point.offset].append(point)
    branches_visited = tuple(
        tuple(point.visit_count > 0 for point in sorted(group, key=lambda p: p.path))
        for group in by_offset.values()
    )
    branch_state = CoverageState.classify(
        visited for group in branches_visited for visited in group
    )

    return LineCoverage(
        visit_count=visit_count,
        sequence_state=sequence_state,
        branch_state=branch_state,
        branches_visited=branches_visited,
        unvisited_sections=unvisited,
    )
