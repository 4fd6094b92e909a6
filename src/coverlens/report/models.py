"""Raw coverage report model.

Mirrors what the instrumentation tool writes: modules own classes and a
file table, classes own methods, methods own sequence and branch points.
Every record is frozen and every collection is a tuple, so a Report handed
to the provider is a snapshot that readers can share across threads.

Line numbers are 1-based, as the instrumentation tool emits them.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Summary:
    """Pre-aggregated visit counts for a method (or any group of methods)."""

    num_sequence_points: int = 0
    visited_sequence_points: int = 0
    num_branch_points: int = 0
    visited_branch_points: int = 0
    sequence_coverage: float = 0.0
    branch_coverage: float = 0.0
    max_cyclomatic_complexity: int = 0
    min_cyclomatic_complexity: int = 0
    num_classes: int = 0
    visited_classes: int = 0
    num_methods: int = 0
    visited_methods: int = 0

    @classmethod
    def aggregate(cls, summaries: Iterable[Summary]) -> Summary:
        """Combine summaries: counts add up, percentages are recomputed.

        Complexity bounds take the max of the maxima and the min of the
        minima. An empty input yields an empty Summary.
        """
        items = list(summaries)
        if not items:
            return cls()

        num_seq = sum(s.num_sequence_points for s in items)
        visited_seq = sum(s.visited_sequence_points for s in items)
        num_branch = sum(s.num_branch_points for s in items)
        visited_branch = sum(s.visited_branch_points for s in items)

        return cls(
            num_sequence_points=num_seq,
            visited_sequence_points=visited_seq,
            num_branch_points=num_branch,
            visited_branch_points=visited_branch,
            sequence_coverage=_percent(visited_seq, num_seq),
            branch_coverage=_percent(visited_branch, num_branch),
            max_cyclomatic_complexity=max(s.max_cyclomatic_complexity for s in items),
            min_cyclomatic_complexity=min(s.min_cyclomatic_complexity for s in items),
            num_classes=sum(s.num_classes for s in items),
            visited_classes=sum(s.visited_classes for s in items),
            num_methods=sum(s.num_methods for s in items),
            visited_methods=sum(s.visited_methods for s in items),
        )


def _percent(hit: int, total: int) -> float:
    if total == 0:
        return 0.0
    return round(hit / total * 100.0, 2)


@dataclass(frozen=True, slots=True)
class SequencePoint:
    """Source range with a visit count. May span several lines."""

    start_line: int
    start_column: int
    end_line: int
    end_column: int
    visit_count: int


@dataclass(frozen=True, slots=True)
class BranchPoint:
    """One outcome path of the decision site identified by ``offset``."""

    line: int
    offset: int
    path: int
    visit_count: int


@dataclass(frozen=True, slots=True)
class MethodReport:
    name: str  # mangled signature, e.g. "System.Void Ns.Type::Method(System.Int32)"
    file_id: int | None = None
    sequence_points: tuple[SequencePoint, ...] = ()
    branch_points: tuple[BranchPoint, ...] = ()
    summary: Summary | None = None


@dataclass(frozen=True, slots=True)
class ClassReport:
    full_name: str  # dot- or slash-delimited
    methods: tuple[MethodReport, ...] = ()


@dataclass(frozen=True, slots=True)
class FileRecord:
    id: int
    full_path: str


@dataclass(frozen=True, slots=True)
class Module:
    name: str
    classes: tuple[ClassReport, ...] = ()
    files: tuple[FileRecord, ...] = ()

    def find_file(self, path: str) -> FileRecord | None:
        """First file whose full path equals ``path``, ignoring case."""
        wanted = path.casefold()
        for record in self.files:
            if record.full_path.casefold() == wanted:
                return record
        return None

    def file_path(self, file_id: int | None) -> str | None:
        """Full path of the file with ``file_id``, or None if unknown."""
        if file_id is None:
            return None
        for record in self.files:
            if record.id == file_id:
                return record.full_path
        return None


@dataclass(frozen=True, slots=True)
class Report:
    """A complete coverage session: the ordered modules of one test run."""

    modules: tuple[Module, ...] = ()
