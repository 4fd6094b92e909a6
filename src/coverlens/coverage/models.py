"""Derived coverage views.

Two projections of a Report:
- FileCoverage: per-line annotations for one source file (editor gutter)
- CoverageNode: Solution -> Project -> Namespace -> Class -> Method tree
  (coverage explorer)

Line numbers in FileCoverage are zero-based.
"""

from __future__ import annotations

import sys
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from coverlens.report.models import Summary

# End column of a section that runs to the end of its line
UNBOUNDED = sys.maxsize


class CoverageState(Enum):
    """Tri-state coverage of a group of signals."""

    COVERED = "covered"
    UNCOVERED = "uncovered"
    MIXED = "mixed"

    @classmethod
    def classify(cls, flags: Iterable[bool]) -> CoverageState:
        """All true -> COVERED, all false -> UNCOVERED, otherwise MIXED.

        An empty group is COVERED.
        """
        values = list(flags)
        if all(values):
            return cls.COVERED
        if not any(values):
            return cls.UNCOVERED
        return cls.MIXED


@dataclass(frozen=True, slots=True)
class LineSection:
    """Column range on a single line. ``end == UNBOUNDED`` means end of line."""

    start: int
    end: int


@dataclass(frozen=True, slots=True)
class LineCoverage:
    visit_count: int
    sequence_state: CoverageState
    branch_state: CoverageState
    # One tuple per decision site, ordered by path index
    branches_visited: tuple[tuple[bool, ...], ...] = ()
    unvisited_sections: tuple[LineSection, ...] = ()


@dataclass(frozen=True, slots=True)
class FileCoverage:
    """Line coverage for one file, keyed by zero-based line number."""

    lines: Mapping[int, LineCoverage] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> FileCoverage:
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def get(self, line: int) -> LineCoverage | None:
        return self.lines.get(line)

    def __contains__(self, line: object) -> bool:
        return line in self.lines

    def __len__(self) -> int:
        return len(self.lines)

    @property
    def uncovered_lines(self) -> list[int]:
        """Sorted lines whose sequence points were never visited."""
        return sorted(
            line for line, cov in self.lines.items() if cov.sequence_state is CoverageState.UNCOVERED
        )

    @property
    def partial_lines(self) -> list[int]:
        """Sorted lines with mixed sequence or branch coverage."""
        return sorted(
            line
            for line, cov in self.lines.items()
            if CoverageState.MIXED in (cov.sequence_state, cov.branch_state)
        )


class CodeItemKind(Enum):
    SOLUTION = "solution"
    PROJECT = "project"
    NAMESPACE = "namespace"
    CLASS = "class"
    METHOD = "method"


@dataclass(eq=True)
class CoverageNode:
    """Node of the coverage tree.

    Constructing a node with a parent appends it to ``parent.children``; the
    parent owns its children. Equality is structural and ignores the parent
    back-link, so two trees built from the same report compare equal.
    """

    kind: CodeItemKind
    name: str | None
    parent: CoverageNode | None = field(default=None, repr=False, compare=False)
    source_file: str | None = None
    source_line: int | None = None
    summary: Summary | None = None
    children: list[CoverageNode] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        if self.parent is not None:
            self.parent.children.append(self)

    @property
    def path(self) -> str:
        """Dotted path of the named ancestors and this node."""
        names: list[str] = []
        node: CoverageNode | None = self
        while node is not None:
            if node.name is not None:
                names.append(node.name)
            node = node.parent
        return ".".join(reversed(names))

    def walk(self) -> Iterator[CoverageNode]:
        """Pre-order traversal, this node first."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find(self, path: str) -> CoverageNode | None:
        """First descendant (or self) whose ``path`` equals ``path``."""
        for node in self.walk():
            if node.path == path:
                return node
        return None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "kind": self.kind.value,
            "name": self.name,
        }
        if self.source_file is not None:
            result["source_file"] = self.source_file
            result["source_line"] = self.source_line
        if self.summary is not None:
            result["sequence_coverage"] = self.summary.sequence_coverage
            result["branch_coverage"] = self.summary.branch_coverage
            result["visited_sequence_points"] = self.summary.visited_sequence_points
            result["num_sequence_points"] = self.summary.num_sequence_points
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result
