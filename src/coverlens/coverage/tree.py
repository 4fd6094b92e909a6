"""Coverage tree construction.

Builds Solution -> Project -> Namespace -> Class -> Method from a Report.
Class names are dotted (``Foo.Bar``) or slash-delimited for nested types
(``Foo.Outer/Inner``); every prefix of such a name becomes a node, interned
per project so that sibling classes share their namespace nodes.
"""

from __future__ import annotations

import re

from coverlens.core.logging import get_logger
from coverlens.coverage.models import CodeItemKind, CoverageNode
from coverlens.coverage.signature import parse_method_name
from coverlens.report.models import ClassReport, Module, Report, Summary

logger = get_logger(__name__)

_PATH_SEPARATORS = re.compile(r"[./]")


class _PathIndex:
    """Dotted path -> node, scoped to one project.

    The empty path maps to the project node, the root every path resolves
    under.
    """

    def __init__(self, project: CoverageNode) -> None:
        self._nodes: dict[str, CoverageNode] = {"": project}

    def __contains__(self, path: str) -> bool:
        return path in self._nodes

    def resolve(self, kind: CodeItemKind, path: str) -> CoverageNode:
        """Return the node for ``path``, creating it and any missing ancestors.

        Missing ancestors are synthesized as Namespace nodes. A path already
        interned as a synthesized Namespace that is now resolved as a Class
        becomes that Class.
        """
        segments = _PATH_SEPARATORS.split(path)
        key = ".".join(segments)

        existing = self._nodes.get(key)
        if existing is not None:
            if kind is CodeItemKind.CLASS and existing.kind is CodeItemKind.NAMESPACE:
                existing.kind = CodeItemKind.CLASS
            return existing

        # Deepest interned ancestor; the loop is bounded by the segment count
        depth = len(segments) - 1
        while ".".join(segments[:depth]) not in self._nodes:
            depth -= 1
        parent = self._nodes[".".join(segments[:depth])]

        for index in range(depth, len(segments)):
            node_kind = kind if index == len(segments) - 1 else CodeItemKind.NAMESPACE
            parent = CoverageNode(kind=node_kind, name=segments[index], parent=parent)
            self._nodes[".".join(segments[: index + 1])] = parent

        return parent


def build_coverage_tree(report: Report | None) -> CoverageNode | None:
    """Build the coverage tree of ``report``.

    Returns:
        The Solution root, or None when no report is loaded. A report without
        modules yields a Solution with no children.
    """
    if report is None:
        return None

    solution = CoverageNode(kind=CodeItemKind.SOLUTION, name=None)
    for module in report.modules:
        if not any(cls.methods for cls in module.classes):
            continue

        project = CoverageNode(kind=CodeItemKind.PROJECT, name=module.name, parent=solution)
        index = _PathIndex(project)
        for cls in module.classes:
            if not cls.full_name:
                # The empty path is the project itself
                logger.debug("class_name_missing", module=module.name)
                continue
            if cls.methods:
                _add_class(index, module, cls)

    _aggregate_summaries(solution)
    logger.debug(
        "coverage_tree_built",
        modules=len(report.modules),
        projects=len(solution.children),
    )
    return solution


def _add_class(index: _PathIndex, module: Module, cls: ClassReport) -> None:
    class_node: CoverageNode | None = None

    for method in cls.methods:
        if not method.sequence_points:
            continue

        signature = parse_method_name(method.name)
        if signature is None:
            logger.debug("method_name_unparsable", method=method.name, cls=cls.full_name)
            continue

        # Created lazily: a class none of whose methods parse stays out of the tree
        if class_node is None:
            class_node = index.resolve(CodeItemKind.CLASS, cls.full_name)

        CoverageNode(
            kind=CodeItemKind.METHOD,
            name=signature.display_name,
            parent=class_node,
            source_file=module.file_path(method.file_id),
            source_line=method.sequence_points[0].start_line,
            summary=method.summary or Summary(),
        )

    if class_node is not None:
        _locate_class(class_node)


def _locate_class(class_node: CoverageNode) -> None:
    """Give the class the earliest source location among its methods."""
    located = [
        child
        for child in class_node.children
        if child.kind is CodeItemKind.METHOD and child.source_file is not None
    ]
    if not located:
        return
    first = min(located, key=lambda child: child.source_line or 0)
    class_node.source_file = first.source_file
    class_node.source_line = first.source_line


def _aggregate_summaries(node: CoverageNode) -> Summary:
    if node.kind is CodeItemKind.METHOD:
        return node.summary or Summary()
    node.summary = Summary.aggregate(_aggregate_summaries(child) for child in node.children)
    return node.summary
