"""Tests for coverage/tree.py - coverage tree construction."""

from __future__ import annotations

from coverlens.coverage.models import CodeItemKind, CoverageNode
from coverlens.coverage.tree import _PathIndex, build_coverage_tree
from coverlens.report.models import (
    ClassReport,
    FileRecord,
    MethodReport,
    Module,
    Report,
    SequencePoint,
    Summary,
)


def _point(line: int, visit_count: int = 1) -> SequencePoint:
    return SequencePoint(
        start_line=line, start_column=1, end_line=line, end_column=5, visit_count=visit_count
    )


def _method(
    name: str,
    line: int = 1,
    *,
    file_id: int | None = 1,
    summary: Summary | None = None,
    points: tuple[SequencePoint, ...] | None = None,
) -> MethodReport:
    return MethodReport(
        name=name,
        file_id=file_id,
        sequence_points=(_point(line),) if points is None else points,
        summary=summary,
    )


def _module(name: str, *classes: ClassReport) -> Module:
    return Module(
        name=name,
        classes=classes,
        files=(FileRecord(id=1, full_path="/src/Foo.cs"),),
    )


def _kinds_and_names(node: CoverageNode) -> list[tuple[CodeItemKind, str | None]]:
    return [(n.kind, n.name) for n in node.walk()]


class TestRoot:
    def test_no_report_returns_none(self) -> None:
        assert build_coverage_tree(None) is None

    def test_empty_report_returns_childless_solution(self) -> None:
        root = build_coverage_tree(Report())
        assert root is not None
        assert root.kind is CodeItemKind.SOLUTION
        assert root.name is None
        assert root.parent is None
        assert root.children == []


class TestExampleScenario:
    def test_single_method_hierarchy(self) -> None:
        report = Report(
            modules=(
                _module(
                    "M",
                    ClassReport("Foo.Bar", (_method("System.Void Foo.Bar::Baz(System.Int32)", 10),)),
                ),
            )
        )

        root = build_coverage_tree(report)

        assert root is not None
        assert _kinds_and_names(root) == [
            (CodeItemKind.SOLUTION, None),
            (CodeItemKind.PROJECT, "M"),
            (CodeItemKind.NAMESPACE, "Foo"),
            (CodeItemKind.CLASS, "Bar"),
            (CodeItemKind.METHOD, "Baz(System.Int32) : System.Void"),
        ]
        cls = root.find("M.Foo.Bar")
        assert cls is not None
        assert cls.kind is CodeItemKind.CLASS
        method = cls.children[0]
        assert method.source_file == "/src/Foo.cs"
        assert method.source_line == 10
        assert method.parent is cls


class TestPathInterning:
    def test_sibling_classes_share_namespaces(self) -> None:
        report = Report(
            modules=(
                _module(
                    "M",
                    ClassReport("A.B.C", (_method("System.Void A.B.C::Run()"),)),
                    ClassReport("A.B.D", (_method("System.Void A.B.D::Run()"),)),
                ),
            )
        )

        root = build_coverage_tree(report)

        assert root is not None
        project = root.children[0]
        assert [n.name for n in project.children] == ["A"]
        namespace_a = project.children[0]
        assert namespace_a.kind is CodeItemKind.NAMESPACE
        assert [n.name for n in namespace_a.children] == ["B"]
        namespace_ab = namespace_a.children[0]
        assert namespace_ab.kind is CodeItemKind.NAMESPACE
        assert [(n.kind, n.name) for n in namespace_ab.children] == [
            (CodeItemKind.CLASS, "C"),
            (CodeItemKind.CLASS, "D"),
        ]
        namespaces = [n for n in root.walk() if n.kind is CodeItemKind.NAMESPACE]
        assert len(namespaces) == 2

    def test_slash_delimited_nested_class(self) -> None:
        report = Report(
            modules=(
                _module(
                    "M",
                    ClassReport("Ns.Outer/Inner", (_method("System.Int32 Ns.Outer/Inner::Get()"),)),
                ),
            )
        )

        root = build_coverage_tree(report)

        assert root is not None
        inner = root.find("M.Ns.Outer.Inner")
        assert inner is not None
        assert inner.kind is CodeItemKind.CLASS
        assert inner.parent is not None
        assert inner.parent.kind is CodeItemKind.NAMESPACE
        assert inner.parent.name == "Outer"

    def test_outer_class_after_nested_is_promoted(self) -> None:
        report = Report(
            modules=(
                _module(
                    "M",
                    ClassReport("Ns.Outer/Inner", (_method("System.Void Ns.Outer/Inner::A()"),)),
                    ClassReport("Ns.Outer", (_method("System.Void Ns.Outer::B()"),)),
                ),
            )
        )

        root = build_coverage_tree(report)

        assert root is not None
        outer_nodes = [n for n in root.walk() if n.name == "Outer"]
        assert len(outer_nodes) == 1
        outer = outer_nodes[0]
        assert outer.kind is CodeItemKind.CLASS
        assert [(n.kind, n.name) for n in outer.children] == [
            (CodeItemKind.CLASS, "Inner"),
            (CodeItemKind.METHOD, "B() : System.Void"),
        ]

    def test_duplicate_class_entries_share_node(self) -> None:
        report = Report(
            modules=(
                _module(
                    "M",
                    ClassReport("Ns.Foo", (_method("System.Void Ns.Foo::A()"),)),
                    ClassReport("Ns.Foo", (_method("System.Void Ns.Foo::B()"),)),
                ),
            )
        )

        root = build_coverage_tree(report)

        assert root is not None
        foo = root.find("M.Ns.Foo")
        assert foo is not None
        assert [n.name for n in foo.children] == ["A() : System.Void", "B() : System.Void"]

    def test_projects_do_not_share_paths(self) -> None:
        cls = ClassReport("Ns.Foo", (_method("System.Void Ns.Foo::A()"),))
        report = Report(modules=(_module("One", cls), _module("Two", cls)))

        root = build_coverage_tree(report)

        assert root is not None
        assert [n.name for n in root.children] == ["One", "Two"]
        one, two = (root.find("One.Ns.Foo"), root.find("Two.Ns.Foo"))
        assert one is not None and two is not None
        assert one is not two


class TestPathIndex:
    def test_class_ancestors_are_synthesized_as_namespaces(self) -> None:
        project = CoverageNode(kind=CodeItemKind.PROJECT, name="M")
        index = _PathIndex(project)

        cls = index.resolve(CodeItemKind.CLASS, "Ns.Sub.Foo")

        assert cls.kind is CodeItemKind.CLASS
        assert cls.parent is not None
        assert cls.parent.kind is CodeItemKind.NAMESPACE
        assert cls.parent.parent is not None
        assert cls.parent.parent.kind is CodeItemKind.NAMESPACE
        assert cls.parent.parent.parent is project

    def test_repeated_resolution_returns_same_node(self) -> None:
        index = _PathIndex(CoverageNode(kind=CodeItemKind.PROJECT, name="M"))

        first = index.resolve(CodeItemKind.CLASS, "Ns.Foo")
        second = index.resolve(CodeItemKind.CLASS, "Ns/Foo")

        assert first is second
        assert "Ns" in index
        assert "Ns.Foo" in index


class TestSkipping:
    def test_module_without_classes_is_skipped(self) -> None:
        root = build_coverage_tree(Report(modules=(_module("Empty"),)))
        assert root is not None
        assert root.children == []

    def test_class_without_methods_is_skipped(self) -> None:
        report = Report(
            modules=(
                _module(
                    "M",
                    ClassReport("Ns.Empty", ()),
                    ClassReport("Other.Foo", (_method("System.Void Other.Foo::A()"),)),
                ),
            )
        )

        root = build_coverage_tree(report)

        assert root is not None
        assert root.find("M.Ns") is None
        assert root.find("M.Ns.Empty") is None

    def test_class_without_name_is_skipped(self) -> None:
        report = Report(
            modules=(
                _module(
                    "M",
                    ClassReport("", (_method("System.Void ::Baz()"),)),
                    ClassReport("Ns.Foo", (_method("System.Void Ns.Foo::Run()", 4),)),
                ),
            )
        )

        root = build_coverage_tree(report)

        assert root is not None
        project = root.children[0]
        assert [(c.kind, c.name) for c in project.children] == [(CodeItemKind.NAMESPACE, "Ns")]
        assert project.source_file is None
        assert all(
            n.parent is not None and n.parent.kind is CodeItemKind.CLASS
            for n in root.walk()
            if n.kind is CodeItemKind.METHOD
        )

    def test_module_whose_classes_have_no_methods_is_skipped(self) -> None:
        report = Report(modules=(_module("M", ClassReport("Ns.Empty", ())),))
        root = build_coverage_tree(report)
        assert root is not None
        assert root.children == []

    def test_method_without_sequence_points_is_skipped(self) -> None:
        report = Report(
            modules=(
                _module(
                    "M",
                    ClassReport(
                        "Ns.Foo",
                        (
                            _method("System.Void Ns.Foo::Abstract()", points=()),
                            _method("System.Void Ns.Foo::Real()"),
                        ),
                    ),
                ),
            )
        )

        root = build_coverage_tree(report)

        assert root is not None
        foo = root.find("M.Ns.Foo")
        assert foo is not None
        assert [n.name for n in foo.children] == ["Real() : System.Void"]

    def test_unparsable_only_method_creates_no_class(self) -> None:
        report = Report(
            modules=(_module("M", ClassReport("Ns.Foo", (_method("System.Void Ns.Foo.Run()"),))),)
        )

        root = build_coverage_tree(report)

        assert root is not None
        assert [n.kind for n in root.walk()] == [CodeItemKind.SOLUTION, CodeItemKind.PROJECT]

    def test_unparsable_method_is_dropped_beside_valid_ones(self) -> None:
        report = Report(
            modules=(
                _module(
                    "M",
                    ClassReport(
                        "Ns.Foo",
                        (
                            _method("not a signature"),
                            _method("System.Void Ns.Foo::Ok()"),
                        ),
                    ),
                ),
            )
        )

        root = build_coverage_tree(report)

        assert root is not None
        foo = root.find("M.Ns.Foo")
        assert foo is not None
        assert [n.name for n in foo.children] == ["Ok() : System.Void"]


class TestSourceLocation:
    def test_class_takes_earliest_method_location(self) -> None:
        report = Report(
            modules=(
                _module(
                    "M",
                    ClassReport(
                        "Ns.Foo",
                        (
                            _method("System.Void Ns.Foo::Late()", 40),
                            _method("System.Void Ns.Foo::Early()", 12),
                            _method("System.Void Ns.Foo::Unknown()", 3, file_id=None),
                        ),
                    ),
                ),
            )
        )

        root = build_coverage_tree(report)

        assert root is not None
        foo = root.find("M.Ns.Foo")
        assert foo is not None
        assert foo.source_file == "/src/Foo.cs"
        assert foo.source_line == 12

    def test_class_without_located_methods_has_no_location(self) -> None:
        report = Report(
            modules=(
                _module(
                    "M",
                    ClassReport("Ns.Foo", (_method("System.Void Ns.Foo::A()", 5, file_id=None),)),
                ),
            )
        )

        root = build_coverage_tree(report)

        assert root is not None
        foo = root.find("M.Ns.Foo")
        assert foo is not None
        assert foo.source_file is None
        assert foo.source_line is None
        assert foo.children[0].source_line == 5

    def test_unknown_file_id_has_no_source_file(self) -> None:
        report = Report(
            modules=(
                _module(
                    "M",
                    ClassReport("Ns.Foo", (_method("System.Void Ns.Foo::A()", file_id=99),)),
                ),
            )
        )

        root = build_coverage_tree(report)

        assert root is not None
        foo = root.find("M.Ns.Foo")
        assert foo is not None
        assert foo.children[0].source_file is None


class TestSummaries:
    def test_method_without_summary_gets_empty_summary(self) -> None:
        report = Report(
            modules=(_module("M", ClassReport("Ns.Foo", (_method("System.Void Ns.Foo::A()"),))),)
        )

        root = build_coverage_tree(report)

        assert root is not None
        method = next(n for n in root.walk() if n.kind is CodeItemKind.METHOD)
        assert method.summary == Summary()

    def test_summaries_aggregate_upwards(self) -> None:
        report = Report(
            modules=(
                _module(
                    "M",
                    ClassReport(
                        "Ns.Foo",
                        (
                            _method(
                                "System.Void Ns.Foo::A()",
                                summary=Summary(num_sequence_points=4, visited_sequence_points=3),
                            ),
                            _method(
                                "System.Void Ns.Foo::B()",
                                summary=Summary(num_sequence_points=4, visited_sequence_points=1),
                            ),
                        ),
                    ),
                ),
            )
        )

        root = build_coverage_tree(report)

        assert root is not None
        for path in ("M", "M.Ns", "M.Ns.Foo"):
            node = root.find(path)
            assert node is not None
            assert node.summary is not None
            assert node.summary.num_sequence_points == 8
            assert node.summary.visited_sequence_points == 4
            assert node.summary.sequence_coverage == 50.0
        assert root.summary is not None
        assert root.summary.num_sequence_points == 8


class TestIdempotence:
    def test_rebuilding_yields_equal_trees(self) -> None:
        report = Report(
            modules=(
                _module(
                    "M",
                    ClassReport("A.B.C", (_method("System.Void A.B.C::Run()", 3),)),
                    ClassReport("A.B.D", (_method("System.String A.B.D::Name(System.Int32)", 9),)),
                ),
            )
        )

        first = build_coverage_tree(report)
        second = build_coverage_tree(report)

        assert first is not None and second is not None
        assert first is not second
        assert first == second
        assert first.to_dict() == second.to_dict()
