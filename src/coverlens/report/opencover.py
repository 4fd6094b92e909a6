r"""OpenCover XML reader.

OpenCover (and coverlet with ``--format opencover``) writes one XML document
per test run. Unlike a file-centric format it keeps the full
module/class/method hierarchy, which is what the tree view is built from.

Structure:
<CoverageSession>
  <Modules>
    <Module>
      <ModuleName>MyAssembly</ModuleName>
      <Files>
        <File uid="1" fullPath="C:\src\Foo.cs"/>
      </Files>
      <Classes>
        <Class>
          <FullName>MyNamespace.MyClass</FullName>
          <Methods>
            <Method>
              <Summary numSequencePoints="2" visitedSequencePoints="1" .../>
              <Name>System.Void MyNamespace.MyClass::MyMethod()</Name>
              <FileRef uid="1"/>
              <SequencePoints>
                <SequencePoint vc="5" sl="10" el="12" sc="9" ec="10" fileid="1"/>
              </SequencePoints>
              <BranchPoints>
                <BranchPoint vc="3" sl="11" path="0" offset="1" fileid="1"/>
              </BranchPoints>
            </Method>
          </Methods>
        </Class>
      </Classes>
    </Module>
  </Modules>
</CoverageSession>

vc = visit count, sl = start line, el = end line, sc = start column, ec = end column
"""

import xml.etree.ElementTree as ET
from pathlib import Path

from coverlens.core.errors import ReportError
from coverlens.core.logging import get_logger
from coverlens.report.models import (
    BranchPoint,
    ClassReport,
    FileRecord,
    MethodReport,
    Module,
    Report,
    SequencePoint,
    Summary,
)

logger = get_logger(__name__)

_CANDIDATE_NAMES = ("coverage.opencover.xml", "opencover.xml", "coverage.xml")

# XML attribute -> Summary field
_SUMMARY_INT_ATTRS = {
    "numSequencePoints": "num_sequence_points",
    "visitedSequencePoints": "visited_sequence_points",
    "numBranchPoints": "num_branch_points",
    "visitedBranchPoints": "visited_branch_points",
    "maxCyclomaticComplexity": "max_cyclomatic_complexity",
    "minCyclomaticComplexity": "min_cyclomatic_complexity",
    "numClasses": "num_classes",
    "visitedClasses": "visited_classes",
    "numMethods": "num_methods",
    "visitedMethods": "visited_methods",
}
_SUMMARY_FLOAT_ATTRS = {
    "sequenceCoverage": "sequence_coverage",
    "branchCoverage": "branch_coverage",
}


class OpencoverReader:
    """Reader for OpenCover XML coverage sessions."""

    def __init__(self, *, skip_compiler_generated: bool = False) -> None:
        self.skip_compiler_generated = skip_compiler_generated

    def can_parse(self, path: Path) -> bool:
        """Check if path contains OpenCover coverage data."""
        if path.is_dir():
            for name in _CANDIDATE_NAMES:
                if (path / name).exists():
                    return True
            # Coverlet TestResults structure
            for results_dir in path.glob("TestResults/*"):
                if results_dir.is_dir() and any(results_dir.glob("coverage.opencover.xml")):
                    return True
            return False

        if not path.is_file():
            return False

        # Content sniff for OpenCover XML
        try:
            with path.open("rb") as f:
                header = f.read(2048).decode("utf-8", errors="ignore")
        except OSError:
            return False
        return "<CoverageSession" in header or "<SequencePoint" in header

    def _find_xml_file(self, path: Path) -> Path:
        """Find the actual XML file."""
        if path.is_file():
            return path

        for name in _CANDIDATE_NAMES:
            candidate = path / name
            if candidate.exists():
                return candidate

        xml_files = sorted(path.glob("TestResults/*/coverage.opencover.xml"))
        if xml_files:
            return xml_files[0]

        raise ReportError.not_found(str(path))

    def parse(self, path: Path) -> Report:
        """Parse OpenCover XML into a Report."""
        if not path.exists():
            raise ReportError.not_found(str(path))

        xml_file = self._find_xml_file(path)

        try:
            root = ET.parse(xml_file).getroot()
        except ET.ParseError as e:
            raise ReportError.parse_error(str(xml_file), str(e)) from e

        try:
            modules = tuple(self._read_module(elem) for elem in root.iterfind("Modules/Module"))
        except ValueError as e:
            raise ReportError.parse_error(str(xml_file), str(e)) from e

        logger.debug("opencover_report_loaded", path=str(xml_file), modules=len(modules))
        return Report(modules=modules)

    def _read_module(self, elem: ET.Element) -> Module:
        name = _text(elem, "ModuleName") or _text(elem, "FullName")

        files = tuple(
            FileRecord(id=int(file_elem.get("uid", "")), full_path=file_elem.get("fullPath", ""))
            for file_elem in elem.iterfind("Files/File")
            if file_elem.get("uid") and file_elem.get("fullPath")
        )
        classes = tuple(self._read_class(cls) for cls in elem.iterfind("Classes/Class"))
        return Module(name=name, classes=classes, files=files)

    def _read_class(self, elem: ET.Element) -> ClassReport:
        methods = []
        for method in elem.iterfind("Methods/Method"):
            report = self._read_method(method)
            # Compiler-generated lambdas: "<Outer>b__0_0"
            if self.skip_compiler_generated and "<" in report.name and ">b__" in report.name:
                continue
            methods.append(report)
        return ClassReport(full_name=_text(elem, "FullName"), methods=tuple(methods))

    def _read_method(self, elem: ET.Element) -> MethodReport:
        file_ref = elem.find("FileRef")
        file_id = _int(file_ref, "uid") if file_ref is not None and file_ref.get("uid") else None

        sequence_points = []
        for sp in elem.iterfind("SequencePoints/SequencePoint"):
            start_line = _int(sp, "sl")
            sequence_points.append(
                SequencePoint(
                    start_line=start_line,
                    start_column=_int(sp, "sc"),
                    end_line=_int(sp, "el", start_line),
                    end_column=_int(sp, "ec"),
                    visit_count=_int(sp, "vc"),
                )
            )

        branch_points = [
            BranchPoint(
                line=_int(bp, "sl"),
                offset=_int(bp, "offset"),
                path=_int(bp, "path"),
                visit_count=_int(bp, "vc"),
            )
            for bp in elem.iterfind("BranchPoints/BranchPoint")
        ]

        summary_elem = elem.find("Summary")
        return MethodReport(
            name=_text(elem, "Name"),
            file_id=file_id,
            sequence_points=tuple(sequence_points),
            branch_points=tuple(branch_points),
            summary=_read_summary(summary_elem) if summary_elem is not None else None,
        )


def _read_summary(elem: ET.Element) -> Summary:
    values: dict[str, int | float] = {}
    for attr, name in _SUMMARY_INT_ATTRS.items():
        values[name] = _int(elem, attr)
    for attr, name in _SUMMARY_FLOAT_ATTRS.items():
        raw = elem.get(attr)
        values[name] = float(raw) if raw else 0.0
    return Summary(**values)  # type: ignore[arg-type]


def _text(elem: ET.Element, tag: str) -> str:
    child = elem.find(tag)
    if child is None or child.text is None:
        return ""
    return child.text.strip()


def _int(elem: ET.Element, attr: str, default: int = 0) -> int:
    raw = elem.get(attr)
    if raw is None or raw == "":
        return default
    return int(raw)


def load_report(path: Path, *, skip_compiler_generated: bool = False) -> Report:
    """Read an OpenCover report from a file or a directory containing one.

    Raises:
        ReportError: If no report is found or the XML cannot be read.
    """
    reader = OpencoverReader(skip_compiler_generated=skip_compiler_generated)
    return reader.parse(path)
