"""Raw coverage report model and its OpenCover XML reader."""

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
from coverlens.report.opencover import OpencoverReader, load_report

__all__ = [
    # Models
    "BranchPoint",
    "ClassReport",
    "FileRecord",
    "MethodReport",
    "Module",
    "Report",
    "SequencePoint",
    "Summary",
    # Reader
    "OpencoverReader",
    "load_report",
]
