"""Per-symbol binary size analysis for compiled JavaScript modules."""

from .errors import SizeAnalysisError
from .models import ExportData, MemberList, build_symbol_type_index
from .orchestrator import AnalysisOptions, SizeAnalysis
from .report import ReportBuilder, build_report

__version__ = "0.1.0"

__all__ = [
    "AnalysisOptions",
    "ExportData",
    "MemberList",
    "ReportBuilder",
    "SizeAnalysis",
    "SizeAnalysisError",
    "build_report",
    "build_symbol_type_index",
]
