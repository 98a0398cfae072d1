"""Builds and writes per-module size/dependency reports."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Optional

from .errors import MissingInputError, OutputDirectoryRequiredError, OutputFileRequiredError
from .extractors.base import DeclarationExtractor, DependencyExtractor
from .extractors.tree_sitter import BundleDependencyExtractor, TypeScriptDeclarationExtractor
from .logging import get_logger
from .models import build_symbol_type_index

REPORT_INDENT = 4


class ReportBuilder:
    """Turns a declaration file and its bundle into a JSON size report.

    Every exported symbol is measured, classes first, then functions,
    variables and enums. A failure for any symbol aborts the whole report so
    that a written report is always complete.
    """

    def __init__(
        self,
        declaration_extractor: DeclarationExtractor,
        dependency_extractor: DependencyExtractor,
    ) -> None:
        self.declaration_extractor = declaration_extractor
        self.dependency_extractor = dependency_extractor
        self.logger = get_logger("report")

    def build(self, declaration_file: Path | str, bundle_file: Path | str) -> str:
        resolved_declarations = Path(declaration_file).expanduser().resolve()
        resolved_bundle = Path(bundle_file).expanduser().resolve()
        for path in (resolved_declarations, resolved_bundle):
            if not path.is_file():
                raise MissingInputError(path)

        members = self.declaration_extractor.extract(resolved_declarations)
        if members.is_empty():
            self.logger.debug("%s exports no measurable symbols", resolved_declarations.name)
        index = build_symbol_type_index(members)
        self.logger.debug(
            "Measuring %d exported symbols from %s", len(index), resolved_declarations.name
        )

        report: Dict[str, object] = {}
        for _, symbol in members.iter_symbols():
            data = self.dependency_extractor.extract(symbol, resolved_bundle, index)
            report[symbol] = data.to_dict()
        return json.dumps(report, indent=REPORT_INDENT)


def build_report(
    declaration_file: Path | str,
    bundle_file: Path | str,
    *,
    declaration_extractor: Optional[DeclarationExtractor] = None,
    dependency_extractor: Optional[DependencyExtractor] = None,
) -> str:
    """Build a report with the default tree-sitter extractors unless overridden."""
    declaration_extractor = declaration_extractor or TypeScriptDeclarationExtractor()
    dependency_extractor = dependency_extractor or BundleDependencyExtractor()
    builder = ReportBuilder(declaration_extractor, dependency_extractor)
    return builder.build(declaration_file, bundle_file)


def write_report_to_file(report: str, path: Path | str) -> Path:
    """Write ``report`` to ``path``, creating parent directories as needed."""
    target = Path(path).expanduser().resolve()
    if target.is_dir():
        raise OutputFileRequiredError(target)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(report, encoding="utf-8")
    return target


def write_report_to_directory(report: str, file_name: str, directory: Path | str) -> Path:
    """Write ``report`` as ``file_name`` inside ``directory``."""
    target_dir = Path(directory).expanduser().resolve()
    if target_dir.exists() and not target_dir.is_dir():
        raise OutputDirectoryRequiredError(target_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    target = target_dir / file_name
    target.write_text(report, encoding="utf-8")
    return target


__all__ = [
    "REPORT_INDENT",
    "ReportBuilder",
    "build_report",
    "write_report_to_directory",
    "write_report_to_file",
]
