"""In-memory extractors used to drive the report builder in tests."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Mapping

from sizeanalysis.extractors.base import DeclarationExtractor, DependencyExtractor
from sizeanalysis.models import ExportData, MemberList, SymbolTypeIndex


class FakeDeclarationExtractor(DeclarationExtractor):
    """Returns a fixed member list and records the files it was asked about."""

    def __init__(self, members: MemberList) -> None:
        self.members = members
        self.calls: List[Path] = []

    def extract(self, declaration_file: Path) -> MemberList:
        self.calls.append(declaration_file)
        return self.members


class FakeDependencyExtractor(DependencyExtractor):
    """Serves canned export data keyed by symbol name."""

    def __init__(self, data: Mapping[str, ExportData]) -> None:
        self.data: Dict[str, ExportData] = dict(data)
        self.calls: List[str] = []
        self.indexes: List[SymbolTypeIndex] = []

    def extract(self, symbol: str, bundle_file: Path, index: SymbolTypeIndex) -> ExportData:
        self.calls.append(symbol)
        self.indexes.append(index)
        return self.data[symbol]


__all__ = ["FakeDeclarationExtractor", "FakeDependencyExtractor"]
