"""Base classes for declaration and dependency extractors."""

from abc import ABC, abstractmethod
from pathlib import Path

from ..models import ExportData, MemberList, SymbolTypeIndex


class DeclarationExtractor(ABC):
    """Contract for extractors that list the public API of a declaration file."""

    @abstractmethod
    def extract(self, declaration_file: Path) -> MemberList:
        """Return the exported symbols of ``declaration_file`` grouped by kind."""


class DependencyExtractor(ABC):
    """Contract for extractors that measure one symbol inside a bundle."""

    @abstractmethod
    def extract(self, symbol: str, bundle_file: Path, index: SymbolTypeIndex) -> ExportData:
        """Return the public symbols ``symbol`` pulls in and its size in bytes."""
