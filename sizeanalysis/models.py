"""Core data models shared across size analysis components."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Tuple

from .errors import DuplicateSymbolError

SymbolTypeIndex = Mapping[str, str]


@dataclass
class MemberList:
    """Public symbols exported by a declaration file, grouped by kind."""

    CATEGORIES = ("classes", "functions", "variables", "enums")

    classes: List[str] = field(default_factory=list)
    functions: List[str] = field(default_factory=list)
    variables: List[str] = field(default_factory=list)
    enums: List[str] = field(default_factory=list)

    def iter_symbols(self) -> Iterator[Tuple[str, str]]:
        """Yield ``(category, symbol)`` pairs, classes first and enums last."""
        for category in self.CATEGORIES:
            for symbol in getattr(self, category):
                yield category, symbol

    def is_empty(self) -> bool:
        return not any(getattr(self, category) for category in self.CATEGORIES)

    @classmethod
    def from_dict(cls, payload: Mapping[str, object]) -> "MemberList":
        values: Dict[str, List[str]] = {}
        for category in cls.CATEGORIES:
            raw = payload.get(category) or []
            if not isinstance(raw, list) or not all(isinstance(item, str) for item in raw):
                raise TypeError(f"'{category}' must be a list of symbol names")
            values[category] = list(raw)
        return cls(**values)


@dataclass
class ExportData:
    """Dependencies and bundle size contribution of one exported symbol."""

    dependencies: List[str]
    size: int

    def to_dict(self) -> Dict[str, object]:
        return {"dependencies": list(self.dependencies), "size": self.size}

    @classmethod
    def from_dict(cls, payload: Mapping[str, object]) -> "ExportData":
        dependencies = payload.get("dependencies")
        size = payload.get("size")
        if not isinstance(dependencies, list) or not all(
            isinstance(item, str) for item in dependencies
        ):
            raise TypeError("'dependencies' must be a list of symbol names")
        if not isinstance(size, int) or isinstance(size, bool):
            raise TypeError("'size' must be an integer byte count")
        return cls(dependencies=list(dependencies), size=size)


def build_symbol_type_index(members: MemberList) -> SymbolTypeIndex:
    """Map every symbol name listed in ``members`` to its category."""
    index: Dict[str, str] = {}
    for category, symbol in members.iter_symbols():
        existing = index.get(symbol)
        if existing is not None and existing != category:
            raise DuplicateSymbolError(symbol, existing, category)
        index[symbol] = category
    return MappingProxyType(index)


__all__ = ["ExportData", "MemberList", "SymbolTypeIndex", "build_symbol_type_index"]
