"""Extractor implementations and factory helpers."""

from __future__ import annotations

from typing import Tuple

from ..config import SizeAnalysisConfig
from .base import DeclarationExtractor, DependencyExtractor
from .helper import HelperDeclarationExtractor, HelperDependencyExtractor
from .tree_sitter import BundleDependencyExtractor, TypeScriptDeclarationExtractor


def create_extractors(
    config: SizeAnalysisConfig,
) -> Tuple[DeclarationExtractor, DependencyExtractor]:
    """Return the declaration/dependency extractor pair selected by ``config``."""
    if config.extractor.kind == "helper":
        command = list(config.extractor.command)
        return (
            HelperDeclarationExtractor(command, cwd=config.root),
            HelperDependencyExtractor(command, cwd=config.root),
        )
    return TypeScriptDeclarationExtractor(), BundleDependencyExtractor()


__all__ = [
    "BundleDependencyExtractor",
    "DeclarationExtractor",
    "DependencyExtractor",
    "HelperDeclarationExtractor",
    "HelperDependencyExtractor",
    "TypeScriptDeclarationExtractor",
    "create_extractors",
]
