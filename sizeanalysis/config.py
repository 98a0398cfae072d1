"""Configuration loading for size analysis (.size-analysis.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".size-analysis.yml"

DEFAULT_PACKAGES = ("packages-exp/*",)
DEFAULT_DEPTH_LIMIT = 1
EXTRACTOR_KINDS = ("tree-sitter", "helper")


@dataclass
class ManifestConfig:
    """package.json fields that point at the typings and bundle artifacts."""

    typings_field: str = "typings"
    bundle_field: str = "esm2017"


@dataclass
class ExtractorConfig:
    """Which extractor implementation to use and how to launch helpers."""

    kind: str = "tree-sitter"
    command: List[str] = field(default_factory=list)


@dataclass
class SizeAnalysisConfig:
    """Represents the settings defined in .size-analysis.yml."""

    root: Path
    packages: List[str] = field(default_factory=lambda: list(DEFAULT_PACKAGES))
    depth_limit: int = DEFAULT_DEPTH_LIMIT
    manifest: ManifestConfig = field(default_factory=ManifestConfig)
    extractor: ExtractorConfig = field(default_factory=ExtractorConfig)


def load_config(config_path: Path) -> SizeAnalysisConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return SizeAnalysisConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = SizeAnalysisConfig(root=root)

    packages = _as_str_list(data.get("packages"))
    if packages:
        config.packages = packages

    if "depth_limit" in data:
        depth_limit = _as_int(data.get("depth_limit"))
        if depth_limit is None or depth_limit < 0:
            raise ConfigError("depth_limit must be a non-negative integer")
        config.depth_limit = depth_limit

    manifest_data = _as_dict(data.get("manifest"))
    if manifest_data:
        typings = _as_str(manifest_data.get("typings_field"))
        bundle = _as_str(manifest_data.get("bundle_field"))
        if typings:
            config.manifest.typings_field = typings
        if bundle:
            config.manifest.bundle_field = bundle

    extractor_data = _as_dict(data.get("extractor"))
    if extractor_data:
        kind = _as_str(extractor_data.get("kind"))
        if kind:
            if kind not in EXTRACTOR_KINDS:
                choices = ", ".join(EXTRACTOR_KINDS)
                raise ConfigError(f"Unknown extractor kind '{kind}' (expected one of: {choices})")
            config.extractor.kind = kind
        config.extractor.command = _as_str_list(extractor_data.get("command"))

    if config.extractor.kind == "helper" and not config.extractor.command:
        raise ConfigError("extractor.command is required when extractor.kind is 'helper'")

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ExtractorConfig",
    "ManifestConfig",
    "SizeAnalysisConfig",
    "load_config",
]
