"""Extractors that delegate to an external analysis helper process."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence

from ..errors import ExtractorError
from ..logging import get_logger
from ..models import ExportData, MemberList, SymbolTypeIndex
from .base import DeclarationExtractor, DependencyExtractor

Runner = Callable[..., str]

logger = get_logger("extractors.helper")


class _HelperProcess:
    """Runs the configured helper command and decodes its JSON output."""

    def __init__(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        runner: Optional[Runner] = None,
    ) -> None:
        if not command:
            raise ValueError("A helper command is required")
        self._command = list(command)
        self._cwd = cwd
        self._runner = runner or self._default_runner

    def call(self, *args: str) -> object:
        full_args = [*self._command, *args]
        logger.debug("Running helper: %s", " ".join(full_args))
        output = self._runner(full_args, cwd=self._cwd)
        try:
            return json.loads(output)
        except json.JSONDecodeError as exc:
            raise ExtractorError(
                f"Helper '{self._command[0]}' returned invalid JSON for '{args[0]}': {exc}"
            ) from exc

    @staticmethod
    def _default_runner(args: Iterable[str], *, cwd: Path | None = None) -> str:
        args = list(args)
        try:
            completed = subprocess.run(
                args,
                cwd=str(cwd) if cwd is not None else None,
                check=True,
                text=True,
                capture_output=True,
            )
        except FileNotFoundError as exc:
            raise ExtractorError(f"Unable to locate helper executable '{args[0]}'") from exc
        except subprocess.CalledProcessError as exc:
            stderr = (exc.stderr or "").strip()
            raise ExtractorError(
                f"Helper failed with exit code {exc.returncode}: {stderr}"
            ) from exc
        return completed.stdout


class HelperDeclarationExtractor(DeclarationExtractor):
    """Asks the helper for ``{"classes": [...], "functions": [...], ...}``."""

    def __init__(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        runner: Optional[Runner] = None,
    ) -> None:
        self._process = _HelperProcess(command, cwd=cwd, runner=runner)

    def extract(self, declaration_file: Path) -> MemberList:
        payload = self._process.call("declarations", str(declaration_file))
        if not isinstance(payload, dict):
            raise ExtractorError("Helper declaration output must be a JSON object")
        try:
            return MemberList.from_dict(payload)
        except TypeError as exc:
            raise ExtractorError(f"Malformed declaration output: {exc}") from exc


class HelperDependencyExtractor(DependencyExtractor):
    """Asks the helper for ``{"dependencies": [...], "size": n}`` per symbol."""

    def __init__(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        runner: Optional[Runner] = None,
    ) -> None:
        self._process = _HelperProcess(command, cwd=cwd, runner=runner)

    def extract(self, symbol: str, bundle_file: Path, index: SymbolTypeIndex) -> ExportData:
        encoded_index = json.dumps(dict(index), sort_keys=True)
        payload = self._process.call("dependencies", symbol, str(bundle_file), encoded_index)
        if not isinstance(payload, dict):
            raise ExtractorError(f"Helper output for '{symbol}' must be a JSON object")
        try:
            return ExportData.from_dict(payload)
        except TypeError as exc:
            raise ExtractorError(f"Malformed dependency output for '{symbol}': {exc}") from exc


__all__ = ["HelperDeclarationExtractor", "HelperDependencyExtractor"]
