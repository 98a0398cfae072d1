"""Tests for module gating and run-mode dispatch."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Tuple

import pytest

from sizeanalysis.config import SizeAnalysisConfig
from sizeanalysis.errors import (
    BundleMissingError,
    InvalidFlagCombinationError,
    ReportRedirectionError,
)
from sizeanalysis.models import ExportData, MemberList
from sizeanalysis.orchestrator import AnalysisOptions, SizeAnalysis
from sizeanalysis.report import ReportBuilder
from sizeanalysis.upload import ReportUploader
from tests._fixtures.fakes import FakeDeclarationExtractor, FakeDependencyExtractor
from tests._fixtures.workspace_builder import WorkspaceBuilder

_ARTIFACTS = {"dist/index.d.ts": "export {};\n", "dist/index.esm2017.js": "export {};\n"}
_MANIFEST_FIELDS = {"typings": "dist/index.d.ts", "esm2017": "dist/index.esm2017.js"}


class _RecordingUploader(ReportUploader):
    def __init__(self) -> None:
        self.uploads: List[Tuple[str, str]] = []

    def upload(self, file_name: str, report: str) -> None:
        self.uploads.append((file_name, report))


def _analysis(
    workspace: WorkspaceBuilder,
) -> tuple[SizeAnalysis, FakeDeclarationExtractor, FakeDependencyExtractor, _RecordingUploader]:
    declarations = FakeDeclarationExtractor(MemberList(classes=["Bar"], functions=["foo"]))
    dependencies = FakeDependencyExtractor(
        {
            "foo": ExportData(dependencies=[], size=10),
            "Bar": ExportData(dependencies=["foo"], size=25),
        }
    )
    uploader = _RecordingUploader()
    analysis = SizeAnalysis(
        config=SizeAnalysisConfig(root=workspace.path().resolve()),
        report_builder=ReportBuilder(declarations, dependencies),
        uploader=uploader,
    )
    return analysis, declarations, dependencies, uploader


def _module(workspace: WorkspaceBuilder, relative: str, name: str) -> Path:
    return workspace.package(relative, {"name": name, **_MANIFEST_FIELDS}, _ARTIFACTS)


def test_module_without_package_json_is_skipped(workspace: WorkspaceBuilder, tmp_path: Path) -> None:
    analysis, declarations, _, _ = _analysis(workspace)
    directory = workspace.path() / "scripts"
    directory.mkdir()

    result = analysis.generate_report_for_module(
        directory, str(tmp_path / "out"), write_files=True, upload_to_ci=False
    )

    assert result is None
    assert declarations.calls == []
    assert not (tmp_path / "out").exists()


def test_module_without_typings_is_skipped(workspace: WorkspaceBuilder, tmp_path: Path) -> None:
    analysis, declarations, _, _ = _analysis(workspace)
    directory = workspace.package("packages-exp/app-types", {"name": "@firebase/app-types"})

    result = analysis.generate_report_for_module(
        directory, str(tmp_path / "out"), write_files=True, upload_to_ci=False
    )

    assert result is None
    assert declarations.calls == []


def test_module_without_bundle_fails_before_extraction(
    workspace: WorkspaceBuilder, tmp_path: Path
) -> None:
    analysis, declarations, dependencies, _ = _analysis(workspace)
    directory = workspace.package(
        "packages-exp/broken",
        {"name": "@firebase/broken", "typings": "dist/index.d.ts"},
        _ARTIFACTS,
    )

    with pytest.raises(BundleMissingError):
        analysis.generate_report_for_module(
            directory, str(tmp_path / "out"), write_files=True, upload_to_ci=False
        )

    assert declarations.calls == []
    assert dependencies.calls == []
    assert not (tmp_path / "out").exists()


def test_module_report_is_named_after_package(workspace: WorkspaceBuilder, tmp_path: Path) -> None:
    analysis, _, _, uploader = _analysis(workspace)
    directory = _module(workspace, "packages-exp/app-exp", "@firebase/app-exp")

    result = analysis.generate_report_for_module(
        directory, str(tmp_path / "out"), write_files=True, upload_to_ci=True
    )

    assert result == (tmp_path / "out" / "app-exp-dependency.json").resolve()
    report = json.loads(result.read_text(encoding="utf-8"))
    assert list(report) == ["Bar", "foo"]
    assert [name for name, _ in uploader.uploads] == ["app-exp-dependency.json"]


def test_batch_includes_submodules_one_level_deep(workspace: WorkspaceBuilder, tmp_path: Path) -> None:
    analysis, _, _, _ = _analysis(workspace)
    firestore = _module(workspace, "packages-exp/firestore-exp", "@firebase/firestore-exp")
    _module(workspace, "packages-exp/firestore-exp/memory", "@firebase/firestore-exp/memory")
    _module(workspace, "packages-exp/firestore-exp/memory/nested", "@firebase/firestore-exp/nested")

    written = analysis.generate_report_for_modules(
        [firestore], str(tmp_path / "out"), write_files=True, upload_to_ci=False
    )

    assert sorted(path.name for path in written) == [
        "firestore-exp-dependency.json",
        "memory-dependency.json",
    ]


def test_run_without_destination_raises_and_writes_nothing(
    workspace: WorkspaceBuilder, tmp_path: Path
) -> None:
    analysis, declarations, _, _ = _analysis(workspace)
    _module(workspace, "packages-exp/app-exp", "@firebase/app-exp")
    before = sorted(tmp_path.rglob("*"))

    with pytest.raises(ReportRedirectionError):
        analysis.run(AnalysisOptions(root=str(workspace.path())))

    assert sorted(tmp_path.rglob("*")) == before
    assert declarations.calls == []


def test_run_with_only_dts_file_is_invalid(workspace: WorkspaceBuilder, tmp_path: Path) -> None:
    analysis, _, _, _ = _analysis(workspace)

    with pytest.raises(InvalidFlagCombinationError):
        analysis.run(
            AnalysisOptions(input_dts_file="index.d.ts", output=str(tmp_path / "report.json"))
        )


def test_run_adhoc_requires_output_file(workspace: WorkspaceBuilder) -> None:
    analysis, _, _, _ = _analysis(workspace)

    with pytest.raises(InvalidFlagCombinationError):
        analysis.run(
            AnalysisOptions(input_dts_file="index.d.ts", input_bundle_file="index.js", ci=True)
        )


def test_run_adhoc_writes_report_file(workspace: WorkspaceBuilder, tmp_path: Path) -> None:
    analysis, _, _, _ = _analysis(workspace)
    directory = _module(workspace, "adhoc", "adhoc")
    output = tmp_path / "reports" / "adhoc.json"

    written = analysis.run(
        AnalysisOptions(
            input_dts_file=str(directory / "dist/index.d.ts"),
            input_bundle_file=str(directory / "dist/index.esm2017.js"),
            output=str(output),
        )
    )

    assert written == [output.resolve()]
    assert json.loads(output.read_text(encoding="utf-8")) == {
        "Bar": {"dependencies": ["foo"], "size": 25},
        "foo": {"dependencies": [], "size": 10},
    }


def test_run_batch_filters_named_modules(workspace: WorkspaceBuilder, tmp_path: Path) -> None:
    analysis, _, _, _ = _analysis(workspace)
    _module(workspace, "packages-exp/app-exp", "@firebase/app-exp")
    _module(workspace, "packages-exp/auth-exp", "@firebase/auth-exp")

    written = analysis.run(
        AnalysisOptions(
            input_module=["@firebase/auth-exp"],
            output=str(tmp_path / "out"),
            root=str(workspace.path()),
        )
    )

    assert [path.name for path in written] == ["auth-exp-dependency.json"]


def test_run_batch_without_names_analyzes_all_modules(
    workspace: WorkspaceBuilder, tmp_path: Path
) -> None:
    analysis, _, _, _ = _analysis(workspace)
    _module(workspace, "packages-exp/app-exp", "@firebase/app-exp")
    _module(workspace, "packages-exp/auth-exp", "@firebase/auth-exp")

    written = analysis.run(AnalysisOptions(input_module=[], output=str(tmp_path / "out")))

    assert [path.name for path in written] == [
        "app-exp-dependency.json",
        "auth-exp-dependency.json",
    ]


def test_run_batch_ci_only_uploads_without_writing(
    workspace: WorkspaceBuilder, tmp_path: Path
) -> None:
    analysis, _, _, uploader = _analysis(workspace)
    _module(workspace, "packages-exp/app-exp", "@firebase/app-exp")

    written = analysis.run(AnalysisOptions(ci=True))

    assert written == []
    assert [name for name, _ in uploader.uploads] == ["app-exp-dependency.json"]


def test_default_uploader_performs_no_writes(workspace: WorkspaceBuilder, tmp_path: Path) -> None:
    declarations = FakeDeclarationExtractor(MemberList(functions=["foo"]))
    dependencies = FakeDependencyExtractor({"foo": ExportData(dependencies=[], size=10)})
    analysis = SizeAnalysis(
        config=SizeAnalysisConfig(root=workspace.path().resolve()),
        report_builder=ReportBuilder(declarations, dependencies),
    )
    _module(workspace, "packages-exp/app-exp", "@firebase/app-exp")
    before = sorted(tmp_path.rglob("*"))

    assert analysis.run(AnalysisOptions(ci=True)) == []
    assert dependencies.calls == ["foo"]
    assert sorted(tmp_path.rglob("*")) == before
