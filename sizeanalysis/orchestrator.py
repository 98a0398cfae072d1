"""Run orchestration for adhoc and workspace-wide size analysis."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .config import SizeAnalysisConfig, load_config
from .errors import BundleMissingError, InvalidFlagCombinationError, ReportRedirectionError
from .extractors import create_extractors
from .logging import get_logger
from .report import ReportBuilder, write_report_to_directory, write_report_to_file
from .upload import NullUploader, ReportUploader
from .workspace import (
    load_package_json,
    map_workspace_to_packages,
    report_file_name,
    traverse_dirs,
)


@dataclass
class AnalysisOptions:
    """Command line options for a single run."""

    input_module: Optional[List[str]] = None
    input_dts_file: Optional[str] = None
    input_bundle_file: Optional[str] = None
    ci: bool = False
    output: Optional[str] = None
    root: str = "."
    config: Optional[str] = None


class SizeAnalysis:
    """Coordinates report generation for adhoc files or workspace modules."""

    def __init__(
        self,
        config: SizeAnalysisConfig | None = None,
        report_builder: ReportBuilder | None = None,
        uploader: ReportUploader | None = None,
    ) -> None:
        self._config = config
        self._report_builder = report_builder
        self.uploader = uploader or NullUploader()
        self.logger = get_logger("orchestrator")

    def run(self, options: AnalysisOptions) -> List[Path]:
        """Dispatch to adhoc or batch mode and return the written report paths."""
        if not options.output and not options.ci:
            raise ReportRedirectionError()

        # Adhoc reports can only be redirected to a file.
        if options.input_dts_file and options.input_bundle_file and options.output:
            self.logger.info(
                "Running adhoc analysis for %s and %s",
                options.input_dts_file,
                options.input_bundle_file,
            )
            report = self._builder(self._load_config(options)).build(
                options.input_dts_file, options.input_bundle_file
            )
            return [write_report_to_file(report, options.output)]

        if not options.input_dts_file and not options.input_bundle_file:
            config = self._load_config(options)
            locations = map_workspace_to_packages(config.root, config.packages)
            if options.input_module:
                wanted = set(options.input_module)
                locations = [
                    location
                    for location in locations
                    if (load_package_json(location) or {}).get("name") in wanted
                ]
            self.logger.info("Analyzing %d module(s) under %s", len(locations), config.root)
            return self.generate_report_for_modules(
                locations,
                options.output,
                write_files=bool(options.output),
                upload_to_ci=options.ci,
            )

        raise InvalidFlagCombinationError()

    def generate_report_for_modules(
        self,
        locations: Sequence[Path],
        output_directory: Optional[str],
        *,
        write_files: bool,
        upload_to_ci: bool,
    ) -> List[Path]:
        """Generate reports for each module and its submodules."""
        config = self._require_config()
        written: List[Path] = []

        def _action(path: Path) -> None:
            result = self.generate_report_for_module(
                path,
                output_directory,
                write_files=write_files,
                upload_to_ci=upload_to_ci,
            )
            if result is not None:
                written.append(result)

        for location in locations:
            # Submodules such as @firebase/firestore/memory live one level down.
            traverse_dirs(Path(location), _action, level_limit=config.depth_limit)
        return written

    def generate_report_for_module(
        self,
        path: Path,
        output_directory: Optional[str],
        *,
        write_files: bool,
        upload_to_ci: bool,
    ) -> Optional[Path]:
        """Build the report for one module directory, if it is a public module."""
        config = self._require_config()
        package_json = load_package_json(path)
        if package_json is None:
            self.logger.debug("Skipping %s: no package.json", path)
            return None
        typings = package_json.get(config.manifest.typings_field)
        # <module>-types packages have no typings entry of their own.
        if not typings:
            self.logger.debug("Skipping %s: no '%s' field", path, config.manifest.typings_field)
            return None
        bundle = package_json.get(config.manifest.bundle_field)
        if not bundle:
            raise BundleMissingError(path)

        name = str(package_json.get("name") or path.name)
        self.logger.info("Generating report for %s", name)
        report = self._builder(config).build(path / str(typings), path / str(bundle))
        file_name = report_file_name(name)

        written: Optional[Path] = None
        if write_files and output_directory:
            written = write_report_to_directory(report, file_name, output_directory)
            self.logger.info("Report written to %s", written)
        if upload_to_ci:
            self.uploader.upload(file_name, report)
        return written

    def _load_config(self, options: AnalysisOptions) -> SizeAnalysisConfig:
        if self._config is None:
            config_path = Path(options.config) if options.config else Path(options.root)
            config = load_config(config_path)
            config.root = Path(options.root).expanduser().resolve()
            self._config = config
        return self._config

    def _require_config(self) -> SizeAnalysisConfig:
        if self._config is None:
            self._config = load_config(Path.cwd())
        return self._config

    def _builder(self, config: SizeAnalysisConfig) -> ReportBuilder:
        if self._report_builder is None:
            declarations, dependencies = create_extractors(config)
            self._report_builder = ReportBuilder(declarations, dependencies)
        return self._report_builder


__all__ = ["AnalysisOptions", "SizeAnalysis"]
