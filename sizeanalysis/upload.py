"""Upload hooks for sending reports to a CI backend."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .logging import get_logger


class ReportUploader(ABC):
    """Receives finished reports when a run is invoked with ``--ci``."""

    @abstractmethod
    def upload(self, file_name: str, report: str) -> None:
        """Send ``report`` to the CI backend under ``file_name``."""


class NullUploader(ReportUploader):
    """Default uploader: no backend is wired up, reports are only logged."""

    def __init__(self) -> None:
        self.logger = get_logger("upload")

    def upload(self, file_name: str, report: str) -> None:
        self.logger.debug("CI upload skipped for %s (%d bytes)", file_name, len(report))


__all__ = ["NullUploader", "ReportUploader"]
