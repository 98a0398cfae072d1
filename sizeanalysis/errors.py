"""Error types raised by the size analysis tool."""

from __future__ import annotations


class SizeAnalysisError(RuntimeError):
    """Base class for every fatal size analysis failure."""


class MissingInputError(SizeAnalysisError):
    """Raised when a declaration or bundle file does not exist."""

    def __init__(self, path: object) -> None:
        super().__init__(f"Input file does not exist! ({path})")
        self.path = path


class BundleMissingError(SizeAnalysisError):
    """Raised when a module declares typings but no bundle file."""

    def __init__(self, module: object) -> None:
        super().__init__(f"Module does not have a bundle file! ({module})")
        self.module = module


class InvalidFlagCombinationError(SizeAnalysisError):
    """Raised when the run mode cannot be derived from the supplied flags."""

    def __init__(self) -> None:
        super().__init__("Invalid command flag combinations!")


class ReportRedirectionError(SizeAnalysisError):
    """Raised when neither --output nor --ci is given."""

    def __init__(self) -> None:
        super().__init__("--ci and --output flags can not both be undefined!")


class OutputDirectoryRequiredError(SizeAnalysisError):
    """Raised when a directory is expected as output but a file was given."""

    def __init__(self, path: object) -> None:
        super().__init__(f"An output directory is required but a file given! ({path})")
        self.path = path


class OutputFileRequiredError(SizeAnalysisError):
    """Raised when a file is expected as output but a directory was given."""

    def __init__(self, path: object) -> None:
        super().__init__(f"An output file is required but a directory given! ({path})")
        self.path = path


class ManifestError(SizeAnalysisError):
    """Raised when a package.json cannot be parsed."""


class ConfigError(SizeAnalysisError):
    """Raised when the configuration file cannot be parsed."""


class ExtractorError(SizeAnalysisError):
    """Raised when declaration or dependency extraction fails."""


class SymbolNotFoundError(ExtractorError):
    """Raised when an exported symbol cannot be located in a bundle."""

    def __init__(self, symbol: str, bundle: object) -> None:
        super().__init__(f"Symbol '{symbol}' is not exported by {bundle}")
        self.symbol = symbol
        self.bundle = bundle


class DuplicateSymbolError(SizeAnalysisError):
    """Raised when a symbol name is classified into more than one category."""

    def __init__(self, symbol: str, first: str, second: str) -> None:
        super().__init__(f"Symbol '{symbol}' is listed as both {first} and {second}")
        self.symbol = symbol


__all__ = [
    "BundleMissingError",
    "ConfigError",
    "DuplicateSymbolError",
    "ExtractorError",
    "InvalidFlagCombinationError",
    "ManifestError",
    "MissingInputError",
    "OutputDirectoryRequiredError",
    "OutputFileRequiredError",
    "ReportRedirectionError",
    "SizeAnalysisError",
    "SymbolNotFoundError",
]
