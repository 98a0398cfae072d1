"""CLI entrypoint for the binary size analysis tool.

Either pass ``--inputDtsFile`` and ``--inputBundleFile`` together with
``--output`` for an adhoc report, or omit both to analyze workspace modules
(all of them, or those named with ``--inputModule``). One of ``--output`` and
``--ci`` is always required.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List

from .errors import SizeAnalysisError
from .logging import configure_logging
from .orchestrator import AnalysisOptions, SizeAnalysis


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="size-analysis",
        description="Estimate the bundle size contribution of every exported symbol.",
        allow_abbrev=False,
    )
    parser.add_argument(
        "--inputModule",
        "--im",
        dest="input_module",
        nargs="*",
        metavar="NAME",
        help=(
            'The name of the module(s) to be analyzed, e.g. --inputModule "@firebase/functions-exp" '
            '"firebase/auth-exp". Analyzes every workspace module when omitted.'
        ),
    )
    parser.add_argument(
        "--inputDtsFile",
        "--if",
        dest="input_dts_file",
        help="Adhoc analysis: path to a dts file. Requires --inputBundleFile.",
    )
    parser.add_argument(
        "--inputBundleFile",
        "--ib",
        dest="input_bundle_file",
        help="Adhoc analysis: path to a bundle file. Requires --inputDtsFile.",
    )
    parser.add_argument(
        "--ci",
        action="store_true",
        default=False,
        help="Upload the report to the CI backend instead of only writing files.",
    )
    parser.add_argument(
        "--output",
        "--o",
        dest="output",
        help=(
            "Where reports are written: a directory when modules are analyzed, "
            "a file path for adhoc analysis."
        ),
    )
    parser.add_argument(
        "--root",
        default=".",
        help="Path to the workspace root (defaults to current directory).",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a .size-analysis.yml file (defaults to the one under --root).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Also write log output to this file.",
    )
    return parser


def main(argv: List[str] | None = None) -> None:
    """CLI entrypoint for size analysis runs."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file).expanduser() if args.log_file else None
    configure_logging(verbose=bool(args.verbose), log_file=log_file)

    options = AnalysisOptions(
        input_module=args.input_module,
        input_dts_file=args.input_dts_file,
        input_bundle_file=args.input_bundle_file,
        ci=bool(args.ci),
        output=args.output,
        root=args.root,
        config=args.config,
    )
    try:
        written = SizeAnalysis().run(options)
    except SizeAnalysisError as exc:
        parser.exit(1, f"size-analysis failed: {exc}\n")

    for path in written:
        print(f"Report written to {_relativize(path)}")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
