"""CLI entrypoints for i18n commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError
from .errors import CatalogFormatError, WriteError
from .logging import configure_logging
from .pipeline import ExtractionPipeline
from .report import REPORT_FORMATS, render_report


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from exc
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="i18n",
        description="Extract translatable strings from source code into a translation catalog.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log output to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract_parser = subparsers.add_parser(
        "extract",
        help="Scan a project and synchronize its translation catalog.",
    )
    _add_verbose_option(extract_parser, suppress_default=True)
    extract_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )
    extract_parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="GLOB",
        help="Skip files or directories matching GLOB (repeatable).",
    )
    extract_parser.add_argument(
        "--catalog",
        default=None,
        help="Catalog file to update (defaults to the configured path).",
    )
    extract_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report changes without writing the catalog.",
    )
    extract_parser.add_argument(
        "--strict",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Fail without writing when any conflict is found (overrides the config).",
    )
    extract_parser.add_argument(
        "--tr",
        action="append",
        default=[],
        metavar="TEXT",
        help="Add TEXT to the catalog under a hashed key (repeatable).",
    )
    extract_parser.add_argument(
        "--workers",
        type=_positive_int,
        default=None,
        help="Number of files processed in parallel.",
    )
    extract_parser.add_argument(
        "--format",
        choices=REPORT_FORMATS,
        default="text",
        help="Output format of the sync report.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for i18n commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    pipeline = ExtractionPipeline()

    if args.command == "extract":
        try:
            outcome = pipeline.run(
                args.path,
                excludes=args.exclude,
                catalog=args.catalog,
                dry_run=bool(args.dry_run),
                strict=args.strict,
                extra_texts=args.tr,
                workers=args.workers,
            )
        except (FileNotFoundError, NotADirectoryError, PermissionError) as exc:
            parser.exit(1, f"{exc}\n")
        except (ConfigError, CatalogFormatError) as exc:
            parser.exit(1, f"i18n extract failed: {exc}\n")
        except WriteError as exc:
            parser.exit(1, f"i18n extract failed: {exc}\nThe previous catalog was left unchanged.\n")
        except KeyboardInterrupt:
            parser.exit(130, "Interrupted; catalog not written.\n")

        sys.stdout.write(
            render_report(
                outcome.report,
                args.format,
                catalog_path=_relativize(outcome.catalog_path),
                written=outcome.written,
            )
        )
        if outcome.blocked:
            parser.exit(1, "Conflicts found in strict mode; resolve them before releasing.\n")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
