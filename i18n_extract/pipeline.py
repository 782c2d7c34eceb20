"""Pipeline orchestration for extraction runs."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .catalog import Catalog, CatalogMerger, CatalogStore
from .config import ConfigError, I18nConfig, load_config
from .errors import NonLiteralArgument, ParseError
from .extractor import LiteralExtractor, minify_key, parse_placeholders
from .logging import get_logger
from .markers import MarkerSet
from .models import (
    Conflict,
    Diagnostic,
    FileResult,
    SourceFile,
    SourceLocation,
    SyncReport,
    TranslationEntry,
)
from .scanners import Scanner, discover_scanners, scanner_for
from .walker import SourceWalker


@dataclass
class RunOutcome:
    """Result of an extraction run."""

    catalog: Catalog
    report: SyncReport
    catalog_path: Path
    written: bool
    dry_run: bool
    blocked: bool = False


class ExtractionPipeline:
    """Walks, scans and extracts files in parallel, then merges and writes once."""

    def __init__(
        self,
        scanners: Optional[Iterable[Scanner]] = None,
        extractor: Optional[LiteralExtractor] = None,
    ) -> None:
        self._scanner_overrides = list(scanners) if scanners is not None else None
        self._extractor_override = extractor
        self.logger = get_logger("pipeline")

    def run(
        self,
        path: str | Path,
        *,
        excludes: Sequence[str] = (),
        catalog: Optional[str | Path] = None,
        dry_run: bool = False,
        strict: Optional[bool] = None,
        extra_texts: Sequence[str] = (),
        workers: Optional[int] = None,
        config: Optional[I18nConfig] = None,
    ) -> RunOutcome:
        """Extract messages below ``path`` and synchronize the catalog."""
        root = Path(path).expanduser()
        if config is None:
            config = load_config(root) if root.is_dir() else I18nConfig(root=root)
        if catalog is not None:
            config = replace(config, catalog_path=Path(catalog))
        strict = config.strict if strict is None else strict
        workers = workers or config.workers

        if self._scanner_overrides is not None:
            scanners = self._scanner_overrides
        else:
            try:
                scanners = discover_scanners(config.languages)
            except ValueError as exc:
                raise ConfigError(f"Invalid languages setting: {exc}") from exc
        suffixes = {suffix for scanner in scanners for suffix in scanner.suffixes}
        diagnostics: List[Diagnostic] = []
        walker = SourceWalker(
            root,
            excludes=[*config.exclude_paths, *excludes],
            suffixes=suffixes,
            on_warning=diagnostics.append,
        )
        catalog_path = config.catalog_file
        self.logger.info("Scanning %s", walker.root)

        # Load before scanning so a broken catalog fails fast.
        store = CatalogStore(catalog_path, write_locations=config.write_locations)
        previous = store.load(source_locale=config.source_locale)

        extractor = self._extractor_override or LiteralExtractor(config.keys)
        markers = MarkerSet(config.markers)
        results = self._process(walker, scanners, extractor, markers, workers)
        results.sort(key=lambda result: result.path)

        entries: List[TranslationEntry] = []
        conflicts: List[Conflict] = []
        for result in results:
            entries.extend(result.entries)
            conflicts.extend(result.conflicts)
            diagnostics.extend(result.diagnostics)
        entries.extend(self._manual_entries(extra_texts, config))
        self.logger.debug("Extracted %d entries from %d files", len(entries), len(results))

        merger = CatalogMerger(
            source_locale=config.source_locale,
            available_locales=config.available_locales,
        )
        merged = merger.merge(entries, previous, conflicts)
        merged.report.diagnostics = diagnostics

        blocked = strict and merged.report.has_conflicts
        written = False
        if blocked:
            self.logger.error(
                "%d conflict(s) found in strict mode; catalog not written",
                len(merged.report.conflicts),
            )
        elif dry_run:
            self.logger.info("Dry-run completed; catalog not written")
        else:
            store.write(merged.catalog)
            written = True
            self.logger.info("Catalog written to %s", catalog_path)

        return RunOutcome(
            catalog=merged.catalog,
            report=merged.report,
            catalog_path=catalog_path,
            written=written,
            dry_run=dry_run,
            blocked=blocked,
        )

    def _process(
        self,
        walker: SourceWalker,
        scanners: Sequence[Scanner],
        extractor: LiteralExtractor,
        markers: MarkerSet,
        workers: Optional[int],
    ) -> List[FileResult]:
        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="i18n-extract")
        futures: List[Future[FileResult]] = []
        try:
            for file_path in walker:
                rel_path = walker.relative(file_path)
                futures.append(
                    executor.submit(
                        process_file, file_path, rel_path, scanners, extractor, markers
                    )
                )
            results = [future.result() for future in futures]
        except BaseException:
            executor.shutdown(wait=True, cancel_futures=True)
            raise
        executor.shutdown(wait=True)
        return results

    @staticmethod
    def _manual_entries(texts: Sequence[str], config: I18nConfig) -> List[TranslationEntry]:
        entries: List[TranslationEntry] = []
        for text in texts:
            entries.append(
                TranslationEntry(
                    key=minify_key(text, config.keys),
                    text=text,
                    placeholders=parse_placeholders(text),
                )
            )
        return entries


def process_file(
    file_path: Path,
    rel_path: str,
    scanners: Sequence[Scanner],
    extractor: LiteralExtractor,
    markers: MarkerSet,
) -> FileResult:
    """Read, scan and extract a single file; never raises for per-file problems."""
    logger = get_logger("pipeline")
    result = FileResult(path=rel_path)
    scanner = scanner_for(rel_path, scanners)
    if scanner is None:
        return result

    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Skipping unreadable file %s: %s", rel_path, exc)
        result.diagnostics.append(
            Diagnostic(kind="io-error", message=str(exc), location=SourceLocation(rel_path, 0))
        )
        return result

    try:
        sites = scanner.scan(SourceFile(path=rel_path, content=content), markers)
    except ParseError as exc:
        logger.debug("Skipping %s: %s", exc.location, exc)
        result.diagnostics.append(Diagnostic(kind="parse-error", message=str(exc), location=exc.location))
        return result

    for site in sites:
        try:
            extraction = extractor.extract(site)
        except NonLiteralArgument as exc:
            logger.debug("Skipping site at %s (%s): %s", exc.location, site.span, exc.detail)
            result.diagnostics.append(
                Diagnostic(kind="non-literal-argument", message=exc.detail, location=exc.location)
            )
            continue
        result.entries.append(extraction.entry)
        result.conflicts.extend(extraction.conflicts)
    return result


__all__ = ["ExtractionPipeline", "RunOutcome", "process_file"]
