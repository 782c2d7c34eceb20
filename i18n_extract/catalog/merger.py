"""Reconcile freshly extracted entries with the previous catalog."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional, Sequence

from ..logging import get_logger
from ..models import Conflict, SyncReport, TranslationEntry
from .model import Catalog

logger = get_logger("merger")


@dataclass
class MergeResult:
    """Merged catalog plus the report describing how it differs from the old one."""

    catalog: Catalog
    report: SyncReport


def compare_entries(
    current: TranslationEntry, other: TranslationEntry
) -> List[tuple[str, str, str]]:
    """Return ``(reason, current, other)`` descriptions for every metadata difference."""
    differences: List[tuple[str, str, str]] = []
    if current.text != other.text:
        differences.append(("text-mismatch", repr(current.text), repr(other.text)))
    if set(current.placeholders) != set(other.placeholders):
        left = ", ".join(str(p) for p in current.placeholders) or "(none)"
        right = ", ".join(str(p) for p in other.placeholders) or "(none)"
        differences.append(("placeholder-mismatch", f"[{left}]", f"[{right}]"))
    if (current.context or None) != (other.context or None):
        differences.append(("context-mismatch", repr(current.context), repr(other.context)))
    return differences


class CatalogMerger:
    """Single-threaded merge of per-file extraction results.

    Retained keys keep the previous catalog's order, new keys follow in
    discovery order, and keys that are no longer referenced are dropped but
    listed in the report.
    """

    def __init__(
        self, *, source_locale: Optional[str] = None, available_locales: Sequence[str] = ()
    ) -> None:
        self.source_locale = source_locale
        self.available_locales = list(available_locales)

    def merge(
        self,
        extracted: Iterable[TranslationEntry],
        previous: Optional[Catalog] = None,
        conflicts: Iterable[Conflict] = (),
    ) -> MergeResult:
        previous = previous if previous is not None else Catalog()
        report = SyncReport(conflicts=list(conflicts))

        fresh = self._fold(extracted, report)

        merged = Catalog(source_locale=self.source_locale or previous.source_locale)
        for old in previous:
            new = fresh.get(old.key)
            if new is None:
                report.removed.append(old.key)
                continue
            for reason, source_value, catalog_value in compare_entries(new, old):
                report.conflicts.append(
                    Conflict(
                        key=old.key,
                        reason=reason,
                        detail=f"catalog has {catalog_value}, source has {source_value}",
                        locations=tuple(new.locations),
                    )
                )
            merged.add(replace(new, translations=dict(old.translations)))

        for key, entry in fresh.items():
            if key in merged:
                continue
            merged.add(entry)
            report.added.append(key)

        if self.available_locales:
            report.missing_translations = merged.missing_translations(self.available_locales)

        logger.debug(
            "Merged %d entries (%d added, %d removed, %d conflicts)",
            len(merged),
            len(report.added),
            len(report.removed),
            len(report.conflicts),
        )
        return MergeResult(catalog=merged, report=report)

    @staticmethod
    def _fold(extracted: Iterable[TranslationEntry], report: SyncReport) -> Dict[str, TranslationEntry]:
        """Collapse entries sharing a key; the first discovery wins."""
        fresh: Dict[str, TranslationEntry] = {}
        for entry in extracted:
            current = fresh.get(entry.key)
            if current is None:
                fresh[entry.key] = replace(
                    entry,
                    locations=list(entry.locations),
                    translations=dict(entry.translations),
                )
                continue
            for reason, first_value, other_value in compare_entries(current, entry):
                report.conflicts.append(
                    Conflict(
                        key=entry.key,
                        reason=reason,
                        detail=f"{first_value} != {other_value}",
                        locations=tuple(current.locations[:1]) + tuple(entry.locations),
                    )
                )
            for location in entry.locations:
                if location not in current.locations:
                    current.locations.append(location)
        return fresh


__all__ = ["CatalogMerger", "MergeResult", "compare_entries"]
