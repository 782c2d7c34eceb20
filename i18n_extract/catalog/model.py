"""In-memory catalog of translation entries."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional

from ..models import TranslationEntry

CATALOG_VERSION = 1


class Catalog:
    """Ordered mapping from key to entry; keys are unique by construction."""

    def __init__(
        self,
        entries: Optional[Iterable[TranslationEntry]] = None,
        *,
        source_locale: str = "en",
    ) -> None:
        self.source_locale = source_locale
        self._entries: Dict[str, TranslationEntry] = {}
        for entry in entries or ():
            self.add(entry)

    def add(self, entry: TranslationEntry) -> None:
        if entry.key in self._entries:
            raise KeyError(f"Duplicate catalog key: {entry.key!r}")
        self._entries[entry.key] = entry

    def get(self, key: str) -> Optional[TranslationEntry]:
        return self._entries.get(key)

    def keys(self) -> List[str]:
        return list(self._entries)

    def entries(self) -> List[TranslationEntry]:
        return list(self._entries.values())

    def missing_translations(self, locales: Iterable[str]) -> Dict[str, int]:
        """Count entries without a translation for each non-source locale."""
        counts: Dict[str, int] = {}
        for locale in locales:
            if locale == self.source_locale:
                continue
            counts[locale] = sum(
                1 for entry in self._entries.values() if not entry.translations.get(locale)
            )
        return counts

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[TranslationEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Catalog):
            return NotImplemented
        return (
            self.source_locale == other.source_locale
            and list(self._entries.items()) == list(other._entries.items())
        )

    def __repr__(self) -> str:
        return f"Catalog(source_locale={self.source_locale!r}, entries={len(self)})"


__all__ = ["CATALOG_VERSION", "Catalog"]
