"""Persisted catalog format and atomic writes."""

from __future__ import annotations

import json
import os
import stat
import tempfile
from pathlib import Path
from typing import Any, Dict, List

import yaml

from ..errors import CatalogFormatError, WriteError
from ..logging import get_logger
from ..models import Placeholder, SourceLocation, TranslationEntry
from .model import CATALOG_VERSION, Catalog

logger = get_logger("store")

_JSON_SUFFIXES = {".json"}
_NEW_FILE_MODE = 0o644


class CatalogStore:
    """Reads and writes a catalog file; the format follows the file suffix."""

    def __init__(self, path: Path, *, write_locations: bool = True) -> None:
        self.path = path
        self.write_locations = write_locations

    @property
    def format(self) -> str:
        return "json" if self.path.suffix.lower() in _JSON_SUFFIXES else "yaml"

    def load(self, *, source_locale: str = "en") -> Catalog:
        """Return the persisted catalog, or an empty one when the file is missing."""
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("No catalog at %s; starting empty", self.path)
            return Catalog(source_locale=source_locale)
        except (OSError, UnicodeDecodeError) as exc:
            raise CatalogFormatError(self.path, f"cannot read catalog: {exc}") from exc
        return self.loads(text, source_locale=source_locale)

    def loads(self, text: str, *, source_locale: str = "en") -> Catalog:
        if not text.strip():
            return Catalog(source_locale=source_locale)
        try:
            if self.format == "json":
                payload = json.loads(text)
            else:
                payload = yaml.safe_load(text)
        except (json.JSONDecodeError, yaml.YAMLError) as exc:
            raise CatalogFormatError(self.path, f"malformed {self.format}: {exc}") from exc
        return _catalog_from_payload(self.path, payload, source_locale)

    def dumps(self, catalog: Catalog) -> str:
        payload = self._payload(catalog)
        if self.format == "json":
            return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
        return yaml.safe_dump(
            payload,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
            width=100,
        )

    def write(self, catalog: Catalog) -> None:
        """Replace the catalog file; on failure the previous file is left untouched."""
        temp_path: Path | None = None
        replaced = False
        try:
            text = self.dumps(catalog)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                newline="\n",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                temp_path = Path(handle.name)
                handle.write(text)
                handle.flush()
                os.fsync(handle.fileno())
            os.chmod(temp_path, self._target_mode())
            os.replace(temp_path, self.path)
            replaced = True
        except (OSError, ValueError, TypeError, yaml.YAMLError) as exc:
            raise WriteError(self.path, exc) from exc
        finally:
            if temp_path is not None and not replaced:
                temp_path.unlink(missing_ok=True)
        logger.debug("Catalog written to %s (%d entries)", self.path, len(catalog))

    def _target_mode(self) -> int:
        """Permissions of the catalog being replaced, or 0644 for a new one."""
        try:
            return stat.S_IMODE(os.stat(self.path).st_mode)
        except FileNotFoundError:
            return _NEW_FILE_MODE

    def _payload(self, catalog: Catalog) -> Dict[str, Any]:
        entries: Dict[str, Dict[str, Any]] = {}
        for entry in catalog:
            data: Dict[str, Any] = {"text": entry.text}
            if entry.context:
                data["context"] = entry.context
            if entry.placeholders:
                data["placeholders"] = [str(placeholder) for placeholder in entry.placeholders]
            if self.write_locations and entry.locations:
                data["locations"] = [str(location) for location in entry.locations]
            if entry.translations:
                data["translations"] = dict(entry.translations)
            entries[entry.key] = data
        return {
            "version": CATALOG_VERSION,
            "source_locale": catalog.source_locale,
            "entries": entries,
        }


def _catalog_from_payload(path: Path, payload: Any, source_locale: str) -> Catalog:
    if not isinstance(payload, dict):
        raise CatalogFormatError(path, "catalog root must be a mapping")
    version = payload.get("version", CATALOG_VERSION)
    if version != CATALOG_VERSION:
        raise CatalogFormatError(path, f"unsupported catalog version {version!r}")
    locale = payload.get("source_locale", source_locale)
    if not isinstance(locale, str):
        raise CatalogFormatError(path, "source_locale must be a string")
    raw_entries = payload.get("entries") or {}
    if not isinstance(raw_entries, dict):
        raise CatalogFormatError(path, "entries must be a mapping")

    catalog = Catalog(source_locale=locale)
    for key, raw in raw_entries.items():
        entry = _entry_from_payload(path, str(key), raw)
        if entry.key in catalog:
            raise CatalogFormatError(path, f"duplicate entry key {entry.key!r}")
        catalog.add(entry)
    return catalog


def _entry_from_payload(path: Path, key: str, raw: Any) -> TranslationEntry:
    if not isinstance(raw, dict) or not isinstance(raw.get("text"), str):
        raise CatalogFormatError(path, f"entry {key!r} needs a text string")
    context = raw.get("context")
    if context is not None and not isinstance(context, str):
        raise CatalogFormatError(path, f"entry {key!r} has a non-string context")
    translations = raw.get("translations") or {}
    if not isinstance(translations, dict):
        raise CatalogFormatError(path, f"entry {key!r} translations must be a mapping")
    return TranslationEntry(
        key=key,
        text=raw["text"],
        placeholders=tuple(Placeholder.parse(str(item)) for item in _as_list(raw.get("placeholders"))),
        context=context or None,
        locations=[SourceLocation.parse(str(item)) for item in _as_list(raw.get("locations"))],
        translations={str(locale): str(text) for locale, text in translations.items() if text is not None},
    )


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


__all__ = ["CatalogStore"]
