"""Syntax scanner implementations and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Iterable, List, Optional, Sequence, Set

from .base import Scanner, TreeSitterScanner
from .python import PythonScanner
from .rust import RustScanner

_ENTRY_POINT_GROUP = "i18n_extract.scanners"

_BUILTIN_FACTORIES: dict[str, Callable[[], Scanner]] = {
    "python": PythonScanner,
    "rust": RustScanner,
}


def discover_scanners(enabled: Sequence[str] | None = None) -> List[Scanner]:
    """Return instantiated scanners, honoring optional enabled language names."""

    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}

    scanners: List[Scanner] = []
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], Scanner]) -> None:
        key = name.lower()
        if enabled_set is not None and key not in enabled_set:
            return
        if key in seen:
            return
        instance = factory()
        if not isinstance(instance, Scanner):
            raise TypeError(f"Scanner factory for '{name}' did not return a Scanner instance")
        scanners.append(instance)
        seen.add(key)

    for name, factory in _BUILTIN_FACTORIES.items():
        _add(name, factory)

    for entry in _iter_entry_points():
        name = entry.name
        try:
            loaded = entry.load()
        except Exception as exc:
            raise RuntimeError(f"Failed to load scanner entry point '{name}': {exc}") from exc

        def _factory(obj: object = loaded) -> Scanner:
            return _coerce_scanner(obj)

        _add(name, _factory)

    if enabled_set is not None:
        missing = enabled_set - seen
        if missing:
            raise ValueError(f"Unknown scanners requested: {', '.join(sorted(missing))}")

    return scanners


def scanner_for(path: str, scanners: Iterable[Scanner]) -> Optional[Scanner]:
    for scanner in scanners:
        if scanner.supports(path):
            return scanner
    return None


def _coerce_scanner(obj: object) -> Scanner:
    if isinstance(obj, Scanner):
        return obj
    if isinstance(obj, type) and issubclass(obj, Scanner):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, Scanner):
            return instance
    raise TypeError("Scanner entry point must be a Scanner subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "PythonScanner",
    "RustScanner",
    "Scanner",
    "TreeSitterScanner",
    "discover_scanners",
    "scanner_for",
]
