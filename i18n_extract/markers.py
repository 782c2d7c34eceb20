"""Matcher predicates for translation-marking call sites."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple


def normalise_callee(callee: str) -> str:
    """Collapse a callee expression to a dotted path (``a::b!`` -> ``a.b``)."""
    cleaned = "".join(callee.split())
    cleaned = cleaned.replace("::", ".").rstrip("!")
    return cleaned.lstrip(".")


@dataclass(frozen=True)
class Marker:
    """A function or macro name that marks its first argument for translation."""

    name: str
    minify_key: bool = False

    def matches(self, callee: str) -> bool:
        target = normalise_callee(self.name)
        if not target:
            return False
        path = normalise_callee(callee)
        return path == target or path.endswith(f".{target}")


DEFAULT_MARKERS: Tuple[Marker, ...] = (
    Marker("t"),
    Marker("translate"),
    Marker("_"),
    Marker("gettext"),
    Marker("tr", minify_key=True),
)


class MarkerSet:
    """Ordered collection of markers; the first matching marker wins."""

    def __init__(self, markers: Optional[Iterable[Marker]] = None) -> None:
        self._markers: List[Marker] = list(DEFAULT_MARKERS if markers is None else markers)

    def match(self, callee: str) -> Optional[Marker]:
        for marker in self._markers:
            if marker.matches(callee):
                return marker
        return None

    def names(self) -> Sequence[str]:
        return [marker.name for marker in self._markers]

    def __iter__(self) -> Iterator[Marker]:
        return iter(self._markers)

    def __len__(self) -> int:
        return len(self._markers)


__all__ = ["DEFAULT_MARKERS", "Marker", "MarkerSet", "normalise_callee"]
