"""Core data models shared across extraction components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .markers import Marker


@dataclass(frozen=True, order=True)
class SourceLocation:
    """A 1-based position inside a project file.

    Only ``path:line`` is persisted, so the column takes no part in equality.
    """

    path: str
    line: int
    column: int = field(default=0, compare=False)

    def __str__(self) -> str:
        if self.line:
            return f"{self.path}:{self.line}"
        return self.path

    @classmethod
    def parse(cls, value: str) -> "SourceLocation":
        path, sep, line = value.rpartition(":")
        if sep and line.isdigit():
            return cls(path=path, line=int(line))
        return cls(path=value, line=0)


@dataclass
class SourceFile:
    """Path and decoded content of a file handed to a scanner."""

    path: str
    content: str


@dataclass(frozen=True)
class Argument:
    """One argument of an invocation site as written in the source."""

    text: str
    name: Optional[str] = None
    value: Optional[str] = None

    @property
    def is_literal(self) -> bool:
        return self.value is not None


@dataclass
class InvocationSite:
    """A located call of a translation-marking function or macro."""

    path: str
    line: int
    column: int
    end_line: int
    end_column: int
    callee: str
    marker: Marker
    arguments: List[Argument] = field(default_factory=list)

    @property
    def location(self) -> SourceLocation:
        return SourceLocation(path=self.path, line=self.line, column=self.column)

    @property
    def span(self) -> str:
        """``line:column-end_line:end_column`` of the whole call."""
        return f"{self.line}:{self.column}-{self.end_line}:{self.end_column}"

    @property
    def positional(self) -> List[Argument]:
        return [arg for arg in self.arguments if arg.name is None]

    def keyword(self, name: str) -> Optional[Argument]:
        for arg in self.arguments:
            if arg.name == name:
                return arg
        return None


@dataclass(frozen=True)
class Placeholder:
    """A named or positional interpolation marker inside a message."""

    name: str
    hint: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.name}:{self.hint}" if self.hint else self.name

    @classmethod
    def parse(cls, value: str) -> "Placeholder":
        name, sep, hint = value.partition(":")
        return cls(name=name, hint=hint if sep and hint else None)


@dataclass
class TranslationEntry:
    """A catalog entry: key, default text and metadata."""

    key: str
    text: str
    placeholders: Tuple[Placeholder, ...] = ()
    context: Optional[str] = None
    locations: List[SourceLocation] = field(default_factory=list)
    translations: Dict[str, str] = field(default_factory=dict)

    @property
    def placeholder_names(self) -> List[str]:
        return [placeholder.name for placeholder in self.placeholders]


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal problem recorded during a run."""

    kind: str
    message: str
    location: Optional[SourceLocation] = None

    def __str__(self) -> str:
        if self.location is not None:
            return f"{self.location}: {self.kind}: {self.message}"
        return f"{self.kind}: {self.message}"


@dataclass(frozen=True)
class Conflict:
    """Inconsistent metadata for one key."""

    key: str
    reason: str
    detail: str = ""
    locations: Tuple[SourceLocation, ...] = ()


@dataclass
class FileResult:
    """Everything extracted from a single file."""

    path: str
    entries: List[TranslationEntry] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    conflicts: List[Conflict] = field(default_factory=list)


@dataclass
class SyncReport:
    """Differences between the previous and the merged catalog."""

    added: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    conflicts: List[Conflict] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    missing_translations: Dict[str, int] = field(default_factory=dict)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed or self.conflicts)

    def conflicted(self) -> List[Tuple[str, str]]:
        return [(conflict.key, conflict.reason) for conflict in self.conflicts]
