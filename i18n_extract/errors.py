"""Exception hierarchy for extraction runs."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .models import SourceLocation


class ExtractError(Exception):
    """Base class for errors raised by the extraction engine."""


class ParseError(ExtractError):
    """Raised when a source file cannot be parsed by its scanner."""

    def __init__(self, path: str, message: str, *, line: int = 0, column: int = 0) -> None:
        super().__init__(message)
        self.path = path
        self.line = line
        self.column = column

    @property
    def location(self) -> SourceLocation:
        return SourceLocation(path=self.path, line=self.line, column=self.column)


class NonLiteralArgument(ExtractError):
    """Raised when a translation call does not receive a string literal."""

    def __init__(self, location: SourceLocation, detail: str) -> None:
        super().__init__(f"{detail} at {location}")
        self.location = location
        self.detail = detail


class CatalogFormatError(ExtractError):
    """Raised when a persisted catalog cannot be read back."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path


class WriteError(ExtractError):
    """Raised when the catalog could not be persisted; the previous file is intact."""

    def __init__(self, path: Path, cause: Optional[BaseException] = None) -> None:
        message = f"Failed to write catalog {path}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.path = path


__all__ = [
    "CatalogFormatError",
    "ExtractError",
    "NonLiteralArgument",
    "ParseError",
    "WriteError",
]
