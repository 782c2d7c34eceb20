"""Project walking with ignore rules and symlink cycle protection."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Callable, Collection, Iterable, Iterator, List, Optional, Sequence, Set

from .logging import get_logger
from .models import Diagnostic, SourceLocation

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "venv",
    "node_modules",
    "target",
    "vendor",
    "build",
    "dist",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".tox",
    ".idea",
}

logger = get_logger("walker")


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or an exclusion glob."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        target = rel_path
        if self.anchored or self.has_slash:
            if fnmatchcase(target, self.pattern):
                return True
            if self.directory_only and target.startswith(f"{self.pattern}/"):
                return True
            return False

        for part in target.split("/"):
            if fnmatchcase(part, self.pattern):
                return True
        return False


def build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    has_slash = "/" in pattern
    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash=has_slash,
    )


def parse_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.exists():
        return []

    rules: List[IgnoreRule] = []
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Could not read %s: %s", path, exc)
        return []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


class SourceWalker:
    """Lazily enumerates candidate source files below a project root.

    Iterating the walker starts a fresh traversal each time. Directory
    symlinks are followed, but every canonical directory and file is yielded
    at most once, so symlink cycles terminate.
    """

    def __init__(
        self,
        root: Path | str,
        *,
        excludes: Iterable[str] = (),
        suffixes: Optional[Collection[str]] = None,
        on_warning: Optional[Callable[[Diagnostic], None]] = None,
    ) -> None:
        root_path = Path(root).expanduser()
        if not root_path.exists():
            raise FileNotFoundError(f"Project root not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Project root is not a directory: {root}")
        if not os.access(root_path, os.R_OK | os.X_OK):
            raise PermissionError(f"Project root is not readable: {root}")

        self.root = root_path.resolve()
        self.suffixes = {suffix.lower() for suffix in suffixes} if suffixes is not None else None
        self._on_warning = on_warning
        self._rules = parse_gitignore(self.root / ".gitignore")
        for pattern in excludes:
            rule = build_ignore_rule(pattern)
            if rule is not None:
                self._rules.append(rule)

    def __iter__(self) -> Iterator[Path]:
        return self.walk()

    def walk(self) -> Iterator[Path]:
        """Yield absolute file paths in a stable, sorted order."""
        visited_dirs: Set[Path] = set()
        visited_files: Set[Path] = set()

        def _onerror(error: OSError) -> None:
            self._warn(error)

        for dirpath, dirnames, filenames in os.walk(self.root, followlinks=True, onerror=_onerror):
            current_dir = Path(dirpath)
            real_dir = current_dir.resolve()
            if real_dir in visited_dirs:
                logger.debug("Skipping already visited directory %s", current_dir)
                dirnames[:] = []
                continue
            visited_dirs.add(real_dir)

            rel_dir = current_dir.relative_to(self.root).as_posix() if current_dir != self.root else ""

            filtered_dirs = []
            for name in sorted(dirnames):
                if name in _EXCLUDED_DIRS:
                    continue
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if should_ignore(rel_path, True, self._rules):
                    continue
                filtered_dirs.append(name)
            dirnames[:] = filtered_dirs

            for filename in sorted(filenames):
                path = current_dir / filename
                if self.suffixes is not None and path.suffix.lower() not in self.suffixes:
                    continue
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if should_ignore(rel_path, False, self._rules):
                    continue
                try:
                    real_file = path.resolve(strict=True)
                except OSError as exc:
                    self._warn(exc, rel_path)
                    continue
                if real_file in visited_files:
                    continue
                visited_files.add(real_file)
                yield path

    def relative(self, path: Path) -> str:
        return path.relative_to(self.root).as_posix()

    def _warn(self, error: OSError, rel_path: str | None = None) -> None:
        if rel_path is None:
            filename = getattr(error, "filename", None)
            rel_path = str(filename) if filename else str(self.root)
            try:
                rel_path = Path(rel_path).relative_to(self.root).as_posix()
            except ValueError:
                pass
        diagnostic = Diagnostic(
            kind="io-error",
            message=error.strerror or str(error),
            location=SourceLocation(path=rel_path, line=0),
        )
        logger.warning("Skipping %s: %s", rel_path, diagnostic.message)
        if self._on_warning is not None:
            self._on_warning(diagnostic)


__all__ = ["IgnoreRule", "SourceWalker", "build_ignore_rule", "parse_gitignore", "should_ignore"]
