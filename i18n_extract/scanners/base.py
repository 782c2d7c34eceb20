"""Base classes for syntax scanners."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from pathlib import PurePosixPath
from typing import Iterable, Iterator, List, Optional, Tuple

from tree_sitter import Language, Node, Parser

from ..errors import ParseError
from ..markers import Marker, MarkerSet
from ..models import Argument, InvocationSite, SourceFile


class Scanner(ABC):
    """Contract for scanners that locate translation calls in one file."""

    language: str = ""
    suffixes: Tuple[str, ...] = ()

    def supports(self, path: str) -> bool:
        return PurePosixPath(path).suffix.lower() in self.suffixes

    @abstractmethod
    def scan(self, source: SourceFile, markers: MarkerSet) -> List[InvocationSite]:
        """Return invocation sites in document order; raise ParseError on invalid input."""


class TreeSitterScanner(Scanner):
    """Scanner backed by a tree-sitter grammar.

    Parsers are not thread-safe, so each thread builds its own on first use.
    """

    def __init__(self) -> None:
        self._ts_language = self._load_language()
        self._local = threading.local()

    @abstractmethod
    def _load_language(self) -> Language:
        """Return the tree-sitter language for this scanner."""

    @abstractmethod
    def _collect(
        self, root: Node, source_bytes: bytes, path: str, markers: MarkerSet
    ) -> Iterable[InvocationSite]:
        """Yield invocation sites found below ``root``."""

    def scan(self, source: SourceFile, markers: MarkerSet) -> List[InvocationSite]:
        source_bytes = source.content.encode("utf-8")
        tree = self._parser().parse(source_bytes)
        root = tree.root_node
        if root.has_error:
            error = first_error(root)
            line, column = (error.start_point[0] + 1, error.start_point[1] + 1) if error else (0, 0)
            raise ParseError(
                source.path,
                f"invalid {self.language} syntax",
                line=line,
                column=column,
            )
        return list(self._collect(root, source_bytes, source.path, markers))

    def _parser(self) -> Parser:
        parser = getattr(self._local, "parser", None)
        if parser is None:
            parser = Parser(self._ts_language)
            self._local.parser = parser
        return parser

    @staticmethod
    def _site(
        path: str,
        start: Node,
        end: Node,
        callee: str,
        marker: Marker,
        arguments: List[Argument],
    ) -> InvocationSite:
        return InvocationSite(
            path=path,
            line=start.start_point[0] + 1,
            column=start.start_point[1] + 1,
            end_line=end.end_point[0] + 1,
            end_column=end.end_point[1] + 1,
            callee=callee,
            marker=marker,
            arguments=arguments,
        )


def iter_nodes(root: Node) -> Iterator[Node]:
    """Walk the tree in document order without recursion."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def first_error(root: Node) -> Optional[Node]:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        stack.extend(reversed([child for child in node.children if child.has_error or child.is_missing]))
    return None


def node_text(node: Node, source_bytes: bytes) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def span_text(first: Node, last: Node, source_bytes: bytes) -> str:
    return source_bytes[first.start_byte : last.end_byte].decode("utf-8", errors="replace")


__all__ = ["Scanner", "TreeSitterScanner", "first_error", "iter_nodes", "node_text", "span_text"]
