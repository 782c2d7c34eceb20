"""Rust scanner matching ``t!("...")`` macros and ``translate("...")`` calls."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Sequence

import tree_sitter_rust
from tree_sitter import Language, Node

from ..markers import MarkerSet
from ..models import Argument, InvocationSite
from .base import TreeSitterScanner, iter_nodes, node_text, span_text

_COMMENT_TYPES = {"line_comment", "block_comment"}
_STRING_TYPES = {"string_literal", "raw_string_literal"}
_CALLEE_TYPES = {"identifier", "scoped_identifier", "field_expression"}
_NAMED_ARGUMENT_OPERATORS = {"=", "=>"}

_ESCAPE_PATTERN = re.compile(
    r"\\(?:u\{(?P<unicode>[0-9a-fA-F_]{1,8})\}|x(?P<hex>[0-9a-fA-F]{2})|(?P<newline>\r?\n\s*)|(?P<char>.))",
    re.DOTALL,
)
_SIMPLE_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "0": "\0", "\\": "\\", "'": "'", '"': '"'}


class RustScanner(TreeSitterScanner):
    """Finds ``t!``-style macro invocations, including ones nested in other macros."""

    language = "rust"
    suffixes = (".rs",)

    def _load_language(self) -> Language:
        return Language(tree_sitter_rust.language())

    def _collect(
        self, root: Node, source_bytes: bytes, path: str, markers: MarkerSet
    ) -> Iterable[InvocationSite]:
        for node in iter_nodes(root):
            if node.type == "macro_invocation":
                macro = node.child_by_field_name("macro")
                tree = _token_tree(node)
                if macro is None or tree is None:
                    continue
                callee = f"{node_text(macro, source_bytes)}!"
                marker = markers.match(callee)
                if marker is not None:
                    yield self._site(
                        path, node, node, callee, marker, _split_token_tree(tree, source_bytes)
                    )
            elif node.type == "call_expression":
                function = node.child_by_field_name("function")
                arguments = node.child_by_field_name("arguments")
                if function is None or arguments is None or function.type not in _CALLEE_TYPES:
                    continue
                callee = node_text(function, source_bytes)
                marker = markers.match(callee)
                if marker is not None:
                    yield self._site(
                        path, node, node, callee, marker, _call_arguments(arguments, source_bytes)
                    )
            elif node.type == "token_tree":
                yield from self._nested_sites(node, source_bytes, path, markers)

    def _nested_sites(
        self, tree: Node, source_bytes: bytes, path: str, markers: MarkerSet
    ) -> Iterable[InvocationSite]:
        """Match ``path::name!(...)`` and ``name(...)`` token shapes inside a token tree."""
        children = tree.children
        index = 0
        while index < len(children):
            child = children[index]
            if child.type != "identifier":
                index += 1
                continue
            parts = [node_text(child, source_bytes)]
            cursor = index
            while (
                cursor + 2 < len(children)
                and node_text(children[cursor + 1], source_bytes) == "::"
                and children[cursor + 2].type == "identifier"
            ):
                parts.append(node_text(children[cursor + 2], source_bytes))
                cursor += 2
            follow = cursor + 1
            bang = follow < len(children) and node_text(children[follow], source_bytes) == "!"
            if bang:
                follow += 1
            if follow < len(children) and children[follow].type == "token_tree":
                callee = "::".join(parts) + ("!" if bang else "")
                marker = markers.match(callee)
                if marker is not None:
                    arguments = _split_token_tree(children[follow], source_bytes)
                    yield self._site(path, child, children[follow], callee, marker, arguments)
                index = follow + 1
                continue
            index = cursor + 1


def _token_tree(node: Node) -> Optional[Node]:
    for child in node.children:
        if child.type == "token_tree":
            return child
    return None


def _split_token_tree(tree: Node, source_bytes: bytes) -> List[Argument]:
    groups: List[List[Node]] = [[]]
    for child in tree.children[1:-1]:
        if child.type in _COMMENT_TYPES:
            continue
        if not child.is_named and node_text(child, source_bytes) == ",":
            groups.append([])
            continue
        groups[-1].append(child)
    return [_token_argument(group, source_bytes) for group in groups if group]


def _token_argument(group: Sequence[Node], source_bytes: bytes) -> Argument:
    if len(group) >= 3 and node_text(group[1], source_bytes) in _NAMED_ARGUMENT_OPERATORS:
        head = group[0]
        name: Optional[str] = None
        if head.type == "identifier":
            name = node_text(head, source_bytes)
        elif head.type in _STRING_TYPES:
            name = rust_literal(head, source_bytes)
        if name is not None:
            value_nodes = group[2:]
            value = rust_literal(value_nodes[0], source_bytes) if len(value_nodes) == 1 else None
            return Argument(
                text=span_text(value_nodes[0], value_nodes[-1], source_bytes),
                name=name,
                value=value,
            )
    value = rust_literal(group[0], source_bytes) if len(group) == 1 else None
    return Argument(text=span_text(group[0], group[-1], source_bytes), value=value)


def _call_arguments(arguments: Node, source_bytes: bytes) -> List[Argument]:
    return [
        Argument(text=node_text(child, source_bytes), value=rust_literal(child, source_bytes))
        for child in arguments.named_children
        if child.type not in _COMMENT_TYPES and child.type != "attribute_item"
    ]


def rust_literal(node: Node, source_bytes: bytes) -> Optional[str]:
    """Return the value of a Rust string literal node, or None for anything else."""
    if node.type not in _STRING_TYPES:
        return None
    text = node_text(node, source_bytes)
    if text.startswith(("b", "c")):
        return None
    if node.type == "raw_string_literal":
        hashes = len(text) - len(text[1:].lstrip("#")) - 1
        return text[2 + hashes : len(text) - 1 - hashes]
    return unescape(text[1:-1])


def unescape(body: str) -> str:
    def _replace(match: re.Match[str]) -> str:
        if match.group("unicode") is not None:
            return chr(int(match.group("unicode").replace("_", ""), 16))
        if match.group("hex") is not None:
            return chr(int(match.group("hex"), 16))
        if match.group("newline") is not None:
            return ""
        char = match.group("char")
        return _SIMPLE_ESCAPES.get(char, f"\\{char}")

    return _ESCAPE_PATTERN.sub(_replace, body)


__all__ = ["RustScanner", "rust_literal", "unescape"]
