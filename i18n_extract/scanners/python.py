"""Python scanner matching ``_("...")``-style calls."""

from __future__ import annotations

import ast
from typing import Iterable, List, Optional

import tree_sitter_python
from tree_sitter import Language, Node

from ..markers import MarkerSet
from ..models import Argument, InvocationSite
from .base import TreeSitterScanner, iter_nodes, node_text

_CALLEE_TYPES = {"identifier", "attribute"}
_STRING_TYPES = {"string", "concatenated_string", "parenthesized_expression"}


class PythonScanner(TreeSitterScanner):
    """Finds calls such as ``_("Save")`` or ``i18n.t("menu.open", count=n)``."""

    language = "python"
    suffixes = (".py", ".pyi")

    def _load_language(self) -> Language:
        return Language(tree_sitter_python.language())

    def _collect(
        self, root: Node, source_bytes: bytes, path: str, markers: MarkerSet
    ) -> Iterable[InvocationSite]:
        for node in iter_nodes(root):
            if node.type != "call":
                continue
            function = node.child_by_field_name("function")
            if function is None or function.type not in _CALLEE_TYPES:
                continue
            callee = node_text(function, source_bytes)
            marker = markers.match(callee)
            if marker is None:
                continue
            arguments = node.child_by_field_name("arguments")
            if arguments is None or arguments.type != "argument_list":
                continue
            yield self._site(
                path, node, node, callee, marker, _arguments(arguments, source_bytes)
            )


def _arguments(node: Node, source_bytes: bytes) -> List[Argument]:
    arguments: List[Argument] = []
    for child in node.named_children:
        if child.type in {"comment", "dictionary_splat"}:
            continue
        if child.type == "keyword_argument":
            name_node = child.child_by_field_name("name")
            value_node = child.child_by_field_name("value")
            if name_node is None or value_node is None:
                continue
            arguments.append(
                Argument(
                    text=node_text(value_node, source_bytes),
                    name=node_text(name_node, source_bytes),
                    value=_literal_value(value_node, source_bytes),
                )
            )
            continue
        arguments.append(
            Argument(text=node_text(child, source_bytes), value=_literal_value(child, source_bytes))
        )
    return arguments


def _literal_value(node: Node, source_bytes: bytes) -> Optional[str]:
    if node.type not in _STRING_TYPES:
        return None
    text = node_text(node, source_bytes)
    try:
        value = ast.literal_eval(f"({text})")
    except (ValueError, SyntaxError, MemoryError, RecursionError):
        # f-strings and other computed expressions.
        return None
    return value if isinstance(value, str) else None


__all__ = ["PythonScanner"]
