"""Turn invocation sites into translation entries."""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .config import KeyOptions
from .errors import NonLiteralArgument
from .models import Conflict, InvocationSite, Placeholder, TranslationEntry

RESERVED_KEYWORDS = frozenset({"locale", "context", "default"})
CONTEXT_SEPARATOR = "::"

_PLACEHOLDER_PATTERN = re.compile(
    r"(?P<escape>\{\{|\}\})"
    r"|%\((?P<printf>[A-Za-z_]\w*)\)(?P<conversion>[#0\- +]*\d*(?:\.\d+)?[diouxXeEfFgGcrsa])"
    r"|%?\{(?P<name>[A-Za-z_][\w.]*|\d+)(?::(?P<hint>[^{}]*))?\}"
)
_BASE62 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"


def parse_placeholders(text: str) -> Tuple[Placeholder, ...]:
    """Return unique placeholders in declaration order.

    Supports ``{name}``, ``{name:hint}``, ``%{name}`` and ``%(name)s``;
    ``{{`` and ``}}`` are literal braces.
    """
    seen: dict[str, Placeholder] = {}
    for match in _PLACEHOLDER_PATTERN.finditer(text):
        if match.group("escape") is not None:
            continue
        if match.group("printf") is not None:
            placeholder = Placeholder(match.group("printf"), match.group("conversion"))
        else:
            hint = match.group("hint")
            placeholder = Placeholder(match.group("name"), hint.strip() if hint else None)
        seen.setdefault(placeholder.name, placeholder)
    return tuple(seen.values())


def minify_key(text: str, options: KeyOptions) -> str:
    """Return a short hash-derived key for long message texts."""
    if len(text) <= options.minify_threshold:
        return text
    number = int.from_bytes(hashlib.sha256(text.encode("utf-8")).digest(), "big")
    digits: List[str] = []
    while number:
        number, remainder = divmod(number, 62)
        digits.append(_BASE62[remainder])
    encoded = "".join(reversed(digits)) or "0"
    return f"{options.minify_prefix}{encoded[: options.minify_len]}"


@dataclass
class Extraction:
    """The entry produced by one site plus any conflicts it raised on its own."""

    entry: TranslationEntry
    conflicts: List[Conflict] = field(default_factory=list)


class LiteralExtractor:
    """Applies key, text and placeholder rules to invocation sites."""

    def __init__(self, keys: Optional[KeyOptions] = None) -> None:
        self.keys = keys or KeyOptions()

    def extract(self, site: InvocationSite) -> Extraction:
        location = site.location
        positional = site.positional
        if not positional:
            raise NonLiteralArgument(location, f"{site.callee} called without a message argument")
        first = positional[0]
        if not first.is_literal:
            raise NonLiteralArgument(
                location, f"{site.callee} expects a string literal, got `{first.text}`"
            )

        explicit_key: Optional[str] = None
        text = first.value or ""
        default = site.keyword("default")
        second = positional[1] if len(positional) > 1 else None
        if default is not None:
            if not default.is_literal:
                raise NonLiteralArgument(location, f"default text is not a literal: `{default.text}`")
            explicit_key, text = text, default.value or ""
        elif second is not None and second.is_literal:
            explicit_key, text = text, second.value or ""

        context: Optional[str] = None
        context_arg = site.keyword("context")
        if context_arg is not None:
            if not context_arg.is_literal:
                raise NonLiteralArgument(location, f"context is not a literal: `{context_arg.text}`")
            context = context_arg.value or None

        if explicit_key is not None:
            key = explicit_key
        else:
            key = minify_key(text, self.keys) if site.marker.minify_key else text
            if context:
                key = f"{context}{CONTEXT_SEPARATOR}{key}"

        placeholders = parse_placeholders(text)
        entry = TranslationEntry(
            key=key,
            text=text,
            placeholders=placeholders,
            context=context,
            locations=[location],
        )
        return Extraction(entry=entry, conflicts=self._check_arguments(site, entry))

    @staticmethod
    def _check_arguments(site: InvocationSite, entry: TranslationEntry) -> List[Conflict]:
        declared = {name.split(".", 1)[0] for name in entry.placeholder_names}
        conflicts: List[Conflict] = []
        for argument in site.arguments:
            if argument.name is None or argument.name in RESERVED_KEYWORDS:
                continue
            if argument.name not in declared:
                conflicts.append(
                    Conflict(
                        key=entry.key,
                        reason="placeholder-mismatch",
                        detail=f"argument '{argument.name}' has no placeholder in the message text",
                        locations=(site.location,),
                    )
                )
        return conflicts


__all__ = [
    "CONTEXT_SEPARATOR",
    "Extraction",
    "LiteralExtractor",
    "RESERVED_KEYWORDS",
    "minify_key",
    "parse_placeholders",
]
