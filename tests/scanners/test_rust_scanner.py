"""Tests for the tree-sitter Rust scanner."""

from __future__ import annotations

import textwrap

import pytest

from i18n_extract.errors import ParseError
from i18n_extract.markers import MarkerSet
from i18n_extract.models import InvocationSite, SourceFile
from i18n_extract.scanners import RustScanner
from i18n_extract.scanners.rust import unescape


def _scan(content: str) -> list[InvocationSite]:
    source = SourceFile(path="src/main.rs", content=textwrap.dedent(content).lstrip("\n"))
    return RustScanner().scan(source, MarkerSet())


def test_scanner_finds_macro_invocations() -> None:
    sites = _scan(
        """
        fn main() {
            let greeting = t!("hello.world");
            println!("{}", greeting);
        }
        """
    )

    assert len(sites) == 1
    site = sites[0]
    assert site.callee == "t!"
    assert site.line == 2
    assert [arg.value for arg in site.arguments] == ["hello.world"]


def test_scanner_reads_named_arguments() -> None:
    sites = _scan(
        """
        fn greet(user: &User) -> String {
            t!("messages.hello", name = user.name, locale = "fr").to_string()
        }
        """
    )

    site = sites[0]
    assert site.positional[0].value == "messages.hello"
    name_arg = site.keyword("name")
    assert name_arg is not None
    assert name_arg.value is None
    assert name_arg.text == "user.name"
    locale_arg = site.keyword("locale")
    assert locale_arg is not None and locale_arg.value == "fr"


def test_scanner_accepts_arrow_named_arguments() -> None:
    sites = _scan(
        """
        fn main() {
            let _ = t!("Hello, %{name}", name => "World");
        }
        """
    )

    name_arg = sites[0].keyword("name")
    assert name_arg is not None and name_arg.value == "World"


def test_scanner_finds_macros_nested_in_other_macros() -> None:
    sites = _scan(
        """
        fn main() {
            println!("{}: {}", t!("label.name"), rust_i18n::t!("label.value"));
        }
        """
    )

    assert [site.callee for site in sites] == ["t!", "rust_i18n::t!"]
    assert [site.positional[0].value for site in sites] == ["label.name", "label.value"]


def test_scanner_finds_function_calls() -> None:
    sites = _scan(
        """
        fn title() -> String {
            i18n::translate("window.title", "Main window")
        }
        """
    )

    assert len(sites) == 1
    assert [arg.value for arg in sites[0].arguments] == ["window.title", "Main window"]


def test_scanner_decodes_raw_and_escaped_strings() -> None:
    sites = _scan(
        r'''
        fn main() {
            let a = t!(r#"Say "hi""#);
            let b = t!("tab\there\u{21}");
        }
        '''
    )

    assert [site.positional[0].value for site in sites] == ['Say "hi"', "tab\there!"]


def test_scanner_marks_dynamic_arguments_as_non_literal() -> None:
    sites = _scan(
        """
        fn main() {
            let key = "dynamic";
            let a = t!(key);
            let b = t!(format!("{}.title", key));
        }
        """
    )

    assert len(sites) == 2
    assert all(not site.positional[0].is_literal for site in sites)


def test_scanner_rejects_invalid_syntax() -> None:
    with pytest.raises(ParseError):
        _scan(
            """
            fn main( {
                t!("never");
            """
        )


def test_unescape_handles_line_continuations() -> None:
    assert unescape("one \\\n    two") == "one two"
    assert unescape("quote: \\\" backslash: \\\\") == 'quote: " backslash: \\'
