"""Tests for scanner discovery."""

from __future__ import annotations

from typing import List

import pytest

from i18n_extract.markers import MarkerSet
from i18n_extract.models import InvocationSite, SourceFile
from i18n_extract.scanners import (
    PythonScanner,
    RustScanner,
    Scanner,
    discover_scanners,
    scanner_for,
)


def test_discover_scanners_returns_builtins() -> None:
    scanners = discover_scanners()
    kinds = {type(scanner) for scanner in scanners}
    assert {PythonScanner, RustScanner}.issubset(kinds)


def test_discover_scanners_honours_enabled_languages() -> None:
    scanners = discover_scanners(["Rust"])
    assert [type(scanner) for scanner in scanners] == [RustScanner]


def test_discover_scanners_rejects_unknown_languages() -> None:
    with pytest.raises(ValueError) as excinfo:
        discover_scanners(["python", "cobol"])
    assert "cobol" in str(excinfo.value)


def test_scanner_for_matches_suffix() -> None:
    scanners = discover_scanners(["python", "rust"])
    assert isinstance(scanner_for("src/lib.rs", scanners), RustScanner)
    assert isinstance(scanner_for("pkg/stubs.pyi", scanners), PythonScanner)
    assert scanner_for("README.md", scanners) is None


class TemplateScanner(Scanner):
    language = "template"
    suffixes = (".tmpl",)

    def scan(self, source: SourceFile, markers: MarkerSet) -> List[InvocationSite]:
        return []


class _EntryPoint:
    def __init__(self, name: str, obj: object) -> None:
        self.name = name
        self._obj = obj

    def load(self) -> object:
        return self._obj


def test_discover_scanners_loads_entry_points(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "i18n_extract.scanners._iter_entry_points",
        lambda: [_EntryPoint("template", TemplateScanner)],
    )

    kinds = [type(scanner) for scanner in discover_scanners()]
    assert kinds[-1] is TemplateScanner
    assert [type(scanner) for scanner in discover_scanners(["template"])] == [TemplateScanner]


def test_discover_scanners_accepts_factories(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "i18n_extract.scanners._iter_entry_points",
        lambda: [_EntryPoint("template", lambda: TemplateScanner())],
    )

    scanners = discover_scanners(["template"])
    assert isinstance(scanner_for("views/index.tmpl", scanners), TemplateScanner)


def test_discover_scanners_rejects_non_scanner_entry_points(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(
        "i18n_extract.scanners._iter_entry_points",
        lambda: [_EntryPoint("broken", object())],
    )

    with pytest.raises(TypeError):
        discover_scanners()
