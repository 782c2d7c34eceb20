"""End-to-end extraction runs over temporary projects."""

from __future__ import annotations

from pathlib import Path
from typing import List

import pytest

from i18n_extract.catalog import Catalog, CatalogStore
from i18n_extract.config import ConfigError, load_config
from i18n_extract.extractor import parse_placeholders
from i18n_extract.markers import MarkerSet
from i18n_extract.models import InvocationSite, SourceFile, SourceLocation, TranslationEntry
from i18n_extract.pipeline import ExtractionPipeline
from i18n_extract.scanners import Scanner
from tests._fixtures.project_builder import ProjectBuilder

RUST_MAIN = """
fn main() {
    println!("{}", t!("hello.world", "Hello, World!"));
    println!("{}", t!("greeting", "Hi"));
}
"""


def _seed_catalog(builder: ProjectBuilder, *entries: TranslationEntry) -> bytes:
    CatalogStore(builder.catalog_path).write(Catalog(entries))
    return builder.catalog_path.read_bytes()


def _entry(key: str, text: str, **kwargs) -> TranslationEntry:
    return TranslationEntry(key=key, text=text, placeholders=parse_placeholders(text), **kwargs)


def test_first_run_creates_catalog(project_builder: ProjectBuilder) -> None:
    project_builder.write({"src/main.rs": RUST_MAIN})

    outcome = project_builder.extract()

    assert outcome.written is True
    assert outcome.report.added == ["hello.world", "greeting"]
    catalog = project_builder.load_catalog()
    entry = catalog.get("hello.world")
    assert entry is not None
    assert entry.text == "Hello, World!"
    assert entry.locations == [SourceLocation("src/main.rs", 2)]


def test_strict_run_with_conflict_writes_nothing(project_builder: ProjectBuilder) -> None:
    project_builder.write({"src/main.rs": RUST_MAIN})
    before = _seed_catalog(
        project_builder,
        _entry("greeting", "Hello"),
        _entry("farewell", "Goodbye"),
    )

    outcome = project_builder.extract(strict=True)

    assert outcome.blocked is True
    assert outcome.written is False
    assert outcome.report.added == ["hello.world"]
    assert outcome.report.removed == ["farewell"]
    assert outcome.report.conflicted() == [("greeting", "text-mismatch")]
    assert project_builder.catalog_path.read_bytes() == before


def test_non_strict_run_writes_and_carries_translations(project_builder: ProjectBuilder) -> None:
    project_builder.write({"src/main.rs": RUST_MAIN})
    _seed_catalog(
        project_builder,
        _entry("greeting", "Hi", translations={"fr": "Salut"}),
        _entry("farewell", "Goodbye"),
    )

    outcome = project_builder.extract()

    assert outcome.written is True
    assert not outcome.report.has_conflicts
    catalog = project_builder.load_catalog()
    assert catalog.keys() == ["greeting", "hello.world"]
    assert catalog.get("greeting").translations == {"fr": "Salut"}


def test_second_run_is_idempotent(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "src/main.rs": RUST_MAIN,
            "app/views.py": """
                from i18n import _

                TITLE = _("Dashboard")
                WELCOME = _("Welcome, {user}!", user="someone")
            """,
        }
    )
    project_builder.extract()
    first = project_builder.catalog_path.read_bytes()

    outcome = project_builder.extract(workers=4)

    assert not outcome.report.has_changes
    assert outcome.report.diagnostics == []
    assert project_builder.catalog_path.read_bytes() == first


def test_non_literal_arguments_become_warnings(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "app/dynamic.py": """
                from i18n import _

                def label(key):
                    return _(key)
            """
        }
    )

    outcome = project_builder.extract()

    assert len(outcome.catalog) == 0
    assert [d.kind for d in outcome.report.diagnostics] == ["non-literal-argument"]
    assert str(outcome.report.diagnostics[0].location) == "app/dynamic.py:4"


def test_unparsable_file_is_skipped(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "app/broken.py": "def broken(:\n    _('Never seen')\n",
            "app/good.py": "_('Seen')\n",
        }
    )

    outcome = project_builder.extract()

    assert outcome.catalog.keys() == ["Seen"]
    assert [d.kind for d in outcome.report.diagnostics] == ["parse-error"]
    assert outcome.report.diagnostics[0].location.path == "app/broken.py"


def test_results_do_not_depend_on_worker_count(project_builder: ProjectBuilder) -> None:
    files = {f"pkg/mod_{index:02d}.py": f"_('Message {index}')\n" for index in range(12)}
    project_builder.write(files)

    serial = project_builder.extract(workers=1, dry_run=True)
    parallel = project_builder.extract(workers=8, dry_run=True)

    assert serial.catalog == parallel.catalog
    assert serial.catalog.keys() == [f"Message {index}" for index in range(12)]


def test_dry_run_does_not_write(project_builder: ProjectBuilder) -> None:
    project_builder.write({"src/main.rs": RUST_MAIN})

    outcome = project_builder.extract(dry_run=True)

    assert outcome.dry_run is True
    assert outcome.written is False
    assert outcome.report.added == ["hello.world", "greeting"]
    assert not project_builder.catalog_path.exists()


def test_manual_texts_are_added(project_builder: ProjectBuilder) -> None:
    project_builder.write({"app/good.py": "_('Seen')\n"})

    outcome = project_builder.extract(extra_texts=["Printed by the installer"])

    assert outcome.report.added == ["Seen", "Printed by the installer"]
    assert "Printed by the installer" in project_builder.load_catalog()


def test_placeholder_argument_mismatch_blocks_strict_run(project_builder: ProjectBuilder) -> None:
    project_builder.write({"app/views.py": "_('Hello, {name}!', nam='x')\n"})

    outcome = project_builder.extract(strict=True)

    assert outcome.blocked is True
    assert outcome.report.conflicted() == [("Hello, {name}!", "placeholder-mismatch")]
    assert not project_builder.catalog_path.exists()


def test_configuration_file_is_honoured(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            ".i18n.yml": """
                catalog: i18n/messages.json
                available-locales: [en, fr]
                exclude: ["legacy/"]
                markers: [tr_]
            """,
            "app/views.py": "tr_('Configured')\n_('Default marker')\n",
            "legacy/old.py": "tr_('Legacy')\n",
        }
    )

    outcome = project_builder.extract()

    assert outcome.catalog_path == project_builder.path().resolve() / "i18n" / "messages.json"
    assert outcome.catalog.keys() == ["Configured"]
    assert outcome.report.missing_translations == {"fr": 1}
    assert outcome.catalog_path.read_text(encoding="utf-8").startswith("{\n")


class _InterruptingScanner(Scanner):
    language = "python"
    suffixes = (".py",)

    def scan(self, source: SourceFile, markers: MarkerSet) -> List[InvocationSite]:
        raise KeyboardInterrupt


def test_undecodable_file_is_reported_and_skipped(project_builder: ProjectBuilder) -> None:
    project_builder.write({"app/a.py": "_('ok')\n"})
    (project_builder.path() / "app" / "b.py").write_bytes(b"_('caf\xe9')\n")

    outcome = project_builder.extract()

    assert outcome.catalog.keys() == ["ok"]
    assert [d.kind for d in outcome.report.diagnostics] == ["io-error"]
    assert outcome.report.diagnostics[0].location.path == "app/b.py"


def test_interrupt_leaves_catalog_untouched(project_builder: ProjectBuilder) -> None:
    project_builder.write({"app/a.py": "_('ok')\n", "app/b.py": "_('other')\n"})
    before = _seed_catalog(project_builder, _entry("farewell", "Goodbye"))
    pipeline = ExtractionPipeline(scanners=[_InterruptingScanner()])

    with pytest.raises(KeyboardInterrupt):
        pipeline.run(project_builder.path(), workers=2)

    assert project_builder.catalog_path.read_bytes() == before


def test_catalog_override_does_not_mutate_config(project_builder: ProjectBuilder) -> None:
    project_builder.write({"app/a.py": "_('ok')\n"})
    config = load_config(project_builder.path())

    outcome = project_builder.extract(config=config, catalog="other.yml")

    assert config.catalog_path == Path("locales/catalog.yml")
    assert outcome.catalog_path == config.root / "other.yml"
    assert outcome.catalog_path.exists()


def test_strict_flag_overrides_configuration(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            ".i18n.yml": "strict: true\n",
            "app/views.py": "_('Hello, {name}!', nam='x')\n",
        }
    )

    assert project_builder.extract().blocked is True
    outcome = project_builder.extract(strict=False)

    assert outcome.blocked is False
    assert outcome.written is True
    assert outcome.report.conflicted() == [("Hello, {name}!", "placeholder-mismatch")]


def test_unknown_language_is_a_config_error(project_builder: ProjectBuilder) -> None:
    project_builder.write({".i18n.yml": "languages: [cobol]\n"})

    with pytest.raises(ConfigError) as excinfo:
        project_builder.extract()
    assert "cobol" in str(excinfo.value)
