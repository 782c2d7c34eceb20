"""Human-readable and JSON renderings of a sync report."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from .models import SyncReport

REPORT_FORMATS = ("text", "json")


def render_report(
    report: SyncReport,
    fmt: str = "text",
    *,
    catalog_path: Optional[str] = None,
    written: bool = False,
) -> str:
    if fmt == "json":
        return json.dumps(report_payload(report, catalog_path=catalog_path, written=written), indent=2) + "\n"
    if fmt != "text":
        raise ValueError(f"Unknown report format: {fmt}")
    return _render_text(report, catalog_path=catalog_path, written=written)


def report_payload(
    report: SyncReport, *, catalog_path: Optional[str] = None, written: bool = False
) -> Dict[str, Any]:
    return {
        "catalog": catalog_path,
        "written": written,
        "added": list(report.added),
        "removed": list(report.removed),
        "conflicts": [
            {
                "key": conflict.key,
                "reason": conflict.reason,
                "detail": conflict.detail,
                "locations": [str(location) for location in conflict.locations],
            }
            for conflict in report.conflicts
        ],
        "warnings": [
            {
                "kind": diagnostic.kind,
                "message": diagnostic.message,
                "location": str(diagnostic.location) if diagnostic.location else None,
            }
            for diagnostic in report.diagnostics
        ],
        "missing_translations": dict(report.missing_translations),
    }


def _render_text(report: SyncReport, *, catalog_path: Optional[str], written: bool) -> str:
    lines: List[str] = []
    if catalog_path:
        state = "updated" if written else "not written"
        lines.append(f"Catalog {catalog_path} ({state})")
    lines.append(
        f"Added: {len(report.added)}, Removed: {len(report.removed)}, "
        f"Conflicts: {len(report.conflicts)}, Warnings: {len(report.diagnostics)}"
    )
    for key in report.added:
        lines.append(f"  + {key}")
    for key in report.removed:
        lines.append(f"  - {key}")
    for conflict in report.conflicts:
        where = ", ".join(str(location) for location in conflict.locations)
        line = f"  ! {conflict.key}: {conflict.reason}"
        if conflict.detail:
            line += f" ({conflict.detail})"
        if where:
            line += f" at {where}"
        lines.append(line)
    for diagnostic in report.diagnostics:
        lines.append(f"  warning {diagnostic}")
    for locale, missing in report.missing_translations.items():
        if missing:
            lines.append(f"  {locale}: {missing} untranslated")
    return "\n".join(lines) + "\n"


__all__ = ["REPORT_FORMATS", "render_report", "report_payload"]
