from __future__ import annotations

from typing import Any, Mapping, Sequence

LANGUAGES: tuple[str, ...] = ("en", "es", "fr", "pt")
HISTORY_FILTERS: tuple[str, ...] = ("ALL", "CREATED", "TRANSLATED", "FAILED")


def format_flow(record: Mapping[str, Any]) -> str:
    """Render the language pair of a ticket, e.g. ``en → pt``."""

    source = record.get("sourceLang") or "auto"
    return f"{source} → {record.get('targetLang', '')}"


def sort_history(records: Sequence[Mapping[str, Any]]) -> list[Mapping[str, Any]]:
    """Newest tickets first; ISO timestamps sort lexically."""

    return sorted(records, key=lambda record: str(record.get("createdAt", "")), reverse=True)


def history_rows(records: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for record in sort_history(records):
        rows.append(
            {
                "id": record.get("id"),
                "flow": format_flow(record),
                "status": record.get("status"),
                "original": record.get("originalText"),
                "translation": record.get("translatedText") or "",
                "created": record.get("createdAt"),
            }
        )
    return rows
