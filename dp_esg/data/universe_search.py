# === MODULE PURPOSE ===
# Keyword search over already-fetched ESG universe rows.
# Pure and synchronous: no I/O, inputs are never modified.

# === KEY CONCEPTS ===
# - Substring match: Case-sensitive "keyword in field"
# - Empty fields: A None or empty field never matches
# - Combined search: Ric matches, then CommonName, then PermId, duplicates removed

from __future__ import annotations

from typing import Callable, Iterable

from dp_esg.data.models.universe import UniverseRow


def _matching(
    rows: Iterable[UniverseRow],
    keyword: str,
    field: Callable[[UniverseRow], str | None],
) -> list[UniverseRow]:
    return [row for row in rows if field(row) and keyword in field(row)]


def search_by_perm_id(keyword: str, rows: Iterable[UniverseRow]) -> list[UniverseRow]:
    """Rows whose PermId contains keyword."""
    return _matching(rows, keyword, lambda row: row.perm_id)


def search_by_ric(keyword: str, rows: Iterable[UniverseRow]) -> list[UniverseRow]:
    """Rows whose primary RIC contains keyword."""
    return _matching(rows, keyword, lambda row: row.primary_ric)


def search_by_common_name(keyword: str, rows: Iterable[UniverseRow]) -> list[UniverseRow]:
    """Rows whose common name contains keyword."""
    return _matching(rows, keyword, lambda row: row.common_name)


def search(keyword: str, rows: Iterable[UniverseRow]) -> list[UniverseRow]:
    """
    Search all three fields.

    Results are ordered Ric matches first, then CommonName, then PermId.
    Rows equal to an earlier result are dropped.
    """
    rows = list(rows)
    combined = (
        search_by_ric(keyword, rows)
        + search_by_common_name(keyword, rows)
        + search_by_perm_id(keyword, rows)
    )
    # dict keeps first-occurrence order
    return list(dict.fromkeys(combined))


SEARCH_FIELDS: dict[str, Callable[[str, Iterable[UniverseRow]], list[UniverseRow]]] = {
    "all": search,
    "permid": search_by_perm_id,
    "ric": search_by_ric,
    "commonname": search_by_common_name,
}
