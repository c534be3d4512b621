# Client-side narrowing of the page that is already on screen.

from __future__ import annotations

from typing import Any, Dict, List, Optional

from db.models import ALL

Row = Dict[str, Any]


def _matches(term: str, *values: Optional[str]) -> bool:
    needle = term.lower()
    return any(needle in (value or "").lower() for value in values)


def search_accounts(rows: List[Row], term: str) -> List[Row]:
    if not term:
        return rows
    return [
        r for r in rows
        if _matches(term, r.get("full_name"), r.get("email"), r.get("user_id"), r.get("brand_name"))
    ]


def search_invoices(rows: List[Row], term: str) -> List[Row]:
    if not term:
        return rows
    return [
        r for r in rows
        if _matches(
            term,
            r.get("payment_reference"),
            r.get("customer_name"),
            r.get("merchant_name"),
            r.get("customer_email"),
        )
    ]


def filter_reviews(
    rows: List[Row],
    term: str = "",
    rating: str = ALL,
    featured: str = ALL,
) -> List[Row]:
    """rating is "All" or "1".."5"; featured is "All", "true" or "false"."""
    result = []
    for r in rows:
        if term and not _matches(term, r.get("user_name"), r.get("review_text")):
            continue
        if rating != ALL and str(r.get("rating")) != rating:
            continue
        if featured == "true" and not r.get("is_featured"):
            continue
        if featured == "false" and r.get("is_featured"):
            continue
        result.append(r)
    return result


def status_label(status: Optional[str]) -> str:
    if not status:
        return "Unknown"
    return status[:1].upper() + status[1:]
