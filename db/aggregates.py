# db/aggregates.py
"""
Pure helpers that turn fetched rows into the numbers the console shows.

Nothing in here touches the network, so every aggregation can be checked
against plain lists of dicts.
"""

from __future__ import annotations

import math
import re
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from db.models import MonthBucket, RecentActivity, Row

MONTH_ABBR = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

_NON_NUMERIC = re.compile(r"[^\d.-]")
_LEADING_NUMBER = re.compile(r"-?(?:\d+(?:\.\d*)?|\.\d+)")


# ----------------- AMOUNTS ------------------------

def parse_amount(value: Any) -> float:
    """
    Numeric value of a textual amount such as "₦1,200.50".

    Everything except digits, '.' and '-' is stripped and the longest
    leading number is read. Anything unparseable counts as 0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)

    cleaned = _NON_NUMERIC.sub("", str(value))
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return 0.0
    return float(match.group(0))


def sum_revenue(invoices: Iterable[Row]) -> float:
    return sum(parse_amount(inv.get("invoice_amount")) for inv in invoices)


def format_naira(amount: float) -> str:
    text = f"{amount:,.2f}".rstrip("0").rstrip(".")
    return f"₦{text}"


def amount_in_range(
    invoice: Row,
    min_amount: Optional[float] = None,
    max_amount: Optional[float] = None,
) -> bool:
    amount = parse_amount(invoice.get("invoice_amount"))
    if min_amount is not None and amount < min_amount:
        return False
    if max_amount is not None and amount > max_amount:
        return False
    return True


# ----------------- TIME BUCKETS ------------------------

def parse_timestamp(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        ts = value
    else:
        try:
            ts = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def _shift_month(year: int, month: int, delta: int) -> tuple:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_buckets(n: int, now: Optional[datetime] = None, with_year: bool = False) -> List[MonthBucket]:
    """The last `n` calendar months ending with the month of `now`, oldest first."""
    now = parse_timestamp(now) or datetime.now(timezone.utc)
    buckets = []
    for offset in range(n - 1, -1, -1):
        year, month = _shift_month(now.year, now.month, -offset)
        next_year, next_month = _shift_month(year, month, 1)
        start = datetime(year, month, 1, tzinfo=timezone.utc)
        end = datetime(next_year, next_month, 1, tzinfo=timezone.utc) - timedelta(microseconds=1)
        label = MONTH_ABBR[month - 1]
        if with_year:
            label = f"{label} {year}"
        buckets.append(MonthBucket(label=label, year=year, month=month, start=start, end=end))
    return buckets


def bucket_revenue(invoices: Iterable[Row], buckets: List[MonthBucket]) -> List[Dict[str, Any]]:
    """Attribute invoice revenue to month buckets; invoices outside them are dropped."""
    revenue = {b.key: 0.0 for b in buckets}
    for inv in invoices:
        created = parse_timestamp(inv.get("created_at"))
        if created is None:
            continue
        key = (created.year, created.month)
        if key in revenue:
            revenue[key] += parse_amount(inv.get("invoice_amount"))
    return [{"month": b.label, "revenue": revenue[b.key]} for b in buckets]


# ----------------- CATEGORICAL ------------------------

def top_categories(products: Iterable[Row], n: int = 10) -> List[Dict[str, Any]]:
    counts: Counter = Counter()
    for product in products:
        for category in product.get("product_categories") or []:
            counts[category] += 1
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)[:n]
    return [{"category": category, "count": count} for category, count in ranked]


def count_by_university(requests: Iterable[Row]) -> List[Dict[str, Any]]:
    counts: Dict[Any, int] = {}
    for request in requests:
        university = request.get("university")
        counts[university] = counts.get(university, 0) + 1
    return [{"university": u, "count": c} for u, c in counts.items()]


def average_rating(reviews: List[Row]) -> float:
    if not reviews:
        return 0.0
    mean = sum(r.get("rating") or 0 for r in reviews) / len(reviews)
    # half-up, so 4.25 shows as 4.3
    return math.floor(mean * 10 + 0.5) / 10


def rating_distribution(reviews: List[Row]) -> List[Dict[str, Any]]:
    total = len(reviews)
    rows = []
    for rating in (5, 4, 3, 2, 1):
        count = sum(1 for r in reviews if r.get("rating") == rating)
        rows.append({
            "rating": rating,
            "count": count,
            "percentage": (count / total) * 100 if total else 0.0,
        })
    return rows


def group_by_merchant(products: Iterable[Row], merchant_ids: Iterable[str]) -> Dict[str, List[Row]]:
    wanted = set(merchant_ids)
    grouped: Dict[str, List[Row]] = {}
    for product in products:
        merchant_id = product.get("merchant_id")
        if merchant_id not in wanted:
            continue
        grouped.setdefault(merchant_id, []).append(product)
    return grouped


# ----------------- RECENT ACTIVITY ------------------------

def _display_name(row: Row, fallback: str) -> str:
    return row.get("brand_name") or row.get("full_name") or fallback


def build_recent_activity(
    users: Iterable[Row],
    merchants: Iterable[Row],
    invoices: Iterable[Row],
    pending: Iterable[Row],
    limit: int = 6,
) -> List[RecentActivity]:
    activity: List[RecentActivity] = []

    for user in users:
        activity.append(RecentActivity(
            id=user["id"],
            type="user_registered",
            title="New user registered",
            description=f"{user.get('full_name') or 'Unknown User'} just created an account",
            created_at=user["created_at"],
            user_name=user.get("full_name"),
        ))

    for merchant in merchants:
        name = _display_name(merchant, "Unknown Merchant")
        activity.append(RecentActivity(
            id=merchant["id"],
            type="merchant_registered",
            title="New merchant added",
            description=f"{name} joined as a merchant",
            created_at=merchant["created_at"],
            user_name=merchant.get("brand_name") or merchant.get("full_name"),
        ))

    for invoice in invoices:
        amount = format_naira(parse_amount(invoice.get("invoice_amount")))
        customer = invoice.get("customer_name") or "Unknown Customer"
        activity.append(RecentActivity(
            id=invoice["id"],
            type="invoice_created",
            title="New transaction",
            description=f"{amount} payment from {customer}",
            created_at=invoice["created_at"],
            amount=invoice.get("invoice_amount"),
        ))

    for user in pending:
        name = _display_name(user, "Unknown User")
        activity.append(RecentActivity(
            id=user["id"],
            type="verification_request",
            title="Verification request",
            description=f"{name} submitted verification documents",
            created_at=user["created_at"],
            user_name=user.get("brand_name") or user.get("full_name"),
        ))

    # sorted() is stable, so equal timestamps keep insertion order
    epoch = datetime.min.replace(tzinfo=timezone.utc)
    activity = sorted(
        activity,
        key=lambda a: parse_timestamp(a.created_at) or epoch,
        reverse=True,
    )
    return activity[:limit]
