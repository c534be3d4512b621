# db/stats.py
"""
Overview and analytics figures.

Independent queries inside a phase are awaited together with
asyncio.gather, so one failed query fails the whole phase.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Optional

from supabase import AsyncClient

from db.aggregates import (
    average_rating,
    bucket_revenue,
    build_recent_activity,
    count_by_university,
    month_buckets,
    sum_revenue,
    top_categories,
)
from db.models import (
    INVOICES_TABLE,
    PRODUCTS_TABLE,
    REQUEST_LOGS_TABLE,
    REVIEWS_TABLE,
    SCHOOLS_TABLE,
    VERIFICATION_STATUSES,
    VISITORS_TABLE,
    Analytics,
    DashboardStats,
    MonthBucket,
)

logger = logging.getLogger(__name__)

DASHBOARD_MONTHS = 7
ANALYTICS_MONTHS = 12


# ---------------- QUERY BUILDERS ----------------

def _head_count(client: AsyncClient, table: str, **eq):
    query = client.table(table).select("*", count="exact", head=True)
    for column, value in eq.items():
        query = query.eq(column, value)
    return query


def _in_month(query, bucket: MonthBucket):
    return query.gte("created_at", bucket.start.isoformat()).lte("created_at", bucket.end.isoformat())


def _newest(client: AsyncClient, table: str, limit: int, **eq):
    query = client.table(table).select("*")
    for column, value in eq.items():
        query = query.eq(column, value)
    return query.order("created_at", desc=True).limit(limit)


async def _count(query) -> int:
    resp = await query.execute()
    return resp.count or 0


async def _rows(query) -> list:
    resp = await query.execute()
    return resp.data or []


# ---------------- DASHBOARD ----------------

async def _month_growth(client: AsyncClient, bucket: MonthBucket) -> dict:
    users, merchants = await asyncio.gather(
        _count(_in_month(_head_count(client, VISITORS_TABLE, user_type="user"), bucket)),
        _count(_in_month(_head_count(client, VISITORS_TABLE, user_type="merchant"), bucket)),
    )
    return {"month": bucket.label, "users": users, "merchants": merchants}


async def fetch_dashboard_stats(client: AsyncClient, now: Optional[datetime] = None) -> DashboardStats:
    buckets = month_buckets(DASHBOARD_MONTHS, now)

    user_count, merchant_count, pending_count, invoices = await asyncio.gather(
        _count(_head_count(client, VISITORS_TABLE, user_type="user")),
        _count(_head_count(client, VISITORS_TABLE, user_type="merchant")),
        _count(_head_count(client, VISITORS_TABLE, verification_status="pending")),
        _rows(
            client.table(INVOICES_TABLE)
            .select("invoice_amount, created_at")
            .order("created_at", desc=True)
        ),
    )

    user_growth = await asyncio.gather(*(_month_growth(client, b) for b in buckets))

    recent_users, recent_merchants, recent_invoices, pending = await asyncio.gather(
        _rows(_newest(client, VISITORS_TABLE, 3, user_type="user")),
        _rows(_newest(client, VISITORS_TABLE, 2, user_type="merchant")),
        _rows(_newest(client, INVOICES_TABLE, 2)),
        _rows(_newest(client, VISITORS_TABLE, 2, verification_status="pending")),
    )

    stats = DashboardStats(
        total_users=user_count,
        total_merchants=merchant_count,
        total_revenue=sum_revenue(invoices),
        pending_verifications=pending_count,
        user_growth=list(user_growth),
        revenue_by_month=bucket_revenue(invoices, buckets),
        recent_activity=build_recent_activity(
            recent_users, recent_merchants, recent_invoices, pending
        ),
    )
    logger.info(
        "Dashboard stats: %d users, %d merchants, %d pending",
        stats.total_users, stats.total_merchants, stats.pending_verifications,
    )
    return stats


# ---------------- ANALYTICS ----------------

async def _school_count(client: AsyncClient, school: dict) -> dict:
    count = await _count(_head_count(client, VISITORS_TABLE, school_id=school["id"]))
    return {"school": school.get("short_name"), "count": count}


async def _status_count(client: AsyncClient, status: str) -> dict:
    count = await _count(
        _head_count(client, VISITORS_TABLE, user_type="merchant", verification_status=status)
    )
    return {"status": status.capitalize(), "count": count}


async def _month_revenue(client: AsyncClient, bucket: MonthBucket) -> dict:
    invoices = await _rows(_in_month(client.table(INVOICES_TABLE).select("invoice_amount"), bucket))
    return {"month": bucket.label, "revenue": sum_revenue(invoices)}


async def fetch_analytics(client: AsyncClient, now: Optional[datetime] = None) -> Analytics:
    schools = await _rows(client.table(SCHOOLS_TABLE).select("short_name, id"))
    buckets = month_buckets(ANALYTICS_MONTHS, now, with_year=True)

    # TODO: replace the per-school/per-status/per-month counts with a grouped RPC once the schema exposes one
    (
        users_by_school,
        merchants_by_status,
        revenue_by_month,
        products,
        requests,
        reviews,
        total_requests,
        total_products,
    ) = await asyncio.gather(
        asyncio.gather(*(_school_count(client, s) for s in schools)),
        asyncio.gather(*(_status_count(client, s) for s in VERIFICATION_STATUSES)),
        asyncio.gather(*(_month_revenue(client, b) for b in buckets)),
        _rows(client.table(PRODUCTS_TABLE).select("product_categories")),
        _rows(client.table(REQUEST_LOGS_TABLE).select("university")),
        _rows(client.table(REVIEWS_TABLE).select("rating")),
        _count(_head_count(client, REQUEST_LOGS_TABLE)),
        _count(_head_count(client, PRODUCTS_TABLE)),
    )

    return Analytics(
        users_by_school=list(users_by_school),
        merchants_by_status=list(merchants_by_status),
        revenue_by_month=list(revenue_by_month),
        top_categories=top_categories(products),
        requests_by_university=count_by_university(requests),
        average_rating=average_rating(reviews),
        total_requests=total_requests,
        total_products=total_products,
    )
