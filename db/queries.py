# db/queries.py
"""
Paginated, filtered reads against the marketplace tables.

Every function takes the client explicitly, builds one PostgREST query,
asks for an exact row count in the same round trip and returns a Page.
Remote errors are not caught here; QueryRunner turns them into a failed
result.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from supabase import AsyncClient

from db.aggregates import amount_in_range, group_by_merchant
from db.models import (
    HOSTELS_TABLE,
    INVOICES_TABLE,
    PRODUCTS_TABLE,
    REVIEWS_TABLE,
    SCHOOLS_TABLE,
    VISITOR_SELECT,
    VISITORS_TABLE,
    InvoiceFilters,
    MerchantFilters,
    MerchantPage,
    Page,
    ProductFilters,
    Row,
    UserFilters,
    is_unconstrained,
    page_range,
)

logger = logging.getLogger(__name__)


def _apply_status(query, column: str, value: Optional[str]):
    if is_unconstrained(value):
        return query
    return query.eq(column, value.lower())


def _apply_date_range(query, date_from: Optional[str], date_to: Optional[str]):
    if not is_unconstrained(date_from):
        query = query.gte("created_at", date_from)
    if not is_unconstrained(date_to):
        query = query.lte("created_at", date_to)
    return query


def _visitor_query(client: AsyncClient, user_type: str):
    return (
        client.table(VISITORS_TABLE)
        .select(VISITOR_SELECT, count="exact")
        .eq("user_type", user_type)
        .order("created_at", desc=True)
    )


# ---------------- ACCOUNTS ----------------

async def fetch_users(
    client: AsyncClient,
    filters: Optional[UserFilters] = None,
    page: int = 1,
    limit: int = 10,
) -> Page:
    filters = filters or UserFilters()
    start, end = page_range(page, limit)

    query = _visitor_query(client, "user")
    query = _apply_status(query, "verification_status", filters.verification_status)
    if not is_unconstrained(filters.school_id):
        query = query.eq("school_id", filters.school_id)
    query = _apply_date_range(query, filters.date_from, filters.date_to)

    resp = await query.range(start, end).execute()
    return Page(items=resp.data or [], total=resp.count or 0, page=page, limit=limit)


async def fetch_merchants(
    client: AsyncClient,
    filters: Optional[MerchantFilters] = None,
    page: int = 1,
    limit: int = 10,
) -> MerchantPage:
    filters = filters or MerchantFilters()
    start, end = page_range(page, limit)

    query = _visitor_query(client, "merchant")
    query = _apply_status(query, "verification_status", filters.verification_status)
    query = _apply_date_range(query, filters.date_from, filters.date_to)

    resp = await query.range(start, end).execute()
    merchants = resp.data or []

    products_by_merchant = {}
    merchant_ids = [m["id"] for m in merchants]
    if merchant_ids:
        products = (
            await client.table(PRODUCTS_TABLE)
            .select("*")
            .in_("merchant_id", merchant_ids)
            .execute()
        )
        products_by_merchant = group_by_merchant(products.data or [], merchant_ids)

    return MerchantPage(
        items=merchants,
        total=resp.count or 0,
        page=page,
        limit=limit,
        products_by_merchant=products_by_merchant,
    )


# ---------------- CATALOG ----------------

async def fetch_products(
    client: AsyncClient,
    filters: Optional[ProductFilters] = None,
    page: int = 1,
    limit: int = 10,
) -> Page:
    filters = filters or ProductFilters()
    start, end = page_range(page, limit)

    query = (
        client.table(PRODUCTS_TABLE)
        .select(f"*, unique_visitors ({VISITOR_SELECT})", count="exact")
        .order("created_at", desc=True)
    )
    if filters.merchant_id:
        query = query.eq("merchant_id", filters.merchant_id)
    if filters.is_available is not None:
        query = query.eq("is_available", filters.is_available)
    if filters.is_featured is not None:
        query = query.eq("is_featured", filters.is_featured)
    if filters.search:
        query = query.ilike("product_description", f"%{filters.search}%")

    resp = await query.range(start, end).execute()
    logger.debug("Fetched %d products (page %d)", len(resp.data or []), page)
    return Page(items=resp.data or [], total=resp.count or 0, page=page, limit=limit)


async def fetch_invoices(
    client: AsyncClient,
    filters: Optional[InvoiceFilters] = None,
    page: int = 1,
    limit: int = 10,
) -> Page:
    filters = filters or InvoiceFilters()
    start, end = page_range(page, limit)

    query = (
        client.table(INVOICES_TABLE)
        .select("*", count="exact")
        .order("created_at", desc=True)
    )
    query = _apply_status(query, "invoice_status", filters.status)
    query = _apply_date_range(query, filters.date_from, filters.date_to)

    resp = await query.range(start, end).execute()
    invoices = resp.data or []

    # invoice_amount is text, so the range check cannot be pushed to PostgREST
    if filters.min_amount is not None or filters.max_amount is not None:
        invoices = [
            inv for inv in invoices
            if amount_in_range(inv, filters.min_amount, filters.max_amount)
        ]

    return Page(items=invoices, total=resp.count or 0, page=page, limit=limit)


async def fetch_reviews(client: AsyncClient, page: int = 1, limit: int = 10) -> Page:
    start, end = page_range(page, limit)
    resp = await (
        client.table(REVIEWS_TABLE)
        .select("*", count="exact")
        .order("created_at", desc=True)
        .range(start, end)
        .execute()
    )
    return Page(items=resp.data or [], total=resp.count or 0, page=page, limit=limit)


# ---------------- DIRECTORY ----------------

async def fetch_schools(client: AsyncClient, order_by: str = "created_at") -> List[Row]:
    query = client.table(SCHOOLS_TABLE).select("*")
    if order_by == "name":
        query = query.order("name")
    else:
        query = query.order(order_by, desc=True)
    resp = await query.execute()
    return resp.data or []


async def fetch_hostels(client: AsyncClient, school_id: Optional[str] = None) -> List[Row]:
    query = client.table(HOSTELS_TABLE).select("*")
    if school_id:
        query = query.eq("school_id", school_id)
    resp = await query.order("created_at", desc=True).execute()
    return resp.data or []
