# db/models.py
"""
Supabase does not require ORM model classes.
Tables managed in the Supabase dashboard and read by this console:

Table: unique_visitors
- id (uuid, PK)
- user_id (text)
- full_name, email, phone_number (text)
- user_type (text: user | merchant)
- verification_status (text: verified | unverified | pending)
- verification_id (text, URL of the uploaded document, nullable)
- school_id (uuid, FK → schools.id)
- brand_name (text, merchants only)
- is_hostel_merchant (bool), hostel_id (uuid, FK → hostels.id), room_number (text)
- created_at, last_visit (timestamp)

Table: merchant_products
- id (uuid, PK), merchant_id (uuid, FK → unique_visitors.id)
- product_description, product_price, discount_price (text)
- is_available, is_featured (bool)
- product_categories, image_urls (text[])
- created_at (timestamp)

Table: invoices
- id (uuid, PK), payment_reference, invoice_status (text)
- customer_name, customer_email, merchant_name (text)
- invoice_amount (text, e.g. "₦1,200.50")
- created_at (timestamp)

Table: site_reviews
- id, user_name, rating (1-5), review_text, is_featured, created_at

Table: schools
- id, name, short_name, is_active, created_at

Table: hostels
- id, name, school_id (FK → schools.id), gender, created_at

Table: request_logs
- id, university, request_text, created_at
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from math import ceil
from typing import Any, Dict, List, Literal, Optional


# ---------------------- TABLES ----------------------

VISITORS_TABLE = "unique_visitors"
PRODUCTS_TABLE = "merchant_products"
INVOICES_TABLE = "invoices"
REVIEWS_TABLE = "site_reviews"
SCHOOLS_TABLE = "schools"
HOSTELS_TABLE = "hostels"
REQUEST_LOGS_TABLE = "request_logs"

VISITOR_SELECT = "*, schools (name, short_name)"

# ---------------------- VALUES ----------------------

ALL = "All"

UserType = Literal["user", "merchant"]
VerificationStatus = Literal["verified", "unverified", "pending"]

VERIFICATION_STATUSES = ("verified", "unverified", "pending")
HOSTEL_GENDERS = ("Not Selected", "Male", "Female", "Mixed")

ActivityType = Literal[
    "user_registered",
    "merchant_registered",
    "invoice_created",
    "verification_request",
]

Row = Dict[str, Any]


# ---------------------- FILTERS ----------------------

@dataclass(frozen=True)
class UserFilters:
    verification_status: Optional[str] = ALL
    school_id: Optional[str] = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None


@dataclass(frozen=True)
class MerchantFilters:
    verification_status: Optional[str] = ALL
    date_from: Optional[str] = None
    date_to: Optional[str] = None


@dataclass(frozen=True)
class ProductFilters:
    merchant_id: Optional[str] = None
    is_available: Optional[bool] = None
    is_featured: Optional[bool] = None
    search: Optional[str] = None


@dataclass(frozen=True)
class InvoiceFilters:
    status: Optional[str] = ALL
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    min_amount: Optional[float] = None
    max_amount: Optional[float] = None


# ---------------------- RESULTS ----------------------

@dataclass
class Page:
    items: List[Row] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 10

    @property
    def total_pages(self) -> int:
        return total_pages(self.total, self.limit)


@dataclass
class MerchantPage(Page):
    # Only merchants present in `items` appear as keys.
    products_by_merchant: Dict[str, List[Row]] = field(default_factory=dict)


@dataclass
class RecentActivity:
    id: str
    type: ActivityType
    title: str
    description: str
    created_at: str
    user_name: Optional[str] = None
    amount: Optional[str] = None


@dataclass
class DashboardStats:
    total_users: int = 0
    total_merchants: int = 0
    total_revenue: float = 0.0
    pending_verifications: int = 0
    user_growth: List[Dict[str, Any]] = field(default_factory=list)
    revenue_by_month: List[Dict[str, Any]] = field(default_factory=list)
    recent_activity: List[RecentActivity] = field(default_factory=list)


@dataclass
class Analytics:
    users_by_school: List[Dict[str, Any]] = field(default_factory=list)
    merchants_by_status: List[Dict[str, Any]] = field(default_factory=list)
    revenue_by_month: List[Dict[str, Any]] = field(default_factory=list)
    top_categories: List[Dict[str, Any]] = field(default_factory=list)
    requests_by_university: List[Dict[str, Any]] = field(default_factory=list)
    average_rating: float = 0.0
    total_requests: int = 0
    total_products: int = 0


@dataclass(frozen=True)
class MonthBucket:
    label: str
    year: int
    month: int
    start: datetime
    end: datetime

    @property
    def key(self) -> tuple:
        return (self.year, self.month)


# ---------------------- PAGINATION ----------------------

def page_range(page: int, limit: int) -> tuple:
    """Zero-based inclusive (from, to) offsets for a 1-based page."""
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")
    return (page - 1) * limit, page * limit - 1


def total_pages(total: int, limit: int) -> int:
    return max(1, ceil((total or 0) / limit))


def is_unconstrained(value: Any) -> bool:
    """True for filter values that must not become a predicate."""
    return value is None or value == "" or value == ALL
