"""Tests for amount parsing, month buckets and the categorical roll-ups."""

from datetime import datetime, timezone

import pytest

from db.aggregates import (
    average_rating,
    bucket_revenue,
    build_recent_activity,
    count_by_university,
    format_naira,
    group_by_merchant,
    month_buckets,
    parse_amount,
    parse_timestamp,
    rating_distribution,
    sum_revenue,
    top_categories,
)
from tests.conftest import ts


# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------


class TestParseAmount:

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("₦1,200.50", 1200.50),
            ("invalid", 0.0),
            ("₦0", 0.0),
            (None, 0.0),
            ("", 0.0),
            ("-50", -50.0),
            ("NGN 3,000", 3000.0),
            ("1.2.3", 1.2),
            (250, 250.0),
        ],
    )
    def test_parse(self, raw, expected):
        assert parse_amount(raw) == pytest.approx(expected)

    def test_sum_revenue_defaults_bad_amounts_to_zero(self):
        invoices = [
            {"invoice_amount": "₦1,200.50"},
            {"invoice_amount": "invalid"},
            {"invoice_amount": "₦0"},
        ]
        assert sum_revenue(invoices) == pytest.approx(1200.50)

    def test_missing_amount_key(self):
        assert sum_revenue([{}, {"invoice_amount": None}]) == 0.0

    def test_format_naira(self):
        assert format_naira(1200.5) == "₦1,200.5"
        assert format_naira(1000) == "₦1,000"
        assert format_naira(0) == "₦0"


# ---------------------------------------------------------------------------
# Month buckets
# ---------------------------------------------------------------------------


class TestMonthBuckets:

    def test_last_seven_months_end_at_current_month(self, now):
        buckets = month_buckets(7, now)
        assert [b.label for b in buckets] == ["Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct"]
        assert buckets[0].start == datetime(2026, 4, 1, tzinfo=timezone.utc)
        assert buckets[-1].end == datetime(2026, 10, 31, 23, 59, 59, 999999, tzinfo=timezone.utc)

    def test_year_labels_cross_year_boundary(self):
        buckets = month_buckets(3, datetime(2026, 1, 15, tzinfo=timezone.utc), with_year=True)
        assert [b.label for b in buckets] == ["Nov 2025", "Dec 2025", "Jan 2026"]

    def test_february_end_in_leap_year(self):
        (bucket,) = month_buckets(1, datetime(2028, 2, 10, tzinfo=timezone.utc))
        assert bucket.end.day == 29

    def test_revenue_buckets_sum_back_to_total(self, now):
        buckets = month_buckets(7, now)
        invoices = [
            {"invoice_amount": f"₦{amount}", "created_at": ts(2026, month, 10)}
            for month, amount in zip(range(4, 11), (100, 200, 300, 400, 500, 600, 700))
        ]

        series = bucket_revenue(invoices, buckets)

        assert sum(row["revenue"] for row in series) == pytest.approx(sum_revenue(invoices))
        assert [row["month"] for row in series] == [b.label for b in buckets]
        assert series[0] == {"month": "Apr", "revenue": 100.0}
        assert series[-1] == {"month": "Oct", "revenue": 700.0}

    def test_invoices_outside_window_are_dropped(self, now):
        buckets = month_buckets(7, now)
        invoices = [
            {"invoice_amount": "₦50", "created_at": ts(2025, 10, 3)},  # same label, a year earlier
            {"invoice_amount": "₦70", "created_at": ts(2026, 10, 3)},
            {"invoice_amount": "₦90", "created_at": None},
        ]

        series = bucket_revenue(invoices, buckets)

        assert series[-1]["revenue"] == 70.0
        assert sum(row["revenue"] for row in series) == 70.0

    def test_empty_months_are_seeded_with_zero(self, now):
        series = bucket_revenue([], month_buckets(7, now))
        assert len(series) == 7
        assert all(row["revenue"] == 0 for row in series)

    def test_parse_timestamp_handles_z_suffix_and_naive(self):
        assert parse_timestamp("2026-10-01T10:00:00Z") == datetime(2026, 10, 1, 10, tzinfo=timezone.utc)
        assert parse_timestamp("2026-10-01T10:00:00").tzinfo == timezone.utc
        assert parse_timestamp("not a date") is None


# ---------------------------------------------------------------------------
# Categorical
# ---------------------------------------------------------------------------


class TestCategorical:

    def test_top_categories(self):
        products = [
            {"product_categories": ["a", "b"]},
            {"product_categories": ["a"]},
            {"product_categories": ["c"]},
        ]
        result = top_categories(products)
        assert result[0] == {"category": "a", "count": 2}
        assert {r["category"]: r["count"] for r in result} == {"a": 2, "b": 1, "c": 1}

    def test_top_categories_keeps_ten(self):
        products = [{"product_categories": [f"cat{i}"] * (i + 1)} for i in range(12)]
        result = top_categories(products)
        assert len(result) == 10
        assert result[0] == {"category": "cat11", "count": 12}

    def test_top_categories_ignores_missing_lists(self):
        assert top_categories([{"product_categories": None}, {}]) == []

    def test_count_by_university(self):
        requests = [{"university": "UNILAG"}, {"university": "OAU"}, {"university": "UNILAG"}]
        assert count_by_university(requests) == [
            {"university": "UNILAG", "count": 2},
            {"university": "OAU", "count": 1},
        ]

    def test_average_rating(self):
        assert average_rating([]) == 0
        assert average_rating([{"rating": 5}, {"rating": 4}, {"rating": 4}]) == 4.3
        assert average_rating([{"rating": r} for r in (4, 5, 4, 4)]) == 4.3

    def test_rating_distribution(self):
        dist = rating_distribution([{"rating": 5}, {"rating": 5}, {"rating": 1}, {"rating": 3}])
        assert [row["rating"] for row in dist] == [5, 4, 3, 2, 1]
        assert dist[0]["count"] == 2
        assert dist[0]["percentage"] == 50.0
        assert rating_distribution([])[0]["percentage"] == 0.0

    def test_group_by_merchant_only_keeps_requested_ids(self):
        products = [
            {"id": "p1", "merchant_id": "m1"},
            {"id": "p2", "merchant_id": "m2"},
            {"id": "p3", "merchant_id": "m1"},
        ]
        grouped = group_by_merchant(products, ["m1"])
        assert list(grouped) == ["m1"]
        assert [p["id"] for p in grouped["m1"]] == ["p1", "p3"]


# ---------------------------------------------------------------------------
# Recent activity
# ---------------------------------------------------------------------------


class TestRecentActivity:

    def test_merged_sorted_and_truncated(self):
        users = [
            {"id": "u1", "full_name": "Ada", "created_at": ts(2026, 10, 10)},
            {"id": "u2", "full_name": None, "created_at": ts(2026, 10, 1)},
            {"id": "u3", "full_name": "Bola", "created_at": ts(2026, 9, 1)},
        ]
        merchants = [
            {"id": "m1", "brand_name": "Snacks Hub", "created_at": ts(2026, 10, 12)},
            {"id": "m2", "full_name": "Chidi", "created_at": ts(2026, 8, 1)},
        ]
        invoices = [
            {"id": "i1", "invoice_amount": "₦1,500", "customer_name": "Ada", "created_at": ts(2026, 10, 15)},
            {"id": "i2", "invoice_amount": "oops", "created_at": ts(2026, 7, 1)},
        ]
        pending = [
            {"id": "m1", "brand_name": "Snacks Hub", "created_at": ts(2026, 10, 12)},
            {"id": "u4", "created_at": ts(2026, 6, 1)},
        ]

        activity = build_recent_activity(users, merchants, invoices, pending)

        assert len(activity) == 6
        assert [a.id for a in activity] == ["i1", "m1", "m1", "u1", "u2", "u3"]
        # equal timestamps keep insertion order: merchant entry before verification entry
        assert [a.type for a in activity[1:3]] == ["merchant_registered", "verification_request"]
        assert activity[0].description == "₦1,500 payment from Ada"
        assert activity[0].amount == "₦1,500"
        assert activity[4].description == "Unknown User just created an account"

    def test_names_fall_back(self):
        activity = build_recent_activity(
            [], [{"id": "m", "created_at": ts(2026, 1, 1)}], [], [{"id": "p", "created_at": ts(2026, 1, 2)}]
        )
        assert activity[0].description == "Unknown User submitted verification documents"
        assert activity[1].description == "Unknown Merchant joined as a merchant"
