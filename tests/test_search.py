"""Tests for client-side search over the visible page."""

from admin_console.search import filter_reviews, search_accounts, search_invoices, status_label


ACCOUNTS = [
    {"full_name": "Ada Obi", "email": "ada@unilag.edu.ng", "user_id": "USR-001"},
    {"full_name": None, "brand_name": "Snacks Hub", "email": "hub@mail.com", "user_id": "MER-002"},
]

INVOICES = [
    {"payment_reference": "PAY-123", "customer_name": "Ada", "merchant_name": "Snacks Hub"},
    {"payment_reference": "PAY-456", "customer_name": "Bola", "customer_email": "bola@oau.edu.ng"},
]

REVIEWS = [
    {"user_name": "Ada", "rating": 5, "review_text": "Great service", "is_featured": True},
    {"user_name": "Bola", "rating": 3, "review_text": "Slow delivery", "is_featured": False},
    {"user_name": "Chi", "rating": 5, "review_text": "Fast", "is_featured": False},
]


def test_search_accounts():
    assert search_accounts(ACCOUNTS, "") == ACCOUNTS
    assert search_accounts(ACCOUNTS, "UNILAG") == [ACCOUNTS[0]]
    assert search_accounts(ACCOUNTS, "snacks") == [ACCOUNTS[1]]
    assert search_accounts(ACCOUNTS, "mer-002") == [ACCOUNTS[1]]
    assert search_accounts(ACCOUNTS, "nobody") == []


def test_search_invoices():
    assert search_invoices(INVOICES, "pay-4") == [INVOICES[1]]
    assert search_invoices(INVOICES, "hub") == [INVOICES[0]]
    assert search_invoices(INVOICES, "oau.edu") == [INVOICES[1]]


def test_filter_reviews():
    assert filter_reviews(REVIEWS) == REVIEWS
    assert filter_reviews(REVIEWS, rating="5") == [REVIEWS[0], REVIEWS[2]]
    assert filter_reviews(REVIEWS, featured="true") == [REVIEWS[0]]
    assert filter_reviews(REVIEWS, rating="5", featured="false") == [REVIEWS[2]]
    assert filter_reviews(REVIEWS, term="delivery") == [REVIEWS[1]]


def test_status_label():
    assert status_label("pending") == "Pending"
    assert status_label(None) == "Unknown"
    assert status_label("") == "Unknown"
