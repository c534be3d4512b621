import pandas as pd
import streamlit as st

from admin_console import runtime, widgets
from admin_console.search import filter_reviews, search_invoices
from db.aggregates import average_rating, format_naira, parse_amount, rating_distribution
from db.models import ALL, InvoiceFilters, ProductFilters
from db.query_state import PagedQuery
from db.queries import fetch_invoices, fetch_products, fetch_reviews

PRODUCT_COLUMNS = [
    "product_description", "merchant", "product_price", "discount_price",
    "is_available", "is_featured", "categories", "created_at", "id",
]
INVOICE_COLUMNS = [
    "payment_reference", "customer_name", "customer_email", "merchant_name",
    "amount", "invoice_status", "created_at", "id",
]
REVIEW_COLUMNS = ["user_name", "rating", "review_text", "is_featured", "created_at", "id"]

TRI_STATE = {ALL: None, "Yes": True, "No": False}


# --- PRODUCTS ---------------------------------------------------------------

def render_products():
    st.title("📦 Products")
    cfg = runtime.get_config()

    c1, c2, c3 = st.columns([2, 1, 1])
    search = c1.text_input("Search products", key="products-search")
    available = c2.selectbox("Available", list(TRI_STATE), key="products-available")
    featured = c3.selectbox("Featured", list(TRI_STATE), key="products-featured")

    filters = ProductFilters(
        is_available=TRI_STATE[available],
        is_featured=TRI_STATE[featured],
        search=search or None,
    )
    page = widgets.page_for("products", filters)
    result = widgets.load("products", lambda: PagedQuery(fetch_products), filters, page, cfg.page_size)
    if widgets.failed(result):
        return

    rows = []
    for product in result.data.items:
        merchant = product.get("unique_visitors") or {}
        rows.append({
            **product,
            "merchant": merchant.get("brand_name") or merchant.get("full_name"),
            "categories": ", ".join(product.get("product_categories") or []),
        })
    widgets.table(rows, PRODUCT_COLUMNS, "No products found.")
    widgets.pager("products", result.data)


# --- INVOICES ---------------------------------------------------------------

def render_invoices():
    st.title("🧾 Invoices")
    cfg = runtime.get_config()

    with st.expander("Filters", expanded=True):
        c1, c2, c3 = st.columns(3)
        status = c1.selectbox("Status", [ALL, "Paid", "Pending", "Failed"], key="invoices-status")
        min_amount = c2.number_input("Min amount (₦)", min_value=0.0, value=None, key="invoices-min")
        max_amount = c3.number_input("Max amount (₦)", min_value=0.0, value=None, key="invoices-max")
        d1, d2 = st.columns(2)
        date_from = d1.date_input("From", value=None, key="invoices-from")
        date_to = d2.date_input("To", value=None, key="invoices-to")
    search = st.text_input("Search invoices", key="invoices-search")

    filters = InvoiceFilters(
        status=status,
        date_from=date_from.isoformat() if date_from else None,
        date_to=f"{date_to.isoformat()}T23:59:59.999999+00:00" if date_to else None,
        min_amount=min_amount,
        max_amount=max_amount,
    )
    page = widgets.page_for("invoices", filters)
    result = widgets.load("invoices", lambda: PagedQuery(fetch_invoices), filters, page, cfg.page_size)
    if widgets.failed(result):
        return

    invoices = search_invoices(result.data.items, search)
    rows = [
        {
            **inv,
            "amount": format_naira(parse_amount(inv["invoice_amount"])) if inv.get("invoice_amount") else "N/A",
        }
        for inv in invoices
    ]
    widgets.table(rows, INVOICE_COLUMNS, "No invoices found.")
    widgets.pager("invoices", result.data)

    # --- Export ---
    if invoices:
        csv = pd.DataFrame(invoices).to_csv(index=False).encode("utf-8")
        st.download_button(
            "📥 Download as CSV",
            csv,
            "invoices.csv",
            "text/csv",
            key="download-invoices",
        )


# --- REVIEWS ----------------------------------------------------------------

def render_reviews():
    st.title("⭐ Reviews")
    cfg = runtime.get_config()

    page = widgets.current_page("reviews")
    result = widgets.load("reviews", lambda: PagedQuery(fetch_reviews), None, page, cfg.page_size)
    if widgets.failed(result):
        return
    reviews = result.data.items

    # Figures cover the loaded page only
    col1, col2 = st.columns(2)
    col1.metric("Average Rating", f"{average_rating(reviews):.1f} ★")
    col2.metric("Total Reviews", f"{result.data.total:,}")
    distribution = pd.DataFrame(rating_distribution(reviews))
    st.bar_chart(distribution, x="rating", y="count")

    c1, c2, c3 = st.columns([2, 1, 1])
    search = c1.text_input("Search reviews", key="reviews-search")
    rating = c2.selectbox("Rating", [ALL, "5", "4", "3", "2", "1"], key="reviews-rating")
    featured = c3.selectbox(
        "Featured",
        [ALL, "true", "false"],
        format_func={ALL: ALL, "true": "Featured", "false": "Not featured"}.get,
        key="reviews-featured",
    )

    widgets.table(filter_reviews(reviews, search, rating, featured), REVIEW_COLUMNS, "No reviews found.")
    widgets.pager("reviews", result.data)
