from datetime import date
from typing import Optional

import streamlit as st

from admin_console import runtime, widgets
from admin_console.search import search_accounts, status_label
from db.models import ALL, MerchantFilters, MerchantPage, UserFilters
from db.mutations import (
    update_hostel_merchant_status,
    update_verification_status,
    validate_hostel_merchant,
)
from db.query_state import PagedQuery, QueryRunner
from db.queries import fetch_hostels, fetch_merchants, fetch_schools, fetch_users

STATUS_OPTIONS = [ALL, "Verified", "Unverified", "Pending"]

ACCOUNT_COLUMNS = [
    "full_name", "email", "phone_number", "user_id", "verification_status",
    "school", "last_visit", "created_at", "id",
]
MERCHANT_COLUMNS = [
    "brand_name", "full_name", "email", "verification_status", "products",
    "is_hostel_merchant", "room_number", "created_at", "id",
]


def _day_start(d: Optional[date]) -> Optional[str]:
    return d.isoformat() if d else None


def _day_end(d: Optional[date]) -> Optional[str]:
    # inclusive of the whole selected day
    return f"{d.isoformat()}T23:59:59.999999+00:00" if d else None


def _with_school(rows):
    out = []
    for row in rows:
        school = row.get("schools") or {}
        out.append({**row, "school": school.get("short_name") or school.get("name")})
    return out


def _date_filters(key: str):
    c1, c2 = st.columns(2)
    date_from = c1.date_input("From", value=None, key=f"{key}-from")
    date_to = c2.date_input("To", value=None, key=f"{key}-to")
    return _day_start(date_from), _day_end(date_to)


# --- VERIFICATION -----------------------------------------------------------

def _verification_panel(rows, runner_key: str):
    pending = [r for r in rows if r.get("verification_status") == "pending"]
    st.write("### Verification Requests")
    if not pending:
        st.caption("No pending verifications on this page.")
        return

    labels = {
        r["id"]: f"{r.get('brand_name') or r.get('full_name') or 'Unknown'} ({r.get('email') or 'no email'})"
        for r in pending
    }
    selected = st.selectbox(
        "Pending account", options=list(labels), format_func=labels.get, key=f"{runner_key}-verify"
    )
    account = next(r for r in pending if r["id"] == selected)

    c1, c2 = st.columns([2, 1])
    with c1:
        st.markdown(f"**Status:** {widgets.status_badge(account.get('verification_status'))}")
        st.markdown(f"**Phone:** {account.get('phone_number') or 'Not provided'}")
        st.markdown(f"**User ID:** {account.get('user_id')}")
    with c2:
        if account.get("verification_id"):
            st.image(account["verification_id"], caption="Verification document")

    a1, a2 = st.columns(2)
    if a1.button("✅ Approve Verification", key=f"{runner_key}-approve"):
        if runtime.mutate(
            lambda client: update_verification_status(client, selected, "verified"),
            "Verification approved.",
            runner_key,
        ):
            st.rerun()
    if a2.button("❌ Reject Verification", key=f"{runner_key}-reject"):
        if runtime.mutate(
            lambda client: update_verification_status(client, selected, "unverified"),
            "Verification rejected.",
            runner_key,
        ):
            st.rerun()


# --- USERS ------------------------------------------------------------------

def render_users():
    st.title("👥 Users")
    runtime.show_flash()
    cfg = runtime.get_config()

    schools = widgets.load("schools-by-name", lambda: QueryRunner(fetch_schools, list), order_by="name")
    school_names = {s["id"]: s.get("name") for s in schools.data}

    with st.expander("Filters", expanded=True):
        c1, c2 = st.columns(2)
        status = c1.selectbox("Verification status", STATUS_OPTIONS, key="users-status")
        school_id = c2.selectbox(
            "School",
            options=[None, *school_names],
            format_func=lambda sid: "All" if sid is None else school_names.get(sid, sid),
            key="users-school",
        )
        date_from, date_to = _date_filters("users")
    search = st.text_input("Search users", key="users-search")

    filters = UserFilters(
        verification_status=status, school_id=school_id, date_from=date_from, date_to=date_to
    )
    page = widgets.page_for("users", filters)
    result = widgets.load("users", lambda: PagedQuery(fetch_users), filters, page, cfg.page_size)
    if widgets.failed(result):
        return

    rows = _with_school(search_accounts(result.data.items, search))
    for row in rows:
        row["verification_status"] = status_label(row.get("verification_status"))
    widgets.table(rows, ACCOUNT_COLUMNS, "No users found.")
    widgets.pager("users", result.data)

    st.divider()
    _verification_panel(search_accounts(result.data.items, search), "users")


# --- MERCHANTS --------------------------------------------------------------

def _hostel_panel(merchants):
    st.write("### Hostel Merchant Settings")
    if not merchants:
        return

    labels = {m["id"]: m.get("brand_name") or m.get("full_name") or m["id"] for m in merchants}
    merchant_id = st.selectbox(
        "Merchant", options=list(labels), format_func=labels.get, key="hostel-merchant"
    )
    merchant = next(m for m in merchants if m["id"] == merchant_id)

    hostels = widgets.load("hostels", lambda: QueryRunner(fetch_hostels, list))
    hostel_names = {h["id"]: h.get("name") for h in hostels.data}

    enabled = st.checkbox(
        "Is hostel merchant",
        value=bool(merchant.get("is_hostel_merchant")),
        key=f"hostel-enabled-{merchant_id}",
    )
    current_hostel = merchant.get("hostel_id")
    hostel_options = [None, *hostel_names]
    hostel_id = st.selectbox(
        "Hostel",
        options=hostel_options,
        index=hostel_options.index(current_hostel) if current_hostel in hostel_options else 0,
        format_func=lambda hid: "Select hostel" if hid is None else hostel_names.get(hid, hid),
        disabled=not enabled,
        key=f"hostel-id-{merchant_id}",
    )
    room_number = st.text_input(
        "Room number",
        value=merchant.get("room_number") or "",
        disabled=not enabled,
        key=f"hostel-room-{merchant_id}",
    )

    if st.button("Save hostel settings", key="hostel-save"):
        # no client is opened for incomplete input
        message = validate_hostel_merchant(enabled, hostel_id, room_number)
        if message:
            st.warning(message)
            return

        async def _save(client):
            outcome = await update_hostel_merchant_status(
                client, merchant_id, enabled, hostel_id, room_number
            )
            if not outcome["success"]:
                raise RuntimeError(outcome["error"])

        if runtime.mutate(_save, "Hostel settings saved.", "merchants"):
            st.rerun()


def render_merchants():
    st.title("🏪 Merchants")
    runtime.show_flash()
    cfg = runtime.get_config()

    with st.expander("Filters", expanded=True):
        status = st.selectbox("Verification status", STATUS_OPTIONS, key="merchants-status")
        date_from, date_to = _date_filters("merchants")
    search = st.text_input("Search merchants", key="merchants-search")

    filters = MerchantFilters(verification_status=status, date_from=date_from, date_to=date_to)
    page = widgets.page_for("merchants", filters)
    result = widgets.load(
        "merchants",
        lambda: PagedQuery(fetch_merchants, MerchantPage),
        filters,
        page,
        cfg.page_size,
    )
    if widgets.failed(result):
        return

    merchant_page: MerchantPage = result.data
    merchants = search_accounts(merchant_page.items, search)
    rows = [
        {**m, "products": len(merchant_page.products_by_merchant.get(m["id"], []))}
        for m in merchants
    ]
    widgets.table(rows, MERCHANT_COLUMNS, "No merchants found.")
    widgets.pager("merchants", merchant_page)

    st.divider()
    _verification_panel(merchants, "merchants")
    st.divider()
    _hostel_panel(merchants)
