from __future__ import annotations

import sys
import os

# --- Add project root to sys.path ---
current_dir = os.path.dirname(os.path.abspath(__file__))
parent_dir = os.path.dirname(current_dir)
if parent_dir not in sys.path:
    sys.path.insert(0, parent_dir)

import streamlit as st

# IMPORTS
from admin_console import runtime
from admin_console.accounts import render_merchants, render_users
from admin_console.catalog import render_invoices, render_products, render_reviews
from admin_console.config import ConfigError
from admin_console.directory import render_hostels, render_schools
from admin_console.log import configure_logging, get_logger
from admin_console.overview import render_analytics, render_dashboard

logger = get_logger(__name__)

PAGES = {
    "Dashboard": render_dashboard,
    "Analytics": render_analytics,
    "Users": render_users,
    "Merchants": render_merchants,
    "Products": render_products,
    "Invoices": render_invoices,
    "Reviews": render_reviews,
    "Schools": render_schools,
    "Hostels": render_hostels,
}


def main():
    st.set_page_config(
        page_title="Campus Market Admin",
        page_icon="🛍️",
        layout="wide",
        initial_sidebar_state="expanded",
    )
    configure_logging()

    try:
        runtime.get_config()
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        st.error(str(e))
        return

    # --- SIDEBAR NAVIGATION ---
    with st.sidebar:
        st.title("Campus Market")
        menu = st.radio("Go to", list(PAGES))
        st.divider()
        refresh = st.button("🔄 Refresh data")

    if not runtime.enter_page(menu) and refresh:
        runtime.invalidate_runners()

    PAGES[menu]()


if __name__ == "__main__":
    main()
