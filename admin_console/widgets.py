from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import pandas as pd
import streamlit as st

from admin_console import runtime
from db.models import Page
from db.query_state import QueryResult, QueryStatus

STATUS_COLORS = {
    "verified": "green",
    "paid": "green",
    "pending": "orange",
    "unverified": "red",
    "failed": "red",
}


def load(key: str, factory: Callable[[], Any], *args: Any, **kwargs: Any) -> QueryResult:
    """Fetch through the named runner, only hitting the network when inputs changed."""
    runner = runtime.get_runner(key, factory)
    if runner.is_current(*args, **kwargs):
        return runner.result
    with st.spinner("Loading..."):
        return runtime.run(lambda client: runner.ensure(client, *args, **kwargs))


def failed(result: QueryResult) -> bool:
    if result.status == QueryStatus.FAILURE:
        st.error(f"Error: {result.error}")
        return True
    return False


def status_badge(status: Optional[str]) -> str:
    status = (status or "").lower()
    color = STATUS_COLORS.get(status, "gray")
    label = status.capitalize() if status else "Unknown"
    return f":{color}[{label}]"


def table(rows: List[Dict[str, Any]], columns: List[str], empty: str = "Nothing to show.") -> None:
    if not rows:
        st.info(empty)
        return
    df = pd.DataFrame(rows)
    # Keep only columns that actually exist
    final_cols = [c for c in columns if c in df.columns]
    st.dataframe(df[final_cols], use_container_width=True, hide_index=True)


def pager(key: str, page: Page) -> None:
    """Previous/next controls; changing page stores it and reruns."""
    state_key = f"page:{key}"
    c1, c2, c3 = st.columns([1, 2, 1])
    with c1:
        if st.button("← Previous", key=f"{key}-prev", disabled=page.page <= 1):
            st.session_state[state_key] = page.page - 1
            st.rerun()
    with c2:
        st.caption(f"Page {page.page} of {page.total_pages} · {page.total:,} records")
    with c3:
        if st.button("Next →", key=f"{key}-next", disabled=page.page >= page.total_pages):
            st.session_state[state_key] = page.page + 1
            st.rerun()


def current_page(key: str) -> int:
    return st.session_state.get(f"page:{key}", 1)


def reset_page(key: str) -> None:
    st.session_state[f"page:{key}"] = 1


def page_for(key: str, filters: Any) -> int:
    """Current page for a list, back to 1 whenever its filters change."""
    if st.session_state.get(f"filters:{key}") != filters:
        st.session_state[f"filters:{key}"] = filters
        reset_page(key)
    return current_page(key)
