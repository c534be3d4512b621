import streamlit as st

from admin_console import runtime, widgets
from db.models import HOSTEL_GENDERS
from db.mutations import (
    create_hostel,
    create_school,
    delete_hostel,
    delete_school,
    update_hostel,
    update_school,
)
from db.query_state import QueryRunner
from db.queries import fetch_hostels, fetch_schools


def _schools_runner() -> QueryRunner:
    return QueryRunner(fetch_schools, list)


def _hostels_runner() -> QueryRunner:
    return QueryRunner(fetch_hostels, list)


def _pick_existing(rows, label_key: str, key: str):
    """Selectbox over existing rows; None means "add new"."""
    labels = {r["id"]: r.get(label_key) for r in rows}
    return st.selectbox(
        "Edit existing",
        options=[None, *labels],
        format_func=lambda rid: "➕ Add new" if rid is None else labels.get(rid, rid),
        key=key,
    )


# --- SCHOOLS ----------------------------------------------------------------

def render_schools():
    st.title("🎓 Schools")
    runtime.show_flash()

    result = widgets.load("schools", _schools_runner)
    if widgets.failed(result):
        return
    schools = result.data

    editing_id = _pick_existing(schools, "name", "school-edit")
    editing = next((s for s in schools if s["id"] == editing_id), {})

    c1, c2 = st.columns(2)
    name = c1.text_input("Name", value=editing.get("name", ""), key=f"school-name-{editing_id}")
    short_name = c2.text_input(
        "Short name", value=editing.get("short_name", ""), key=f"school-short-{editing_id}"
    )

    a1, a2 = st.columns(2)
    if editing_id is None:
        if a1.button("Add school"):
            if not name or not short_name:
                st.warning("School name and short name are required.")
            elif runtime.mutate(
                lambda client: create_school(client, name, short_name),
                "School added.",
                "schools",
                "schools-by-name",
            ):
                st.rerun()
    else:
        if a1.button("Update school"):
            if not name or not short_name:
                st.warning("School name and short name are required.")
            elif runtime.mutate(
                lambda client: update_school(client, editing_id, name, short_name),
                "School updated.",
                "schools",
                "schools-by-name",
            ):
                st.rerun()
        confirm = a2.checkbox("Confirm delete", key=f"school-confirm-{editing_id}")
        if a2.button("Delete school", disabled=not confirm):
            if runtime.mutate(
                lambda client: delete_school(client, editing_id),
                "School deleted.",
                "schools",
                "schools-by-name",
            ):
                st.rerun()

    st.divider()
    widgets.table(schools, ["name", "short_name", "is_active", "created_at"], "No schools yet.")


# --- HOSTELS ----------------------------------------------------------------

def render_hostels():
    st.title("🏠 Hostels")
    runtime.show_flash()

    schools = widgets.load("schools-by-name", _schools_runner, order_by="name")
    result = widgets.load("hostels", _hostels_runner)
    if widgets.failed(schools) or widgets.failed(result):
        return
    school_names = {s["id"]: s.get("name") for s in schools.data}
    hostels = result.data

    editing_id = _pick_existing(hostels, "name", "hostel-edit")
    editing = next((h for h in hostels if h["id"] == editing_id), {})

    c1, c2, c3 = st.columns(3)
    name = c1.text_input("Name", value=editing.get("name", ""), key=f"hostel-name-{editing_id}")
    school_options = [None, *school_names]
    current_school = editing.get("school_id")
    school_id = c2.selectbox(
        "School",
        options=school_options,
        index=school_options.index(current_school) if current_school in school_options else 0,
        format_func=lambda sid: "Select school" if sid is None else school_names.get(sid, sid),
        key=f"hostel-school-{editing_id}",
    )
    current_gender = editing.get("gender")
    gender = c3.selectbox(
        "Gender",
        HOSTEL_GENDERS,
        index=HOSTEL_GENDERS.index(current_gender) if current_gender in HOSTEL_GENDERS else 0,
        key=f"hostel-gender-{editing_id}",
    )

    a1, a2 = st.columns(2)
    if editing_id is None:
        if a1.button("Add hostel"):
            if not name or not school_id:
                st.warning("Hostel name and school are required.")
            elif runtime.mutate(
                lambda client: create_hostel(client, name, school_id, gender), "Hostel added.", "hostels"
            ):
                st.rerun()
    else:
        if a1.button("Update hostel"):
            if not name or not school_id:
                st.warning("Hostel name and school are required.")
            elif runtime.mutate(
                lambda client: update_hostel(client, editing_id, name, school_id, gender),
                "Hostel updated.",
                "hostels",
            ):
                st.rerun()
        confirm = a2.checkbox("Confirm delete", key=f"hostel-confirm-{editing_id}")
        if a2.button("Delete hostel", disabled=not confirm):
            if runtime.mutate(
                lambda client: delete_hostel(client, editing_id), "Hostel deleted.", "hostels"
            ):
                st.rerun()

    st.divider()
    rows = [{**h, "school": school_names.get(h.get("school_id"), "Unknown")} for h in hostels]
    widgets.table(rows, ["name", "school", "gender", "created_at"], "No hostels yet.")
