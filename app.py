import pandas as pd
import streamlit as st
from contextlib import contextmanager
from datetime import date, time
from typing import Any, Dict, List, Optional

from core.config import get_settings
from core.errors import DashboardError
from core.filters import apply_table_filters, normalize_table_filters
from core.formatters import currency_inr, format_date
from core.logging import configure_logging
from core.metrics_dashboard import compute_dashboard
from core.records import FORM_FIELDS, FormField
from core.resources import RESOURCES, build_backend


PAGES = {
    "Dashboard": None,
    "Residents": "residents",
    "Staff": "staff",
    "Caretakers": "caretakers",
    "Visitors": "visitors",
    "Donations": "donations",
    "Medical": "medical",
}

PAGE_BLURBS = {
    "residents": "Everyone currently living at the home, with admission details.",
    "staff": "Track staff availability, roles, and performance ratings.",
    "caretakers": "Caretakers attached to the foundation.",
    "visitors": "Visitor log with in/out times and purpose of visit.",
    "donations": "Donations received, by donor, method and city.",
    "medical": "Patient visits recorded at the medical camp.",
}

TABLE_COLUMNS = {
    "residents": ["name", "gender", "dob", "date_of_admission", "date_of_leaving", "remarks"],
    "staff": ["employee_id", "name", "department", "role", "status", "performance_rating"],
    "caretakers": ["name", "age"],
    "visitors": ["name", "contact_number", "visit_date", "in_time", "out_time", "purpose"],
    "donations": ["donor_name", "amount", "payment_method", "donation_date", "city"],
    "medical": ["patient_name", "diagnosis", "gender", "age", "record_date", "time_slot"],
}


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        .kpi-label {color: #6b7280;font-size: 0.9rem;}
        .kpi-value {font-size: 1.8rem;font-weight: 700;color: #111827;}
        .kpi-caption {color: #9ca3af;font-size: 0.8rem;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header"><div class="card-title">{title}</div></div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def kpi_tile(col, label: str, value: Any, caption: str = ""):
    col.markdown(
        f"<div class='card'><div class='kpi-label'>{label}</div>"
        f"<div class='kpi-value'>{value}</div><div class='kpi-caption'>{caption}</div></div>",
        unsafe_allow_html=True,
    )


def render_page_header(title: str, breadcrumb: str, blurb: str = "", export_df: Optional[pd.DataFrame] = None, export_name: str = "export.csv"):
    inject_base_styles()
    c1, c2 = st.columns([8, 2])
    with c1:
        st.markdown(
            f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
            unsafe_allow_html=True,
        )
        if blurb:
            st.caption(blurb)
    with c2:
        btn_cols = st.columns(2)
        if btn_cols[0].button("Refresh"):
            st.rerun()
        if export_df is not None and not export_df.empty:
            btn_cols[1].download_button(
                "Export CSV",
                data=export_df.to_csv(index=False).encode("utf-8"),
                file_name=export_name,
                mime="text/csv",
            )


# ---------- Form helpers ----------
def _parse_date(value: Any) -> Optional[date]:
    parsed = pd.to_datetime(value, errors="coerce") if value else pd.NaT
    return None if pd.isna(parsed) else parsed.date()


def _parse_time(value: Any) -> Optional[time]:
    parsed = pd.to_datetime(str(value), format="%H:%M", errors="coerce") if value else pd.NaT
    return None if pd.isna(parsed) else parsed.time()


def render_field(field: FormField, current: Any, key: str) -> Any:
    if field.kind == "select":
        options = list(field.options)
        if current and current not in options:
            options.append(current)
        index = options.index(current) if current in options else 0
        return st.selectbox(field.label, options, index=index, key=key)
    if field.kind == "number":
        number = pd.to_numeric(current, errors="coerce")
        return st.number_input(field.label, value=0.0 if pd.isna(number) else float(number), step=1.0, key=key)
    if field.kind == "date":
        picked = st.date_input(field.label, value=_parse_date(current), key=key)
        return picked.isoformat() if picked else ""
    if field.kind == "time":
        picked = st.time_input(field.label, value=_parse_time(current), key=key)
        return picked.strftime("%H:%M") if picked else ""
    return st.text_input(field.label, value="" if current is None else str(current), key=key)


def record_form(resource: str, form_key: str, current: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
    current = current or {}
    with st.form(form_key, clear_on_submit=not current):
        values = {
            f.name: render_field(f, current.get(f.name), key=f"{form_key}-{f.name}")
            for f in FORM_FIELDS[resource]
        }
        submitted = st.form_submit_button("Save")
    return values if submitted else None


# ---------- Pages ----------
def render_dashboard_page():
    render_page_header("Overview", "Home / Dashboard")
    payload = compute_dashboard(
        backend.list("residents"),
        backend.list("staff"),
        backend.list("donations"),
        backend.list("visitors"),
    )
    kpis = payload["kpis"]
    cols = st.columns(4)
    kpi_tile(cols[0], "Residents", kpis["residents"])
    kpi_tile(cols[1], "Active Staff", kpis["active_staff"])
    kpi_tile(cols[2], "Donations This Month", f"₹{kpis['donations_this_month'] / 1000:.1f}k", "Online + Offline")
    kpi_tile(cols[3], "Today's Visitors", kpis["todays_visitors"])

    charts = payload["charts"]
    left, right = st.columns(2)
    with left:
        with card("Monthly Donation Trends"):
            st.vega_lite_chart(charts["monthly_donations"], use_container_width=True)
    with right:
        with card("Visitor Traffic"):
            st.vega_lite_chart(charts["visitor_traffic"], use_container_width=True)
    left, right = st.columns(2)
    with left:
        with card("Staff Distribution"):
            st.vega_lite_chart(charts["staff_distribution"], use_container_width=True)
    with right:
        with card("Data Source"):
            st.write({"backend": settings.data_backend, "as_of": format_date(payload["as_of"])})


def _display_frame(resource: str, rows: List[Dict[str, Any]]) -> pd.DataFrame:
    columns = ["id"] + TABLE_COLUMNS[resource]
    df = pd.DataFrame(rows, columns=columns) if rows else pd.DataFrame(columns=columns)
    if resource == "donations" and not df.empty:
        df["amount"] = df["amount"].apply(currency_inr)
    for col in [c for c in columns if c.endswith("date") or c in {"dob", "date_of_admission", "date_of_leaving", "date_of_joining"}]:
        if col in df.columns and not df.empty:
            df[col] = df[col].apply(lambda v: format_date(v) if v else "")
    return df


def render_table_page(title: str, resource: str):
    rows = backend.list(resource)
    with st.sidebar:
        st.markdown("### Table")
        search = st.text_input("Search", "", key=f"{resource}-search")
        sort_key = st.selectbox("Sort by", ["(none)"] + TABLE_COLUMNS[resource], key=f"{resource}-sort")
        direction = st.radio("Direction", ["asc", "desc"], horizontal=True, key=f"{resource}-direction")
    filters = normalize_table_filters(
        {"search": search, "sort_key": None if sort_key == "(none)" else sort_key, "direction": direction}
    )
    visible = apply_table_filters(rows, filters)

    render_page_header(
        title,
        f"Home / {title}",
        PAGE_BLURBS[resource],
        export_df=pd.DataFrame(visible),
        export_name=f"{resource}.csv",
    )
    with card(f"{title} ({len(visible)} of {len(rows)})"):
        if not visible:
            st.info("No records match your search.")
        else:
            st.dataframe(_display_frame(resource, visible), hide_index=True, use_container_width=True)

    if backend.read_only:
        st.caption("Spreadsheet mode: records are read from the workbooks and cannot be edited here.")
        return

    add_tab, edit_tab = st.tabs(["Add", "Edit / Delete"])
    with add_tab:
        values = record_form(resource, f"{resource}-add")
        if values is not None:
            try:
                backend.create(resource, values)
                st.success("Record added.")
                st.rerun()
            except DashboardError as exc:
                st.error(exc.message)
    with edit_tab:
        if not rows:
            st.info("Nothing to edit yet.")
            return
        by_id = {str(r.get("id")): r for r in rows}
        label_field = FORM_FIELDS[resource][0].name
        selected = st.selectbox(
            "Record",
            list(by_id.keys()),
            format_func=lambda rid: f"{by_id[rid].get(label_field) or rid}",
            key=f"{resource}-selected",
        )
        current = by_id[selected]
        values = record_form(resource, f"{resource}-edit-{selected}", current)
        if values is not None:
            try:
                backend.update(resource, {"id": current["id"], **values})
                st.success("Record updated.")
                st.rerun()
            except DashboardError as exc:
                st.error(exc.message)
        if st.button("Delete record", key=f"{resource}-delete-{selected}"):
            try:
                backend.delete(resource, {"id": current["id"]})
                st.success("Record deleted.")
                st.rerun()
            except DashboardError as exc:
                st.error(exc.message)


# ---------- UI setup ----------
settings = get_settings()
configure_logging(settings.log_level, json_logs=settings.json_logs, force=False)

st.set_page_config(page_title="Aastha Foundation Dashboard", layout="wide")
inject_base_styles()
st.title("Aastha Foundation Dashboard")
st.caption("Residents, staff, visitors, donations and medical records in one place.")


@st.cache_resource
def get_backend():
    return build_backend(settings)


backend = get_backend()

with st.sidebar:
    st.markdown("### Navigate")
    nav_choice = st.radio("Navigate", list(PAGES.keys()), index=0)
    st.markdown("---")

current_resource = PAGES[nav_choice]
if current_resource is None:
    render_dashboard_page()
else:
    render_table_page(nav_choice, RESOURCES[current_resource].name)
