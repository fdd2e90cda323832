import os
from datetime import datetime
from typing import Any

import pandas as pd
import plotly.express as px
import requests
import streamlit as st
from streamlit_autorefresh import st_autorefresh


DEFAULT_BACKEND_URL = os.getenv("BACKEND_API_URL", "http://localhost:8000/api")
REQUEST_TIMEOUT = 8
CHART_PERIODS = (7, 14, 30)

AC_OPTIONS = {"normal": "Normal", "maintenance": "Maintenance", "broken": "Broken"}
UPS_OPTIONS = {"normal": "Normal", "low_battery": "Low Battery", "maintenance": "Maintenance", "broken": "Broken"}
FIRE_OPTIONS = {"ready": "Ready", "expired": "Expired", "needs_maintenance": "Needs Maintenance"}
STATUS_COLORS = {"normal": "#10b981", "warning": "#f59e0b", "danger": "#ef4444"}


st.set_page_config(page_title="Server Room Monitor", layout="wide")


def _error_detail(exc: requests.RequestException) -> str:
    response = getattr(exc, "response", None)
    if response is not None:
        try:
            detail = response.json().get("detail")
        except ValueError:
            detail = None
        if detail:
            return str(detail)
    return str(exc)


def api_request(
    method: str,
    base_url: str,
    path: str,
    payload: Any = None,
    params: dict[str, Any] | None = None,
) -> tuple[Any, str | None]:
    try:
        response = requests.request(method, f"{base_url}{path}", json=payload, params=params, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        if response.content:
            return response.json(), None
        return {}, None
    except requests.RequestException as exc:
        return None, _error_detail(exc)


def api_download(base_url: str, path: str, params: dict[str, Any]) -> tuple[bytes | None, str | None]:
    try:
        response = requests.get(f"{base_url}{path}", params=params, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        return response.content, None
    except requests.RequestException as exc:
        return None, _error_detail(exc)


def format_status(status: str | None) -> str:
    return status.capitalize() if status else "--"


def record_form(key: str, defaults: dict[str, Any] | None = None) -> dict[str, Any] | None:
    defaults = defaults or {}
    now = datetime.now()
    with st.form(key, clear_on_submit=defaults == {}):
        c1, c2 = st.columns(2)
        entry_date = c1.date_input(
            "Date",
            value=datetime.strptime(defaults["date"], "%Y-%m-%d").date() if "date" in defaults else now.date(),
        )
        entry_time = c2.time_input(
            "Time",
            value=datetime.strptime(defaults["time"], "%H:%M").time() if "time" in defaults else now.time().replace(second=0, microsecond=0),
        )
        c3, c4, c5 = st.columns(3)
        temperature = c3.number_input("Temperature (°C)", value=float(defaults.get("temperature", 22.0)), step=0.1)
        humidity = c4.number_input("Humidity (%)", min_value=0.0, max_value=100.0, value=float(defaults.get("humidity", 50.0)), step=0.1)
        power_usage = c5.number_input("Power usage (kW)", min_value=0.0, value=float(defaults.get("power_usage", 0.0)), step=0.01)
        c6, c7, c8 = st.columns(3)
        ac_status = c6.selectbox("AC status", list(AC_OPTIONS), format_func=AC_OPTIONS.get, index=list(AC_OPTIONS).index(defaults.get("ac_status", "normal")))
        ups_status = c7.selectbox("UPS status", list(UPS_OPTIONS), format_func=UPS_OPTIONS.get, index=list(UPS_OPTIONS).index(defaults.get("ups_status", "normal")))
        fire_status = c8.selectbox(
            "Fire extinguisher",
            list(FIRE_OPTIONS),
            format_func=FIRE_OPTIONS.get,
            index=list(FIRE_OPTIONS).index(defaults.get("fire_extinguisher_status", "ready")),
        )
        c9, c10 = st.columns(2)
        rack_count = c9.number_input("Rack count", min_value=0, value=int(defaults.get("rack_count", 0)), step=1)
        active_servers = c10.number_input("Active servers", min_value=0, value=int(defaults.get("active_servers", 0)), step=1)
        notes = st.text_area("Notes", value=defaults.get("notes") or "")
        submitted = st.form_submit_button("Save", use_container_width=True)

    if not submitted:
        return None
    return {
        "date": entry_date.isoformat(),
        "time": entry_time.strftime("%H:%M"),
        "temperature": temperature,
        "humidity": humidity,
        "ac_status": ac_status,
        "ups_status": ups_status,
        "rack_count": int(rack_count),
        "active_servers": int(active_servers),
        "power_usage": power_usage,
        "fire_extinguisher_status": fire_status,
        "notes": notes or None,
    }


st.title("Server Room Monitor")
st.caption(datetime.now().strftime("%A, %d %B %Y"))

with st.sidebar:
    st.header("Settings")
    backend_url = st.text_input("Backend API URL", value=DEFAULT_BACKEND_URL)
    auto_refresh = st.checkbox("Auto refresh", value=False)
    refresh_seconds = st.slider("Refresh interval (seconds)", min_value=15, max_value=300, value=60, step=15)

if auto_refresh:
    st_autorefresh(interval=refresh_seconds * 1000, key="monitor-refresh")

_, health_error = api_request("GET", backend_url, "/health")
if health_error:
    st.error(f"Backend unavailable: {health_error}")
    st.stop()

storage_payload, storage_error = api_request("GET", backend_url, "/storage/status")
if storage_error:
    st.warning(f"Storage status unavailable: {storage_error}")
elif storage_payload["degraded"]:
    st.warning(
        f"Running in degraded mode on the '{storage_payload['active_backend']}' backend: "
        + " | ".join(storage_payload["warnings"])
    )

dashboard_tab, entry_tab, history_tab = st.tabs(["Dashboard", "Input Data", "History"])

with dashboard_tab:
    period = st.selectbox("Chart period", CHART_PERIODS, format_func=lambda days: f"Last {days} records")
    summary, summary_error = api_request("GET", backend_url, "/dashboard", params={"period": period})
    if summary_error:
        st.warning(f"Dashboard unavailable: {summary_error}")
    elif summary["total_records"] == 0:
        st.info("No monitoring data yet. Add a reading in the Input Data tab.")
    else:
        m1, m2, m3, m4 = st.columns(4)
        m1.metric("Average temperature", f"{summary['avg_temperature']:.1f} °C", format_status(summary["temperature_status"]))
        m2.metric("Average humidity", f"{summary['avg_humidity']:.1f} %", format_status(summary["humidity_status"]))
        m3.metric("Average power", f"{summary['avg_power_usage']:.2f} kW")
        m4.metric("Active servers", summary["avg_active_servers"])

        s1, s2, s3 = st.columns(3)
        s1.metric("Active alerts", summary["active_alerts"])
        s2.metric("Total records", summary["total_records"])
        s3.metric("Last update", summary["last_update"] or "--:--")

        series = summary["series"]
        trend = pd.DataFrame(
            {"date": series["labels"], "Temperature (°C)": series["temperature"], "Humidity (%)": series["humidity"]}
        )
        fig_trend = px.line(trend, x="date", y=["Temperature (°C)", "Humidity (%)"], title="Temperature & humidity")

        distribution = summary["distribution"]
        tier_names = [name.capitalize() for name in distribution]
        fig_status = px.pie(
            names=tier_names,
            values=list(distribution.values()),
            hole=0.5,
            title="Status distribution",
            color=tier_names,
            color_discrete_map={name.capitalize(): color for name, color in STATUS_COLORS.items()},
        )

        c1, c2 = st.columns([2, 1])
        c1.plotly_chart(fig_trend, use_container_width=True)
        c2.plotly_chart(fig_status, use_container_width=True)

    aggregates, aggregates_error = api_request("GET", backend_url, "/aggregates")
    if not aggregates_error and aggregates["items"]:
        st.subheader("Monthly summary")
        st.dataframe(pd.DataFrame(aggregates["items"]).drop(columns=["computed_at"]), use_container_width=True)

with entry_tab:
    st.subheader("New monitoring record")
    new_record = record_form("entry-form")
    if new_record is not None:
        _, create_error = api_request("POST", backend_url, "/records", new_record)
        if create_error:
            st.error(f"Save failed: {create_error}")
        else:
            st.success("Monitoring record saved")

with history_tab:
    f1, f2, f3 = st.columns([1, 1, 1])
    start_date = f1.date_input("From", value=None)
    end_date = f2.date_input("To", value=None)
    page = f3.number_input("Page", min_value=1, value=1, step=1)

    params: dict[str, Any] = {"page": int(page)}
    if start_date:
        params["start_date"] = start_date.isoformat()
    if end_date:
        params["end_date"] = end_date.isoformat()

    table, table_error = api_request("GET", backend_url, "/table", params=params)
    if table_error:
        st.warning(f"History unavailable: {table_error}")
    elif not table["rows"]:
        st.info("No data. Please add monitoring data first.")
    else:
        rows = [
            {
                "No": row["number"],
                "Date": row["record"]["date"],
                "Time": row["record"]["time"],
                "Temperature": f"{row['record']['temperature']} °C ({row['temperature_status']})",
                "Humidity": f"{row['record']['humidity']} % ({row['humidity_status']})",
                "AC": row["ac_label"],
                "UPS": row["ups_label"],
                "Servers": row["record"]["active_servers"],
                "Power (kW)": row["record"]["power_usage"],
            }
            for row in table["rows"]
        ]
        st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)
        st.caption(
            "Page " + " ".join(f"**{item}**" if item == table["page"] else str(item) for item in table["window"])
            + f" of {table['total_pages']} ({table['total_items']} records)"
        )

        records_by_label = {
            f"{row['record']['date']} {row['record']['time']} ({row['record']['id'][:8]})": row["record"]
            for row in table["rows"]
        }
        selected_label = st.selectbox("Select a record to edit or delete", list(records_by_label))
        selected = records_by_label[selected_label]

        with st.expander("Edit record"):
            changes = record_form(f"edit-{selected['id']}", selected)
            if changes is not None:
                _, update_error = api_request("PATCH", backend_url, f"/records/{selected['id']}", changes)
                if update_error:
                    st.error(f"Update failed: {update_error}")
                else:
                    st.success("Record updated")

        if st.button("Delete record", type="primary"):
            _, delete_error = api_request("DELETE", backend_url, f"/records/{selected['id']}")
            if delete_error:
                st.error(f"Delete failed: {delete_error}")
            else:
                st.success("Record deleted")

    st.subheader("Export")
    one_per_date = st.checkbox("One record per date", value=False)
    e1, e2, e3 = st.columns(3)
    for column, extension, mime in (
        (e1, "xlsx", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"),
        (e2, "csv", "text/csv"),
        (e3, "pdf", "application/pdf"),
    ):
        content, export_error = api_download(backend_url, f"/export/{extension}", {"one_per_date": one_per_date})
        if export_error:
            column.error(f"Export failed: {export_error}")
        else:
            column.download_button(
                f"Download {extension.upper()}",
                data=content,
                file_name=f"monitoring_server_{datetime.now().date().isoformat()}.{extension}",
                mime=mime,
                use_container_width=True,
            )
