"""Streamlit dashboard for the hot-desk reservation service."""

from __future__ import annotations

import datetime
from typing import Any, Dict, List, Optional

import pandas as pd
import requests
import streamlit as st

from backend.utils.config import get_settings

# ==========================================
# Configuration & Constants
# ==========================================
SETTINGS = get_settings()
API_BASE_URL = SETTINGS.api_base_url
TIME_SLOTS = ["AM", "PM"]

st.set_page_config(
    page_title="Hot-Desk Dashboard",
    page_icon="🪑",
    layout="wide",
)


# ==========================================
# API Helper Functions
# ==========================================
def _identity_headers() -> Dict[str, str]:
    headers = {
        "X-User-Id": st.session_state.get("user_id", ""),
        "X-User-Name": st.session_state.get("user_name", ""),
        "X-User-Email": st.session_state.get("user_email", ""),
    }
    if SETTINGS.gateway_token:
        headers["Authorization"] = f"Bearer {SETTINGS.gateway_token}"
    return headers


def _error_detail(response: requests.Response) -> Any:
    try:
        return response.json().get("detail", response.text)
    except ValueError:
        return response.text


def fetch_seats() -> List[Dict[str, Any]]:
    try:
        response = requests.get(f"{API_BASE_URL}/api/seats", timeout=5)
        response.raise_for_status()
        return response.json()
    except requests.exceptions.RequestException as e:
        st.error(f"Backend connection failed: {e}")
        return []


def fetch_bookings_for_date(target_date: str) -> Optional[List[Dict[str, Any]]]:
    """Active bookings across all seats for one day."""
    try:
        response = requests.get(
            f"{API_BASE_URL}/api/bookings/date/{target_date}",
            headers=_identity_headers(),
            timeout=5,
        )
        response.raise_for_status()
        return response.json()
    except requests.exceptions.RequestException as e:
        st.error(f"Could not load bookings: {e}")
        return None


def fetch_my_bookings() -> Optional[List[Dict[str, Any]]]:
    try:
        response = requests.get(
            f"{API_BASE_URL}/api/bookings/my",
            headers=_identity_headers(),
            timeout=5,
        )
        response.raise_for_status()
        return response.json()
    except requests.exceptions.RequestException as e:
        st.error(f"Could not load your bookings: {e}")
        return None


def submit_bulk_booking(
    seat_ids: List[str],
    dates: List[str],
    slots: List[str],
) -> Optional[Dict[str, Any]]:
    """Returns the report on success, or ``{"conflicts": [...]}`` when nothing was booked."""
    try:
        response = requests.post(
            f"{API_BASE_URL}/api/bookings/bulk",
            json={"seatIds": seat_ids, "dates": dates, "slots": slots},
            headers=_identity_headers(),
            timeout=10,
        )
    except requests.exceptions.RequestException as e:
        st.error(f"Booking failed: {e}")
        return None
    if response.status_code == 409:
        body = response.json()
        return {"createdCount": 0, "conflicts": body.get("conflicts", [body.get("message", "")])}
    if not response.ok:
        st.error(f"Booking failed: {_error_detail(response)}")
        return None
    return response.json()


def cancel_booking(booking_id: str) -> bool:
    try:
        response = requests.delete(
            f"{API_BASE_URL}/api/bookings/{booking_id}",
            headers=_identity_headers(),
            timeout=5,
        )
    except requests.exceptions.RequestException as e:
        st.error(f"Cancellation failed: {e}")
        return False
    if not response.ok:
        st.error(f"Cancellation failed: {_error_detail(response)}")
        return False
    return True


# ==========================================
# UI Page Functions
# ==========================================
def render_whos_in_page() -> None:
    st.header("📅 Who's In")
    st.markdown("Active bookings across the office for a single day.")

    target_date = st.date_input("Date", datetime.date.today())
    bookings = fetch_bookings_for_date(str(target_date))
    if bookings is None:
        return
    if not bookings:
        st.info("Nobody has booked a desk for this day yet.")
        return

    seat_names = {seat["id"]: seat["name"] for seat in fetch_seats()}
    df = pd.DataFrame(bookings)
    df["seat"] = df["seatId"].map(seat_names).fillna(df["seatId"])
    df = df[["seat", "slot", "userName", "userEmail"]].sort_values(["seat", "slot"])

    metric_col1, metric_col2 = st.columns(2)
    metric_col1.metric("AM bookings", int((df["slot"] == "AM").sum()))
    metric_col2.metric("PM bookings", int((df["slot"] == "PM").sum()))
    st.dataframe(df, use_container_width=True)


def render_bulk_booking_page() -> None:
    st.header("🗂️ Book Desks")
    st.markdown("Book several desks, days and slots in one go. Unavailable combinations are reported, the rest are booked.")

    seats = [seat for seat in fetch_seats() if not seat["isBlocked"] and not seat["isLongTermReserved"]]
    options = {seat["name"]: seat["id"] for seat in seats}

    selected_names = st.multiselect("Desks", sorted(options))
    col1, col2 = st.columns(2)
    with col1:
        start = st.date_input("From", datetime.date.today())
        end = st.date_input("To", datetime.date.today())
    with col2:
        slots = st.multiselect("Slots", TIME_SLOTS, default=TIME_SLOTS)

    if st.button("Book", type="primary"):
        if not selected_names or not slots or end < start:
            st.warning("Pick at least one desk, one slot and a valid date range.")
            return
        dates = [str(start + datetime.timedelta(days=offset)) for offset in range((end - start).days + 1)]
        with st.spinner("Booking..."):
            result = submit_bulk_booking([options[name] for name in selected_names], dates, slots)
        if result is None:
            return
        created = result.get("createdCount", 0)
        conflicts = result.get("conflicts", [])
        if created:
            st.success(result.get("summary", f"created {created} bookings"))
        else:
            st.error("No bookings could be created")
        if conflicts:
            st.write("### Conflicts")
            st.dataframe(pd.DataFrame({"conflict": conflicts}), use_container_width=True)


def render_my_bookings_page() -> None:
    st.header("🧾 My Bookings")

    bookings = fetch_my_bookings()
    if not bookings:
        st.info("You have no bookings.")
        return

    active = [item for item in bookings if item.get("cancelledAt") is None]
    df = pd.DataFrame(bookings)[["id", "seatId", "date", "slot", "cancelledAt"]]
    st.dataframe(df, use_container_width=True)

    if active:
        labels = {f"{item['date']} {item['slot']} ({item['seatId']})": item["id"] for item in active}
        choice = st.selectbox("Cancel a booking", list(labels))
        if st.button("Cancel booking"):
            if cancel_booking(labels[choice]):
                st.success("Booking cancelled")


# ==========================================
# Main App Router
# ==========================================
def main() -> None:
    st.sidebar.title("Hot-Desk Booking")
    st.sidebar.markdown("---")
    st.sidebar.text_input("User ID", key="user_id")
    st.sidebar.text_input("Name", key="user_name")
    st.sidebar.text_input("Email", key="user_email")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigation",
        ["Who's In", "Book Desks", "My Bookings"],
    )

    st.sidebar.markdown("---")
    st.sidebar.caption(f"API: {API_BASE_URL}")

    if not st.session_state.get("user_id"):
        st.warning("Enter your user ID in the sidebar to continue.")
        return

    if page == "Who's In":
        render_whos_in_page()
    elif page == "Book Desks":
        render_bulk_booking_page()
    else:
        render_my_bookings_page()


if __name__ == "__main__":
    main()
