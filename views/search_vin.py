import streamlit as st

from errors import NotFound, RecordError
from logic import find_by_vin
from views.record_card import render_record_card


def _run_search():
    query = st.session_state.get('vin_query', '')
    st.session_state.vin_result = find_by_vin(query) if query.strip() else None


def render_search_vin_view():
    st.header("Search by VIN Number")

    with st.form("vin_search_form"):
        st.text_input("VIN Number", key="vin_query", max_chars=17, placeholder="Enter VIN number...")
        submitted = st.form_submit_button("Search", type="primary")

    if submitted:
        if not st.session_state.vin_query.strip():
            st.error("Please enter a VIN number")
            st.session_state.vin_result = None
            return
        with st.spinner("Searching..."):
            _run_search()

    result = st.session_state.get('vin_result')
    if result is None:
        return
    if isinstance(result, NotFound):
        st.info(f"No record found for VIN {st.session_state.vin_query.strip().upper()}")
    elif isinstance(result, RecordError):
        st.error(result.message)
    else:
        render_record_card(result, _run_search)
