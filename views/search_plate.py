import streamlit as st

from errors import NotFound, RecordError
from logic import find_by_plate, records_to_frame
from views.record_card import render_record_card


def _run_search():
    query = st.session_state.get('plate_query', '')
    st.session_state.plate_results = find_by_plate(query) if query.strip() else None


def render_search_plate_view():
    st.header("Search by License Plate")

    with st.form("plate_search_form"):
        st.text_input("License Plate", key="plate_query", max_chars=10, placeholder="Enter license plate...")
        submitted = st.form_submit_button("Search", type="primary")

    if submitted:
        if not st.session_state.plate_query.strip():
            st.error("Introdu un numar de inmatriculare")
            st.session_state.plate_results = None
            return
        with st.spinner("Searching..."):
            _run_search()

    results = st.session_state.get('plate_results')
    if results is None:
        return
    if isinstance(results, NotFound):
        st.info(f"No records found for license plate {st.session_state.plate_query.strip().upper()}")
        return
    if isinstance(results, RecordError):
        st.error(results.message)
        return

    st.caption(f"Found {len(results)} record(s)")
    if len(results) > 1:
        st.dataframe(records_to_frame(results), hide_index=True, width='stretch')
    for record in results:
        render_record_card(record, _run_search)
