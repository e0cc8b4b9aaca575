import streamlit as st

from errors import DuplicateVin, RecordError, ValidationFailure
from logic import create_record, validate_record_fields
from parts_editor import FLOW_CREATE
from views.parts_form import drop_editor, get_editor, render_parts_editor

EDITOR_KEY = 'add_record_editor'
FIELD_KEYS = ('add_vin', 'add_plate', 'add_client', 'add_notes')
SAVING_KEY = 'add_record_saving'


def _start_saving():
    st.session_state[SAVING_KEY] = True
    st.session_state.add_record_error = None


def _reset_form():
    for key in FIELD_KEYS:
        st.session_state.pop(key, None)
    drop_editor(EDITOR_KEY)
    st.session_state.add_record_error = None


def submit_new_record(vin, client_name, plate, notes, editor):
    """Validate the form and create the record.

    Raises ValidationFailure before the store is touched; otherwise returns
    the new Record or the failure reported by the store.
    """
    validate_record_fields(vin, client_name, plate)
    parts = editor.validate()
    return create_record(vin, client_name, parts, license_plate=plate, notes=notes)


def render_add_record_view():
    st.header("Adauga Client Nou")
    saving = st.session_state.get(SAVING_KEY, False)

    if st.session_state.get('add_record_error'):
        st.error(st.session_state.add_record_error)

    vin = st.text_input("Serie de Sasiu *", key="add_vin", max_chars=17, placeholder="Enter 17-character VIN...", disabled=saving)
    client_name = st.text_input("Nume Client *", key="add_client", placeholder="Enter client name...", disabled=saving)
    plate = st.text_input("License Plate", key="add_plate", max_chars=10, placeholder="Enter license plate...", disabled=saving)
    notes = st.text_area("Notite", key="add_notes", disabled=saving)

    editor = get_editor(EDITOR_KEY, FLOW_CREATE)
    render_parts_editor(editor, EDITOR_KEY, disabled=saving)

    st.divider()
    col1, col2 = st.columns([0.7, 0.3])
    with col1:
        st.button("Save Record", type="primary", disabled=saving, key="add_record_save", on_click=_start_saving)
    with col2:
        if st.button("Clear", disabled=saving, key="add_record_clear"):
            _reset_form()
            st.rerun()

    if not saving:
        return

    # Drawn disabled above, so this runs once per click
    try:
        with st.spinner("Saving..."):
            result = submit_new_record(vin, client_name, plate, notes, editor)
    except ValidationFailure as e:
        result = e
    finally:
        st.session_state.pop(SAVING_KEY, None)

    if isinstance(result, DuplicateVin):
        st.session_state.add_record_error = "VIN number already exists in the system"
        st.rerun()
    elif isinstance(result, RecordError):
        st.session_state.add_record_error = result.message
        st.rerun()

    _reset_form()
    st.session_state.flash = ('success', "Client adaugat cu succes")
    st.session_state.view = 'search_vin'
    st.session_state.vin_query = result.vin_number
    st.session_state.vin_result = result
    st.rerun()
