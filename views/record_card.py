import pandas as pd
import streamlit as st

from errors import NotFound, RecordError, ValidationFailure
from logic import append_part, delete_record, remove_part, update_record, validate_record_fields
from parts_editor import FLOW_CREATE, FLOW_EDIT
from services.pdf import format_date, format_price, generate_record_pdf, parts_total, report_file_name
from views.parts_form import drop_editor, get_editor, render_parts_editor

# Which panel is open under a record: 'edit', 'add_part', 'remove_part' or 'delete'
PANEL_KEY = 'record_panel'
PANEL_ERROR_KEY = 'record_panel_error'
# (record_id, panel) of the write in flight; its controls stay disabled until it finishes
PENDING_KEY = 'record_pending'


def _open_panel(record_id, panel):
    st.session_state[PANEL_KEY] = (record_id, panel)


def _close_panel():
    st.session_state[PANEL_KEY] = None
    st.session_state.pop(PANEL_ERROR_KEY, None)


def _panel_for(record_id):
    current = st.session_state.get(PANEL_KEY)
    if current and current[0] == record_id:
        return current[1]
    return None


def begin_write(record_id, panel):
    st.session_state[PENDING_KEY] = (record_id, panel)


def finish_write():
    st.session_state.pop(PENDING_KEY, None)


def write_pending(record_id, panel=None):
    pending = st.session_state.get(PENDING_KEY)
    if not pending or pending[0] != record_id:
        return False
    return panel is None or pending[1] == panel


def _report_key(record_id):
    return f"pdf_{record_id}"


def prepare_report(record):
    """Render the record's PDF and keep it for the download button."""
    data = generate_record_pdf(record)
    file_name = report_file_name(record)
    st.session_state[_report_key(record.id)] = (record.updated_at, data, file_name)
    return data, file_name


def cached_report(record):
    """The prepared PDF for ``record``, or None when the record changed since."""
    cached = st.session_state.get(_report_key(record.id))
    if cached and cached[0] == record.updated_at:
        return cached[1], cached[2]
    return None


def forget_report(record_id):
    st.session_state.pop(_report_key(record_id), None)


def _report(record_id, result, success_message, refresh, editor_key=None):
    """Show the outcome of a write and resynchronize from the store.

    Store failures keep the panel and its inputs open for correction.
    """
    finish_write()
    forget_report(record_id)
    if isinstance(result, RecordError) and not isinstance(result, NotFound):
        st.session_state[PANEL_ERROR_KEY] = result.message
        refresh()
        st.rerun()
    if isinstance(result, NotFound):
        st.session_state.flash = ('info', result.message)
    else:
        st.session_state.flash = ('success', success_message)
    if editor_key:
        drop_editor(editor_key)
    _close_panel()
    refresh()
    st.rerun()


def _reject(message):
    """Abort a pending write before it reaches the store."""
    finish_write()
    st.session_state[PANEL_ERROR_KEY] = message
    st.rerun()


def _show_panel_error():
    message = st.session_state.pop(PANEL_ERROR_KEY, None)
    if message:
        st.error(message)


def parts_frame(record):
    rows = [
        {
            'Nr.': number,
            'Nume Piesa': part.name,
            'Numar Serie': part.serial_number or 'N/A',
            'Pret': format_price(part.price),
        }
        for number, part in enumerate(record.parts, start=1)
    ]
    return pd.DataFrame(rows, columns=['Nr.', 'Nume Piesa', 'Numar Serie', 'Pret'])


def render_record_card(record, refresh):
    """Show one record with its edit, part, delete and export actions.

    ``refresh`` re-runs the search that produced the record so the page
    reflects the store after a write.
    """
    busy = write_pending(record.id)
    with st.container(border=True):
        st.subheader(record.client_name)
        c1, c2, c3 = st.columns(3)
        c1.markdown(f"**Serie de Sasiu:** `{record.vin_number}`")
        c2.markdown(f"**Numar Inmatriculare:** {record.license_plate or 'N/A'}")
        c3.markdown(f"**Data Crearii:** {format_date(record.created_at)}")
        if record.notes:
            st.markdown(f"**Notite:** {record.notes}")

        if record.parts:
            st.dataframe(parts_frame(record), hide_index=True, width='stretch')
            st.markdown(f"**Total:** {format_price(parts_total(record.parts))}")
        else:
            st.info("No parts recorded.")

        b1, b2, b3, b4, b5 = st.columns(5)
        if b1.button("Edit", key=f"edit_{record.id}", disabled=busy):
            drop_editor(f"edit_editor_{record.id}")
            _open_panel(record.id, 'edit')
        if b2.button("Add Part", key=f"add_part_{record.id}", disabled=busy):
            drop_editor(f"add_part_editor_{record.id}")
            _open_panel(record.id, 'add_part')
        if b3.button("Remove Part", key=f"remove_part_{record.id}", disabled=busy or not record.parts):
            _open_panel(record.id, 'remove_part')
        if b4.button("Delete", key=f"delete_{record.id}", disabled=busy):
            _open_panel(record.id, 'delete')
        with b5:
            _render_export(record, busy)

        panel = _panel_for(record.id)
        if panel == 'edit':
            _render_edit_panel(record, refresh)
        elif panel == 'add_part':
            _render_add_part_panel(record, refresh)
        elif panel == 'remove_part':
            _render_remove_part_panel(record, refresh)
        elif panel == 'delete':
            _render_delete_panel(record, refresh)


def _render_export(record, busy):
    if st.button("Export PDF", key=f"export_{record.id}", disabled=busy):
        with st.spinner("Generating PDF..."):
            prepare_report(record)
    prepared = cached_report(record)
    if prepared:
        data, file_name = prepared
        st.download_button("Download", data=data, file_name=file_name, mime="application/pdf", key=f"download_{record.id}")


def _render_edit_panel(record, refresh):
    st.markdown("---")
    st.markdown("#### Editeaza Inregistrarea")
    editor_key = f"edit_editor_{record.id}"
    pending = write_pending(record.id, 'edit')
    _show_panel_error()
    vin = st.text_input("Serie de Sasiu *", value=record.vin_number, max_chars=17, key=f"edit_vin_{record.id}", disabled=pending)
    plate = st.text_input("Numar Inmatriculare", value=record.license_plate or '', max_chars=10, key=f"edit_plate_{record.id}", disabled=pending)
    client_name = st.text_input("Nume Client *", value=record.client_name, key=f"edit_client_{record.id}", disabled=pending)
    notes = st.text_area("Notite", value=record.notes or '', key=f"edit_notes_{record.id}", disabled=pending)

    editor = get_editor(editor_key, FLOW_EDIT, record.parts)
    render_parts_editor(editor, editor_key, disabled=pending)
    if not len(editor):
        st.warning("This record will be saved without any parts.")

    c1, c2 = st.columns(2)
    if c2.button("Cancel", key=f"edit_cancel_{record.id}", disabled=pending):
        drop_editor(editor_key)
        _close_panel()
        st.rerun()
    c1.button("Save Changes", type="primary", key=f"edit_save_{record.id}", disabled=pending,
              on_click=begin_write, args=(record.id, 'edit'))

    if not pending:
        return
    try:
        validate_record_fields(vin, client_name, plate)
        parts = editor.validate()
    except ValidationFailure as e:
        _reject(e.message)
    with st.spinner("Saving..."):
        result = update_record(record.id, vin, client_name, parts, license_plate=plate, notes=notes)
    _report(record.id, result, "Record updated", refresh, editor_key)


def _render_add_part_panel(record, refresh):
    st.markdown("---")
    st.markdown("#### Adauga Piesa")
    editor_key = f"add_part_editor_{record.id}"
    pending = write_pending(record.id, 'add_part')
    _show_panel_error()
    editor = get_editor(editor_key, FLOW_CREATE)
    row = editor.rows[0]
    c1, c2, c3 = st.columns([0.4, 0.4, 0.2])
    editor.update_field(0, 'name', c1.text_input("Part Name", value=row.name, key=f"ap_name_{record.id}", disabled=pending))
    editor.update_field(0, 'serial_number', c2.text_input("Serial Number", value=row.serial_number, key=f"ap_serial_{record.id}", disabled=pending))
    editor.update_field(0, 'price', c3.text_input("Price", value=row.price, key=f"ap_price_{record.id}", disabled=pending))

    c1, c2 = st.columns(2)
    if c2.button("Cancel", key=f"ap_cancel_{record.id}", disabled=pending):
        drop_editor(editor_key)
        _close_panel()
        st.rerun()
    c1.button("Add Part", type="primary", key=f"ap_save_{record.id}", disabled=pending,
              on_click=begin_write, args=(record.id, 'add_part'))

    if not pending:
        return
    try:
        part = editor.validate()[0]
    except ValidationFailure as e:
        _reject(e.message)
    with st.spinner("Saving..."):
        result = append_part(record.id, part)
    _report(record.id, result, f"Part {part.name} added", refresh, editor_key)


def _render_remove_part_panel(record, refresh):
    st.markdown("---")
    st.markdown("#### Elimina Piesa")
    pending = write_pending(record.id, 'remove_part')
    _show_panel_error()
    options = list(range(len(record.parts)))
    index = st.radio(
        "Select a part to remove",
        options,
        format_func=lambda i: f"{record.parts[i].name} - Cod de Identificare: {record.parts[i].serial_number or 'N/A'}",
        index=None,
        key=f"rp_index_{record.id}",
        disabled=pending,
    )
    c1, c2 = st.columns(2)
    if c2.button("Anuleaza", key=f"rp_cancel_{record.id}", disabled=pending):
        _close_panel()
        st.rerun()
    c1.button("Elimina Piesa", type="primary", key=f"rp_save_{record.id}", disabled=pending or index is None,
              on_click=begin_write, args=(record.id, 'remove_part'))

    if not pending:
        return
    if index is None:
        _reject("Select a part to remove")
    with st.spinner("Removing..."):
        result = remove_part(record.id, index)
    _report(record.id, result, "Part removed", refresh)


def _render_delete_panel(record, refresh):
    st.markdown("---")
    pending = write_pending(record.id, 'delete')
    _show_panel_error()
    st.warning(f"Are you sure you want to delete the record for VIN {record.vin_number}? This cannot be undone.")
    c1, c2 = st.columns(2)
    if c2.button("Cancel", key=f"del_cancel_{record.id}", disabled=pending):
        _close_panel()
        st.rerun()
    c1.button("Confirm Delete", type="primary", key=f"del_confirm_{record.id}", disabled=pending,
              on_click=begin_write, args=(record.id, 'delete'))

    if not pending:
        return
    with st.spinner("Deleting..."):
        result = delete_record(record.id)
    _report(record.id, result, "Record deleted", refresh)
