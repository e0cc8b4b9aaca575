import streamlit as st

from parts_editor import PartsEditor


def get_editor(key, flow, parts=None) -> PartsEditor:
    """Return the editor kept in session state under ``key``, creating it if needed."""
    if key not in st.session_state:
        if parts is None:
            st.session_state[key] = PartsEditor(flow)
        else:
            st.session_state[key] = PartsEditor.from_parts(parts, flow)
    return st.session_state[key]


def drop_editor(key):
    st.session_state.pop(key, None)


def render_parts_editor(editor: PartsEditor, key, disabled=False):
    """Draw one input line per part row and push widget values back into the editor."""
    st.markdown("**Parts & Serial Numbers**")
    if not len(editor):
        st.caption("No parts on this record.")

    remove_index = None
    for index, row in enumerate(editor.rows):
        c1, c2, c3, c4 = st.columns([0.4, 0.3, 0.2, 0.1])
        with c1:
            name = st.text_input(
                "Part name", value=row.name, key=f"{key}_{id(editor)}_name_{row.row_id}",
                placeholder="Part name...", label_visibility="collapsed", disabled=disabled,
            )
        with c2:
            serial = st.text_input(
                "Serial number", value=row.serial_number, key=f"{key}_{id(editor)}_serial_{row.row_id}",
                placeholder="Serial number...", label_visibility="collapsed", disabled=disabled,
            )
        with c3:
            price = st.text_input(
                "Price", value=row.price, key=f"{key}_{id(editor)}_price_{row.row_id}",
                placeholder="Price...", label_visibility="collapsed", disabled=disabled,
            )
        editor.update_field(index, 'name', name)
        editor.update_field(index, 'serial_number', serial)
        editor.update_field(index, 'price', price)
        with c4:
            can_remove = len(editor) > 1 or editor.allows_empty
            if st.button("✕", key=f"{key}_{id(editor)}_remove_{row.row_id}", disabled=disabled or not can_remove):
                remove_index = index

    if remove_index is not None:
        editor.remove_row(remove_index)
        st.rerun()

    if st.button("Add Part", key=f"{key}_add_row", disabled=disabled):
        editor.add_row()
        st.rerun()
