import streamlit as st

VIEWS = {
    'search_vin': "Search VIN",
    'search_plate': "Search License Plate",
    'add_record': "Add New Record",
}


def _set_view(view_name):
    st.session_state.view = view_name


def main_navigation(session):
    st.sidebar.title("Focus Part")
    st.sidebar.caption("Management Piese Auto")

    for view_name, label in VIEWS.items():
        st.sidebar.button(
            label,
            key=f"nav_{view_name}",
            on_click=_set_view,
            args=(view_name,),
            type="primary" if st.session_state.get('view') == view_name else "secondary",
        )

    st.sidebar.markdown("---")
    st.sidebar.info(f"Logged in as: {session.username}")
    st.sidebar.button("Logout", on_click=session.logout)


def show_flash():
    """Display and clear the one-shot message left by the previous action."""
    flash = st.session_state.pop('flash', None)
    if flash:
        level, message = flash
        if level == 'info':
            st.info(message)
        else:
            st.success(message)
