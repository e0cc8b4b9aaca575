# app.py
import logging
import os

import streamlit as st

from auth import init_session_state, require_login
from db_utils import create_tables, migrate_schema
from ui.navigation import main_navigation, show_flash
from views.add_record import render_add_record_view
from views.search_plate import render_search_plate_view
from views.search_vin import render_search_vin_view

logging.basicConfig(
    level=os.environ.get('FOCUSPART_LOG_LEVEL', 'INFO').upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

st.set_page_config(page_title="Focus Part", layout="wide")

# Initialize session state
session = init_session_state()
if 'view' not in st.session_state:
    st.session_state.view = 'search_vin'


@st.cache_resource
def _prepare_database():
    create_tables()
    migrate_schema()
    return True


# --- Ensure tables are created when the app first runs ---
_prepare_database()

require_login(session)

main_navigation(session)
show_flash()

if st.session_state.view == 'search_plate':
    render_search_plate_view()
elif st.session_state.view == 'add_record':
    render_add_record_view()
else:
    render_search_vin_view()
