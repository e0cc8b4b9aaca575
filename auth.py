# auth.py
import hmac
import logging
import os
import time
from datetime import datetime

import streamlit as st

logger = logging.getLogger(__name__)

VALID_USERNAME = os.environ.get('FOCUSPART_USERNAME')
VALID_PASSWORD = os.environ.get('FOCUSPART_PASSWORD')

# Sessions without "remember me" end after one hour of inactivity
SESSION_TIMEOUT_SECONDS = 3600
SESSION_WARNING_SECONDS = 3300

SESSION_KEY = 'session_context'


class SessionContext:
    """Authentication state of one browser session."""

    def __init__(self):
        self.authenticated = False
        self.username = None
        self.remember = False
        self.last_activity = datetime.now()

    def is_authenticated(self) -> bool:
        return self.authenticated

    def login(self, username, remember=False):
        self.authenticated = True
        self.username = username
        self.remember = bool(remember)
        self.touch()

    def logout(self):
        if self.authenticated:
            logger.info("User %s logged out", self.username)
        self.authenticated = False
        self.username = None
        self.remember = False

    def touch(self, now=None):
        self.last_activity = now or datetime.now()

    def idle_seconds(self, now=None) -> float:
        return ((now or datetime.now()) - self.last_activity).total_seconds()

    def is_expired(self, now=None) -> bool:
        if not self.authenticated or self.remember:
            return False
        return self.idle_seconds(now) > SESSION_TIMEOUT_SECONDS


def authenticate_user(username, password) -> bool:
    """Check credentials against the two configured secrets."""
    if not VALID_USERNAME or not VALID_PASSWORD:
        logger.error("Login refused: FOCUSPART_USERNAME / FOCUSPART_PASSWORD are not configured")
        return False
    user_ok = hmac.compare_digest((username or '').encode(), VALID_USERNAME.encode())
    password_ok = hmac.compare_digest((password or '').encode(), VALID_PASSWORD.encode())
    return user_ok and password_ok


def init_session_state() -> SessionContext:
    defaults = {
        SESSION_KEY: SessionContext(),
        'login_loading': False,
    }

    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value
    return st.session_state[SESSION_KEY]


def login_form(session: SessionContext):
    """Display login form"""
    st.title("Focus Part - Login")

    with st.form("login_form", clear_on_submit=True):
        username = st.text_input("Username", key="login_username")
        password = st.text_input("Password", type="password", key="login_password")
        remember = st.checkbox("Remember me", key="login_remember")
        submitted = st.form_submit_button("Login", type="primary", disabled=st.session_state.get('login_loading', False))

    if submitted:
        st.session_state.login_loading = True
        with st.spinner("Signing in..."):
            # Slow down guessing a little
            time.sleep(0.5)
            authenticated = authenticate_user(username, password)
        st.session_state.login_loading = False

        if authenticated:
            session.login(username, remember)
            st.session_state.view = 'search_vin'
            logger.info("User %s logged in", username)
            st.rerun()
        else:
            st.error("Invalid username or password")
            logger.info("Failed login attempt for %s", username)


def require_login(session: SessionContext):
    """Stop the script unless the session is logged in and still active"""
    if session.is_expired():
        session.logout()
        st.warning("Session timed out due to inactivity. Please log in again.")

    if not session.is_authenticated():
        login_form(session)
        st.stop()

    if not session.remember and session.idle_seconds() > SESSION_WARNING_SECONDS:
        remaining = int(SESSION_TIMEOUT_SECONDS - session.idle_seconds())
        st.warning(
            f"Session will timeout in {remaining // 60}m {remaining % 60}s due to inactivity. "
            "Interact with the page to continue."
        )
    session.touch()
