import unittest
from datetime import datetime, timedelta
from unittest import mock

import auth
from auth import SESSION_TIMEOUT_SECONDS, SessionContext, authenticate_user


class TestSessionContext(unittest.TestCase):
    def test_login_and_logout(self):
        session = SessionContext()
        self.assertFalse(session.is_authenticated())

        session.login("admin")
        self.assertTrue(session.is_authenticated())
        self.assertEqual(session.username, "admin")

        session.logout()
        self.assertFalse(session.is_authenticated())
        self.assertIsNone(session.username)

    def test_idle_session_expires(self):
        session = SessionContext()
        session.login("admin")
        start = session.last_activity
        self.assertFalse(session.is_expired(start + timedelta(seconds=SESSION_TIMEOUT_SECONDS - 1)))
        self.assertTrue(session.is_expired(start + timedelta(seconds=SESSION_TIMEOUT_SECONDS + 1)))

    def test_touch_resets_idle_time(self):
        session = SessionContext()
        session.login("admin")
        later = session.last_activity + timedelta(minutes=50)
        session.touch(later)
        self.assertFalse(session.is_expired(later + timedelta(minutes=50)))

    def test_remember_me_never_expires(self):
        session = SessionContext()
        session.login("admin", remember=True)
        self.assertFalse(session.is_expired(datetime.now() + timedelta(days=30)))

    def test_logged_out_session_is_not_expired(self):
        self.assertFalse(SessionContext().is_expired(datetime.now() + timedelta(days=1)))


class TestAuthenticateUser(unittest.TestCase):
    def test_valid_and_invalid_credentials(self):
        with mock.patch.object(auth, 'VALID_USERNAME', 'admin'), \
                mock.patch.object(auth, 'VALID_PASSWORD', 's3cret'):
            self.assertTrue(authenticate_user('admin', 's3cret'))
            self.assertFalse(authenticate_user('admin', 'wrong'))
            self.assertFalse(authenticate_user('other', 's3cret'))
            self.assertFalse(authenticate_user(None, None))

    def test_unconfigured_credentials_refuse_login(self):
        with mock.patch.object(auth, 'VALID_USERNAME', None), \
                mock.patch.object(auth, 'VALID_PASSWORD', None):
            self.assertFalse(authenticate_user('', ''))


if __name__ == '__main__':
    unittest.main()
