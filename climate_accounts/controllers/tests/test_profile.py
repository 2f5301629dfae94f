"""Tests for :mod:`climate_accounts.controllers.profile`."""

from unittest import TestCase, mock

from werkzeug.exceptions import InternalServerError

from climate_accounts.controllers import profile
from climate_accounts.errors import NotFoundError, SessionExpiredError, \
    ValidationError
from climate_accounts.services.exceptions import SessionUpdateFailed
from climate_accounts.sessions import SessionExpired, UnknownSession


class TestUserFromSession(TestCase):
    """Tests for :func:`.profile.user_from_session`."""

    @mock.patch(f'{profile.__name__}.sessions.resolve_session')
    def test_resolved(self, mock_resolve):
        mock_resolve.return_value = {'name': 'Ada'}
        data, code, _ = profile.user_from_session('tok', mock.MagicMock(),
                                                  mock.MagicMock())
        self.assertEqual(code, 200)
        self.assertEqual(data, {'user': {'name': 'Ada'}})

    @mock.patch(f'{profile.__name__}.sessions.resolve_session')
    def test_expired(self, mock_resolve):
        """Expired sessions carry a machine-readable reason."""
        mock_resolve.side_effect = SessionExpired('gone')
        with self.assertRaises(SessionExpiredError) as ctx:
            profile.user_from_session('tok', mock.MagicMock(),
                                      mock.MagicMock())
        self.assertEqual(ctx.exception.code, 401)
        self.assertEqual(ctx.exception.payload,
                         {'expired': True, 'code': 'SESSION_EXPIRED'})

    @mock.patch(f'{profile.__name__}.sessions.resolve_session')
    def test_invalid(self, mock_resolve):
        mock_resolve.side_effect = SessionExpired('Invalid session',
                                                  SessionExpired.INVALID)
        with self.assertRaises(SessionExpiredError) as ctx:
            profile.user_from_session('tok', mock.MagicMock(),
                                      mock.MagicMock())
        self.assertEqual(ctx.exception.payload['code'], 'SESSION_INVALID')

    @mock.patch(f'{profile.__name__}.sessions.resolve_session')
    def test_repair_fails(self, mock_resolve):
        mock_resolve.side_effect = SessionUpdateFailed('down')
        with self.assertRaises(InternalServerError):
            profile.user_from_session('tok', mock.MagicMock(),
                                      mock.MagicMock())


class TestUpdateProfile(TestCase):
    """Tests for :func:`.profile.update_profile`."""

    @mock.patch(f'{profile.__name__}.sessions.update_profile')
    def test_update(self, mock_update):
        mock_update.return_value = {'phone': '222'}
        users, cache = mock.MagicMock(), mock.MagicMock()
        data, code, _ = profile.update_profile(
            {'token': 'tok', 'phone': ' 222 '}, users, cache
        )
        self.assertEqual(code, 200)
        self.assertEqual(data['user'], {'phone': '222'})
        mock_update.assert_called_once_with(users, cache, 'tok', name=None,
                                            phone='222')

    @mock.patch(f'{profile.__name__}.sessions.update_profile')
    def test_session_key_alias(self, mock_update):
        """``sessionKey`` is accepted in place of ``token``."""
        mock_update.return_value = {}
        profile.update_profile({'sessionKey': 'tok', 'name': 'Ada'},
                               mock.MagicMock(), mock.MagicMock())
        self.assertEqual(mock_update.call_args[0][2], 'tok')

    def test_no_token(self):
        with self.assertRaises(ValidationError):
            profile.update_profile({'name': 'Ada'}, mock.MagicMock(),
                                   mock.MagicMock())

    def test_nothing_to_update(self):
        """Blank fields do not count as changes."""
        with self.assertRaises(ValidationError) as ctx:
            profile.update_profile({'token': 'tok', 'name': '  '},
                                   mock.MagicMock(), mock.MagicMock())
        self.assertEqual(ctx.exception.description, 'Nothing to update.')

    @mock.patch(f'{profile.__name__}.sessions.update_profile')
    def test_unknown_session(self, mock_update):
        mock_update.side_effect = UnknownSession('Invalid session')
        with self.assertRaises(NotFoundError):
            profile.update_profile({'token': 'tok', 'name': 'Ada'},
                                   mock.MagicMock(), mock.MagicMock())

    @mock.patch(f'{profile.__name__}.sessions.update_profile')
    def test_expired(self, mock_update):
        mock_update.side_effect = SessionExpired('gone')
        with self.assertRaises(SessionExpiredError):
            profile.update_profile({'token': 'tok', 'name': 'Ada'},
                                   mock.MagicMock(), mock.MagicMock())

    @mock.patch(f'{profile.__name__}.sessions.update_profile')
    def test_cache_write_fails(self, mock_update):
        mock_update.side_effect = SessionUpdateFailed('down')
        with self.assertRaises(InternalServerError):
            profile.update_profile({'token': 'tok', 'name': 'Ada'},
                                   mock.MagicMock(), mock.MagicMock())
