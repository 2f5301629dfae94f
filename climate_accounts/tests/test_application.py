"""End-to-end tests of the accounts API."""

from unittest import TestCase, mock
import json

from climate_accounts.factory import create_app, shutdown
from climate_accounts.services.exceptions import SessionCreationFailed

from .util import make_cache, make_user_store

REGISTRATION = {'name': 'Ada', 'email': 'Ada@Example.com', 'phone': '111',
                'password': 'correct horse'}


class TestAccountsAPI(TestCase):
    """Register, log in, look up and update sessions over HTTP."""

    def setUp(self):
        self.users = make_user_store()
        self.cache = make_cache()
        self.app = create_app(
            config={'LOG_JSON': False, 'TESTING': True},
            user_store=self.users, cache=self.cache
        )
        self.client = self.app.test_client()

    def tearDown(self):
        self.users.drop_all()
        shutdown(self.app)

    def _register(self, **changes):
        payload = dict(REGISTRATION)
        payload.update(changes)
        return self.client.post('/register', json=payload)

    def _login(self, email='ada@example.com', password='correct horse'):
        return self.client.post('/login', json={'email': email,
                                                'password': password})

    def test_register(self):
        """A new account is created."""
        response = self._register()
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.get_json(),
                         {'success': True,
                          'message': 'Registration successful'})

    def test_register_duplicate(self):
        """The same address in a different case is a conflict."""
        self._register()
        response = self._register(email='ADA@example.com')
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.get_json()['error'],
                         'Email already registered.')

    def test_register_missing_field(self):
        response = self.client.post('/register', json={'email': 'a@b.c'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['error'],
                         'All fields are required.')

    def test_register_not_json(self):
        response = self.client.post('/register', data='name=Ada',
                                    content_type='text/plain')
        self.assertEqual(response.status_code, 400)

    def test_login(self):
        """Logging in returns a token and the public profile."""
        self._register()
        response = self._login()
        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertEqual(data['token'], data['sessionKey'])
        self.assertEqual(data['user']['email'], 'ada@example.com')
        self.assertEqual(data['user']['phone'], '111')
        self.assertNotIn('password', data['user'])

    def test_login_twice(self):
        """A second login reuses the live session."""
        self._register()
        first = self._login().get_json()['token']
        second = self._login().get_json()['token']
        self.assertEqual(first, second)

    def test_login_failures(self):
        self._register()
        response = self._login(email='bob@example.com')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['error'], "User Doesn't Exist")

        response = self._login(password='wrong')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['error'], 'Invalid credentials')

        response = self.client.post('/login', json={})
        self.assertEqual(response.status_code, 400)

    def test_login_cache_down(self):
        """If the session cannot be stored, login fails."""
        self._register()
        with mock.patch.object(self.cache, 'create',
                               side_effect=SessionCreationFailed('down')):
            response = self._login()
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.get_json()['error'], 'Cannot log in')

    def test_user_from_session(self):
        self._register()
        login = self._login().get_json()
        response = self.client.get(f'/userfromsession/{login["token"]}')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['user'], login['user'])

    def test_user_from_expired_session(self):
        """An expired session is reported so clients can log in again."""
        self._register()
        token = self._login().get_json()['token']
        self.cache.r.delete(token)
        response = self.client.get(f'/userfromsession/{token}')
        self.assertEqual(response.status_code, 401)
        data = response.get_json()
        self.assertTrue(data['expired'])
        self.assertEqual(data['code'], 'SESSION_EXPIRED')

        # Logging in again issues a fresh token.
        self.assertNotEqual(self._login().get_json()['token'], token)

    def test_update_profile(self):
        """Profile changes show up in the session."""
        self._register()
        token = self._login().get_json()['token']
        response = self.client.put('/updateprofile',
                                   json={'token': token, 'phone': '222'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['user']['phone'], '222')

        response = self.client.get(f'/userfromsession/{token}')
        self.assertEqual(response.get_json()['user']['phone'], '222')

    def test_update_profile_drift_repaired(self):
        """A change made directly in the store reaches the session."""
        self._register()
        token = self._login().get_json()['token']
        self.users.update_profile(token, name='Ada Lovelace')
        response = self.client.get(f'/userfromsession/{token}')
        self.assertEqual(response.get_json()['user']['name'], 'Ada Lovelace')
        entry = json.loads(self.cache.r.get(token))
        self.assertEqual(entry['user']['name'], 'Ada Lovelace')

    def test_update_profile_errors(self):
        self._register()
        token = self._login().get_json()['token']
        response = self.client.put('/updateprofile', json={'phone': '222'})
        self.assertEqual(response.status_code, 400)

        response = self.client.put('/updateprofile', json={'token': token})
        self.assertEqual(response.status_code, 400)

        response = self.client.put('/updateprofile',
                                   json={'token': 'nope', 'phone': '222'})
        self.assertEqual(response.status_code, 404)

        self.cache.r.delete(token)
        response = self.client.put('/updateprofile',
                                   json={'token': token, 'phone': '222'})
        self.assertEqual(response.status_code, 401)
        self.assertTrue(response.get_json()['expired'])

    def test_change_password(self):
        """The password can be changed with a bearer token."""
        self._register()
        token = self._login().get_json()['token']
        response = self.client.post(
            '/password/change',
            json={'currentPassword': 'correct horse',
                  'newPassword': 'battery staple'},
            headers={'Authorization': f'Bearer {token}'}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self._login(password='correct horse').status_code,
                         400)
        self.assertEqual(self._login(password='battery staple').status_code,
                         200)

    def test_change_password_failures(self):
        self._register()
        token = self._login().get_json()['token']
        auth = {'Authorization': f'Bearer {token}'}
        response = self.client.post(
            '/password/change',
            json={'currentPassword': 'wrong', 'newPassword': 'battery staple'},
            headers=auth
        )
        self.assertEqual(response.status_code, 401)

        response = self.client.post(
            '/password/change',
            json={'currentPassword': 'correct horse', 'newPassword': 'short'},
            headers=auth
        )
        self.assertEqual(response.status_code, 400)

        response = self.client.post(
            '/password/change',
            json={'userId': 'nobody', 'currentPassword': 'correct horse',
                  'newPassword': 'battery staple'}
        )
        self.assertEqual(response.status_code, 404)

        response = self.client.post(
            '/password/change',
            json={'currentPassword': 'correct horse',
                  'newPassword': 'battery staple'},
            headers={'Authorization': 'Token'}
        )
        self.assertEqual(response.status_code, 400)

    def test_change_password_requires_token(self):
        """Body identity can be switched off."""
        self.app.config['PASSWORD_CHANGE_BODY_IDENTITY'] = False
        self._register()
        user_id = self._login().get_json()['user']['userid']
        response = self.client.post(
            '/password/change',
            json={'userId': user_id, 'currentPassword': 'correct horse',
                  'newPassword': 'battery staple'}
        )
        self.assertEqual(response.status_code, 401)

    def test_status(self):
        response = self.client.get('/status')
        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertTrue(data['store']['available'])
        self.assertTrue(data['cache']['available'])
        self.assertEqual(data['cache']['state'], 'connected')

    def test_status_cache_down(self):
        with mock.patch.object(self.cache.r, 'ping',
                               side_effect=ConnectionError('down')):
            response = self.client.get('/status')
        self.assertEqual(response.status_code, 503)
        self.assertFalse(response.get_json()['cache']['available'])
