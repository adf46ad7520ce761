"""
Tests for registration, JWT login and role permissions.
"""
import json
from django.test import TestCase, Client

from apps.audit.models import AuditLog
from apps.identity.models import User, UserRole
from apps.identity.permissions import get_user_permissions, Permissions
from apps.identity.jwt_auth import (
    create_access_token, create_refresh_token, decode_token, get_user_id_from_token,
)


class RBACTest(TestCase):
    def test_guest_has_no_write_permissions(self):
        user = User.objects.create_user(username="guest", password="pw", role=UserRole.GUEST)
        self.assertEqual(get_user_permissions(user), [])

    def test_user_permissions(self):
        user = User.objects.create_user(username="member", password="pw", role=UserRole.USER)
        perms = get_user_permissions(user)
        self.assertIn(Permissions.WALLET_USE, perms)
        self.assertNotIn(Permissions.SUBSCRIPTION_PURCHASE, perms)
        self.assertNotIn(Permissions.LEDGER_MANAGE, perms)

    def test_creator_can_buy_packages(self):
        user = User.objects.create_user(username="creator", password="pw", role=UserRole.CREATOR)
        self.assertIn(Permissions.SUBSCRIPTION_PURCHASE, get_user_permissions(user))

    def test_admin_permissions(self):
        user = User.objects.create_user(username="admin", password="pw", role=UserRole.ADMIN)
        perms = get_user_permissions(user)
        self.assertIn(Permissions.LEDGER_MANAGE, perms)
        self.assertIn(Permissions.REPORT_MANAGE, perms)

    def test_inactive_user_has_no_permissions(self):
        user = User.objects.create_user(username="gone", password="pw", is_active=False)
        self.assertEqual(get_user_permissions(user), [])


class JWTTokenTest(TestCase):
    def test_access_token_round_trip(self):
        user = User.objects.create_user(username="tok", password="pw")
        token = create_access_token(user.id, user.role)
        self.assertEqual(get_user_id_from_token(token), user.id)
        self.assertEqual(decode_token(token)['role'], UserRole.USER)

    def test_refresh_token_is_not_an_access_token(self):
        user = User.objects.create_user(username="tok2", password="pw")
        token = create_refresh_token(user.id)
        self.assertIsNone(get_user_id_from_token(token))
        self.assertEqual(get_user_id_from_token(token, token_type='refresh'), user.id)

    def test_garbage_token(self):
        self.assertIsNone(decode_token("not-a-jwt"))


class AuthAPITest(TestCase):
    def setUp(self):
        self.client = Client()
        self.user = User.objects.create_user(
            username="alice", email="alice@test.com", password="secret123",
            first_name="Alice", last_name="Nguyen",
        )

    def _post(self, url, payload, **extra):
        return self.client.post(url, data=json.dumps(payload), content_type='application/json', **extra)

    def test_register_creates_account_and_tokens(self):
        response = self._post('/api/v1/auth/register', {
            'username': 'bob', 'email': 'bob@test.com', 'password': 'secret123',
        })
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(data['user']['username'], 'bob')
        self.assertEqual(data['user']['role'], UserRole.USER)
        self.assertTrue(data['access_token'])
        self.assertIn('access_token', response.cookies)

    def test_register_duplicate_username(self):
        response = self._post('/api/v1/auth/register', {
            'username': 'alice', 'email': 'other@test.com', 'password': 'secret123',
        })
        self.assertEqual(response.status_code, 409)

    def test_register_short_password(self):
        response = self._post('/api/v1/auth/register', {
            'username': 'carol', 'email': 'carol@test.com', 'password': '123',
        })
        self.assertEqual(response.status_code, 400)

    def test_login_success_sets_cookies(self):
        response = self._post('/api/v1/auth/login', {'username': 'alice', 'password': 'secret123'})
        self.assertEqual(response.status_code, 200)
        self.assertIn('refresh_token', response.cookies)
        self.assertTrue(AuditLog.objects.filter(action='USER_LOGIN', target_id=self.user.id).exists())

    def test_login_wrong_password(self):
        response = self._post('/api/v1/auth/login', {'username': 'alice', 'password': 'nope'})
        self.assertEqual(response.status_code, 401)

    def test_login_disabled_account(self):
        self.user.is_active = False
        self.user.save()
        response = self._post('/api/v1/auth/login', {'username': 'alice', 'password': 'secret123'})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['detail'], "Account is disabled")

    def test_bearer_token_authenticates(self):
        token = create_access_token(self.user.id, self.user.role)
        response = self.client.get('/api/v1/auth/me', HTTP_AUTHORIZATION=f'Bearer {token}')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['username'], 'alice')

    def test_me_requires_auth(self):
        response = self.client.get('/api/v1/auth/me')
        self.assertEqual(response.status_code, 401)

    def test_refresh_with_body_token(self):
        token = create_refresh_token(self.user.id)
        response = self._post('/api/v1/auth/refresh', {'refresh_token': token})
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['access_token'])

    def test_refresh_rejects_access_token(self):
        token = create_access_token(self.user.id, self.user.role)
        response = self._post('/api/v1/auth/refresh', {'refresh_token': token})
        self.assertEqual(response.status_code, 401)

    def test_login_rate_limited(self):
        with self.settings(RATE_LIMITS={'auth': 2, 'transfer': 20, 'search': 60}):
            for _ in range(2):
                self._post('/api/v1/auth/login', {'username': 'alice', 'password': 'nope'})
            response = self._post('/api/v1/auth/login', {'username': 'alice', 'password': 'nope'})
        self.assertEqual(response.status_code, 429)

    def test_public_profile(self):
        response = self.client.get(f'/api/v1/users/{self.user.id}')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['display_name'], 'Alice Nguyen')

    def test_admin_changes_role(self):
        admin = User.objects.create_user(username="root", password="pw", role=UserRole.ADMIN)
        self.client.force_login(admin)
        response = self.client.patch(
            f'/api/v1/users/{self.user.id}',
            data=json.dumps({'role': 'CREATOR'}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 200)
        self.user.refresh_from_db()
        self.assertEqual(self.user.role, UserRole.CREATOR)

    def test_non_admin_cannot_change_role(self):
        self.client.force_login(self.user)
        response = self.client.patch(
            f'/api/v1/users/{self.user.id}',
            data=json.dumps({'role': 'ADMIN'}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 403)
