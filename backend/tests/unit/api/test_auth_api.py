"""
Unit Tests for Authentication API Endpoints
"""
import pytest
from unittest.mock import AsyncMock
from httpx import AsyncClient
from faker import Faker
from sqlalchemy import select, func

from app.core.exceptions import IdentityProviderError
from app.core.rate_limiter import limiter
from app.core.security import decode_token, create_access_token
from app.main import app
from app.models.account import Account
from app.modules.identity import get_identity_provider
from app.modules.identity.base import ExternalIdentity

fake = Faker()


class TestSignup:
    """Test account sign-up endpoint"""

    async def test_signup_success(self, client: AsyncClient):
        email = fake.unique.email()

        response = await client.post('/api/v1/auth/signup', json={'email': email, 'password': 'secret123'})

        assert response.status_code == 201
        data = response.json()
        assert data['message'] == 'User registered successfully'
        assert data['user']['email'] == email.lower()
        assert data['user']['role'] == 'user'
        assert 'password' not in data['user']
        claims = decode_token(data['token'])
        assert claims.account_id == data['user']['id']
        assert claims.role == 'user'

    async def test_signup_ignores_role(self, client: AsyncClient):
        response = await client.post('/api/v1/auth/signup', json={
            'email': fake.unique.email(), 'password': 'secret123', 'role': 'admin'
        })

        assert response.status_code == 201
        assert response.json()['user']['role'] == 'user'

    async def test_duplicate_signup_conflict(self, client: AsyncClient, db_session):
        email = fake.unique.email()
        first = await client.post('/api/v1/auth/signup', json={'email': email, 'password': 'secret123'})
        assert first.status_code == 201

        second = await client.post('/api/v1/auth/signup', json={'email': email, 'password': 'other12345'})

        assert second.status_code == 409
        assert second.json()['error']['code'] == 'CONFLICT'
        count = await db_session.scalar(select(func.count()).select_from(Account))
        assert count == 1

    async def test_signup_losing_concurrent_insert_conflicts(self, client: AsyncClient, db_session):
        """The account appears between the pre-check and the insert"""
        email = fake.unique.email().lower()

        async def sign_up_after_winner(*_args):
            db_session.add(Account(external_id='winner-ext', email=email))
            await db_session.commit()
            return ExternalIdentity(external_id='loser-ext', email=email, access_token='prov')

        provider = AsyncMock()
        provider.sign_up.side_effect = sign_up_after_winner
        app.dependency_overrides[get_identity_provider] = lambda: provider

        response = await client.post('/api/v1/auth/signup', json={'email': email, 'password': 'secret123'})

        assert response.status_code == 409
        body = response.json()
        assert body['error']['code'] == 'CONFLICT'
        assert 'token' not in body
        count = await db_session.scalar(select(func.count()).select_from(Account))
        assert count == 1

    async def test_signup_existing_account_skips_provider(self, client: AsyncClient, test_user):
        provider = AsyncMock()
        app.dependency_overrides[get_identity_provider] = lambda: provider

        response = await client.post('/api/v1/auth/signup', json={
            'email': test_user.email, 'password': 'secret123'
        })

        assert response.status_code == 409
        provider.sign_up.assert_not_called()

    async def test_signup_invalid_email(self, client: AsyncClient):
        response = await client.post('/api/v1/auth/signup', json={'email': 'nope', 'password': 'secret123'})

        assert response.status_code == 422
        body = response.json()
        assert body['success'] is False
        assert body['error']['code'] == 'VALIDATION_ERROR'

    async def test_signup_missing_password(self, client: AsyncClient):
        response = await client.post('/api/v1/auth/signup', json={'email': fake.email()})

        assert response.status_code == 422

    async def test_provider_failure_maps_to_502(self, client: AsyncClient):
        provider = AsyncMock()
        provider.sign_up.side_effect = IdentityProviderError("Identity provider unavailable", provider="supabase")
        app.dependency_overrides[get_identity_provider] = lambda: provider

        response = await client.post('/api/v1/auth/signup', json={
            'email': fake.unique.email(), 'password': 'secret123'
        })

        assert response.status_code == 502
        assert response.json()['error']['code'] == 'IDENTITY_PROVIDER_ERROR'


class TestLogin:
    """Test login endpoint"""

    async def test_login_success(self, client: AsyncClient):
        email = fake.unique.email()
        await client.post('/api/v1/auth/signup', json={'email': email, 'password': 'secret123'})

        response = await client.post('/api/v1/auth/login', json={'email': email, 'password': 'secret123'})

        assert response.status_code == 200
        data = response.json()
        assert data['user']['email'] == email.lower()
        assert decode_token(data['token']).email == email.lower()

    async def test_login_wrong_password(self, client: AsyncClient):
        email = fake.unique.email()
        await client.post('/api/v1/auth/signup', json={'email': email, 'password': 'secret123'})

        response = await client.post('/api/v1/auth/login', json={'email': email, 'password': 'wrong-one'})

        assert response.status_code == 401
        assert response.json()['error']['code'] == 'AUTH_FAILED'

    async def test_login_unknown_email(self, client: AsyncClient):
        response = await client.post('/api/v1/auth/login', json={
            'email': fake.unique.email(), 'password': 'secret123'
        })

        assert response.status_code == 401

    async def test_first_login_creates_account(self, client: AsyncClient, db_session):
        """An identity known to the provider but not locally gets an account on sign-in"""
        identity = ExternalIdentity(external_id='ext-42', email='fresh@example.com', access_token='prov')
        provider = AsyncMock()
        provider.sign_in.return_value = identity
        app.dependency_overrides[get_identity_provider] = lambda: provider

        response = await client.post('/api/v1/auth/login', json={
            'email': 'fresh@example.com', 'password': 'secret123'
        })

        assert response.status_code == 200
        assert response.json()['user']['external_id'] == 'ext-42'
        assert decode_token(response.json()['token']).provider_token == 'prov'
        count = await db_session.scalar(select(func.count()).select_from(Account))
        assert count == 1

    async def test_admin_login_token_carries_role(self, client: AsyncClient, admin_user):
        provider = AsyncMock()
        provider.sign_in.return_value = ExternalIdentity(
            external_id=admin_user.external_id, email=admin_user.email
        )
        app.dependency_overrides[get_identity_provider] = lambda: provider

        response = await client.post('/api/v1/auth/login', json={
            'email': admin_user.email, 'password': 'secret123'
        })

        assert response.status_code == 200
        assert response.json()['user']['role'] == 'admin'
        assert decode_token(response.json()['token']).role == 'admin'


class TestLogout:

    async def test_logout(self, client: AsyncClient, auth_headers):
        response = await client.post('/api/v1/auth/logout', headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {'message': 'Logged out successfully', 'success': True}

    async def test_logout_signs_out_provider_session(self, client: AsyncClient, test_user):
        provider = AsyncMock()
        app.dependency_overrides[get_identity_provider] = lambda: provider
        token = create_access_token(test_user.id, test_user.email, 'user', provider_token='prov-abc')

        response = await client.post('/api/v1/auth/logout', headers={'Authorization': f'Bearer {token}'})

        assert response.status_code == 200
        provider.sign_out.assert_awaited_once_with('prov-abc')

    async def test_logout_requires_auth(self, client: AsyncClient):
        response = await client.post('/api/v1/auth/logout')

        assert response.status_code == 401


class TestProfile:

    async def test_profile(self, client: AsyncClient, test_user, auth_headers):
        response = await client.get('/api/v1/auth/profile', headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data['id'] == test_user.id
        assert data['email'] == test_user.email
        assert data['role'] == 'user'

    async def test_profile_account_vanished(self, client: AsyncClient):
        token = create_access_token('no-such-account', 'ghost@example.com', 'user')

        response = await client.get('/api/v1/auth/profile', headers={'Authorization': f'Bearer {token}'})

        assert response.status_code == 404
        assert response.json()['error']['code'] == 'ACCOUNT_NOT_FOUND'


PROTECTED_ROUTES = [
    ('GET', '/api/v1/auth/profile', None),
    ('POST', '/api/v1/auth/logout', None),
    ('GET', '/api/v1/complaints', None),
    ('POST', '/api/v1/complaints', {'title': 'T', 'description': 'D', 'category': 'Other'}),
    ('GET', '/api/v1/complaints/some-id', None),
    ('PUT', '/api/v1/complaints/some-id', {'title': 'T'}),
    ('DELETE', '/api/v1/complaints/some-id', None),
    ('PUT', '/api/v1/complaints/some-id/status', {'status': 'Resolved'}),
]


class TestTokenHandling:
    """Missing or bad tokens are rejected uniformly with 401"""

    @pytest.mark.parametrize('method,url,body', PROTECTED_ROUTES)
    @pytest.mark.parametrize('headers', [
        {},
        {'Authorization': 'Bearer not-a-token'},
        {'Authorization': 'Basic dXNlcjpwYXNz'},
    ])
    async def test_rejected(self, client: AsyncClient, method, url, body, headers):
        response = await client.request(method, url, json=body, headers=headers)

        assert response.status_code == 401
        assert response.headers['www-authenticate'] == 'Bearer'
        assert response.json()['success'] is False

    async def test_expired_token(self, client: AsyncClient, test_user):
        from datetime import timedelta
        token = create_access_token(test_user.id, test_user.email, 'user', expires_delta=timedelta(seconds=-5))

        response = await client.get('/api/v1/complaints', headers={'Authorization': f'Bearer {token}'})

        assert response.status_code == 401
        assert response.json()['error']['code'] == 'TOKEN_EXPIRED'


@pytest.fixture
def rate_limited():
    """Turn the limiter on with empty counters"""
    limiter.reset()
    limiter.enabled = True
    yield
    limiter.enabled = False
    limiter.reset()


class TestRateLimiting:

    async def test_login_limited_per_minute(self, client: AsyncClient, rate_limited):
        payload = {'email': fake.unique.email(), 'password': 'wrong-one'}

        statuses = [
            (await client.post('/api/v1/auth/login', json=payload)).status_code
            for _ in range(6)
        ]

        assert statuses == [401] * 5 + [429]

    async def test_limited_response_shape(self, client: AsyncClient, rate_limited):
        payload = {'email': fake.unique.email(), 'password': 'wrong-one'}
        for _ in range(5):
            await client.post('/api/v1/auth/login', json=payload)

        response = await client.post('/api/v1/auth/login', json=payload)

        assert response.status_code == 429
        assert response.json()['error']['code'] == 'RATE_LIMITED'
        assert response.headers['retry-after'].isdigit()

    async def test_undecorated_routes_not_limited(self, client: AsyncClient, auth_headers, rate_limited):
        statuses = {
            (await client.get('/api/v1/complaints', headers=auth_headers)).status_code
            for _ in range(20)
        }

        assert statuses == {200}
