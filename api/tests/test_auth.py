from datetime import timedelta

import pytest
from httpx import AsyncClient

from pyqvault.auth.jwt_utils import create_access_token
from pyqvault.config import settings

ADMIN_EMAIL = settings.ADMIN_EMAIL
ADMIN_PASSWORD = settings.ADMIN_PASSWORD


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient):
    response = await client.post('/api/auth/login', json={'email': ADMIN_EMAIL, 'password': ADMIN_PASSWORD})

    assert response.status_code == 200
    data = response.json()
    assert data['success'] is True
    assert data['token_type'] == 'bearer'
    assert data['access_token']
    assert data['user'] == {'email': ADMIN_EMAIL, 'role': 'admin'}


@pytest.mark.asyncio
async def test_login_email_is_case_insensitive(client: AsyncClient):
    response = await client.post('/api/auth/login', json={'email': ADMIN_EMAIL.upper(), 'password': ADMIN_PASSWORD})

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_login_invalid_credentials(client: AsyncClient):
    response = await client.post('/api/auth/login', json={'email': ADMIN_EMAIL, 'password': 'wrongpassword'})

    assert response.status_code == 401
    assert response.json() == {'error': 'Invalid email or password'}


@pytest.mark.asyncio
async def test_login_requires_both_fields(client: AsyncClient):
    response = await client.post('/api/auth/login', json={'email': ADMIN_EMAIL})

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_login_rate_limited(client: AsyncClient):
    for _ in range(settings.MAX_LOGIN_ATTEMPTS):
        response = await client.post('/api/auth/login', json={'email': ADMIN_EMAIL, 'password': 'nope'})
        assert response.status_code == 401

    response = await client.post('/api/auth/login', json={'email': ADMIN_EMAIL, 'password': ADMIN_PASSWORD})

    assert response.status_code == 429


@pytest.mark.asyncio
async def test_verify_token(client: AsyncClient, auth_headers):
    response = await client.get('/api/auth/verify', headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {'valid': True, 'user': {'email': ADMIN_EMAIL, 'role': 'admin'}}


@pytest.mark.asyncio
async def test_verify_without_token(client: AsyncClient):
    response = await client.get('/api/auth/verify')

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_verify_expired_token(client: AsyncClient):
    token = create_access_token(ADMIN_EMAIL, {'role': 'admin'}, expires_delta=timedelta(minutes=-5))

    response = await client.get('/api/auth/verify', headers={'Authorization': f'Bearer {token}'})

    assert response.status_code == 401
    assert response.json() == {'error': 'Token has expired'}


@pytest.mark.asyncio
async def test_verify_garbage_token(client: AsyncClient):
    response = await client.get('/api/auth/verify', headers={'Authorization': 'Bearer not.a.jwt'})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_data_routes_open_by_default(client: AsyncClient):
    response = await client.get('/api/files')

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_require_auth_guards_data_routes(client: AsyncClient, auth_headers, monkeypatch):
    monkeypatch.setattr(settings, 'REQUIRE_AUTH', True)

    anonymous = await client.get('/api/files')
    authorized = await client.get('/api/files', headers=auth_headers)

    assert anonymous.status_code == 401
    assert authorized.status_code == 200


@pytest.mark.asyncio
async def test_require_auth_rejects_non_admin_token(client: AsyncClient, monkeypatch):
    monkeypatch.setattr(settings, 'REQUIRE_AUTH', True)
    token = create_access_token('student@example.com', {'role': 'student'})

    response = await client.get('/api/colleges', headers={'Authorization': f'Bearer {token}'})

    assert response.status_code == 403
