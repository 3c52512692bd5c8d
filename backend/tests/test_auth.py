import pytest

from bowlingclub import db
from bowlingclub.errors import Conflict, NotFound, Unauthorized
from bowlingclub.services import auth as auth_service
from bowlingclub.services.tokens import issue_token


def register(client, **overrides):
    body = {'email': 'alice@strike.com', 'password': 'secret123', 'name': 'Alice'}
    body.update(overrides)
    return client.post('/api/auth/register', json=body)


def test_register_returns_token_and_public_user(client):
    res = register(client, phoneNumber='010-1234-5678')
    assert res.status_code == 201
    body = res.get_json()
    assert body['success'] is True
    data = body['data']
    assert data['accessToken']
    assert data['user']['email'] == 'alice@strike.com'
    assert data['user']['phoneNumber'] == '010-1234-5678'
    assert 'passwordHash' not in data['user']
    assert 'password_hash' not in data['user']


def test_duplicate_registration_conflicts(client):
    assert register(client).status_code == 201
    res = register(client, email='ALICE@strike.com', name='Other')
    assert res.status_code == 409
    assert res.get_json()['error'] == 'Conflict'


def test_register_service_conflict(flask_app):
    auth_service.register('bob@strike.com', 'secret123', 'Bob')
    with pytest.raises(Conflict):
        auth_service.register('bob@strike.com', 'another1', 'Bobby')


@pytest.mark.parametrize('overrides', [
    {'email': 'not-an-email'},
    {'password': '12345'},
    {'name': 'A'},
    {'nickname': 'extra field'},
])
def test_register_rejects_invalid_input(client, overrides):
    res = register(client, **overrides)
    assert res.status_code == 400
    body = res.get_json()
    assert body['success'] is False
    assert body['errors']


def test_login_succeeds_with_correct_password(client):
    register(client)
    res = client.post('/api/auth/login', json={'email': 'alice@strike.com', 'password': 'secret123'})
    assert res.status_code == 200
    data = res.get_json()['data']
    assert data['accessToken']
    assert data['user']['name'] == 'Alice'


def test_login_failure_does_not_reveal_which_field_was_wrong(client):
    register(client)
    wrong_password = client.post('/api/auth/login', json={'email': 'alice@strike.com', 'password': 'nope-nope'})
    unknown_email = client.post('/api/auth/login', json={'email': 'nobody@strike.com', 'password': 'secret123'})
    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.get_json()['message'] == unknown_email.get_json()['message']


def test_login_service_raises_unauthorized(flask_app):
    auth_service.register('carol@strike.com', 'secret123', 'Carol')
    with pytest.raises(Unauthorized):
        auth_service.login('carol@strike.com', 'wrong-pass')


def test_get_profile_missing_user(flask_app):
    with pytest.raises(NotFound):
        auth_service.get_profile(9999)


def test_profile_requires_token(client):
    res = client.get('/api/auth/profile')
    assert res.status_code == 401
    assert res.get_json()['error'] == 'Unauthorized'


@pytest.mark.parametrize('path', ['/api/auth/profile', '/api/auth/me'])
def test_profile_with_token(client, path):
    token = register(client).get_json()['data']['accessToken']
    res = client.get(path, headers={'Authorization': f'Bearer {token}'})
    assert res.status_code == 200
    assert res.get_json()['data']['email'] == 'alice@strike.com'


def test_malformed_authorization_header(client, make_user):
    user = make_user()
    token = issue_token(user.id, user.email)
    res = client.get('/api/auth/me', headers={'Authorization': f'Token {token}'})
    assert res.status_code == 401


def test_expired_token_is_rejected(client, make_user):
    user = make_user()
    token = issue_token(user.id, user.email, expires_in=-5)
    res = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})
    assert res.status_code == 401
    assert '만료' in res.get_json()['message']


def test_token_is_stale_after_email_change(client, make_user):
    user = make_user(email='old@strike.com')
    token = issue_token(user.id, user.email)
    user.email = 'new@strike.com'
    db.session.commit()
    res = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})
    assert res.status_code == 401


def test_token_for_deleted_user_is_rejected(client, make_user):
    user = make_user()
    token = issue_token(user.id, user.email)
    db.session.delete(user)
    db.session.commit()
    res = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})
    assert res.status_code == 401


def test_each_request_resolves_its_own_bearer(client, make_user, auth_headers):
    alice = make_user(name='Alice')
    bobby = make_user(name='Bobby')
    names = [
        client.get('/api/auth/me', headers=auth_headers(user)).get_json()['data']['name']
        for user in (alice, bobby, alice)
    ]
    assert names == ['Alice', 'Bobby', 'Alice']
    assert client.get('/api/auth/me').status_code == 401
