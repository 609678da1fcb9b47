import time

from healthwallet.models import RevokedToken, User
from healthwallet.utils.auth import decode_token, generate_token


def test_register_returns_token_and_user(client):
    response = client.post('/api/auth/register', json={
        'name': 'Dana', 'email': 'dana@example.com', 'password': 'secret123',
    })
    assert response.status_code == 201
    body = response.get_json()
    assert body['message'] == 'User registered successfully'
    assert body['user']['email'] == 'dana@example.com'
    assert body['user']['name'] == 'Dana'
    assert 'password_hash' not in body['user']

    user = User.query.one()
    assert user.password_hash != 'secret123'
    assert user.check_password('secret123')


def test_register_duplicate_email(client, alice):
    response = client.post('/api/auth/register', json={
        'name': 'Other Alice', 'email': 'alice@example.com', 'password': 'secret123',
    })
    assert response.status_code == 409
    assert User.query.count() == 1


def test_register_validates_input(client):
    bad = [
        {'name': 'Dana', 'email': 'not-an-email', 'password': 'secret123'},
        {'name': 'Dana', 'email': 'dana@example.com', 'password': '123'},
        {'email': 'dana@example.com', 'password': 'secret123'},
    ]
    for body in bad:
        assert client.post('/api/auth/register', json=body).status_code == 400
    assert User.query.count() == 0


def test_register_reports_every_problem(client):
    response = client.post('/api/auth/register', json={'name': '', 'email': '', 'password': ''})
    assert response.status_code == 400
    errors = response.get_json()['error']
    assert 'Name is required' in errors
    assert 'Email is required' in errors
    assert 'Password is required' in errors


def test_login(client, alice):
    alice_id, _ = alice
    response = client.post('/api/auth/login', json={
        'email': 'alice@example.com', 'password': 'secret123',
    })
    assert response.status_code == 200
    body = response.get_json()
    assert body['user']['id'] == alice_id
    assert decode_token(body['token'])['user_id'] == alice_id


def test_login_wrong_password_or_unknown_user(client, alice):
    wrong = client.post('/api/auth/login', json={'email': 'alice@example.com', 'password': 'nope12'})
    unknown = client.post('/api/auth/login', json={'email': 'who@example.com', 'password': 'secret123'})
    assert wrong.status_code == 401
    assert unknown.status_code == 401
    assert wrong.get_json() == unknown.get_json() == {'error': 'Invalid credentials'}


def test_login_requires_fields(client):
    assert client.post('/api/auth/login', json={'email': 'alice@example.com'}).status_code == 400


def test_email_is_case_sensitive(client, alice):
    response = client.post('/api/auth/login', json={
        'email': 'ALICE@example.com', 'password': 'secret123',
    })
    assert response.status_code == 401


def test_me(client, alice):
    alice_id, headers = alice
    response = client.get('/api/auth/me', headers=headers)
    assert response.status_code == 200
    assert response.get_json()['user']['id'] == alice_id


def test_bad_authorization_headers(client, alice):
    _, headers = alice
    token = headers['Authorization'].split()[1]
    assert client.get('/api/auth/me').status_code == 401
    assert client.get('/api/auth/me', headers={'Authorization': token}).status_code == 401
    assert client.get('/api/auth/me', headers={'Authorization': f'Basic {token}'}).status_code == 401


def test_token_signed_with_other_key_is_rejected(app, client, alice):
    alice_id, _ = alice
    app.config['JWT_SECRET_KEY'] = 'a-different-secret-key-of-enough-length'
    token = generate_token(alice_id, 'alice@example.com')
    app.config['JWT_SECRET_KEY'] = 'test-jwt-secret-key-with-enough-length'

    response = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})
    assert response.status_code == 401


def test_expired_token_is_rejected(app, client, alice):
    alice_id, _ = alice
    app.config['JWT_ACCESS_TOKEN_EXPIRES'] = -10
    token = generate_token(alice_id, 'alice@example.com')

    response = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})
    assert response.status_code == 401


def test_logout_revokes_token(client, alice):
    _, headers = alice
    response = client.post('/api/auth/logout', headers=headers)
    assert response.status_code == 200
    assert RevokedToken.query.count() == 1

    response = client.get('/api/auth/me', headers=headers)
    assert response.status_code == 401
    assert response.get_json()['error'] == 'Token has been revoked'

    # A fresh login still works
    login = client.post('/api/auth/login', json={'email': 'alice@example.com', 'password': 'secret123'})
    assert login.status_code == 200


def test_health(client):
    response = client.get('/api/health')
    assert response.status_code == 200
    assert response.get_json()['status'] == 'OK'


def test_unknown_route_is_json_404(client):
    response = client.get('/api/nothing-here')
    assert response.status_code == 404
    assert 'error' in response.get_json()


def test_plain_text_body_is_rejected(client):
    response = client.post('/api/auth/login', data='email=a', content_type='text/plain')
    assert response.status_code == 415


def test_purge_expired_revocations(alice):
    alice_id, _ = alice
    RevokedToken.revoke('old-jti', alice_id, time.time() - 3600)
    RevokedToken.revoke('live-jti', alice_id, time.time() + 3600)

    assert RevokedToken.purge_expired() == 1
    assert not RevokedToken.is_revoked('old-jti')
    assert RevokedToken.is_revoked('live-jti')


def test_register_rejects_non_object_body(client):
    response = client.post('/api/auth/register', json=['dana@example.com'])
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Request body must be a JSON object'


def test_register_rejects_non_string_fields(client):
    response = client.post('/api/auth/register', json={
        'name': 5, 'email': 'dana@example.com', 'password': 'secret123',
    })
    assert response.status_code == 400
    assert response.get_json()['error'] == ['Name must be a string']
    assert User.query.count() == 0


def test_login_rejects_malformed_bodies(client, alice):
    assert client.post('/api/auth/login', json={'email': 5, 'password': 'secret123'}).status_code == 400
    assert client.post('/api/auth/login', json={'email': 'alice@example.com',
                                                'password': ['secret123']}).status_code == 400
    assert client.post('/api/auth/login', json=['alice@example.com', 'secret123']).status_code == 400
