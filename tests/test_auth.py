PASSWORD = 'secret123'

REGISTRATION = {
    'email': 'Cook@Example.com',
    'password': 'secret123',
    'firstName': 'Julia',
    'lastName': 'Child',
}


def register(client, **overrides):
    body = dict(REGISTRATION, **overrides)
    return client.post('/api/auth/register', json=body)


def bearer(token):
    return {'Authorization': f'Bearer {token}'}


def test_register_returns_user_and_tokens(client):
    res = register(client)
    assert res.status_code == 201
    body = res.get_json()
    assert body['success'] is True
    assert body['message'] == 'User registered successfully'
    user = body['data']['user']
    assert user['email'] == 'cook@example.com'
    assert user['username'] == 'cook'
    assert 'password' not in user and 'passwordHash' not in user
    assert set(body['data']['tokens']) == {'accessToken', 'refreshToken'}


def test_register_then_login_round_trip(app, client):
    from extensions import tokens

    registered = register(client, username='julia').get_json()['data']['user']
    res = client.post('/api/auth/login', json={'email': 'cook@example.com', 'password': 'secret123'})
    assert res.status_code == 200
    data = res.get_json()['data']
    assert data['user']['username'] == 'julia'
    with app.app_context():
        claims = tokens.verify(data['tokens']['accessToken'])
    assert claims['userId'] == registered['id']

    res = client.post('/api/auth/login', json={'username': 'JULIA', 'password': 'secret123'})
    assert res.status_code == 200


def test_register_duplicate_is_conflict(client):
    register(client)
    res = register(client)
    assert res.status_code == 409
    assert res.get_json()['error'] == 'User with this email or username already exists'


def test_register_validation(client):
    res = client.post('/api/auth/register', json={'email': 'a@b.c'})
    assert res.status_code == 400
    assert res.get_json() == {
        'success': False,
        'error': 'Email, password, firstName, and lastName are required',
    }
    assert register(client, email='not-an-email').get_json()['error'] == 'Invalid email address'
    assert register(client, password='123').status_code == 400
    assert register(client, username='ab').status_code == 400


def test_login_failures_are_indistinguishable(client, make_user):
    make_user('maria')
    wrong_password = client.post('/api/auth/login', json={'username': 'maria', 'password': 'nope-nope'})
    unknown_user = client.post('/api/auth/login', json={'username': 'ghost', 'password': 'nope-nope'})
    assert wrong_password.status_code == unknown_user.status_code == 401
    assert wrong_password.get_json() == unknown_user.get_json() == {
        'success': False,
        'error': 'Invalid credentials',
    }


def test_login_requires_credentials(client):
    res = client.post('/api/auth/login', json={'email': 'x@example.com'})
    assert res.status_code == 400


def test_refresh_issues_new_pair(client):
    tokens = register(client).get_json()['data']['tokens']
    res = client.post('/api/auth/refresh', json={'refreshToken': tokens['refreshToken']})
    assert res.status_code == 200
    assert set(res.get_json()['data']['tokens']) == {'accessToken', 'refreshToken'}


def test_refresh_errors(client):
    assert client.post('/api/auth/refresh', json={}).status_code == 400
    res = client.post('/api/auth/refresh', json={'refreshToken': 'garbage'})
    assert res.status_code == 401
    assert res.get_json()['error'] == 'Invalid or expired refresh token'


def test_refresh_for_deleted_user(app, client, make_user):
    from extensions import db, tokens
    from models import User

    user_id = make_user('leaving')
    with app.app_context():
        user = db.session.get(User, user_id)
        refresh = tokens.refresh_token(user)
        db.session.delete(user)
        db.session.commit()
    res = client.post('/api/auth/refresh', json={'refreshToken': refresh})
    assert res.status_code == 401
    assert res.get_json()['error'] == 'Invalid refresh token'


def test_logout_requires_token(client, make_user, auth_headers):
    assert client.post('/api/auth/logout').status_code == 401
    res = client.post('/api/auth/logout', headers=auth_headers(make_user()))
    assert res.status_code == 200
    assert res.get_json() == {'success': True, 'message': 'Logout successful', 'data': None}


def test_profile_includes_stats(client, make_user, make_recipe, auth_headers):
    user_id = make_user('profiled')
    make_recipe(user_id)
    res = client.get('/api/auth/profile', headers=auth_headers(user_id))
    assert res.status_code == 200
    data = res.get_json()['data']
    assert data['username'] == 'profiled'
    assert data['stats'] == {'recipesCreated': 1, 'recipesSaved': 0, 'recipesCooked': 0}


def test_update_profile(client, make_user, auth_headers):
    make_user('taken')
    headers = auth_headers(make_user('renamer'))
    res = client.put('/api/auth/profile', json={'username': 'taken'}, headers=headers)
    assert res.status_code == 409
    assert res.get_json()['error'] == 'Username already taken'

    res = client.put('/api/auth/profile', json={'firstName': 'Renée', 'username': 'Fresh'}, headers=headers)
    assert res.status_code == 200
    data = res.get_json()['data']
    assert data['firstName'] == 'Renée'
    assert data['username'] == 'fresh'


def test_change_password(client, make_user, auth_headers):
    headers = auth_headers(make_user('changer'))
    res = client.put('/api/auth/change-password', headers=headers,
                      json={'currentPassword': 'wrong-one', 'newPassword': 'brandnew1'})
    assert res.status_code == 401
    assert res.get_json()['error'] == 'Current password is incorrect'

    res = client.put('/api/auth/change-password', headers=headers,
                      json={'currentPassword': PASSWORD, 'newPassword': '123'})
    assert res.status_code == 400

    res = client.put('/api/auth/change-password', headers=headers,
                      json={'currentPassword': PASSWORD, 'newPassword': 'brandnew1'})
    assert res.status_code == 200
    login = client.post('/api/auth/login', json={'username': 'changer', 'password': 'brandnew1'})
    assert login.status_code == 200


def test_register_short_email_needs_explicit_username(client):
    res = register(client, email='ab@x.com')
    assert res.status_code == 400
    assert res.get_json()['error'] == 'Username must be between 3 and 80 characters'

    res = register(client, email='ab@x.com', username='abby')
    assert res.status_code == 201
    assert res.get_json()['data']['user']['username'] == 'abby'


def test_token_kinds_are_not_interchangeable(client):
    pair = register(client).get_json()['data']['tokens']

    res = client.get('/api/auth/profile', headers=bearer(pair['refreshToken']))
    assert res.status_code == 401
    assert res.get_json()['error'] == 'Invalid or expired token'

    res = client.post('/api/auth/refresh', json={'refreshToken': pair['accessToken']})
    assert res.status_code == 401
    assert res.get_json()['error'] == 'Invalid or expired refresh token'
