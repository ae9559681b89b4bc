from datetime import datetime, timedelta, timezone


def test_admin_only_user_listing(client, make_user, auth_headers):
    regular = make_user('regular')
    admin = make_user('boss', is_admin=True)

    assert client.get('/api/users').status_code == 401
    res = client.get('/api/users', headers=auth_headers(regular))
    assert res.status_code == 403
    assert res.get_json()['error'] == 'Admin access required'

    res = client.get('/api/users?limit=1', headers=auth_headers(admin))
    assert res.status_code == 200
    data = res.get_json()['data']
    assert data['pagination']['totalItems'] == 2
    assert len(data['items']) == 1


def test_expired_token_is_rejected(app, client, make_user):
    from extensions import db, tokens
    from models import User

    user_id = make_user()
    with app.app_context():
        user = db.session.get(User, user_id)
        stale = tokens.access_token(user, now=datetime.now(timezone.utc) - timedelta(days=30))
    res = client.get('/api/users/stats', headers={'Authorization': f'Bearer {stale}'})
    assert res.status_code == 401
    assert res.get_json()['error'] == 'Invalid or expired token'


def test_malformed_authorization_header(client):
    res = client.get('/api/users/stats', headers={'Authorization': 'Token abc'})
    assert res.status_code == 401
    assert res.get_json()['error'] == 'Access token required'


def test_invalid_token_on_optional_route_is_anonymous(client, make_user, make_recipe):
    recipe_id = make_recipe(make_user())
    res = client.get(f'/api/recipes/{recipe_id}', headers={'Authorization': 'Bearer broken'})
    assert res.status_code == 200
    assert res.get_json()['data']['isSavedByUser'] is False


def test_identity_does_not_leak_between_requests(client, make_user, auth_headers):
    user_id = make_user()
    assert client.get('/api/users/stats', headers=auth_headers(user_id)).status_code == 200
    assert client.get('/api/users/stats').status_code == 401
