import pytest

from app import create_app
from config import TestingConfig
from extensions import db, tokens
from models import Difficulty, Recipe, User

PASSWORD = 'secret123'


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = {'n': 0}

    def _make_user(username=None, password=PASSWORD, is_admin=False):
        counter['n'] += 1
        username = username or f'user{counter["n"]}'
        with app.app_context():
            user = User(
                username=username,
                email=f'{username}@example.com',
                first_name='Test',
                last_name=username.title(),
                is_admin=is_admin,
            )
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            return user.id
    return _make_user


@pytest.fixture
def auth_headers(app):
    """Bearer header for an existing user id."""
    def _auth_headers(user_id):
        with app.app_context():
            user = db.session.get(User, user_id)
            return {'Authorization': f'Bearer {tokens.access_token(user)}'}
    return _auth_headers


@pytest.fixture
def make_recipe(app):
    def _make_recipe(user_id, title='Pancakes', is_public=True, **fields):
        values = {
            'description': 'Fluffy breakfast pancakes',
            'ingredients': [{'name': 'flour', 'amount': '200', 'unit': 'g'}],
            'instructions': ['Mix', 'Fry'],
            'difficulty': Difficulty.EASY,
            'servings': 2,
            'prep_time': 10,
            'cook_time': 15,
        }
        values.update(fields)
        with app.app_context():
            recipe = Recipe(user_id=user_id, title=title, is_public=is_public, **values)
            db.session.add(recipe)
            db.session.commit()
            return recipe.id
    return _make_recipe
