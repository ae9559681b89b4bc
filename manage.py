import logging
import secrets
import string

import click
from flask import current_app

from extensions import db
from models import CookedRecipe, Difficulty, Recipe, SavedRecipe, User

logger = logging.getLogger(__name__)

SEED_PASSWORD = 'password123'

SEED_USERS = [
    {'username': 'chef_maria', 'email': 'maria@example.com', 'first_name': 'Maria', 'last_name': 'Garcia'},
    {'username': 'home_cook_john', 'email': 'john@example.com', 'first_name': 'John', 'last_name': 'Smith'},
    {'username': 'baker_sarah', 'email': 'sarah@example.com', 'first_name': 'Sarah', 'last_name': 'Johnson'},
]

SEED_RECIPES = [
    {
        'owner': 'chef_maria',
        'title': 'Classic Spaghetti Carbonara',
        'description': 'Creamy Roman pasta with eggs, pecorino and guanciale.',
        'prep_time': 10,
        'cook_time': 15,
        'servings': 4,
        'difficulty': Difficulty.MEDIUM,
        'is_public': True,
        'ingredients': [
            {'name': 'spaghetti', 'amount': '400', 'unit': 'g'},
            {'name': 'guanciale', 'amount': '150', 'unit': 'g'},
            {'name': 'eggs', 'amount': '4', 'unit': ''},
            {'name': 'pecorino romano', 'amount': '60', 'unit': 'g'},
        ],
        'instructions': [
            'Boil the pasta in salted water.',
            'Crisp the guanciale in a dry pan.',
            'Whisk eggs with grated cheese and pepper.',
            'Toss pasta with guanciale off the heat, then stir in the egg mixture.',
        ],
    },
    {
        'owner': 'home_cook_john',
        'title': 'Weeknight Chicken Stir Fry',
        'description': 'Fast stir fry with whatever vegetables are around.',
        'prep_time': 15,
        'cook_time': 10,
        'servings': 2,
        'difficulty': Difficulty.EASY,
        'is_public': True,
        'ingredients': [
            {'name': 'chicken breast', 'amount': '300', 'unit': 'g'},
            {'name': 'mixed vegetables', 'amount': '400', 'unit': 'g'},
            {'name': 'soy sauce', 'amount': '3', 'unit': 'tbsp'},
        ],
        'instructions': [
            'Slice the chicken thinly.',
            'Stir fry chicken until golden, then add vegetables.',
            'Finish with soy sauce and serve with rice.',
        ],
    },
    {
        'owner': 'baker_sarah',
        'title': 'Sourdough Boule',
        'description': 'Naturally leavened loaf with an open crumb.',
        'prep_time': 60,
        'cook_time': 45,
        'servings': 8,
        'difficulty': Difficulty.HARD,
        'is_public': True,
        'ingredients': [
            {'name': 'bread flour', 'amount': '500', 'unit': 'g'},
            {'name': 'water', 'amount': '350', 'unit': 'g'},
            {'name': 'levain', 'amount': '100', 'unit': 'g'},
            {'name': 'salt', 'amount': '10', 'unit': 'g'},
        ],
        'instructions': [
            'Mix flour and water and rest for an hour.',
            'Add levain and salt, then stretch and fold over three hours.',
            'Shape, proof overnight in the fridge and bake in a Dutch oven.',
        ],
    },
    {
        'owner': 'baker_sarah',
        'title': 'Grandma\'s Secret Brownies',
        'description': 'Family recipe, kept private.',
        'prep_time': 20,
        'cook_time': 25,
        'servings': 12,
        'difficulty': Difficulty.EASY,
        'is_public': False,
        'ingredients': [
            {'name': 'dark chocolate', 'amount': '200', 'unit': 'g'},
            {'name': 'butter', 'amount': '150', 'unit': 'g'},
            {'name': 'sugar', 'amount': '200', 'unit': 'g'},
            {'name': 'eggs', 'amount': '3', 'unit': ''},
        ],
        'instructions': [
            'Melt chocolate with butter.',
            'Whisk in sugar and eggs, then fold in flour.',
            'Bake until just set.',
        ],
    },
]

# (username, recipe title)
SEED_SAVES = [
    ('home_cook_john', 'Classic Spaghetti Carbonara'),
    ('baker_sarah', 'Classic Spaghetti Carbonara'),
    ('chef_maria', 'Sourdough Boule'),
]

# (username, recipe title, rating, notes)
SEED_COOKS = [
    ('home_cook_john', 'Classic Spaghetti Carbonara', 5, 'Perfect on the first try.'),
    ('baker_sarah', 'Classic Spaghetti Carbonara', 4, None),
    ('chef_maria', 'Weeknight Chicken Stir Fry', None, 'Added chili flakes.'),
]


def gen_password(length=14):
    alphabet = string.ascii_letters + string.digits + "!@#$%^&*()-_"
    return ''.join(secrets.choice(alphabet) for _ in range(length))


def seed_database():
    """Insert the sample data set. Returns the number of users created."""
    rounds = current_app.config.get('SEED_BCRYPT_ROUNDS', 10)
    users = {}
    for spec in SEED_USERS:
        user = User.query.filter_by(username=spec['username']).first()
        if user is None:
            user = User(**spec)
            user.set_password(SEED_PASSWORD, rounds=rounds)
            db.session.add(user)
        users[spec['username']] = user
    db.session.flush()

    recipes = {}
    for spec in SEED_RECIPES:
        fields = dict(spec)
        owner = users[fields.pop('owner')]
        recipe = Recipe.query.filter_by(user_id=owner.id, title=fields['title']).first()
        if recipe is None:
            recipe = Recipe(user_id=owner.id, **fields)
            db.session.add(recipe)
        recipes[fields['title']] = recipe
    db.session.flush()

    for username, title in SEED_SAVES:
        user, recipe = users[username], recipes[title]
        if not SavedRecipe.query.filter_by(user_id=user.id, recipe_id=recipe.id).first():
            db.session.add(SavedRecipe(user_id=user.id, recipe_id=recipe.id))

    for username, title, rating, notes in SEED_COOKS:
        user, recipe = users[username], recipes[title]
        if not CookedRecipe.query.filter_by(user_id=user.id, recipe_id=recipe.id).first():
            db.session.add(CookedRecipe(user_id=user.id, recipe_id=recipe.id, rating=rating, notes=notes))

    db.session.commit()
    return len(users)


def register_commands(app):
    @app.cli.command('init-db')
    def init_db():
        """Create all database tables."""
        db.create_all()
        click.echo('Database tables created.')

    @app.cli.command('seed')
    def seed():
        """Load sample users, recipes, saves and cooks."""
        db.create_all()
        count = seed_database()
        click.echo(f'Seeded {count} users. Sample password: {SEED_PASSWORD}')

    @app.cli.command('create-admin')
    @click.option('--username', '-u', required=True, help='Admin username')
    @click.option('--email', '-e', help='Admin email (optional)')
    @click.option('--password', '-p', help='Password to set (optional)')
    @click.option('--first-name', default='Admin', show_default=True)
    @click.option('--last-name', default='User', show_default=True)
    @click.option('--reset', is_flag=True, help='Reset password if user exists')
    def create_admin(username, email, password, first_name, last_name, reset):
        """Create an admin user, or promote an existing one."""
        username = username.strip().lower()
        email = email.strip().lower() if email else f'{username}@example.local'

        existing = User.query.filter((User.username == username) | (User.email == email)).first()
        if existing:
            if existing.is_admin:
                if not reset:
                    click.echo(f"Admin user '{existing.username}' already exists. "
                               "Password cannot be retrieved. Use --reset to set a new password.")
                    return
                password = password or gen_password()
                existing.set_password(password)
                db.session.commit()
                click.echo(f"Updated admin '{existing.username}'. New password: {password}")
                return
            password = password or gen_password()
            existing.is_admin = True
            existing.set_password(password)
            db.session.commit()
            logger.info('Promoted user %s to admin', existing.id)
            click.echo(f"User '{existing.username}' promoted to admin. Password: {password}")
            return

        password = password or gen_password()
        user = User(username=username, email=email, first_name=first_name,
                    last_name=last_name, is_admin=True)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        logger.info('Created admin user %s', user.id)
        click.echo(f"Created new admin user '{username}' with password: {password}")
