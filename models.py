# models.py
import enum
from datetime import datetime, timezone

import bcrypt
from flask import current_app

from extensions import db


# Upper bound of the INTEGER columns; larger values never reach the database.
INT_MAX = 2**31 - 1


def utcnow():
    return datetime.now(timezone.utc)


def isoformat(value):
    return value.isoformat() if value else None


class Difficulty(enum.Enum):
    EASY = 'EASY'
    MEDIUM = 'MEDIUM'
    HARD = 'HARD'


class User(db.Model):
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(200), unique=True, nullable=False)
    password_hash = db.Column(db.String(200), nullable=False)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    is_admin = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    recipes = db.relationship('Recipe', back_populates='author', lazy=True, cascade='all, delete-orphan')
    saved_recipes = db.relationship('SavedRecipe', backref='user', lazy=True, cascade='all, delete-orphan')
    cooked_recipes = db.relationship('CookedRecipe', backref='user', lazy=True, cascade='all, delete-orphan')

    def set_password(self, password, rounds=None):
        if rounds is None:
            rounds = current_app.config.get('BCRYPT_ROUNDS', 12)
        hashed = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt(rounds=rounds))
        self.password_hash = hashed.decode('utf-8')

    def check_password(self, password):
        # The cost factor is embedded in the hash, so older hashes keep verifying.
        try:
            return bcrypt.checkpw(password.encode('utf-8'), self.password_hash.encode('utf-8'))
        except ValueError:
            return False

    def summary(self):
        return {
            'id': self.id,
            'username': self.username,
            'firstName': self.first_name,
            'lastName': self.last_name,
        }

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }


class Recipe(db.Model):
    __tablename__ = 'recipes'
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    image_url = db.Column(db.String(500))
    prep_time = db.Column(db.Integer, nullable=True)
    cook_time = db.Column(db.Integer, nullable=True)
    servings = db.Column(db.Integer, nullable=True)
    difficulty = db.Column(db.Enum(Difficulty), default=Difficulty.EASY, nullable=False)
    is_public = db.Column(db.Boolean, default=True, nullable=False)
    ingredients = db.Column(db.JSON, nullable=False, default=list)
    instructions = db.Column(db.JSON, nullable=False, default=list)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)

    author = db.relationship('User', back_populates='recipes')
    saves = db.relationship('SavedRecipe', backref='recipe', lazy=True, cascade='all, delete-orphan')
    cooks = db.relationship('CookedRecipe', backref='recipe', lazy=True, cascade='all, delete-orphan')

    def is_visible_to(self, user_id):
        return self.is_public or (user_id is not None and self.user_id == user_id)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'imageUrl': self.image_url,
            'prepTime': self.prep_time,
            'cookTime': self.cook_time,
            'servings': self.servings,
            'difficulty': self.difficulty.value if self.difficulty else None,
            'isPublic': self.is_public,
            'ingredients': self.ingredients,
            'instructions': self.instructions,
            'userId': self.user_id,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
            'user': self.author.summary() if self.author else None,
        }


class SavedRecipe(db.Model):
    __tablename__ = 'saved_recipes'
    __table_args__ = (db.UniqueConstraint('user_id', 'recipe_id', name='uq_saved_recipe_user_recipe'),)
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    recipe_id = db.Column(db.Integer, db.ForeignKey('recipes.id', ondelete='CASCADE'), nullable=False, index=True)
    saved_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)


class CookedRecipe(db.Model):
    __tablename__ = 'cooked_recipes'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    recipe_id = db.Column(db.Integer, db.ForeignKey('recipes.id', ondelete='CASCADE'), nullable=False, index=True)
    rating = db.Column(db.Integer, nullable=True)
    notes = db.Column(db.Text, nullable=True)
    cooked_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
