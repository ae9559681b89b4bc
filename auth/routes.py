import logging

from flask import current_app, jsonify
from flask_login import current_user, login_required

from . import bp
from errors import AuthError, ConflictError, NotFoundError, ValidationError
from extensions import db, limiter, tokens
from models import User
from responses import success_response
from stats import user_stats
from tokens import REFRESH, TokenError
from validation import (
    LoginInput, PasswordChangeInput, RegisterInput, json_body, parse_profile_update,
)

logger = logging.getLogger(__name__)


def _register_limit():
    return current_app.config['REGISTER_RATE_LIMIT']


def _login_limit():
    return current_app.config['LOGIN_RATE_LIMIT']


def get_user_or_404(user_id):
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError('User not found')
    return user


@bp.route('/register', methods=['POST'])
@limiter.limit(_register_limit)
def register():
    data = RegisterInput.parse(json_body())

    existing = User.query.filter((User.email == data.email) | (User.username == data.username)).first()
    if existing:
        raise ConflictError('User with this email or username already exists')

    user = User(
        username=data.username,
        email=data.email,
        first_name=data.first_name,
        last_name=data.last_name,
    )
    user.set_password(data.password)
    db.session.add(user)
    db.session.commit()
    logger.info('Registered user %s (%s)', user.id, user.username)

    payload = {'user': user.to_dict(), 'tokens': tokens.pair(user)}
    return jsonify(success_response(payload, 'User registered successfully')), 201


@bp.route('/login', methods=['POST'])
@limiter.limit(_login_limit)
def login():
    data = LoginInput.parse(json_body())

    user = User.query.filter((User.email == data.identifier) | (User.username == data.identifier)).first()
    # Unknown account and wrong password are indistinguishable to the caller.
    if not user or not user.check_password(data.password):
        logger.warning('Failed login for %r', data.identifier)
        raise AuthError('Invalid credentials')

    payload = {'user': user.to_dict(), 'tokens': tokens.pair(user)}
    return jsonify(success_response(payload, 'Login successful'))


@bp.route('/refresh', methods=['POST'])
def refresh():
    refresh_token = json_body().get('refreshToken')
    if not refresh_token or not isinstance(refresh_token, str):
        raise ValidationError('Refresh token is required')
    try:
        claims = tokens.verify(refresh_token, token_type=REFRESH)
    except TokenError:
        raise AuthError('Invalid or expired refresh token') from None

    user = db.session.get(User, claims['userId'])
    if user is None:
        raise AuthError('Invalid refresh token')
    return jsonify(success_response({'tokens': tokens.pair(user)}, 'Token refreshed successfully'))


@bp.route('/logout', methods=['POST'])
@login_required
def logout():
    # Tokens are stateless; nothing is revoked server side.
    logger.info('User %s logged out', current_user.id)
    return jsonify(success_response(None, 'Logout successful'))


@bp.route('/profile', methods=['GET'])
@login_required
def profile():
    user = get_user_or_404(current_user.id)
    data = user.to_dict()
    data['stats'] = user_stats(user.id)
    return jsonify(success_response(data))


@bp.route('/profile', methods=['PUT'])
@login_required
def update_profile():
    changes = parse_profile_update(json_body())
    user = get_user_or_404(current_user.id)

    username = changes.get('username')
    if username and username != user.username:
        if User.query.filter(User.username == username, User.id != user.id).first():
            raise ConflictError('Username already taken')

    for column, value in changes.items():
        setattr(user, column, value)
    db.session.commit()
    return jsonify(success_response(user.to_dict(), 'Profile updated successfully'))


@bp.route('/change-password', methods=['PUT'])
@login_required
def change_password():
    data = PasswordChangeInput.parse(json_body())
    user = get_user_or_404(current_user.id)
    if not user.check_password(data.current_password):
        raise AuthError('Current password is incorrect')
    user.set_password(data.new_password)
    db.session.commit()
    logger.info('User %s changed password', user.id)
    return jsonify(success_response(None, 'Password changed successfully'))
