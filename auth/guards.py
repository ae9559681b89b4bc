"""Per-request identity and the guards composed onto routes.

Identity resolution has exactly three outcomes: a valid bearer token yields an
``Identity``, a missing or invalid one yields ``AnonymousIdentity``, and views
wrapped in ``login_required`` turn the anonymous case into a 401.
"""
from functools import wraps

from flask import g, request
from flask_login import AnonymousUserMixin, UserMixin, current_user

from errors import AuthError, ForbiddenError, ValidationError
from extensions import login_manager, tokens
from models import INT_MAX
from tokens import TokenError


class Identity(UserMixin):
    def __init__(self, claims):
        self.claims = claims
        self.id = claims['userId']
        self.username = claims.get('username')
        self.email = claims.get('email')
        self.is_admin = claims.get('isAdmin') is True


class AnonymousIdentity(AnonymousUserMixin):
    id = None
    username = None
    email = None
    is_admin = False


login_manager.anonymous_user = AnonymousIdentity
login_manager.session_protection = None


def bearer_token(req):
    header = req.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()


@login_manager.request_loader
def load_identity(req):
    token = bearer_token(req)
    g.bearer_token_sent = token is not None
    if token is None:
        return None
    try:
        return Identity(tokens.verify(token))
    except TokenError:
        return None


@login_manager.unauthorized_handler
def unauthorized():
    if not g.get('bearer_token_sent'):
        raise AuthError('Access token required')
    raise AuthError('Invalid or expired token')


def viewer_id():
    """Id of the authenticated caller, or None for anonymous requests."""
    return current_user.id if current_user.is_authenticated else None


def _requested_user_id():
    value = (request.view_args or {}).get('user_id')
    if value is None:
        value = request.args.get('userId')
    return value


def validate_user_id(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        value = _requested_user_id()
        if value is None or str(value).strip() == '':
            raise ValidationError('userId is required')
        try:
            user_id = int(str(value).strip())
        except ValueError:
            raise ValidationError('userId must be a valid number') from None
        if not 1 <= user_id <= INT_MAX:
            raise ValidationError('userId must be a valid number')
        g.target_user_id = user_id
        return view(*args, **kwargs)
    return wrapper


def owner_required(view):
    """Must sit under ``login_required``."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        value = _requested_user_id()
        if value is not None:
            try:
                owner_id = int(str(value).strip())
            except ValueError:
                owner_id = None
            if owner_id != current_user.id:
                raise ForbiddenError('Access denied: You can only access your own resources')
        return view(*args, **kwargs)
    return wrapper


def admin_required(view):
    """Must sit under ``login_required``."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        if not getattr(current_user, 'is_admin', False):
            raise ForbiddenError('Admin access required')
        return view(*args, **kwargs)
    return wrapper
