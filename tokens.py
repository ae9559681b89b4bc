"""Signed session tokens.

Two HS256 JWTs are issued per session: a short-lived access token carrying
the user's identity and a long-lived refresh token carrying only the user id.
Both are bound to an issuer and an audience and carry a ``typ`` claim naming
their kind, all of which are checked on the way back in. Every verification
failure collapses into the same ``TokenError`` so that callers never learn why
a token was rejected.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from flask import current_app

ACCESS = 'access'
REFRESH = 'refresh'


class TokenError(Exception):
    """Raised for any token that does not verify."""

    def __init__(self, message='Invalid or expired token'):
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class TokenSettings:
    secret: str
    issuer: str = 'recipe-api'
    audience: str = 'recipe-app'
    algorithm: str = 'HS256'
    access_expires: timedelta = timedelta(days=7)
    refresh_expires: timedelta = timedelta(days=30)

    @classmethod
    def from_config(cls, config):
        secret = config.get('JWT_SECRET')
        if not secret:
            raise RuntimeError('JWT_SECRET environment variable is required')
        return cls(
            secret=secret,
            issuer=config.get('JWT_ISSUER', cls.issuer),
            audience=config.get('JWT_AUDIENCE', cls.audience),
            algorithm=config.get('JWT_ALGORITHM', cls.algorithm),
            access_expires=config.get('JWT_ACCESS_TOKEN_EXPIRES', cls.access_expires),
            refresh_expires=config.get('JWT_REFRESH_TOKEN_EXPIRES', cls.refresh_expires),
        )


class TokenManager:
    """Issues and verifies token pairs.

    Usable standalone with explicit ``TokenSettings`` or as a Flask extension,
    in which case the settings are read from the app config at ``init_app``
    time and a missing secret aborts startup.
    """

    def __init__(self, settings=None, app=None):
        self._settings = settings
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        app.extensions['tokens'] = TokenSettings.from_config(app.config)

    @property
    def settings(self):
        if self._settings is not None:
            return self._settings
        return current_app.extensions['tokens']

    def _sign(self, payload, token_type, expires_in, now=None):
        settings = self.settings
        issued_at = now or datetime.now(timezone.utc)
        claims = dict(payload)
        claims.update({
            'typ': token_type,
            'iat': issued_at,
            'exp': issued_at + expires_in,
            'iss': settings.issuer,
            'aud': settings.audience,
        })
        return jwt.encode(claims, settings.secret, algorithm=settings.algorithm)

    def access_token(self, user, now=None):
        payload = {'userId': user.id, 'username': user.username, 'email': user.email}
        if getattr(user, 'is_admin', False):
            payload['isAdmin'] = True
        return self._sign(payload, ACCESS, self.settings.access_expires, now)

    def refresh_token(self, user, now=None):
        return self._sign({'userId': user.id}, REFRESH, self.settings.refresh_expires, now)

    def pair(self, user):
        return {
            'accessToken': self.access_token(user),
            'refreshToken': self.refresh_token(user),
        }

    def verify(self, token, token_type=ACCESS):
        """Claims of ``token``, which must be of ``token_type``."""
        settings = self.settings
        try:
            claims = jwt.decode(
                token,
                settings.secret,
                algorithms=[settings.algorithm],
                issuer=settings.issuer,
                audience=settings.audience,
                options={'require': ['exp', 'iss', 'aud', 'typ']},
            )
        except jwt.InvalidTokenError as exc:
            raise TokenError() from exc
        if claims.get('typ') != token_type or not isinstance(claims.get('userId'), int):
            raise TokenError()
        return claims
