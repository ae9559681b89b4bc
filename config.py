import os
import re
from datetime import timedelta

from dotenv import load_dotenv
load_dotenv()

_DURATION_RE = re.compile(r'^\s*(\d+)\s*([smhdw]?)\s*$')
_DURATION_UNITS = {'': 'seconds', 's': 'seconds', 'm': 'minutes', 'h': 'hours', 'd': 'days', 'w': 'weeks'}


def parse_duration(value, default):
    """Turn '7d', '15m', '3600' style values into a timedelta."""
    if not value:
        return default
    match = _DURATION_RE.match(str(value).lower())
    if not match:
        raise ValueError(f'Invalid duration: {value!r}')
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})


def _cors_origins():
    configured = os.environ.get('CORS_ORIGINS')
    if configured:
        return [o.strip() for o in configured.split(',') if o.strip()]
    origins = ['http://localhost:5173']
    for name in ('RENDER_BACKEND_URL', 'RENDER_FRONTEND_URL'):
        if os.environ.get(name):
            origins.append(os.environ[name])
    return origins


class BaseConfig:
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key')
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///dev.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    MAX_CONTENT_LENGTH = 1 * 1024 * 1024

    JWT_SECRET = os.environ.get('JWT_SECRET')
    JWT_ALGORITHM = 'HS256'
    JWT_ISSUER = 'recipe-api'
    JWT_AUDIENCE = 'recipe-app'
    JWT_ACCESS_TOKEN_EXPIRES = parse_duration(os.environ.get('JWT_EXPIRES_IN'), timedelta(days=7))
    JWT_REFRESH_TOKEN_EXPIRES = parse_duration(os.environ.get('JWT_REFRESH_EXPIRES_IN'), timedelta(days=30))

    BCRYPT_ROUNDS = int(os.environ.get('BCRYPT_ROUNDS', 12))
    # Seed data was historically hashed at a lower cost; it must keep verifying.
    SEED_BCRYPT_ROUNDS = 10

    CORS_ORIGINS = _cors_origins()
    ERROR_DETAILS = False
    FORCE_HTTPS = os.environ.get('FORCE_HTTPS', 'False').lower() == 'true'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    RATELIMIT_ENABLED = True
    RATELIMIT_DEFAULT = '300/hour'
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')
    LOGIN_RATE_LIMIT = '10/hour'
    REGISTER_RATE_LIMIT = '30/hour'


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    ERROR_DETAILS = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')
    SQLALCHEMY_ECHO = os.environ.get('SQL_ECHO', 'False').lower() == 'true'


class ProductionConfig(BaseConfig):
    DEBUG = False
    FORCE_HTTPS = os.environ.get('FORCE_HTTPS', 'True').lower() == 'true'


class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    JWT_SECRET = 'test-jwt-secret'
    BCRYPT_ROUNDS = 4
    SEED_BCRYPT_ROUNDS = 4
    CORS_ORIGINS = ['http://localhost:5173']
    FORCE_HTTPS = False
    RATELIMIT_ENABLED = False
    LOG_LEVEL = 'WARNING'


# Select ProductionConfig when FLASK_ENV indicates production, otherwise DevelopmentConfig.
_env = os.environ.get('FLASK_ENV', os.environ.get('ENV', '')).lower()
if _env in ('production', 'prod'):
    Config = ProductionConfig
else:
    Config = DevelopmentConfig
