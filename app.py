# app.py
import logging
from datetime import datetime, timezone

from flask import Flask, jsonify
from werkzeug.routing import IntegerConverter

from config import Config
from errors import register_error_handlers
from extensions import cors, db, limiter, login_manager, migrate, talisman, tokens
from models import INT_MAX


class IdConverter(IntegerConverter):
    """Primary keys in URLs; anything outside the column range is a 404."""

    def __init__(self, map):
        super().__init__(map, min=1, max=INT_MAX)


def configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    )
    app.logger.setLevel(level)


def create_app(config_object=None):
    app = Flask(__name__)
    app.config.from_object(config_object or Config)
    configure_logging(app)

    # Fails fast on a missing signing secret, before anything else is wired up.
    tokens.init_app(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    limiter.init_app(app)
    cors.init_app(
        app,
        resources={r'/api/*': {'origins': app.config['CORS_ORIGINS']}},
        supports_credentials=True,
    )
    # JSON only: no framing and no subresources
    talisman.init_app(
        app,
        content_security_policy={
            'default-src': "'none'",
            'frame-ancestors': "'none'",
        },
        force_https=app.config.get('FORCE_HTTPS', False),
        strict_transport_security=True,
        strict_transport_security_max_age=31536000,
        strict_transport_security_include_subdomains=True,
        session_cookie_secure=app.config.get('FORCE_HTTPS', False),
    )

    # Register blueprints
    app.url_map.converters['id'] = IdConverter
    from auth import bp as auth_bp
    from dashboard import bp as dashboard_bp
    from recipes import bp as recipes_bp
    from users import bp as users_bp
    app.register_blueprint(auth_bp)
    app.register_blueprint(recipes_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(users_bp)

    register_error_handlers(app, db)

    @app.route('/health')
    def health():
        return jsonify({'status': 'OK', 'timestamp': datetime.now(timezone.utc).isoformat()})

    from manage import register_commands
    register_commands(app)

    app.logger.info('Application created with %s', getattr(config_object or Config, '__name__', 'config'))
    return app


if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        # create tables if missing
        db.create_all()
    app.run(debug=app.config.get('DEBUG', False))
