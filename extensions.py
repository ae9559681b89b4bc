from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_talisman import Talisman
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_cors import CORS

from tokens import TokenManager

# Central place for extension instances to avoid circular imports
db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
# Talisman will be initialized in app factory; the API serves no HTML so CSP is locked down
talisman = Talisman()
limiter = Limiter(key_func=get_remote_address)
cors = CORS()
tokens = TokenManager()
