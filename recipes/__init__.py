from flask import Blueprint

bp = Blueprint('recipes', __name__, url_prefix='/api/recipes')

from . import routes  # noqa: E402,F401
