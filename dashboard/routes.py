from flask import g, jsonify, request
from flask_login import current_user, login_required

from . import bp
from auth.guards import owner_required, validate_user_id
from models import Recipe
from recipes.service import (
    public_recipe_page, recent_activity_by_recipe, recipe_page, serialize_recipes,
)
from responses import pagination_response, success_response
from stats import user_stats


def filters_summary(page):
    """Echo of what the caller asked for next to the sort actually applied."""
    applied = {k: v for k, v in request.args.items() if k not in ('sortBy', 'sortOrder')}
    return {
        'appliedFilters': applied,
        'sorting': {'sortBy': page.sort.sort_by, 'sortOrder': page.sort.sort_order},
    }


@bp.route('/dashboard', methods=['GET'])
@validate_user_id
def dashboard():
    user_id = g.target_user_id
    page = public_recipe_page(request.args)
    items = serialize_recipes(page.recipes, user_id)
    data = pagination_response(items, page.total, page.pagination.page, page.pagination.limit)
    data['userStats'] = user_stats(user_id)
    data['filters'] = filters_summary(page)
    return jsonify(success_response(data))


@bp.route('/my-recipes', methods=['GET'])
@login_required
@validate_user_id
@owner_required
def my_recipes():
    page = recipe_page(request.args, Recipe.user_id == current_user.id)
    items = serialize_recipes(page.recipes, current_user.id)
    last_saved, last_cooked = recent_activity_by_recipe([r.id for r in page.recipes])
    for item in items:
        item['recentActivity'] = {
            'lastSaved': last_saved.get(item['id']),
            'lastCooked': last_cooked.get(item['id']),
        }
    data = pagination_response(items, page.total, page.pagination.page, page.pagination.limit)
    data['userStats'] = user_stats(current_user.id)
    data['filters'] = filters_summary(page)
    return jsonify(success_response(data))
