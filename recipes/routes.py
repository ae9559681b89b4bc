import logging

from flask import jsonify, request
from flask_login import current_user, login_required

from . import bp
from .service import (
    public_recipe_page, serialize_cooked, serialize_recipes, serialize_saved, with_counts,
)
from auth.guards import viewer_id
from errors import ConflictError, ForbiddenError, NotFoundError
from extensions import db
from models import CookedRecipe, Recipe, SavedRecipe
from queries import build_pagination, paginate
from responses import pagination_response, success_response
from validation import CookInput, json_body, parse_recipe

logger = logging.getLogger(__name__)


def get_recipe_or_404(recipe_id):
    recipe = db.session.get(Recipe, recipe_id)
    if recipe is None:
        raise NotFoundError('Recipe not found')
    return recipe


def get_owned_recipe(recipe_id, action):
    recipe = get_recipe_or_404(recipe_id)
    if recipe.user_id != current_user.id:
        raise ForbiddenError(f'You can only {action} your own recipes')
    return recipe


@bp.route('', methods=['GET'])
def list_recipes():
    page = public_recipe_page(request.args)
    items = serialize_recipes(page.recipes, viewer_id())
    data = pagination_response(items, page.total, page.pagination.page, page.pagination.limit)
    return jsonify(success_response(data))


@bp.route('/<id:recipe_id>', methods=['GET'])
def get_recipe(recipe_id):
    recipe = get_recipe_or_404(recipe_id)
    user_id = viewer_id()
    if not recipe.is_visible_to(user_id):
        raise ForbiddenError('Access denied to private recipe')
    item = serialize_recipes([recipe], user_id, detail=True)[0]
    return jsonify(success_response(item))


@bp.route('', methods=['POST'])
@login_required
def create_recipe():
    fields = parse_recipe(json_body())
    recipe = Recipe(user_id=current_user.id, **fields)
    db.session.add(recipe)
    db.session.commit()
    logger.info('User %s created recipe %s', current_user.id, recipe.id)
    return jsonify(success_response(with_counts(recipe), 'Recipe created successfully')), 201


@bp.route('/<id:recipe_id>', methods=['PUT'])
@login_required
def update_recipe(recipe_id):
    recipe = get_owned_recipe(recipe_id, 'update')
    changes = parse_recipe(json_body(), partial=True)
    for column, value in changes.items():
        setattr(recipe, column, value)
    db.session.commit()
    return jsonify(success_response(with_counts(recipe), 'Recipe updated successfully'))


@bp.route('/<id:recipe_id>', methods=['DELETE'])
@login_required
def delete_recipe(recipe_id):
    recipe = get_owned_recipe(recipe_id, 'delete')
    title = recipe.title
    db.session.delete(recipe)
    db.session.commit()
    logger.info('User %s deleted recipe %s', current_user.id, recipe_id)
    return jsonify(success_response(None, f'Recipe "{title}" deleted successfully'))


@bp.route('/<id:recipe_id>/save', methods=['POST'])
@login_required
def save_recipe(recipe_id):
    recipe = get_recipe_or_404(recipe_id)
    if not recipe.is_visible_to(current_user.id):
        raise ForbiddenError('Cannot save private recipe')
    existing = SavedRecipe.query.filter_by(user_id=current_user.id, recipe_id=recipe_id).first()
    if existing:
        raise ConflictError('Recipe already saved')
    saved = SavedRecipe(user_id=current_user.id, recipe_id=recipe_id)
    db.session.add(saved)
    db.session.commit()
    data = {'id': saved.id, 'savedAt': saved.saved_at.isoformat()}
    return jsonify(success_response(data, f'Recipe "{recipe.title}" saved successfully')), 201


@bp.route('/<id:recipe_id>/save', methods=['DELETE'])
@login_required
def unsave_recipe(recipe_id):
    saved = SavedRecipe.query.filter_by(user_id=current_user.id, recipe_id=recipe_id).first()
    if saved is None:
        raise NotFoundError('Recipe not found in saved recipes')
    title = saved.recipe.title
    db.session.delete(saved)
    db.session.commit()
    return jsonify(success_response(None, f'Recipe "{title}" removed from saved recipes'))


@bp.route('/<id:recipe_id>/cook', methods=['POST'])
@login_required
def cook_recipe(recipe_id):
    cook = CookInput.parse(json_body())
    recipe = get_recipe_or_404(recipe_id)
    if not recipe.is_visible_to(current_user.id):
        raise ForbiddenError('Cannot cook private recipe')
    # Every attempt is a new row; earlier attempts are never touched.
    cooked = CookedRecipe(user_id=current_user.id, recipe_id=recipe_id, rating=cook.rating, notes=cook.notes)
    db.session.add(cooked)
    db.session.commit()
    data = {
        'id': cooked.id,
        'rating': cooked.rating,
        'notes': cooked.notes,
        'cookedAt': cooked.cooked_at.isoformat(),
    }
    return jsonify(success_response(data, f'Recipe "{recipe.title}" marked as cooked')), 201


@bp.route('/saved/list', methods=['GET'])
@login_required
def saved_recipes():
    pagination = build_pagination(request.args.get('page'), request.args.get('limit'))
    query = (
        SavedRecipe.query
        .filter_by(user_id=current_user.id)
        .order_by(SavedRecipe.saved_at.desc(), SavedRecipe.id.desc())
    )
    records, total = paginate(query, pagination)
    data = pagination_response(serialize_saved(records), total, pagination.page, pagination.limit)
    return jsonify(success_response(data))


@bp.route('/cooked/list', methods=['GET'])
@login_required
def cooked_recipes():
    pagination = build_pagination(request.args.get('page'), request.args.get('limit'))
    query = (
        CookedRecipe.query
        .filter_by(user_id=current_user.id)
        .order_by(CookedRecipe.cooked_at.desc(), CookedRecipe.id.desc())
    )
    records, total = paginate(query, pagination)
    data = pagination_response(serialize_cooked(records), total, pagination.page, pagination.limit)
    return jsonify(success_response(data))
