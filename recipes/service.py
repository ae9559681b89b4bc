from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import func
from sqlalchemy.orm import joinedload

from extensions import db
from models import CookedRecipe, Recipe, SavedRecipe, isoformat
from queries import (
    Pagination, RecipeFilters, SortOptions, apply_recipe_filters, apply_sort,
    build_pagination, build_recipe_filters, build_sort_options, paginate,
)


@dataclass
class RecipePage:
    recipes: list
    total: int
    filters: RecipeFilters
    sort: SortOptions
    pagination: Pagination


def format_average(value):
    """Mean rating rendered to one decimal, or None when nobody rated."""
    if value is None:
        return None
    return str(Decimal(str(value)).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP))


def recipe_aggregates(recipe_ids):
    """Map recipe id to (total saves, total cooks, average rating)."""
    if not recipe_ids:
        return {}
    saves = dict(
        db.session.query(SavedRecipe.recipe_id, func.count(SavedRecipe.id))
        .filter(SavedRecipe.recipe_id.in_(recipe_ids))
        .group_by(SavedRecipe.recipe_id)
        .all()
    )
    cooks = {
        recipe_id: (total, average)
        for recipe_id, total, average in (
            db.session.query(CookedRecipe.recipe_id, func.count(CookedRecipe.id), func.avg(CookedRecipe.rating))
            .filter(CookedRecipe.recipe_id.in_(recipe_ids))
            .group_by(CookedRecipe.recipe_id)
            .all()
        )
    }
    result = {}
    for recipe_id in recipe_ids:
        total_cooked, average = cooks.get(recipe_id, (0, None))
        result[recipe_id] = (saves.get(recipe_id, 0), total_cooked, format_average(average))
    return result


def viewer_activity(recipe_ids, user_id):
    """Which of ``recipe_ids`` the user saved, and their latest cook of each."""
    if user_id is None or not recipe_ids:
        return set(), {}
    saved = {
        recipe_id for (recipe_id,) in
        db.session.query(SavedRecipe.recipe_id)
        .filter(SavedRecipe.user_id == user_id, SavedRecipe.recipe_id.in_(recipe_ids))
    }
    latest_cooks = {}
    cooks = (
        CookedRecipe.query
        .filter(CookedRecipe.user_id == user_id, CookedRecipe.recipe_id.in_(recipe_ids))
        .order_by(CookedRecipe.cooked_at.desc(), CookedRecipe.id.desc())
    )
    for cook in cooks:
        latest_cooks.setdefault(cook.recipe_id, cook)
    return saved, latest_cooks


def with_counts(recipe, aggregates=None):
    if aggregates is None:
        aggregates = recipe_aggregates([recipe.id])
    total_saves, total_cooked, average = aggregates.get(recipe.id, (0, 0, None))
    item = recipe.to_dict()
    item.update({
        'totalSaves': total_saves,
        'totalCooked': total_cooked,
        'averageRating': average,
    })
    return item


def serialize_recipes(recipes, user_id, detail=False):
    ids = [r.id for r in recipes]
    aggregates = recipe_aggregates(ids)
    saved, latest_cooks = viewer_activity(ids, user_id)
    items = []
    for recipe in recipes:
        item = with_counts(recipe, aggregates)
        cook = latest_cooks.get(recipe.id)
        item.update({
            'isSavedByUser': recipe.id in saved,
            'isCookedByUser': cook is not None,
            'userRating': cook.rating if cook else None,
            'userCookedAt': isoformat(cook.cooked_at) if cook else None,
        })
        if detail:
            item['userNotes'] = cook.notes if cook else None
        items.append(item)
    return items


def recipe_page(args, *criteria):
    """Filtered, sorted and paginated recipes restricted by ``criteria``."""
    filters = build_recipe_filters(args)
    sort = build_sort_options(args.get('sortBy'), args.get('sortOrder'))
    pagination = build_pagination(args.get('page'), args.get('limit'))
    # Authors load in the same statement; every item carries its author summary.
    base = Recipe.query.options(joinedload(Recipe.author)).filter(*criteria)
    query = apply_sort(apply_recipe_filters(base, filters), sort)
    recipes, total = paginate(query, pagination)
    return RecipePage(recipes, total, filters, sort, pagination)


def public_recipe_page(args):
    # Visibility is forced here, whatever the caller asked for.
    return recipe_page(args, Recipe.is_public.is_(True))


def recent_activity_by_recipe(recipe_ids):
    """Latest save and latest cook of each recipe, with who did it."""
    last_saved, last_cooked = {}, {}
    if not recipe_ids:
        return last_saved, last_cooked
    saves = (
        SavedRecipe.query
        .filter(SavedRecipe.recipe_id.in_(recipe_ids))
        .order_by(SavedRecipe.saved_at.desc(), SavedRecipe.id.desc())
    )
    for save in saves:
        last_saved.setdefault(save.recipe_id, {
            'id': save.id,
            'savedAt': isoformat(save.saved_at),
            'user': {'username': save.user.username},
        })
    cooks = (
        CookedRecipe.query
        .filter(CookedRecipe.recipe_id.in_(recipe_ids))
        .order_by(CookedRecipe.cooked_at.desc(), CookedRecipe.id.desc())
    )
    for cook in cooks:
        last_cooked.setdefault(cook.recipe_id, {
            'id': cook.id,
            'rating': cook.rating,
            'cookedAt': isoformat(cook.cooked_at),
            'user': {'username': cook.user.username},
        })
    return last_saved, last_cooked


def serialize_saved(records):
    aggregates = recipe_aggregates(list({r.recipe_id for r in records}))
    items = []
    for record in records:
        item = with_counts(record.recipe, aggregates)
        item['savedAt'] = isoformat(record.saved_at)
        items.append(item)
    return items


def serialize_cooked(records):
    aggregates = recipe_aggregates(list({r.recipe_id for r in records}))
    items = []
    for record in records:
        item = with_counts(record.recipe, aggregates)
        item.update({
            'cookedAt': isoformat(record.cooked_at),
            'userRating': record.rating,
            'userNotes': record.notes,
        })
        items.append(item)
    return items
