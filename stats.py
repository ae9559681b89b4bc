from sqlalchemy import func, select

from extensions import db
from models import CookedRecipe, Recipe, SavedRecipe, isoformat

RECENT_ACTIVITY_LIMIT = 3


def _count(model, user_id):
    return select(func.count(model.id)).where(model.user_id == user_id).scalar_subquery()


def user_stats(user_id):
    """Created/saved/cooked counters for one user.

    The three counts are independent scalar subqueries of a single SELECT, so
    the database evaluates them together and the caller waits once.
    """
    row = db.session.execute(select(
        _count(Recipe, user_id).label('created'),
        _count(SavedRecipe, user_id).label('saved'),
        _count(CookedRecipe, user_id).label('cooked'),
    )).one()
    return {
        'recipesCreated': row.created,
        'recipesSaved': row.saved,
        'recipesCooked': row.cooked,
    }


def _recipe_ref(recipe):
    return {'id': recipe.id, 'title': recipe.title}


def recent_activity(user_id, limit=RECENT_ACTIVITY_LIMIT):
    created = (
        Recipe.query.filter_by(user_id=user_id)
        .order_by(Recipe.created_at.desc(), Recipe.id.desc())
        .limit(limit)
    )
    saved = (
        SavedRecipe.query.filter_by(user_id=user_id)
        .order_by(SavedRecipe.saved_at.desc(), SavedRecipe.id.desc())
        .limit(limit)
    )
    cooked = (
        CookedRecipe.query.filter_by(user_id=user_id)
        .order_by(CookedRecipe.cooked_at.desc(), CookedRecipe.id.desc())
        .limit(limit)
    )
    return {
        'recentlyCreated': [
            {'id': r.id, 'title': r.title, 'createdAt': isoformat(r.created_at)} for r in created
        ],
        'recentlySaved': [
            {'id': s.id, 'savedAt': isoformat(s.saved_at), 'recipe': _recipe_ref(s.recipe)} for s in saved
        ],
        'recentlyCooked': [
            {
                'id': c.id,
                'rating': c.rating,
                'notes': c.notes,
                'cookedAt': isoformat(c.cooked_at),
                'recipe': _recipe_ref(c.recipe),
            }
            for c in cooked
        ],
    }
