"""Translate untrusted query-string values into filter, sort and page directives.

The ``build_*`` functions are pure and never raise: anything they cannot
make sense of is dropped or replaced by a default. ``apply_*`` helpers turn
their results into SQLAlchemy criteria for the ``Recipe`` model.
"""
import math
import re
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import or_

from models import INT_MAX, Difficulty, Recipe

VALID_SORT_FIELDS = ('createdAt', 'title', 'prepTime', 'cookTime', 'servings', 'difficulty')
VALID_SORT_ORDERS = ('asc', 'desc')
DIFFICULTY_LEVELS = tuple(d.value for d in Difficulty)
DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 100
# Keeps the row offset inside the INTEGER range even at the largest page size.
MAX_PAGE = INT_MAX // MAX_PAGE_SIZE

SORT_COLUMNS = {
    'createdAt': Recipe.created_at,
    'title': Recipe.title,
    'prepTime': Recipe.prep_time,
    'cookTime': Recipe.cook_time,
    'servings': Recipe.servings,
    'difficulty': Recipe.difficulty,
}

_INT_PREFIX = re.compile(r'^\s*([+-]?)(\d+)')


@dataclass(frozen=True)
class RecipeFilters:
    search: Optional[str] = None
    difficulty: Optional[str] = None
    min_servings: Optional[int] = None
    max_servings: Optional[int] = None
    max_prep_time: Optional[int] = None
    max_cook_time: Optional[int] = None


@dataclass(frozen=True)
class SortOptions:
    sort_by: str = 'createdAt'
    sort_order: str = 'desc'


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    skip: int


def _parse_number(value) -> Optional[int]:
    """Whole part of a numeric string, or None when it is not a usable number."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    if math.isnan(number) or math.isinf(number) or abs(number) > INT_MAX:
        return None
    return int(number)


def _parse_int_prefix(value) -> Optional[int]:
    """Leading integer of ``value``, saturated at +/- INT_MAX."""
    if value is None:
        return None
    match = _INT_PREFIX.match(str(value))
    if not match:
        return None
    sign, digits = match.groups()
    digits = digits.lstrip('0') or '0'
    number = INT_MAX if len(digits) > len(str(INT_MAX)) else min(int(digits), INT_MAX)
    return -number if sign == '-' else number


def build_recipe_filters(params) -> RecipeFilters:
    search = (params.get('search') or '').strip() or None

    difficulty = params.get('difficulty')
    difficulty = difficulty.strip().upper() if isinstance(difficulty, str) else None
    if difficulty not in DIFFICULTY_LEVELS:
        difficulty = None

    return RecipeFilters(
        search=search,
        difficulty=difficulty,
        min_servings=_parse_number(params.get('minServings')),
        max_servings=_parse_number(params.get('maxServings')),
        max_prep_time=_parse_number(params.get('maxPrepTime')),
        max_cook_time=_parse_number(params.get('maxCookTime')),
    )


def build_sort_options(sort_by=None, sort_order=None) -> SortOptions:
    if sort_by not in VALID_SORT_FIELDS:
        sort_by = 'createdAt'
    sort_order = sort_order.lower() if isinstance(sort_order, str) else ''
    if sort_order not in VALID_SORT_ORDERS:
        sort_order = 'desc'
    return SortOptions(sort_by, sort_order)


def build_pagination(page=None, limit=None) -> Pagination:
    # Zero and unparsable values fall back to the default before clamping.
    page_num = min(MAX_PAGE, max(1, _parse_int_prefix(page) or 1))
    limit_num = min(MAX_PAGE_SIZE, max(1, _parse_int_prefix(limit) or DEFAULT_PAGE_SIZE))
    return Pagination(page=page_num, limit=limit_num, skip=(page_num - 1) * limit_num)


def apply_recipe_filters(query, filters: RecipeFilters):
    if filters.search:
        query = query.filter(or_(
            Recipe.title.icontains(filters.search, autoescape=True),
            Recipe.description.icontains(filters.search, autoescape=True),
        ))
    if filters.difficulty:
        query = query.filter(Recipe.difficulty == Difficulty(filters.difficulty))
    if filters.min_servings is not None:
        query = query.filter(Recipe.servings >= filters.min_servings)
    if filters.max_servings is not None:
        query = query.filter(Recipe.servings <= filters.max_servings)
    if filters.max_prep_time is not None:
        query = query.filter(Recipe.prep_time <= filters.max_prep_time)
    if filters.max_cook_time is not None:
        query = query.filter(Recipe.cook_time <= filters.max_cook_time)
    return query


def apply_sort(query, sort: SortOptions):
    column = SORT_COLUMNS[sort.sort_by]
    ordering = column.asc() if sort.sort_order == 'asc' else column.desc()
    # Tie-break on id so equal keys page deterministically
    tie_break = Recipe.id.asc() if sort.sort_order == 'asc' else Recipe.id.desc()
    return query.order_by(ordering, tie_break)


def paginate(query, pagination: Pagination):
    """Return the page of items and the total row count for ``query``."""
    total = query.order_by(None).count()
    items = query.offset(pagination.skip).limit(pagination.limit).all()
    return items, total
