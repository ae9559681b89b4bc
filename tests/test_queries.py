import pytest

from models import INT_MAX
from queries import (
    DEFAULT_PAGE_SIZE, MAX_PAGE, MAX_PAGE_SIZE, RecipeFilters, build_pagination,
    build_recipe_filters, build_sort_options,
)


@pytest.mark.parametrize('page,limit', [
    (None, None), ('0', '0'), ('-5', '-3'), ('abc', 'xyz'), ('3', '500'),
    ('2.7', '10.9'), ('7', '1'), ('', ''),
])
def test_pagination_is_always_in_range(page, limit):
    p = build_pagination(page, limit)
    assert p.page >= 1
    assert 1 <= p.limit <= MAX_PAGE_SIZE
    assert p.skip == (p.page - 1) * p.limit


def test_pagination_defaults():
    p = build_pagination()
    assert (p.page, p.limit, p.skip) == (1, DEFAULT_PAGE_SIZE, 0)


def test_pagination_zero_and_negative_limit():
    assert build_pagination(limit='0').limit == DEFAULT_PAGE_SIZE
    assert build_pagination(limit='-3').limit == 1
    assert build_pagination(limit='1000').limit == MAX_PAGE_SIZE


def test_pagination_parses_integer_prefix():
    p = build_pagination('3abc', '20items')
    assert (p.page, p.limit, p.skip) == (3, 20, 40)


@pytest.mark.parametrize('sort_by,sort_order,expected', [
    (None, None, ('createdAt', 'desc')),
    ('title', 'ASC', ('title', 'asc')),
    ('password', 'asc', ('createdAt', 'asc')),
    ('servings', 'sideways', ('servings', 'desc')),
    ('TITLE', 'desc', ('createdAt', 'desc')),
])
def test_sort_falls_back_to_defaults(sort_by, sort_order, expected):
    sort = build_sort_options(sort_by, sort_order)
    assert (sort.sort_by, sort.sort_order) == expected


def test_filters_drop_invalid_values():
    filters = build_recipe_filters({
        'search': '  pasta ',
        'difficulty': 'impossible',
        'minServings': 'two',
        'maxServings': '4',
        'maxPrepTime': '30.9',
        'maxCookTime': 'nan',
    })
    assert filters == RecipeFilters(search='pasta', max_servings=4, max_prep_time=30)


def test_filters_normalise_difficulty_case():
    assert build_recipe_filters({'difficulty': 'hard'}).difficulty == 'HARD'


def test_empty_params_give_empty_filters():
    assert build_recipe_filters({}) == RecipeFilters()
    assert build_recipe_filters({'search': '   '}).search is None


def test_filters_drop_numbers_beyond_the_column_range():
    filters = build_recipe_filters({
        'maxPrepTime': '99999999999999999999',
        'minServings': '1e30',
        'maxServings': str(INT_MAX),
        'maxCookTime': '-1e300',
    })
    assert filters == RecipeFilters(max_servings=INT_MAX)


@pytest.mark.parametrize('page', ['99999999999999999999', '9' * 5000, str(INT_MAX)])
def test_huge_pages_are_capped(page):
    p = build_pagination(page, str(MAX_PAGE_SIZE))
    assert p.page == MAX_PAGE
    assert p.skip <= INT_MAX


def test_huge_limit_is_clamped():
    assert build_pagination('1', '9' * 5000).limit == MAX_PAGE_SIZE
