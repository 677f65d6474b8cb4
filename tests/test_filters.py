from profile_insights.filters import (
    ProfileFilter,
    filter_bottom_up,
    filter_hot_functions,
    matching_node_ids,
)
from profile_insights.model import Category


def names(items):
    return [item.name for item in items]


def test_default_filter_hides_idle(nested):
    assert names(filter_hot_functions(nested.hot_functions, ProfileFilter())) == [
        "work", "main", "(garbage collector)"
    ]


def test_show_idle(nested):
    shown = filter_hot_functions(nested.hot_functions, ProfileFilter(hide_idle=False))
    assert "(idle)" in names(shown)


def test_hide_gc(nested):
    assert names(filter_hot_functions(nested.hot_functions, ProfileFilter(hide_gc=True))) == ["work", "main"]


def test_search_matches_name_or_url_case_insensitively(nested):
    assert names(filter_hot_functions(nested.hot_functions, ProfileFilter(search="WORK.JS"))) == ["work"]
    assert names(filter_hot_functions(nested.hot_functions, ProfileFilter(search="Main"))) == ["main"]


def test_min_percentage(nested):
    profile_filter = ProfileFilter(min_percentage=20, hide_idle=False)
    assert names(filter_hot_functions(nested.hot_functions, profile_filter)) == ["work", "(idle)"]


def test_category_whitelist(nested):
    profile_filter = ProfileFilter(categories=(Category.GC,))
    assert names(filter_hot_functions(nested.hot_functions, profile_filter)) == ["(garbage collector)"]


def test_filters_leave_views_untouched(nested):
    before = nested.hot_functions
    filter_hot_functions(nested.hot_functions, ProfileFilter(search="nothing matches"))
    assert nested.hot_functions == before
    assert len(nested.hot_functions) == 4


def test_filter_bottom_up(nested):
    kept = filter_bottom_up(nested.bottom_up, ProfileFilter())
    assert set(names(kept)) == {"work", "main", "(garbage collector)"}


def test_matching_node_ids(nested):
    assert matching_node_ids(nested.flame_graph, "O") == frozenset({1, 3, 4, 6})
    assert matching_node_ids(nested.flame_graph, "work") == frozenset({3})
    assert matching_node_ids(nested.flame_graph, "") == frozenset()
    assert matching_node_ids(None, "work") == frozenset()
