"""
Search and threshold filters applied over already-built views.

Filters return new sequences and never touch the views they read.
"""
from dataclasses import dataclass
from typing import Tuple

from .model import Category

HIDDEN_BY_IDLE = (Category.IDLE, Category.PROGRAM)


@dataclass(frozen=True)
class ProfileFilter:
    search: str = ""
    min_percentage: float = 0
    hide_idle: bool = True
    hide_gc: bool = False
    hide_native: bool = False
    categories: Tuple[Category, ...] = ()

    def hides(self, category: Category) -> bool:
        if self.hide_idle and category in HIDDEN_BY_IDLE:
            return True
        if self.hide_gc and category is Category.GC:
            return True
        if self.hide_native and category is Category.NATIVE:
            return True
        return bool(self.categories) and category not in self.categories

    def matches(self, name: str, url: str, self_percentage: float, category: Category) -> bool:
        if self.search:
            needle = self.search.lower()
            if needle not in name.lower() and needle not in url.lower():
                return False
        if self.min_percentage > 0 and self_percentage < self.min_percentage:
            return False
        return not self.hides(category)


def filter_hot_functions(functions, profile_filter: ProfileFilter):
    return tuple(
        fn for fn in functions
        if profile_filter.matches(fn.name, fn.url, fn.self_percentage, fn.category)
    )


def filter_bottom_up(nodes, profile_filter: ProfileFilter):
    return tuple(
        node for node in nodes
        if profile_filter.matches(
            node.name,
            node.call_frame.url if node.call_frame else "",
            node.self_percentage,
            node.category,
        )
    )


def matching_node_ids(flame_graph, search: str):
    """Ids of flame graph nodes whose name contains search (case-insensitive)."""
    if not search or flame_graph is None:
        return frozenset()
    needle = search.lower()
    matching = set()
    stack = [flame_graph]
    while stack:
        node = stack.pop()
        if needle in node.name.lower():
            matching.add(node.id)
        stack.extend(node.children)
    return frozenset(matching)
