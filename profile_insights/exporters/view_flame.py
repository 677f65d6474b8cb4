"""
view_flame.py

Render a flame graph or call tree as a collapsible tree in your terminal
using Rich, with human-friendly time units.
"""
from rich.markup import escape
from rich.tree import Tree

from ..formatting import format_time


def node_label(name: str, total: float, pct: float, self_time: float = None, highlight: bool = False) -> str:
    label = f"[bold]{escape(name)}[/] • {format_time(total)} ({pct:.1f}%)"
    if self_time:
        label += f" [dim]self {format_time(self_time)}[/]"
    if highlight:
        label = f"[reverse]{label}[/]"
    return label


def render_flame(root, max_depth: int = None, min_percentage: float = 0.0, highlight=frozenset()) -> Tree:
    """
    Build a Rich Tree from a FlameNode, heaviest children first.
    Branches below min_percentage or deeper than max_depth are left out;
    node ids in highlight are shown in reverse video.
    """
    tree = Tree(node_label(root.name, root.total_value, root.percentage, root.value, root.id in highlight))
    stack = [(root, tree)]
    while stack:
        node, branch = stack.pop()
        if max_depth is not None and node.depth >= max_depth:
            continue
        # Sort children by descending time
        children = sorted(node.children, key=lambda c: c.total_value, reverse=True)
        for child in children:
            if child.percentage < min_percentage:
                continue
            sub = branch.add(node_label(
                child.name, child.total_value, child.percentage, child.value, child.id in highlight
            ))
            stack.append((child, sub))
    return tree


def render_call_tree(root, max_depth: int = None, min_percentage: float = 0.0) -> Tree:
    """
    Build a Rich Tree from a CallTreeNode. Children are already sorted;
    nodes built collapsed are shown only when max_depth asks for them.
    """
    tree = Tree(node_label(root.name, root.total_time, root.total_percentage, root.self_time))
    stack = [(root, tree)]
    while stack:
        node, branch = stack.pop()
        if max_depth is None and not node.expanded:
            continue
        if max_depth is not None and node.depth >= max_depth:
            continue
        for child in node.children:
            if child.total_percentage < min_percentage:
                continue
            sub = branch.add(
                node_label(child.name, child.total_time, child.total_percentage, child.self_time)
            )
            stack.append((child, sub))
    return tree
