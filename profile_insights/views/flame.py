"""
Proportional flame graph: every frame's width is its share of the
profile's total time, laid out left to right in call order.
"""
from ..model import FlameNode, percentage
from ..nodetable import NodeTable


def _width(total_time: float, denominator: float) -> float:
    return total_time / denominator if denominator > 0 else 0.0


def build_flame_graph(table: NodeTable) -> FlameNode:
    denominator = table.total_time
    root = table.root

    # Top-down pass: place children and prune the zero-width ones.
    xs = {root.id: 0.0}
    depths = {root.id: 0}
    kept = {}
    order = []
    stack = [root.id]
    while stack:
        node_id = stack.pop()
        order.append(node_id)
        child_x = xs[node_id]
        kept[node_id] = []
        for child_id in table.tree_children.get(node_id, ()):
            width = _width(table.nodes[child_id].total_time, denominator)
            if width <= 0:
                continue
            xs[child_id] = child_x
            depths[child_id] = depths[node_id] + 1
            kept[node_id].append(child_id)
            child_x += width
        stack.extend(reversed(kept[node_id]))

    # Bottom-up pass: frozen nodes need their children first.
    built = {}
    for node_id in reversed(order):
        node = table.nodes[node_id]
        built[node_id] = FlameNode(
            id=node.id,
            name=node.name,
            value=node.self_time,
            total_value=node.total_time,
            depth=depths[node_id],
            x=xs[node_id],
            width=_width(node.total_time, denominator),
            percentage=percentage(node.total_time, denominator),
            self_percentage=percentage(node.self_time, denominator),
            call_frame=node.call_frame,
            category=node.category,
            children=tuple(built[child_id] for child_id in kept[node_id]),
        )
    return built[root.id]
