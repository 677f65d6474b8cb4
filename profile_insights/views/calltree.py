"""
Top-down call tree, heaviest subtrees first.
"""
from ..model import CallTreeNode
from ..nodetable import NodeTable

# Levels shown expanded when the tree is first rendered.
EXPANDED_DEPTH = 2


def build_call_tree(table: NodeTable) -> CallTreeNode:
    order = list(table.walk())
    built = {}
    for node_id, depth in reversed(order):
        node = table.nodes[node_id]
        children = [built[child_id] for child_id in table.tree_children.get(node_id, ())]
        children = [child for child in children if child.total_time > 0]
        # sorted() is stable, so equal totals keep call order
        children = sorted(children, key=lambda child: child.total_time, reverse=True)
        built[node_id] = CallTreeNode(
            id=node.id,
            name=node.name,
            self_time=node.self_time,
            total_time=node.total_time,
            self_percentage=node.self_percentage,
            total_percentage=node.total_percentage,
            hit_count=node.hit_count,
            depth=depth,
            expanded=depth < EXPANDED_DEPTH,
            call_frame=node.call_frame,
            category=node.category,
            children=tuple(children),
        )
    return built[table.root_id]
