"""
bottomup.py

Inverted call graph: one entry per function, summed over every call
site, with the immediate callers that led to it.

By default functions are grouped by name alone, so two functions with
the same name in different files share an entry. Pass
``group_by="identity"`` to keep (name, url, line) apart instead.
"""
from ..model import ROOT_NAMES, BottomUpNode, percentage
from ..nodetable import NodeTable

GROUP_BY = ("name", "identity")


def _key_function(group_by: str):
    if group_by == "name":
        return lambda node: node.name
    if group_by == "identity":
        return lambda node: f"{node.name}|{node.call_frame.url}|{node.call_frame.line}"
    raise ValueError(f"group_by must be one of {GROUP_BY}, got {group_by!r}")


class _Group:
    def __init__(self, node):
        self.first = node
        self.self_time = 0.0
        self.total_time = 0.0
        self.hit_count = 0
        self.caller_ids = {}  # ordered set

    def add(self, node, parent_ids):
        self.self_time += node.self_time
        self.total_time += node.total_time
        self.hit_count += node.hit_count
        for parent_id in parent_ids:
            self.caller_ids[parent_id] = None


def build_bottom_up(table: NodeTable, group_by: str = "name"):
    key_of = _key_function(group_by)
    denominator = table.total_time

    groups = {}
    for node_id, node in table.nodes.items():
        key = key_of(node)
        group = groups.get(key)
        if group is None:
            group = groups[key] = _Group(node)
        group.add(node, table.parents_of(node_id))

    result = []
    for key, group in groups.items():
        name = group.first.name
        if name in ROOT_NAMES:
            continue

        callers = {}
        for caller_id in group.caller_ids:
            caller = table.get(caller_id)
            if caller is None:
                continue
            caller_key = key_of(caller)
            entry = callers.get(caller_key)
            if entry is None:
                callers[caller_key] = [caller, caller.self_time, 1]
            else:
                entry[1] += caller.self_time
                entry[2] += 1

        caller_nodes = [
            BottomUpNode(
                id=f"bu-caller-{caller_key}-{key}",
                name=caller.name,
                self_time=time,
                total_time=time,
                self_percentage=percentage(time, denominator),
                total_percentage=percentage(time, denominator),
                hit_count=count,
                call_frame=caller.call_frame,
                category=caller.category,
            )
            for caller_key, (caller, time, count) in callers.items()
        ]
        caller_nodes.sort(key=lambda c: c.self_time, reverse=True)

        result.append(BottomUpNode(
            id=f"bu-{key}",
            name=name,
            self_time=group.self_time,
            total_time=group.total_time,
            self_percentage=percentage(group.self_time, denominator),
            total_percentage=percentage(group.total_time, denominator),
            hit_count=group.hit_count,
            call_frame=group.first.call_frame,
            category=group.first.category,
            callers=tuple(caller_nodes),
        ))

    result.sort(key=lambda n: n.self_time, reverse=True)
    return tuple(result)
