"""
Hot functions: every call site that spent time itself, heaviest first,
with one level of callers and callees for context.
"""
from ..model import ROOT_NAMES, CallerInfo, HotFunction, percentage
from ..nodetable import NodeTable


def _neighbours(table: NodeTable, node_ids, denominator: float):
    infos = []
    for node_id in node_ids:
        node = table.get(node_id)
        if node is None:
            continue
        infos.append(CallerInfo(
            name=node.name,
            self_time=node.self_time,
            percentage=percentage(node.self_time, denominator),
            call_frame=node.call_frame,
        ))
    infos.sort(key=lambda info: info.self_time, reverse=True)
    return tuple(infos)


def extract_hot_functions(table: NodeTable):
    denominator = table.total_time
    functions = []
    for node_id, node in table.nodes.items():
        if node.self_time <= 0 or node.name in ROOT_NAMES:
            continue
        functions.append(HotFunction(
            id=node_id,
            name=node.name,
            self_time=node.self_time,
            total_time=node.total_time,
            self_percentage=node.self_percentage,
            total_percentage=node.total_percentage,
            hit_count=node.hit_count,
            url=node.call_frame.url,
            line=node.call_frame.line,
            call_frame=node.call_frame,
            category=node.category,
            callers=_neighbours(table, table.parents_of(node_id), denominator),
            callees=_neighbours(table, node.children, denominator),
        ))
    functions.sort(key=lambda fn: fn.self_time, reverse=True)
    return tuple(functions)
