"""
nodetable.py

Index the raw profile nodes, attribute self time from the sample stream
(or from hit counts), and roll self time up into inclusive total time.

Call graphs from recursive or inlined code may list the same child under
several parents, or even loop back on themselves. Every walk here keeps a
visited set and is driven by an explicit stack, so each node is rolled up
exactly once: the first depth-first path from the root owns a shared
subtree and later references contribute nothing. Shared subtrees are
therefore under-counted rather than double-counted.
"""
import itertools
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Tuple

from .categories import categorize
from .model import CPUProfile, ProfileNode, RawNode, percentage

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class NodeTable:
    nodes: Mapping[int, ProfileNode]
    parents: Mapping[int, Tuple[int, ...]]
    tree_children: Mapping[int, Tuple[int, ...]]
    root_id: int
    total_time: float
    duration: float

    def get(self, node_id: int):
        return self.nodes.get(node_id)

    @property
    def root(self) -> ProfileNode:
        return self.nodes[self.root_id]

    def parents_of(self, node_id: int) -> Tuple[int, ...]:
        return self.parents.get(node_id, ())

    def walk(self, start: int = None) -> Iterator[Tuple[int, int]]:
        """Yield (node_id, depth) in pre-order over the spanning tree below start."""
        start = self.root_id if start is None else start
        stack = [(start, 0)]
        while stack:
            node_id, depth = stack.pop()
            yield node_id, depth
            for child_id in reversed(self.tree_children.get(node_id, ())):
                stack.append((child_id, depth + 1))


def build_index(profile: CPUProfile) -> Tuple[Dict[int, RawNode], Dict[int, List[int]]]:
    """
    Return the id -> node index and the child id -> parent ids multimap.
    A node id seen twice keeps its first definition.
    """
    index = {}
    for node in profile.nodes:
        if node.id in index:
            log.warning("Duplicate node id %s; keeping the first definition", node.id)
            continue
        index[node.id] = node

    parents = {}
    for node in index.values():
        for child_id in node.children:
            parents.setdefault(child_id, []).append(node.id)
    return index, parents


def sample_delta(time_deltas, i: int) -> float:
    if i >= len(time_deltas):
        return 0
    delta = time_deltas[i] or 0
    return delta if delta > 0 else 0


def compute_self_times(profile: CPUProfile, index: Dict[int, RawNode]) -> Dict[int, float]:
    self_times = dict.fromkeys(index, 0.0)

    if profile.has_samples:
        skipped = 0
        for i, node_id in enumerate(profile.samples):
            delta = sample_delta(profile.time_deltas, i)
            if node_id in self_times:
                self_times[node_id] += delta
            else:
                skipped += 1
        if skipped:
            log.debug("Skipped %d samples referencing unknown node ids", skipped)
        return self_times

    # No sample stream: spread the profile duration by hit count.
    total_hits = sum(node.hit_count for node in index.values())
    if total_hits > 0:
        duration = profile.duration
        for node_id, node in index.items():
            self_times[node_id] = duration * node.hit_count / total_hits
    return self_times


def spanning_forest(root_id: int, index: Dict[int, RawNode], parents: Dict[int, List[int]]):
    """
    Depth-first walk from the root, then from any node the root cannot reach.

    Returns (order, tree_children, depths): the pre-order of first visits,
    the children each node owns in the spanning forest, and each node's
    depth below its forest root.
    """
    order = []
    tree_children = {}
    depths = {}
    orphans = [node_id for node_id in index if node_id not in parents]
    for start in itertools.chain([root_id], orphans, index):
        if start in depths:
            continue
        if start != root_id:
            log.debug("Node %s is not reachable from the root", start)
        depths[start] = 0
        tree_children[start] = []
        order.append(start)
        stack = [(start, iter(index[start].children))]
        while stack:
            node_id, children = stack[-1]
            for child_id in children:
                if child_id in depths or child_id not in index:
                    continue
                depths[child_id] = depths[node_id] + 1
                tree_children[child_id] = []
                tree_children[node_id].append(child_id)
                order.append(child_id)
                stack.append((child_id, iter(index[child_id].children)))
                break
            else:
                stack.pop()
    return order, tree_children, depths


def compute_total_times(order, tree_children, self_times: Dict[int, float]) -> Dict[int, float]:
    total_times = {}
    # reversed pre-order visits every child before its parent
    for node_id in reversed(order):
        total_times[node_id] = self_times[node_id] + sum(
            total_times[child_id] for child_id in tree_children[node_id]
        )
    return total_times


def build_node_table(profile: CPUProfile) -> NodeTable:
    """Build the categorized, timed node table for a validated profile."""
    index, parents = build_index(profile)
    root_id = profile.nodes[0].id
    self_times = compute_self_times(profile, index)
    order, tree_children, depths = spanning_forest(root_id, index, parents)
    total_times = compute_total_times(order, tree_children, self_times)

    # Normalise against the root, or the wall-clock duration if the root saw nothing.
    denominator = total_times[root_id] or profile.duration

    nodes = {}
    for node_id, raw in index.items():
        self_time = self_times[node_id]
        total_time = total_times[node_id]
        nodes[node_id] = ProfileNode(
            id=node_id,
            call_frame=raw.call_frame,
            hit_count=raw.hit_count,
            children=raw.children,
            position_ticks=raw.position_ticks,
            self_time=self_time,
            total_time=total_time,
            self_percentage=percentage(self_time, denominator),
            total_percentage=percentage(total_time, denominator),
            category=categorize(raw.call_frame),
            depth=depths[node_id],
        )

    return NodeTable(
        nodes=MappingProxyType(nodes),
        parents=MappingProxyType({k: tuple(v) for k, v in parents.items()}),
        tree_children=MappingProxyType({k: tuple(v) for k, v in tree_children.items()}),
        root_id=root_id,
        total_time=denominator,
        duration=profile.duration,
    )
