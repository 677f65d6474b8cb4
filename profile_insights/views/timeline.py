"""
Rebuild an execution timeline from the sample stream by coalescing runs
of consecutive samples that hit the same node.
"""
from ..model import CPUProfile, TimelineData, TimelineEvent
from ..nodetable import NodeTable, sample_delta


def build_timeline(profile: CPUProfile, table: NodeTable) -> TimelineData:
    events = []
    max_depth = 0

    def close(node_id, start, end):
        nonlocal max_depth
        node = table.get(node_id)
        if node is None:
            return
        events.append(TimelineEvent(
            node_id=node_id,
            start_time=start,
            duration=end - start,
            name=node.name,
            depth=node.depth,
            category=node.category,
        ))
        max_depth = max(max_depth, node.depth)

    if profile.has_samples:
        # offsets are relative to profile.start_time
        current_time = 0
        current_id = None
        event_start = 0
        for i, node_id in enumerate(profile.samples):
            if node_id != current_id:
                if current_id is not None:
                    close(current_id, event_start, current_time)
                current_id = node_id
                event_start = current_time
            current_time += sample_delta(profile.time_deltas, i)
        if current_id is not None:
            close(current_id, event_start, current_time)

    return TimelineData(
        events=tuple(events),
        duration=profile.duration,
        max_depth=max_depth,
    )
