"""
stats.py

Profile-wide statistics and the chart data behind the summary view.
"""
from .formatting import format_time
from .model import (
    Category,
    CategoryStats,
    ChartDataPoint,
    CPUProfile,
    HistogramBucket,
    ProfileStats,
    SummaryData,
    TimelineData,
    percentage,
)
from .nodetable import NodeTable

HISTOGRAM_BUCKETS = 20
TOP_FUNCTIONS = 10
CHART_NAME_LENGTH = 20
# Categories below this share are left out of the breakdown chart.
MIN_BREAKDOWN_PERCENTAGE = 0.1


def calculate_categories(table: NodeTable):
    """Self time and node count per category, largest first."""
    totals = {}
    for node in table.nodes.values():
        time, count = totals.get(node.category, (0.0, 0))
        totals[node.category] = (time + node.self_time, count + 1)

    categories = [
        CategoryStats(
            category=category,
            time=time,
            percentage=percentage(time, table.total_time),
            count=count,
        )
        for category, (time, count) in totals.items()
    ]
    categories.sort(key=lambda c: c.time, reverse=True)
    return tuple(categories)


def calculate_stats(profile: CPUProfile, table: NodeTable, hot_functions, categories) -> ProfileStats:
    gc_time = 0.0
    idle_time = 0.0
    for node in table.nodes.values():
        if node.category is Category.GC:
            gc_time += node.self_time
        elif node.category is Category.IDLE:
            idle_time += node.self_time

    total_samples = len(profile.samples or ())
    duration_seconds = profile.duration / 1_000_000
    samples_per_second = total_samples / duration_seconds if duration_seconds > 0 else 0.0

    return ProfileStats(
        total_time=table.total_time,
        total_samples=total_samples,
        total_nodes=len(profile.nodes),
        top_functions=tuple(hot_functions[:TOP_FUNCTIONS]),
        gc_time=gc_time,
        idle_time=idle_time,
        categories=tuple(categories),
        samples_per_second=samples_per_second,
    )


def timeline_histogram(timeline: TimelineData, bucket_count: int = HISTOGRAM_BUCKETS):
    """
    Split the profile duration into equal buckets and sum, per bucket, how
    much of every timeline event overlaps the bucket's [start, end) window.
    """
    bucket_size = timeline.duration / bucket_count
    buckets = []
    for i in range(bucket_count):
        start = i * bucket_size
        end = (i + 1) * bucket_size
        value = 0.0
        for event in timeline.events:
            if event.start_time < end and event.end_time > start:
                value += min(event.end_time, end) - max(event.start_time, start)
        buckets.append(HistogramBucket(
            label=format_time(start),
            value=value,
            percentage=percentage(value, bucket_size),
        ))
    return tuple(buckets)


def top_functions_chart(hot_functions, limit: int = TOP_FUNCTIONS):
    chart = []
    for fn in hot_functions[:limit]:
        name = fn.name
        if len(name) > CHART_NAME_LENGTH:
            name = name[:CHART_NAME_LENGTH] + "..."
        chart.append(ChartDataPoint(name=name, value=fn.self_time, percentage=fn.self_percentage))
    return tuple(chart)


def call_depth_distribution(table: NodeTable, total_time: float):
    """Self time bucketed by each node's depth in the call tree, shallowest first."""
    by_depth = {}
    for node in table.nodes.values():
        by_depth[node.depth] = by_depth.get(node.depth, 0.0) + node.self_time
    return tuple(
        HistogramBucket(
            label=f"Depth {depth}",
            value=value,
            percentage=percentage(value, total_time),
        )
        for depth, value in sorted(by_depth.items())
    )


def build_summary(stats: ProfileStats, hot_functions, timeline: TimelineData, table: NodeTable) -> SummaryData:
    return SummaryData(
        category_breakdown=tuple(
            c for c in stats.categories if c.percentage > MIN_BREAKDOWN_PERCENTAGE
        ),
        timeline_histogram=timeline_histogram(timeline),
        top_functions_chart=top_functions_chart(hot_functions),
        call_depth_distribution=call_depth_distribution(table, stats.total_time),
    )
