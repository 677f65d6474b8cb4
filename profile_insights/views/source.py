"""
source.py

Per-file, per-line time aggregates.

Line data comes from two places: the position ticks V8 records inside a
function (1-based line, tick count) and the line the function itself is
declared on (``callFrame.lineNumber``, 0-based). Both are turned into
LineContribution records and merged by 1-based line number, whatever
their origin, so a line never appears twice in a file.
"""
from collections import namedtuple

from ..model import SourceFile, SourceLine, percentage
from ..nodetable import NodeTable

TICKS = "ticks"
FRAME = "frame"

LineContribution = namedtuple(
    "LineContribution", ["line_number", "origin", "hit_count", "self_time", "total_time"]
)


def node_contributions(node):
    """Yield the line contributions of a single profile node."""
    for tick in node.position_ticks:
        yield LineContribution(tick.line, TICKS, tick.ticks, 0.0, 0.0)
    if node.call_frame.line >= 0:
        yield LineContribution(
            node.call_frame.line + 1, FRAME, node.hit_count, node.self_time, node.total_time
        )


def merge_line_contributions(contributions, denominator: float):
    """
    Merge contributions sharing a line number into one SourceLine each,
    ordered by line number. Hits, self time and total time are summed.
    """
    merged = {}
    for c in contributions:
        entry = merged.get(c.line_number)
        if entry is None:
            entry = merged[c.line_number] = {
                "hit_count": 0, "self_time": 0.0, "total_time": 0.0, "origins": []
            }
        entry["hit_count"] += c.hit_count
        entry["self_time"] += c.self_time
        entry["total_time"] += c.total_time
        if c.origin not in entry["origins"]:
            entry["origins"].append(c.origin)

    return tuple(
        SourceLine(
            line_number=line_number,
            self_time=entry["self_time"],
            total_time=entry["total_time"],
            self_percentage=percentage(entry["self_time"], denominator),
            hit_count=entry["hit_count"],
            origins=tuple(sorted(entry["origins"])),
        )
        for line_number, entry in sorted(merged.items())
    )


def file_name_of(url: str) -> str:
    return url.rstrip("/").rsplit("/", 1)[-1] or url


def build_source_files(table: NodeTable, hot_functions=()):
    """Return url -> SourceFile for every node with a non-empty url."""
    contributions = {}
    self_totals = {}
    for node in table.nodes.values():
        url = node.call_frame.url
        if not url:
            continue
        contributions.setdefault(url, []).extend(node_contributions(node))
        self_totals[url] = self_totals.get(url, 0.0) + node.self_time

    functions = {}
    for fn in hot_functions:
        functions.setdefault(fn.url, []).append(fn)

    return {
        url: SourceFile(
            url=url,
            file_name=file_name_of(url),
            lines=merge_line_contributions(items, table.total_time),
            total_time=self_totals[url],
            functions=tuple(functions.get(url, ())),
        )
        for url, items in contributions.items()
    }
