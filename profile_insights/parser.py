"""
parser.py

Turn raw .cpuprofile JSON (V8, Node.js, Chrome DevTools) into a
ParsedProfile holding every derived view.

Parsing is all-or-nothing: either a complete ParsedProfile comes back or
MalformedInput is raised.
"""
import json
import logging
from types import MappingProxyType
from typing import Any, Mapping, Union

from .errors import MalformedInput
from .model import CallFrame, CPUProfile, ParsedProfile, PositionTick, RawNode
from .nodetable import build_node_table
from .stats import build_summary, calculate_categories, calculate_stats
from .views.bottomup import build_bottom_up
from .views.calltree import build_call_tree
from .views.flame import build_flame_graph
from .views.hotspots import extract_hot_functions
from .views.source import build_source_files
from .views.timeline import build_timeline

log = logging.getLogger(__name__)


def _as_int(value, default: int, what: str) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedInput(f"Invalid CPU profile: {what} must be a number, got {value!r}")
    return int(value)


def _as_number(value, default: float, what: str) -> float:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedInput(f"Invalid CPU profile: {what} must be a number, got {value!r}")
    return value


def _call_frame(raw: Mapping[str, Any]) -> CallFrame:
    return CallFrame(
        function_name=str(raw.get("functionName") or ""),
        url=str(raw.get("url") or ""),
        line=_as_int(raw.get("lineNumber"), -1, "callFrame.lineNumber"),
        column=_as_int(raw.get("columnNumber"), -1, "callFrame.columnNumber"),
        script_id=str(raw.get("scriptId") or ""),
    )


def _raw_node(raw, position: int) -> RawNode:
    if not isinstance(raw, dict):
        raise MalformedInput(f"Invalid CPU profile: node #{position} is not an object")
    node_id = raw.get("id")
    if isinstance(node_id, bool) or not isinstance(node_id, int):
        raise MalformedInput(f"Invalid CPU profile: node #{position} has no integer id")

    call_frame = raw.get("callFrame") or {}
    if not isinstance(call_frame, dict):
        raise MalformedInput(f"Invalid CPU profile: node {node_id} has a malformed callFrame")

    children = raw.get("children") or []
    if not isinstance(children, list):
        raise MalformedInput(f"Invalid CPU profile: node {node_id} children must be a list")

    ticks = []
    for tick in raw.get("positionTicks") or []:
        if not isinstance(tick, dict):
            raise MalformedInput(f"Invalid CPU profile: node {node_id} has a malformed positionTick")
        ticks.append(PositionTick(
            line=_as_int(tick.get("line"), 0, "positionTicks.line"),
            ticks=_as_int(tick.get("ticks"), 0, "positionTicks.ticks"),
        ))

    return RawNode(
        id=node_id,
        call_frame=_call_frame(call_frame),
        hit_count=max(_as_int(raw.get("hitCount"), 0, "hitCount"), 0),
        children=tuple(_as_int(c, 0, "children") for c in children),
        position_ticks=tuple(ticks),
        deopt_reason=str(raw.get("deoptReason") or ""),
    )


def _optional_sequence(raw: Mapping[str, Any], key: str, convert):
    values = raw.get(key)
    if values is None:
        return None
    if not isinstance(values, list):
        raise MalformedInput(f"Invalid CPU profile: {key} must be a list")
    return tuple(convert(v, 0, key) for v in values)


def decode_profile(content: Union[str, bytes, Mapping[str, Any]]) -> CPUProfile:
    """
    Validate raw profile text (or an already decoded mapping) and return a CPUProfile.
    Raises MalformedInput when the structure cannot be analysed.
    """
    if isinstance(content, (str, bytes, bytearray)):
        try:
            raw = json.loads(content)
        except (ValueError, UnicodeDecodeError) as exc:
            raise MalformedInput(f"Invalid CPU profile: not valid JSON ({exc})") from exc
    else:
        raw = content

    if not isinstance(raw, dict):
        raise MalformedInput("Invalid CPU profile: expected a JSON object")
    nodes = raw.get("nodes")
    if not isinstance(nodes, list):
        raise MalformedInput("Invalid CPU profile: missing nodes array")
    if not nodes:
        raise MalformedInput("Invalid CPU profile: nodes array is empty")

    return CPUProfile(
        nodes=tuple(_raw_node(node, i) for i, node in enumerate(nodes)),
        start_time=_as_number(raw.get("startTime"), 0, "startTime"),
        end_time=_as_number(raw.get("endTime"), 0, "endTime"),
        samples=_optional_sequence(raw, "samples", _as_int),
        time_deltas=_optional_sequence(raw, "timeDeltas", _as_number),
        title=str(raw.get("title") or ""),
    )


def parse_profile(content: Union[str, bytes, Mapping[str, Any]], group_by: str = "name") -> ParsedProfile:
    """
    Parse a CPU profile and build every derived view.

    ``group_by`` selects the bottom-up grouping key: "name" merges all
    functions sharing a name, "identity" keeps (name, url, line) apart.
    """
    profile = decode_profile(content)
    table = build_node_table(profile)
    log.debug(
        "Parsed profile with %d nodes, %d samples, total %.0fus",
        len(table.nodes), len(profile.samples or ()), table.total_time,
    )

    hot_functions = extract_hot_functions(table)
    timeline = build_timeline(profile, table)
    categories = calculate_categories(table)
    stats = calculate_stats(profile, table, hot_functions, categories)

    return ParsedProfile(
        profile=profile,
        nodes=table.nodes,
        flame_graph=build_flame_graph(table),
        call_tree=build_call_tree(table),
        bottom_up=build_bottom_up(table, group_by=group_by),
        hot_functions=hot_functions,
        timeline=timeline,
        stats=stats,
        summary=build_summary(stats, hot_functions, timeline, table),
        source_files=MappingProxyType(build_source_files(table, hot_functions)),
    )
