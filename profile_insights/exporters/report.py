"""
JSON and CSV reports of a parsed profile or a profile comparison.
"""
import csv
import dataclasses
import json
from enum import Enum
from typing import Mapping

HOT_FUNCTION_COLUMNS = (
    "name", "url", "line", "category", "self_time", "self_percentage",
    "total_time", "total_percentage", "hit_count",
)


def to_jsonable(value):
    """Convert result dataclasses (and their enums, tuples and mappings) to plain JSON types."""
    if isinstance(value, Enum):
        return value.value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Mapping):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def profile_report(parsed, include_flame_graph: bool = True, include_call_tree: bool = True,
                   include_hot_functions: bool = True, include_timeline: bool = True) -> dict:
    report = {
        "title": parsed.profile.title,
        "startTime": parsed.profile.start_time,
        "endTime": parsed.profile.end_time,
        "stats": to_jsonable(parsed.stats),
        "summary": to_jsonable(parsed.summary),
        "bottomUp": to_jsonable(parsed.bottom_up),
        "sourceFiles": to_jsonable(parsed.source_files),
    }
    if include_flame_graph:
        report["flameGraph"] = to_jsonable(parsed.flame_graph)
    if include_call_tree:
        report["callTree"] = to_jsonable(parsed.call_tree)
    if include_hot_functions:
        report["hotFunctions"] = to_jsonable(parsed.hot_functions)
    if include_timeline:
        report["timeline"] = to_jsonable(parsed.timeline)
    return report


def comparison_report(comparison) -> dict:
    return {
        "diff": to_jsonable(comparison.diff),
        "categories": to_jsonable(comparison.categories),
        "stats": to_jsonable(comparison.stats),
        "topRegressions": to_jsonable(comparison.top_regressions),
        "topImprovements": to_jsonable(comparison.top_improvements),
    }


def export_json(report: dict, out) -> None:
    json.dump(report, out, indent=2, sort_keys=False)
    out.write("\n")


def export_hot_functions_csv(hot_functions, out) -> None:
    writer = csv.writer(out)
    writer.writerow(HOT_FUNCTION_COLUMNS)
    for fn in hot_functions:
        writer.writerow([
            fn.name, fn.url, fn.line, fn.category.value,
            f"{fn.self_time:.3f}", f"{fn.self_percentage:.3f}",
            f"{fn.total_time:.3f}", f"{fn.total_percentage:.3f}", fn.hit_count,
        ])
