"""
compare.py

Diff two parsed profiles (a baseline run and a comparison run) to find
regressions and improvements.

Functions are matched on ``name|url|line``. Call sites of the same
function reached through different paths are separate hot-function
entries; they are summed per key before comparing. Nothing here mutates
its inputs, and swapping the two profiles swaps added/removed and negates
every diff.
"""
import dataclasses
from typing import Optional

from .model import (
    CategoryComparison,
    FunctionDiff,
    ParsedProfile,
    ProfileComparison,
    ProfileDiff,
    StatDelta,
    StatsComparison,
)

# A function counts as changed when either threshold is exceeded.
CHANGE_THRESHOLD_PERCENT = 1
CHANGE_THRESHOLD_TIME = 1000
TOP_CHANGES = 10


def diff_percentage(baseline: float, comparison: float) -> float:
    if baseline > 0:
        return (comparison - baseline) / baseline * 100
    return 100.0 if comparison > 0 else 0.0


def index_hot_functions(profile: ParsedProfile):
    """Return key -> HotFunction with same-key call sites summed together."""
    index = {}
    for fn in profile.hot_functions:
        existing = index.get(fn.key)
        if existing is None:
            index[fn.key] = fn
        else:
            index[fn.key] = dataclasses.replace(
                existing,
                self_time=existing.self_time + fn.self_time,
                total_time=existing.total_time + fn.total_time,
                self_percentage=existing.self_percentage + fn.self_percentage,
                total_percentage=existing.total_percentage + fn.total_percentage,
                hit_count=existing.hit_count + fn.hit_count,
            )
    return index


def diff_profiles(baseline: Optional[ParsedProfile], comparison: Optional[ParsedProfile]) -> Optional[ProfileDiff]:
    """Diff comparison against baseline. Returns None unless both are given."""
    if baseline is None or comparison is None:
        return None

    base_functions = index_hot_functions(baseline)
    comp_functions = index_hot_functions(comparison)

    added = []
    changed = []
    for key, comp_fn in comp_functions.items():
        base_fn = base_functions.get(key)
        if base_fn is None:
            added.append(comp_fn)
            continue
        self_time_diff = comp_fn.self_time - base_fn.self_time
        self_time_diff_percentage = diff_percentage(base_fn.self_time, comp_fn.self_time)
        if (abs(self_time_diff_percentage) > CHANGE_THRESHOLD_PERCENT
                or abs(self_time_diff) > CHANGE_THRESHOLD_TIME):
            changed.append(FunctionDiff(
                name=comp_fn.name,
                url=comp_fn.url,
                line=comp_fn.line,
                baseline_self_time=base_fn.self_time,
                comparison_self_time=comp_fn.self_time,
                self_time_diff=self_time_diff,
                self_time_diff_percentage=self_time_diff_percentage,
                call_frame=comp_fn.call_frame,
            ))

    removed = [fn for key, fn in base_functions.items() if key not in comp_functions]

    changed.sort(key=lambda d: abs(d.self_time_diff), reverse=True)
    added.sort(key=lambda fn: fn.self_time, reverse=True)
    removed.sort(key=lambda fn: fn.self_time, reverse=True)

    base_total = baseline.stats.total_time
    total_time_diff = comparison.stats.total_time - base_total
    return ProfileDiff(
        added_functions=tuple(added),
        removed_functions=tuple(removed),
        changed_functions=tuple(changed),
        total_time_diff=total_time_diff,
        total_time_diff_percentage=total_time_diff / base_total * 100 if base_total > 0 else 0.0,
    )


def top_regressions(diff: Optional[ProfileDiff], limit: int = TOP_CHANGES):
    if diff is None:
        return ()
    return tuple(d for d in diff.changed_functions if d.self_time_diff > 0)[:limit]


def top_improvements(diff: Optional[ProfileDiff], limit: int = TOP_CHANGES):
    if diff is None:
        return ()
    improvements = [d for d in diff.changed_functions if d.self_time_diff < 0]
    improvements.sort(key=lambda d: d.self_time_diff)
    return tuple(improvements[:limit])


def compare_categories(baseline: Optional[ParsedProfile], comparison: Optional[ParsedProfile]):
    """Per-category times of both runs, zero-filled where a run lacks a category."""
    if baseline is None or comparison is None:
        return ()
    base = {c.category: c for c in baseline.stats.categories}
    comp = {c.category: c for c in comparison.stats.categories}

    rows = []
    for category in list(comp) + [c for c in base if c not in comp]:
        base_time = base[category].time if category in base else 0.0
        base_pct = base[category].percentage if category in base else 0.0
        comp_time = comp[category].time if category in comp else 0.0
        comp_pct = comp[category].percentage if category in comp else 0.0
        rows.append(CategoryComparison(
            category=category,
            baseline_time=base_time,
            baseline_percentage=base_pct,
            comparison_time=comp_time,
            comparison_percentage=comp_pct,
            time_diff=comp_time - base_time,
            percentage_diff=comp_pct - base_pct,
        ))
    return tuple(rows)


def _delta(baseline: float, comparison: float) -> StatDelta:
    diff = comparison - baseline
    return StatDelta(
        baseline=baseline,
        comparison=comparison,
        diff=diff,
        diff_percentage=diff / baseline * 100 if baseline > 0 else 0.0,
    )


def compare_stats(baseline: Optional[ParsedProfile], comparison: Optional[ParsedProfile]) -> Optional[StatsComparison]:
    if baseline is None or comparison is None:
        return None
    base, comp = baseline.stats, comparison.stats
    return StatsComparison(
        total_time=_delta(base.total_time, comp.total_time),
        total_samples=_delta(base.total_samples, comp.total_samples),
        total_nodes=_delta(base.total_nodes, comp.total_nodes),
        gc_time=_delta(base.gc_time, comp.gc_time),
    )


def compare_profiles(baseline: Optional[ParsedProfile], comparison: Optional[ParsedProfile]) -> Optional[ProfileComparison]:
    """Bundle the function diff, category and stat deltas of two runs."""
    diff = diff_profiles(baseline, comparison)
    if diff is None:
        return None
    return ProfileComparison(
        baseline=baseline,
        comparison=comparison,
        diff=diff,
        categories=compare_categories(baseline, comparison),
        stats=compare_stats(baseline, comparison),
        top_regressions=top_regressions(diff),
        top_improvements=top_improvements(diff),
    )
