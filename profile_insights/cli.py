#!/usr/bin/env python3
"""
cli.py

Command-line interface for exploring CPU profiles and diffing two runs.
"""
import json

import click
from rich import print
from rich.markup import escape
from rich.table import Table

from profile_insights import __version__
from profile_insights.compare import compare_profiles
from profile_insights.errors import ProfileError
from profile_insights.exporters import report, speedscope
from profile_insights.exporters.view_flame import render_call_tree, render_flame
from profile_insights.filters import (
    ProfileFilter,
    filter_bottom_up,
    filter_hot_functions,
    matching_node_ids,
)
from profile_insights.formatting import (
    format_percentage,
    format_signed_percentage,
    format_signed_time,
    format_time,
)
from profile_insights.loader import DEFAULT_TIMEOUT, load_pair, load_profile
from profile_insights.logging_config import LOG_FORMATS, setup_logging
from profile_insights.model import Category, ViewMode
from profile_insights.views.bottomup import GROUP_BY

VIEWS = [mode.value for mode in ViewMode] + ["hotspots"]
CATEGORIES = [category.value for category in Category]
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _fail(exc: Exception):
    click.echo(f"Error: {exc}", err=True)
    raise SystemExit(1)


@click.group()
@click.version_option(__version__, prog_name="profile-insights")
@click.option(
    "--log-level", envvar="PROFILE_INSIGHTS_LOG_LEVEL", default="WARNING",
    type=click.Choice(LOG_LEVELS, case_sensitive=False), help="Logging threshold"
)
@click.option(
    "--log-format", envvar="PROFILE_INSIGHTS_LOG_FORMAT", default="text",
    type=click.Choice(LOG_FORMATS), help="Log as Rich text or JSON lines"
)
@click.option(
    "--timeout", envvar="PROFILE_INSIGHTS_HTTP_TIMEOUT", default=DEFAULT_TIMEOUT,
    type=float, help="Timeout in seconds when fetching profiles over HTTP"
)
@click.pass_context
def main(ctx, log_level, log_format, timeout):
    """
    Analyse V8 / Node.js / Chrome .cpuprofile files.

    PROFILE arguments accept a path, "-" for stdin, or an http(s) URL.
    """
    setup_logging(log_level, log_format)
    ctx.obj = {"timeout": timeout}


def _load(ctx, location, group_by="name"):
    try:
        return load_profile(location, timeout=ctx.obj["timeout"], group_by=group_by)
    except ProfileError as exc:
        _fail(exc)


def _time_table(title, columns):
    table = Table(title=title, title_justify="left")
    for name in columns:
        justify = "left" if name in ("Function", "Category", "Location", "File", "Callers") else "right"
        table.add_column(name, justify=justify, overflow="fold")
    return table


def _location(call_frame):
    if call_frame is None or not call_frame.url:
        return ""
    return f"{call_frame.url}:{call_frame.line + 1}"


def show_summary(parsed, limit):
    stats = parsed.stats
    overview = Table(show_header=False, title=parsed.profile.title or "Profile", title_justify="left")
    overview.add_column("Metric")
    overview.add_column("Value", justify="right")
    overview.add_row("Total time", format_time(stats.total_time))
    overview.add_row("Samples", str(stats.total_samples))
    overview.add_row("Nodes", str(stats.total_nodes))
    overview.add_row("Samples/s", f"{stats.samples_per_second:.1f}")
    overview.add_row("GC time", format_time(stats.gc_time))
    overview.add_row("Idle time", format_time(stats.idle_time))
    print(overview)

    categories = _time_table("Categories", ["Category", "Time", "Share", "Nodes"])
    for c in parsed.summary.category_breakdown:
        categories.add_row(c.label, format_time(c.time), format_percentage(c.percentage), str(c.count))
    print(categories)

    top = _time_table("Top functions", ["Function", "Self", "Share"])
    for point in parsed.summary.top_functions_chart[:limit]:
        top.add_row(escape(point.name), format_time(point.value), format_percentage(point.percentage))
    print(top)

    histogram = _time_table("Activity over time", ["Start", "Busy", "Share"])
    for bucket in parsed.summary.timeline_histogram:
        histogram.add_row(bucket.label, format_time(bucket.value), format_percentage(bucket.percentage))
    print(histogram)

    depths = _time_table("Self time by call depth", ["Depth", "Time", "Share"])
    for bucket in parsed.summary.call_depth_distribution:
        depths.add_row(bucket.label, format_time(bucket.value), format_percentage(bucket.percentage))
    print(depths)


def show_hotspots(parsed, profile_filter, limit):
    functions = filter_hot_functions(parsed.hot_functions, profile_filter)
    table = _time_table("Hot functions", ["Function", "Self", "Self %", "Total", "Category", "Location"])
    for fn in functions[:limit]:
        table.add_row(
            escape(fn.name), format_time(fn.self_time), format_percentage(fn.self_percentage),
            format_time(fn.total_time), fn.category.label, _location(fn.call_frame),
        )
    print(table)


def show_bottom_up(parsed, profile_filter, limit):
    nodes = filter_bottom_up(parsed.bottom_up, profile_filter)
    table = _time_table("Bottom-up", ["Function", "Self", "Self %", "Total", "Hits", "Callers"])
    for node in nodes[:limit]:
        callers = ", ".join(escape(caller.name) for caller in node.callers[:3])
        if len(node.callers) > 3:
            callers += f" (+{len(node.callers) - 3})"
        table.add_row(
            escape(node.name), format_time(node.self_time), format_percentage(node.self_percentage),
            format_time(node.total_time), str(node.hit_count), callers,
        )
    print(table)


def show_timeline(parsed, limit):
    timeline = parsed.timeline
    click.echo(
        f"{len(timeline.events)} events over {format_time(timeline.duration)}, "
        f"max depth {timeline.max_depth}"
    )
    table = _time_table("Timeline", ["Start", "Duration", "Depth", "Function", "Category"])
    for event in timeline.events[:limit]:
        table.add_row(
            format_time(event.start_time), format_time(event.duration), str(event.depth),
            escape(event.name), event.category.label,
        )
    print(table)


def show_source(parsed, limit):
    files = sorted(parsed.source_files.values(), key=lambda f: f.total_time, reverse=True)
    if not files:
        click.echo("No source locations in this profile.")
        return
    for source_file in files[:limit]:
        table = _time_table(
            f"{escape(source_file.file_name)} • {format_time(source_file.total_time)}",
            ["Line", "Self", "Self %", "Hits"],
        )
        for line in source_file.lines:
            table.add_row(
                str(line.line_number), format_time(line.self_time),
                format_percentage(line.self_percentage), str(line.hit_count),
            )
        print(table)


@main.command()
@click.argument("profile")
@click.option("--view", "view", type=click.Choice(VIEWS), default=ViewMode.SUMMARY.value, show_default=True)
@click.option("--limit", default=20, type=click.IntRange(min=1), show_default=True, help="Rows per table")
@click.option("--depth", type=click.IntRange(min=1), default=None, help="Maximum tree depth to show")
@click.option("--search", default="", help="Only keep functions whose name or url contains this")
@click.option("--min-percentage", default=0.0, type=float, help="Hide entries below this share")
@click.option("--hide-idle/--show-idle", default=True, show_default=True)
@click.option("--hide-gc", is_flag=True, default=False)
@click.option("--hide-native", is_flag=True, default=False)
@click.option("--category", "categories", multiple=True, type=click.Choice(CATEGORIES), help="Only show these categories")
@click.option("--group-by", type=click.Choice(GROUP_BY), default="name", show_default=True,
              help="Bottom-up grouping key")
@click.pass_context
def show(ctx, profile, view, limit, depth, search, min_percentage, hide_idle, hide_gc,
         hide_native, categories, group_by):
    """Show one view of PROFILE."""
    parsed = _load(ctx, profile, group_by=group_by)
    profile_filter = ProfileFilter(
        search=search,
        min_percentage=min_percentage,
        hide_idle=hide_idle,
        hide_gc=hide_gc,
        hide_native=hide_native,
        categories=tuple(Category(c) for c in categories),
    )

    if view == ViewMode.SUMMARY.value:
        show_summary(parsed, limit)
    elif view == ViewMode.FLAMEGRAPH.value:
        highlight = matching_node_ids(parsed.flame_graph, search)
        if search:
            click.echo(f"{len(highlight)} frames match {search!r}")
        print(render_flame(parsed.flame_graph, max_depth=depth, min_percentage=min_percentage,
                           highlight=highlight))
    elif view == ViewMode.CALLTREE.value:
        print(render_call_tree(parsed.call_tree, max_depth=depth, min_percentage=min_percentage))
    elif view == ViewMode.BOTTOMUP.value:
        show_bottom_up(parsed, profile_filter, limit)
    elif view == ViewMode.TIMELINE.value:
        show_timeline(parsed, limit)
    elif view == ViewMode.SOURCE.value:
        show_source(parsed, limit)
    else:
        show_hotspots(parsed, profile_filter, limit)


def _diff_rows(table, diffs):
    for d in diffs:
        table.add_row(
            escape(d.name), format_time(d.baseline_self_time), format_time(d.comparison_self_time),
            format_signed_time(d.self_time_diff), format_signed_percentage(d.self_time_diff_percentage),
        )


@main.command()
@click.argument("baseline")
@click.argument("comparison")
@click.option("--limit", default=10, type=click.IntRange(min=1), show_default=True, help="Rows per table")
@click.option("--format", "fmt", type=click.Choice(["text", "json"]), default="text", show_default=True)
@click.pass_context
def diff(ctx, baseline, comparison, limit, fmt):
    """Compare COMPARISON against BASELINE."""
    try:
        base, comp = load_pair(baseline, comparison, timeout=ctx.obj["timeout"])
    except ProfileError as exc:
        _fail(exc)
    result = compare_profiles(base, comp)

    if fmt == "json":
        click.echo(json.dumps(report.comparison_report(result), indent=2))
        return

    stats = _time_table("Overview", ["Metric", "Baseline", "Comparison", "Diff", "Diff %"])
    for label, delta, as_time in (
        ("Total time", result.stats.total_time, True),
        ("Samples", result.stats.total_samples, False),
        ("Nodes", result.stats.total_nodes, False),
        ("GC time", result.stats.gc_time, True),
    ):
        fmt_value = format_time if as_time else (lambda v: f"{v:g}")
        fmt_diff = format_signed_time if as_time else (lambda v: f"{v:+g}")
        stats.add_row(
            label, fmt_value(delta.baseline), fmt_value(delta.comparison),
            fmt_diff(delta.diff), format_signed_percentage(delta.diff_percentage),
        )
    print(stats)

    categories = _time_table("Categories", ["Category", "Baseline", "Comparison", "Diff"])
    for row in result.categories:
        categories.add_row(
            row.label, format_time(row.baseline_time), format_time(row.comparison_time),
            format_signed_time(row.time_diff),
        )
    print(categories)

    columns = ["Function", "Baseline", "Comparison", "Diff", "Diff %"]
    regressions = _time_table("Top regressions", columns)
    _diff_rows(regressions, result.top_regressions[:limit])
    print(regressions)
    improvements = _time_table("Top improvements", columns)
    _diff_rows(improvements, result.top_improvements[:limit])
    print(improvements)

    for title, functions in (("Added functions", result.diff.added_functions),
                             ("Removed functions", result.diff.removed_functions)):
        table = _time_table(title, ["Function", "Self", "Location"])
        for fn in functions[:limit]:
            table.add_row(escape(fn.name), format_time(fn.self_time), _location(fn.call_frame))
        print(table)


@main.command()
@click.argument("profile")
@click.option("--format", "fmt", type=click.Choice(["folded", "json", "csv"]), default="folded", show_default=True)
@click.option("--output", "-o", default="-", type=click.Path(dir_okay=False, allow_dash=True),
              help="Write here instead of stdout")
@click.option("--min-us", type=int, default=1, show_default=True, help="Omit folded stacks lighter than this (µs)")
@click.option("--no-timeline", is_flag=True, default=False, help="Leave the timeline out of JSON reports")
@click.pass_context
def export(ctx, profile, fmt, output, min_us, no_timeline):
    """Export PROFILE as folded stacks (Speedscope), a JSON report or hot functions CSV."""
    parsed = _load(ctx, profile)
    with click.open_file(output, "w", encoding="utf-8") as out:
        if fmt == "folded":
            speedscope.export_folded(parsed.flame_graph, out, min_us=min_us)
        elif fmt == "json":
            report.export_json(report.profile_report(parsed, include_timeline=not no_timeline), out)
        else:
            report.export_hot_functions_csv(parsed.hot_functions, out)


if __name__ == "__main__":
    main()
