import io
import json

import pytest

from conftest import function_profile
from profile_insights import parse_profile
from profile_insights.exporters import report
from profile_insights.exporters.speedscope import export_folded, folded_lines
from profile_insights.exporters.view_flame import node_label, render_call_tree, render_flame
from profile_insights.formatting import (
    format_percentage,
    format_signed_percentage,
    format_signed_time,
    format_time,
)


@pytest.mark.parametrize("us,expected", [
    (999, "999µs"),
    (1000, "1.00ms"),
    (1_500_000, "1.50s"),
    (-2000, "-2.00ms"),
])
def test_format_time(us, expected):
    assert format_time(us) == expected


def test_format_percentage():
    assert format_percentage(0.001) == "<0.01%"
    assert format_percentage(0.5) == "0.50%"
    assert format_percentage(12.34) == "12.3%"


def test_signed_formats():
    assert format_signed_time(1000) == "+1.00ms"
    assert format_signed_time(-1000) == "-1.00ms"
    assert format_signed_time(0) == "0µs"
    assert format_signed_percentage(5) == "+5.0%"
    assert format_signed_percentage(-2.5) == "-2.5%"


# folded stacks

def test_folded_lines(nested):
    assert set(folded_lines(nested.flame_graph)) == {
        "(root);main 100",
        "(root);main;work 400",
        "(root);main;(garbage collector) 100",
        "(root);(idle) 200",
        "(root);(program) 100",
    }


def test_folded_lines_min_weight(nested):
    assert list(folded_lines(nested.flame_graph, min_us=150)) == [
        "(root);main;work 400",
        "(root);(idle) 200",
    ]


def test_semicolons_in_names_do_not_split_frames():
    parsed = parse_profile(function_profile([("a;b", "", 0, 100)]))
    assert list(folded_lines(parsed.flame_graph)) == ["(root);a:b 100"]


def test_export_folded_counts_lines(nested):
    out = io.StringIO()
    assert export_folded(nested.flame_graph, out) == 5
    assert out.getvalue().endswith("\n")
    assert len(out.getvalue().splitlines()) == 5


# rich trees

def test_node_label_escapes_markup():
    label = node_label("fn[red]", 1000, 10.0)
    assert "fn\\[red]" in label
    assert "1.00ms (10.0%)" in label


def test_render_flame(nested):
    tree = render_flame(nested.flame_graph)
    assert "(root)" in tree.label
    main = tree.children[0]
    assert "main" in main.label
    assert "work" in main.children[0].label
    assert len(tree.children) == 3


def test_render_flame_limits(nested):
    shallow = render_flame(nested.flame_graph, max_depth=1)
    assert len(shallow.children) == 3
    assert all(child.children == [] for child in shallow.children)

    heavy = render_flame(nested.flame_graph, min_percentage=15)
    assert len(heavy.children) == 2


def test_render_flame_highlight(nested):
    tree = render_flame(nested.flame_graph, highlight=frozenset({3}))
    work = tree.children[0].children[0]
    assert work.label.startswith("[reverse]")
    assert not tree.children[0].label.startswith("[reverse]")


def test_render_call_tree(nested):
    tree = render_call_tree(nested.call_tree)
    assert ["main" in tree.children[0].label, "(idle)" in tree.children[1].label] == [True, True]
    assert any("work" in child.label for child in tree.children[0].children)

    shallow = render_call_tree(nested.call_tree, max_depth=1)
    assert all(child.children == [] for child in shallow.children)


# reports

def test_profile_report_is_json_serialisable(nested):
    data = report.profile_report(nested, include_timeline=False)
    assert "timeline" not in data
    assert data["hotFunctions"][0]["name"] == "work"
    assert data["hotFunctions"][0]["category"] == "javascript"
    assert "file:///app/work.js" in data["sourceFiles"]
    assert json.loads(json.dumps(data)) == data


def test_export_json_writes_trailing_newline(nested):
    out = io.StringIO()
    report.export_json({"title": nested.profile.title}, out)
    assert out.getvalue() == '{\n  "title": "nested"\n}\n'


def test_export_hot_functions_csv(nested):
    out = io.StringIO()
    report.export_hot_functions_csv(nested.hot_functions, out)
    rows = out.getvalue().splitlines()
    assert rows[0] == ",".join(report.HOT_FUNCTION_COLUMNS)
    assert len(rows) == len(nested.hot_functions) + 1
    assert rows[2].startswith("(idle),,")
