import json

import pytest

from profile_insights import parse_profile


def make_node(node_id, name, url="", children=(), hit_count=0, line=0, column=0, ticks=None):
    node = {
        "id": node_id,
        "callFrame": {
            "functionName": name,
            "scriptId": str(node_id),
            "url": url,
            "lineNumber": line,
            "columnNumber": column,
        },
        "hitCount": hit_count,
    }
    if children:
        node["children"] = list(children)
    if ticks:
        node["positionTicks"] = [{"line": line_no, "ticks": count} for line_no, count in ticks]
    return node


def make_profile(nodes, samples=None, deltas=None, start=0, end=None, title=""):
    profile = {"nodes": nodes, "startTime": start}
    if samples is not None:
        profile["samples"] = list(samples)
        profile["timeDeltas"] = list(deltas)
    if end is None:
        end = start + sum(deltas or ())
    profile["endTime"] = end
    if title:
        profile["title"] = title
    return profile


def function_profile(functions, start=0):
    """
    A flat profile: (root) calls each (name, url, line, self_time) once.
    """
    nodes = [make_node(1, "(root)", children=range(2, len(functions) + 2))]
    samples, deltas = [], []
    for offset, (name, url, line, self_time) in enumerate(functions):
        node_id = offset + 2
        nodes.append(make_node(node_id, name, url=url, line=line, hit_count=1))
        samples.append(node_id)
        deltas.append(self_time)
    return make_profile(nodes, samples, deltas, start=start)


@pytest.fixture
def three_node_profile():
    nodes = [
        make_node(1, "(root)", children=[2, 3]),
        make_node(2, "a", url="file:///app/a.js", hit_count=1),
        make_node(3, "b", url="file:///app/b.js", hit_count=2),
    ]
    return make_profile(nodes, samples=[2, 3, 3], deltas=[100, 100, 100])


@pytest.fixture
def nested_profile():
    """
    (root)
      main            self 100
        work          self 400, position ticks on lines 10 and 12
        (garbage collector)  self 100
      (idle)          self 200
      (program)       self 100
    """
    nodes = [
        make_node(1, "(root)", children=[2, 5, 6]),
        make_node(2, "main", url="file:///app/main.js", children=[3, 4], hit_count=1, line=0),
        make_node(3, "work", url="file:///app/work.js", hit_count=4, line=9, ticks=[(10, 3), (12, 1)]),
        make_node(4, "(garbage collector)", hit_count=1),
        make_node(5, "(idle)", hit_count=2),
        make_node(6, "(program)", hit_count=1),
    ]
    samples = [2, 3, 3, 3, 4, 5, 5, 3, 6]
    return make_profile(nodes, samples=samples, deltas=[100] * len(samples), title="nested")


@pytest.fixture
def nested(nested_profile):
    return parse_profile(nested_profile)


@pytest.fixture
def cyclic_profile():
    """
    (root) -> a, b; a -> c; b -> c; c -> a (cycle back up).
    """
    nodes = [
        make_node(1, "(root)", children=[2, 3]),
        make_node(2, "a", url="file:///app/a.js", children=[4]),
        make_node(3, "b", url="file:///app/b.js", children=[4]),
        make_node(4, "c", url="file:///app/c.js", children=[2]),
    ]
    return make_profile(nodes, samples=[4, 2, 3], deltas=[100, 50, 30])


@pytest.fixture
def write_profile(tmp_path):
    def write(profile, name="profile.cpuprofile"):
        path = tmp_path / name
        path.write_text(json.dumps(profile), encoding="utf-8")
        return str(path)
    return write
