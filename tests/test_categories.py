import pytest

from conftest import function_profile
from profile_insights import parse_profile
from profile_insights.categories import categorize
from profile_insights.model import CallFrame, Category


def frame(name, url=""):
    return CallFrame(function_name=name, url=url, line=0, column=0)


@pytest.mark.parametrize("name,url,expected", [
    ("(idle)", "", Category.IDLE),
    ("(program)", "", Category.PROGRAM),
    ("(root)", "", Category.PROGRAM),
    ("(garbage collector)", "", Category.GC),
    ("Minor GC (gc)", "file:///app.js", Category.GC),
    ("RegExp: ^foo", "", Category.REGEXP),
    ("run regular expression", "file:///app.js", Category.REGEXP),
    ("compileFunction", "file:///app.js", Category.COMPILE),
    ("deoptimizeAll", "", Category.COMPILE),
    ("run", "wasm://wasm/abc123", Category.WASM),
    ("wasm-function[12]", "file:///app.js", Category.WASM),
    ("now", "", Category.NATIVE),
    ("sort", "native array.js", Category.NATIVE),
    ("native parse", "file:///x.py", Category.NATIVE),
    ("readFileSync", "node:fs", Category.SYSTEM),
    ("processTicks", "node:internal/process/task_queues", Category.SYSTEM),
    ("listOnTimeout", "internal/timers.js", Category.SYSTEM),
    ("handler", "file:///app/server.js", Category.JAVASCRIPT),
    ("handler", "https://example.com/bundle.mjs", Category.JAVASCRIPT),
    ("handler", "file:///app/server.TS", Category.JAVASCRIPT),
    ("handler", "https://example.com/page.html", Category.OTHER),
])
def test_rules(name, url, expected):
    assert categorize(frame(name, url)) is expected


def test_first_matching_rule_wins():
    # gc outranks the empty-url native rule, compile outranks wasm
    assert categorize(frame("(garbage collector)")) is Category.GC
    assert categorize(frame("compile", "wasm://x")) is Category.COMPILE


def test_categorize_is_deterministic():
    f = frame("handler", "file:///app/server.js")
    assert {categorize(f) for _ in range(10)} == {Category.JAVASCRIPT}


def test_same_identity_same_category_across_profiles():
    base = parse_profile(function_profile([("work", "file:///w.js", 3, 500), ("now", "", 0, 10)]))
    comp = parse_profile(function_profile([("now", "", 0, 99), ("work", "file:///w.js", 3, 50)]))
    categories = lambda parsed: {fn.key: fn.category for fn in parsed.hot_functions}
    assert categories(base) == categories(comp)


def test_every_category_has_a_label():
    assert all(category.label for category in Category)
    assert len(Category) == 10
