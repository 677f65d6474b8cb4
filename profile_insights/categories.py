"""
Classify call frames into coarse execution categories.

The rules are checked in order and the first match wins, so a frame
named "(garbage collector)" with an empty url is gc, not native.
"""
from .model import CallFrame, Category

SCRIPT_EXTENSIONS = (".js", ".ts", ".mjs")


def categorize(call_frame: CallFrame) -> Category:
    """Map a call-frame identity to its Category. Never fails; unknown frames are OTHER."""
    name = call_frame.function_name.lower()
    url = call_frame.url.lower()

    if name == "(idle)":
        return Category.IDLE
    if name in ("(program)", "(root)"):
        return Category.PROGRAM
    if "garbage collector" in name or "(gc)" in name:
        return Category.GC
    if "regexp" in name or "regular expression" in name:
        return Category.REGEXP
    if "compile" in name or "optimize" in name:
        return Category.COMPILE
    if "wasm" in url or "wasm" in name:
        return Category.WASM
    if url == "" or url.startswith("native ") or name.startswith("native "):
        return Category.NATIVE
    if "node:" in url or "internal/" in url:
        return Category.SYSTEM
    if url.endswith(SCRIPT_EXTENSIONS):
        return Category.JAVASCRIPT
    return Category.OTHER
