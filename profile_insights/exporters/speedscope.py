"""
speedscope.py

Emit a parsed profile's flame graph as FlameGraph-style folded stacks:

    (root);main;work <self_us>

You can then load the resulting file into Speedscope
(via "Import" → "Text (FlameGraph)") or feed it to flamegraph.pl.
"""


def _frame(name: str) -> str:
    # only the last space separates the weight, but ";" always splits frames
    return name.replace(";", ":") if name else "(anonymous)"


def folded_lines(flame_graph, min_us: int = 1):
    """
    For each frame with self time, yields:
      root;child;...;thisframe <self_us>
    """
    stack = [(flame_graph, (_frame(flame_graph.name),))]
    while stack:
        node, path = stack.pop()
        weight = int(round(node.value))
        if weight >= min_us:
            yield f"{';'.join(path)} {weight}"
        for child in reversed(node.children):
            stack.append((child, path + (_frame(child.name),)))


def export_folded(flame_graph, out, min_us: int = 1) -> int:
    """Write folded stacks to a text stream; return the number of lines written."""
    count = 0
    for line in folded_lines(flame_graph, min_us=min_us):
        out.write(line + "\n")
        count += 1
    return count
