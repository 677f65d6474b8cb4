"""
Read-only projections of a NodeTable: flame graph, call tree, bottom-up,
hot functions, timeline and per-file source aggregates.
"""
