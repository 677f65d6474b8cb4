"""
Ways of getting a ParsedProfile out of the process: terminal trees,
folded stacks and JSON / CSV reports.
"""
