"""
Human-friendly rendering of microsecond times and percentages.
"""


def format_time(us: float) -> str:
    """Convert microseconds to a human-friendly string."""
    if abs(us) >= 1_000_000:
        return f"{us / 1_000_000:.2f}s"
    elif abs(us) >= 1_000:
        return f"{us / 1_000:.2f}ms"
    else:
        return f"{us:.0f}µs"


def format_percentage(value: float) -> str:
    if value < 0.01:
        return "<0.01%"
    if value < 1:
        return f"{value:.2f}%"
    return f"{value:.1f}%"


def format_signed_time(us: float) -> str:
    sign = "+" if us > 0 else ""
    return sign + format_time(us)


def format_signed_percentage(value: float) -> str:
    sign = "+" if value > 0 else ""
    return f"{sign}{value:.1f}%"
