import logging

from pythonjsonlogger.json import JsonFormatter
from rich.console import Console
from rich.logging import RichHandler

LOG_FORMATS = ("text", "json")


def setup_logging(level="WARNING", fmt: str = "text") -> logging.Handler:
    """
    Send log records to stderr, either through Rich or as JSON lines.
    Replaces any handler installed by a previous call.
    """
    if fmt not in LOG_FORMATS:
        raise ValueError(f"log format must be one of {LOG_FORMATS}, got {fmt!r}")

    if fmt == "json":
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
    else:
        handler = RichHandler(console=Console(stderr=True), show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))

    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, "_profile_insights", False):
            root.removeHandler(existing)
    handler._profile_insights = True
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)
    return handler
