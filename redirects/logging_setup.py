import os
import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: Optional[str] = None) -> None:
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)

    # stderr, so serialized rules on stdout stay pipeable
    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_time=True,
        show_level=True,
        show_path=False,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))

    root.addHandler(handler)
