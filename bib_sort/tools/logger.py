import logging
import sys
from typing import Optional, Union


def setup_logging(level: Union[int, str] = logging.WARNING, format_string: Optional[str] = None) -> None:
    """Send all records to stderr; stdout carries the sorted bib text."""
    if format_string is None:
        format_string = "[%(levelname)s] %(message)s"
    if isinstance(level, str):
        level = level.upper()

    logging.basicConfig(
        level=level,
        format=format_string,
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
