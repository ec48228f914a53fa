"""
Centralized logging configuration for the content registry.

Call setup_logging() once at application startup (from the FastAPI
lifespan handler or from run_server.py).  Every source module then
gets its own logger via:

    import logging
    logger = logging.getLogger(__name__)

Level mapping:
  DEBUG  : document loads, row lookups, normalization details
  INFO   : records created/updated/deleted, backend selection
  WARNING: duplicate-key rejections
  ERROR  : storage failures surfaced to the HTTP layer
"""

import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    """Configure root logger and quiet noisy third-party loggers."""
    fmt = "[%(name)s] %(message)s"
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=fmt,
        stream=sys.stdout,
        force=True,
    )

    # Quiet noisy third-party loggers
    for name in (
        "sqlalchemy.engine",
        "alembic.runtime.migration",
        "httpx",
        "httpcore",
        "uvicorn.access",
    ):
        logging.getLogger(name).setLevel(logging.WARNING)
