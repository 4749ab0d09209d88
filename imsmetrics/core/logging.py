from __future__ import annotations

import logging

from imsmetrics.core.config import get_settings


_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str | None = None) -> None:
    # Apply one root configuration for scripts and workers; repeat calls only adjust the level.
    resolved = (level or get_settings().log_level).upper()
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(getattr(logging, resolved, logging.INFO))
    # SQL echo is controlled by settings.db_echo, keep engine chatter out of INFO logs.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
