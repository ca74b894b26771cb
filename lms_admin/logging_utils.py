"""Root logger setup shared by the app factory and the scripts."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Attach one stderr handler to the root logger; later calls only change the level."""
    root = logging.getLogger()
    root.setLevel(level)

    if not any(getattr(handler, "_lms_admin", False) for handler in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._lms_admin = True
        root.addHandler(handler)

    return root
