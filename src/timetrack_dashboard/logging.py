from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def configure_logging(level: str = "INFO") -> str:
    """Configure root logging for a CLI run and return the normalized level name."""
    normalized = level.strip().upper()
    if normalized not in LOG_LEVELS:
        raise ValueError(f"Unknown log level {level!r}; expected one of {', '.join(LOG_LEVELS)}.")
    logging.basicConfig(level=normalized, format=LOG_FORMAT, force=True)
    return normalized
