from __future__ import annotations
import logging

# Libraries that are chatty at DEBUG and drown out attempt lifecycle logs
NOISY_LOGGERS = ("sqlalchemy.engine", "multipart", "httpx")


def resolve_level(level: int | str) -> int:
    """Turn 'INFO' / 'debug' / 20 into a logging level, defaulting to INFO."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_console_logging(level: int | str = logging.INFO) -> None:
    """
    Call once at app start. Attempt and result events go to the console.
    """
    level = resolve_level(level)
    root = logging.getLogger()
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    if root.handlers:
        # already configured (uvicorn, pytest)
        root.setLevel(level)
        return

    root.setLevel(level)
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] %(levelname)s %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root.addHandler(handler)
