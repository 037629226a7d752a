from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

LOGGER_NAME = "lord"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_logger: logging.Logger | None = None


def setup_logging(
    log_file: Path | None = None, level: int = logging.INFO
) -> logging.Logger:
    """Configure the package logger once per run.

    Discovery runs are short and repeated, so the log file is appended to
    rather than truncated: a course's history accumulates across cycles.
    """
    global _logger

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()
    logger.propagate = False

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    _logger = logger
    return logger


def get_logger(component: str | None = None) -> logging.Logger:
    if _logger is None:
        setup_logging()
    if component:
        return logging.getLogger(f"{LOGGER_NAME}.{component}")
    return logging.getLogger(LOGGER_NAME)


@contextmanager
def timed_section(name: str, level: int = logging.INFO) -> Iterator[None]:
    logger = get_logger()
    logger.log(level, f"Starting: {name}")
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        logger.log(level, f"Completed: {name} ({elapsed:.2f}s)")
