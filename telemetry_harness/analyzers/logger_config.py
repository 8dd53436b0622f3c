import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from telemetry_harness import config

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

_scope_depth = 0


class ScopeIndentFilter(logging.Filter):
    """Indents records emitted inside a log_scope block."""

    def filter(self, record: logging.LogRecord) -> bool:
        if _scope_depth:
            record.msg = "  " * _scope_depth + str(record.msg)
        return True


def _resolve_level(level) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).strip().upper(), logging.INFO)


def setup_logger(name: str = "telemetry_harness",
                 log_file: Optional[str] = None, level=None) -> logging.Logger:
    logger = logging.getLogger(name)
    level = _resolve_level(level if level is not None else config.LOG_LEVEL)
    logger.setLevel(level)
    log_file = config.LOG_FILE if log_file is None else log_file

    if not logger.handlers:
        formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(message)s')

        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        logger.addFilter(ScopeIndentFilter())

    return logger


def log_success(logger: logging.Logger, message: str) -> None:
    logger.log(SUCCESS, message)


@contextmanager
def log_scope(logger: logging.Logger, title: str, silent: bool = False) -> Iterator[None]:
    """ Log ``title`` and indent everything logged until the block exits. """
    global _scope_depth

    if silent:
        yield
        return

    logger.info(title)
    _scope_depth += 1
    try:
        yield
    finally:
        _scope_depth -= 1
        logger.debug(f"Leaving: {title}")
