"""Logging setup and console round-trip timing.

``setup_logging()`` is called once by the CLI. It attaches a console handler
and a rotating file to the ``quagga_reconciler`` logger, and a second
rotating file to ``quagga_reconciler.perf``, which only receives timing
lines from ``timed`` and ``timed_section``.

Environment Variables:
    QUAGGA_RECONCILER_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
    QUAGGA_RECONCILER_LOG_FILE: Path to log file
        (default: ~/.quagga-reconciler/quagga-reconciler.log)
    QUAGGA_RECONCILER_LOG_MAX_SIZE: Max log file size in MB (default: 10)
    QUAGGA_RECONCILER_LOG_BACKUPS: Number of backup files to keep (default: 5)

A perf line reads::

    vtysh_read           | edge-1          |    41.07ms | OK
    exec                 | edge-1          |   212.50ms | FAIL: ... | commands=9
"""
import functools
import logging
import os
import time
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Callable, Optional

ENV_PREFIX = "QUAGGA_RECONCILER_LOG_"
DEFAULT_LOG_FILE = Path.home() / ".quagga-reconciler" / "quagga-reconciler.log"
PERF_LOG_NAME = "quagga-reconciler-perf.log"

LOG_FORMAT = "%(asctime)s.%(msecs)03d | %(name)-40s | %(levelname)-7s | %(message)s"
PERF_FORMAT = "%(asctime)s.%(msecs)03d | PERF | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

main_logger = logging.getLogger("quagga_reconciler")
perf_logger = logging.getLogger("quagga_reconciler.perf")


def _env(name: str, default: str) -> str:
    return os.environ.get(ENV_PREFIX + name, default)


def get_log_level() -> int:
    """Console level from QUAGGA_RECONCILER_LOG_LEVEL, INFO if unset or unknown."""
    level = logging.getLevelName(_env("LEVEL", "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def get_log_file() -> Path:
    """Log file from QUAGGA_RECONCILER_LOG_FILE."""
    return Path(_env("FILE", str(DEFAULT_LOG_FILE)))


def _rotating_handler(path: Path, fmt: str) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path,
        maxBytes=int(_env("MAX_SIZE", "10")) * 1024 * 1024,
        backupCount=int(_env("BACKUPS", "5")),
        encoding="utf-8",
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(fmt, datefmt=DATE_FORMAT))
    return handler


def setup_logging(level: Optional[int] = None) -> None:
    """Configure the application loggers.

    Args:
        level: Console level overriding the environment (the CLI's -v)
    """
    console_level = level if level is not None else get_log_level()
    log_file = get_log_file()
    log_file.parent.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler()
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    # Handlers filter; the loggers pass everything
    main_logger.setLevel(logging.DEBUG)
    main_logger.handlers.clear()
    main_logger.addHandler(console)
    main_logger.addHandler(_rotating_handler(log_file, LOG_FORMAT))

    perf_logger.setLevel(logging.DEBUG)
    perf_logger.handlers.clear()
    perf_logger.addHandler(_rotating_handler(log_file.parent / PERF_LOG_NAME, PERF_FORMAT))
    perf_logger.propagate = False

    main_logger.info(
        f"Logging initialized: level={logging.getLevelName(console_level)}, file={log_file}"
    )


def _report(operation: str, device_id: Optional[str], start: float, error: Optional[Exception], extra: dict) -> None:
    elapsed = (time.perf_counter() - start) * 1000
    status = "OK" if error is None else f"FAIL: {error}"
    line = f"{operation:20s} | {device_id or 'N/A':15s} | {elapsed:8.2f}ms | {status}"
    if extra:
        line += " | " + " | ".join(f"{k}={v}" for k, v in extra.items())
    perf_logger.log(logging.INFO if error is None else logging.WARNING, line)


def timed(operation: str, device_id: Optional[str] = None):
    """Decorator timing a console method.

    The device is taken from ``self.device_id`` unless given.
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            target = device_id
            if target is None and args:
                target = getattr(args[0], "device_id", None)
            with timed_section(operation, target):
                return func(*args, **kwargs)

        return wrapper

    return decorator


@contextmanager
def timed_section(operation: str, device_id: Optional[str] = None, **extra):
    """Time a block; ``extra`` keyword values are appended to the line.

    Usage:
        with timed_section("exec", device_id="edge-1", commands=4):
            console.exec(commands)
    """
    start = time.perf_counter()
    try:
        yield
    except Exception as e:
        _report(operation, device_id, start, e, extra)
        raise
    _report(operation, device_id, start, None, extra)
