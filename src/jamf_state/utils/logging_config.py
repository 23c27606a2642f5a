"""Logging configuration for jamf-state.

Provides configurable logging with:
- File-based logging with rotation
- Console output for real-time debugging
- Performance timing decorators for reconciliation passes

Environment Variables:
    JAMF_STATE_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
    JAMF_STATE_LOG_FILE: Path to log file (default: ~/.jamf-state/jamf-state.log)
    JAMF_STATE_LOG_MAX_SIZE: Max log file size in MB (default: 10)
    JAMF_STATE_LOG_BACKUPS: Number of backup files to keep (default: 5)

Usage:
    from jamf_state.utils.logging_config import setup_logging, timed

    setup_logging()  # Call once at startup

    @timed("read")
    async def read(self, kind, spec):
        ...

    async with timed_section("reconcile", resource="policy/Install Tools"):
        ...
"""
import asyncio
import functools
import logging
import os
import time
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Callable, Any

# Performance logger - separate from main logger for easy filtering
perf_logger = logging.getLogger("jamf_state.perf")

_configured = False


def get_log_level() -> int:
    """Get log level from environment."""
    level_str = os.environ.get("JAMF_STATE_LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_str, logging.INFO)


def get_log_file() -> Path:
    """Get log file path from environment."""
    default_path = Path.home() / ".jamf-state" / "jamf-state.log"
    path_str = os.environ.get("JAMF_STATE_LOG_FILE", str(default_path))
    return Path(path_str)


def setup_logging() -> None:
    """Configure logging for the application.

    Sets up:
    - Console handler (INFO+ by default, respects JAMF_STATE_LOG_LEVEL)
    - File handler with rotation (DEBUG level - captures everything)
    - Performance logger for timing metrics

    Calling it again is a no-op so the CLI and the server can both call it.
    """
    global _configured
    if _configured:
        return

    log_level = get_log_level()
    log_file = get_log_file()
    max_size_mb = int(os.environ.get("JAMF_STATE_LOG_MAX_SIZE", "10"))
    backup_count = int(os.environ.get("JAMF_STATE_LOG_BACKUPS", "5"))

    log_file.parent.mkdir(parents=True, exist_ok=True)

    main_format = logging.Formatter(
        "%(asctime)s.%(msecs)03d | %(name)-28s | %(levelname)-7s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    perf_format = logging.Formatter(
        "%(asctime)s.%(msecs)03d | PERF | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(main_format)

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=max_size_mb * 1024 * 1024,
        backupCount=backup_count,
        encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(main_format)

    perf_log_file = log_file.parent / "jamf-state-perf.log"
    perf_handler = RotatingFileHandler(
        perf_log_file,
        maxBytes=max_size_mb * 1024 * 1024,
        backupCount=backup_count,
        encoding="utf-8"
    )
    perf_handler.setLevel(logging.DEBUG)
    perf_handler.setFormatter(perf_format)

    root_logger = logging.getLogger("jamf_state")
    root_logger.setLevel(logging.DEBUG)  # Capture all, handlers filter
    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    # Perf records go to their own file only
    perf_logger.setLevel(logging.DEBUG)
    perf_logger.addHandler(perf_handler)
    perf_logger.propagate = False

    # httpx logs every request at INFO, which leaks URLs into the console
    logging.getLogger("httpx").setLevel(logging.WARNING)

    _configured = True
    root_logger.info(f"Logging initialized: level={logging.getLevelName(log_level)}, file={log_file}")
    perf_logger.info(f"Performance logging to: {perf_log_file}")


def _format_perf(operation: str, resource: Optional[str], elapsed: float, outcome: str) -> str:
    return f"{operation:20s} | {resource or 'N/A':30s} | {elapsed:8.2f}ms | {outcome}"


def timed(operation: str):
    """Decorator to log execution time of sync/async functions.

    The resource label is taken from a ``kind``/``spec`` pair in the call
    arguments when present.

    Usage:
        @timed("read")
        async def read(self, kind, spec):
            ...
    """
    def _label(args, kwargs) -> Optional[str]:
        spec = kwargs.get("spec")
        if spec is None:
            spec = next((a for a in args if hasattr(a, "identity")), None)
        return getattr(spec, "identity", None)

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> Any:
            label = _label(args, kwargs)
            start = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
                elapsed = (time.perf_counter() - start) * 1000  # ms
                perf_logger.info(_format_perf(operation, label, elapsed, "OK"))
                return result
            except Exception as e:
                elapsed = (time.perf_counter() - start) * 1000
                perf_logger.warning(_format_perf(operation, label, elapsed, f"FAIL: {e}"))
                raise

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs) -> Any:
            label = _label(args, kwargs)
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
                elapsed = (time.perf_counter() - start) * 1000
                perf_logger.info(_format_perf(operation, label, elapsed, "OK"))
                return result
            except Exception as e:
                elapsed = (time.perf_counter() - start) * 1000
                perf_logger.warning(_format_perf(operation, label, elapsed, f"FAIL: {e}"))
                raise

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


@asynccontextmanager
async def timed_section(operation: str, resource: Optional[str] = None, **extra):
    """Async context manager for timing code sections.

    Usage:
        async with timed_section("apply_manifest", resources=12):
            ...
    """
    start = time.perf_counter()
    extra_str = " | ".join(f"{k}={v}" for k, v in extra.items()) if extra else ""

    try:
        yield
        elapsed = (time.perf_counter() - start) * 1000
        msg = _format_perf(operation, resource, elapsed, "OK")
        if extra_str:
            msg += f" | {extra_str}"
        perf_logger.info(msg)
    except Exception as e:
        elapsed = (time.perf_counter() - start) * 1000
        msg = _format_perf(operation, resource, elapsed, f"FAIL: {e}")
        if extra_str:
            msg += f" | {extra_str}"
        perf_logger.warning(msg)
        raise
