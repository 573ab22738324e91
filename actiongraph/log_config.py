"""Logging configuration for ActionGraph.

Uses loguru with automatic rotation. Logs are stored in
~/.actiongraph/logs/ with:
- Rotation at 10 MB per file
- Retention of 7 days
- Compression of old logs

Console output goes to stderr only, so the stdio MCP transport on stdout
stays clean.

Environment variables for log level control:
- ACTIONGRAPH_LOG_LEVEL: Global log level (default: INFO)
- ACTIONGRAPH_LOG_DB: Graph backend log level
- ACTIONGRAPH_LOG_TRACKER: Tracker components log level
- ACTIONGRAPH_LOG_DIR: Override the log directory
"""

import os
import sys
from contextlib import contextmanager
from pathlib import Path
from time import perf_counter

from loguru import logger

# Get global log level from environment
_global_log_level = os.getenv("ACTIONGRAPH_LOG_LEVEL", "INFO").upper()

# Component-specific log level overrides
_component_log_levels: dict[str, str] = {
    "db": os.getenv("ACTIONGRAPH_LOG_DB", "").upper(),
    "tracker": os.getenv("ACTIONGRAPH_LOG_TRACKER", "").upper(),
}


def _log_filter(record) -> bool:
    """Filter log records based on global and component-specific log levels.

    A component override applies when its key is a prefix of the bound name,
    e.g. "db" matches "db.neo4j" and "db.schema".
    """
    name = record["extra"].get("name", "")

    for component, level in _component_log_levels.items():
        if level and name.startswith(component):
            try:
                return record["level"].no >= logger.level(level).no
            except ValueError:
                pass  # Invalid level, fall through to global

    try:
        return record["level"].no >= logger.level(_global_log_level).no
    except ValueError:
        return True


# Remove default handler
logger.remove()

# Console handler - uses filter for level control (allows component overrides)
logger.add(
    sys.stderr,
    level=0,  # Accept all, let filter decide
    filter=_log_filter,
    format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{extra[name]}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
    colorize=True,
)

_log_dir = Path(os.getenv("ACTIONGRAPH_LOG_DIR", str(Path.home() / ".actiongraph" / "logs")))
try:
    _log_dir.mkdir(parents=True, exist_ok=True)
except OSError:
    # Read-only home (containers, CI): console logging only
    _log_dir = None

if _log_dir is not None:
    # File handler - DEBUG level, with rotation
    logger.add(
        _log_dir / "actiongraph_{time:YYYY-MM-DD}.log",
        level="DEBUG",
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[name]}:{function}:{line} | {message}",
        rotation="10 MB",
        retention="7 days",
        compression="zip",
        enqueue=True,  # Thread-safe
    )

    # Most verbose log of the current run for easy access
    logger.add(
        _log_dir / "latest.log",
        level="TRACE",
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[name]}:{function}:{line} | {message}",
        rotation="5 MB",
        retention=1,
    )

# Records logged through the bare logger still need extra[name] for the formats
logger.configure(extra={"name": "actiongraph"})


def get_logger(name: str):
    """Get a logger with the given name bound to context.

    Args:
        name: Module or component name (e.g. "db.neo4j", "tracker.recorder")

    Returns:
        Logger instance with name bound
    """
    return logger.bind(name=name)


@contextmanager
def log_timing(operation: str, log_instance=None, level: str = "debug"):
    """Context manager for timing operations with automatic logging.

    Args:
        operation: Description of the operation being timed
        log_instance: Logger instance (uses global logger if None)
        level: Log level for the timing message (default: debug)

    Yields:
        dict with 'elapsed_ms' key (populated after context exits)

    Example:
        with log_timing("similar actions query", log) as timing:
            result = await store.query(cypher, params)
        # timing['elapsed_ms'] now contains the elapsed time
    """
    log_fn = log_instance or logger
    timing = {"elapsed_ms": 0.0}
    start = perf_counter()
    try:
        yield timing
    finally:
        timing["elapsed_ms"] = (perf_counter() - start) * 1000
        getattr(log_fn, level)(f"{operation}: {timing['elapsed_ms']:.1f}ms")


__all__ = ["logger", "get_logger", "log_timing"]
