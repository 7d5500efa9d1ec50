"""
Structured logging for the rc_detail package.

Builders log through module loggers (`logging.getLogger(__name__)`) under
the "rc_detail" hierarchy and attach their numbers via `extra={}`. The
package never installs handlers itself; an application calls
setup_logging() once.

Mesh-valued fields (anything exposing vertex_count/triangle_count, such
as GeometryBuffer) are summarized as counts in both formatters, and
@timed adds the size of a returned mesh to its completion record.

Usage:
    from rc_detail.logging_config import setup_logging, get_logger

    setup_logging(level=logging.DEBUG, json_file="rc_detail.log.json")

    logger = get_logger(__name__)
    logger.debug("Wave panel built", extra={"n_vertices": 1122})
"""

import json
import logging
import sys
import time
from contextlib import contextmanager
from datetime import datetime
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union

import numpy as np

F = TypeVar('F', bound=Callable[..., Any])

PACKAGE_LOGGER = "rc_detail"

_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {'message', 'asctime', 'taskName'}


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _STANDARD_ATTRS}


def _mesh_counts(value: Any) -> Optional[Dict[str, int]]:
    n_vertices = getattr(value, 'vertex_count', None)
    n_triangles = getattr(value, 'triangle_count', None)
    if isinstance(n_vertices, int) and isinstance(n_triangles, int):
        return {'n_vertices': n_vertices, 'n_triangles': n_triangles}
    return None


def _to_json(value: Any) -> Any:
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    counts = _mesh_counts(value)
    if counts is not None:
        return counts
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class JSONFormatter(logging.Formatter):
    """One JSON object per line.

    Keys: timestamp, level, logger, message, then every `extra` field.
    WARNING and above also carry a location block; exceptions carry the
    formatted traceback.
    """

    def __init__(self, include_extra: bool = True):
        super().__init__()
        self.include_extra = include_extra

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.levelno >= logging.WARNING:
            entry["location"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        if self.include_extra:
            entry.update((k, _to_json(v)) for k, v in _extra_fields(record).items())
        return json.dumps(entry, ensure_ascii=False)


_LEVEL_COLORS = {
    logging.DEBUG: '\033[36m',
    logging.INFO: '\033[32m',
    logging.WARNING: '\033[33m',
    logging.ERROR: '\033[31m',
    logging.CRITICAL: '\033[35m',
}
_RESET = '\033[0m'


def _short_value(key: str, value: Any) -> str:
    if isinstance(value, (float, np.floating)):
        return f"{key}={float(value):.3g}"
    if isinstance(value, np.ndarray):
        if value.size > 3:
            return f"{key}=[...{value.size} values]"
        return f"{key}={np.array2string(value, precision=3)}"
    if isinstance(value, (list, tuple)) and len(value) > 3:
        return f"{key}=[...{len(value)} items]"
    counts = _mesh_counts(value)
    if counts is not None:
        return f"{key}=<{counts['n_vertices']}v/{counts['n_triangles']}t>"
    return f"{key}={value}"


class ConsoleFormatter(logging.Formatter):
    """`[HH:MM:SS] LEVEL module: message [key=value, ...]`

    Logger names are shown relative to the package ("shapes.wave_panel").
    """

    def __init__(self, use_colors: bool = True, show_extra: bool = True):
        super().__init__()
        self.use_colors = use_colors
        self.show_extra = show_extra

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:8}"
        if self.use_colors and record.levelno in _LEVEL_COLORS:
            level = f"{_LEVEL_COLORS[record.levelno]}{level}{_RESET}"

        name = record.name
        if name.startswith(PACKAGE_LOGGER + "."):
            name = name[len(PACKAGE_LOGGER) + 1:]

        line = (
            f"[{datetime.fromtimestamp(record.created):%H:%M:%S}] "
            f"{level} {name}: {record.getMessage()}"
        )
        if self.show_extra:
            extras = [_short_value(k, v) for k, v in _extra_fields(record).items()]
            if extras:
                line += " [" + ", ".join(extras) + "]"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(
    level: int = logging.INFO,
    json_file: Optional[Union[str, Path]] = None,
    console: bool = True,
    use_colors: bool = True,
) -> logging.Logger:
    """Install handlers on the "rc_detail" logger.

    Calling it again replaces the previous handlers. The package logger
    stops propagating so records are not duplicated by root handlers.

    Args:
        level: Minimum log level (default INFO)
        json_file: Optional path for a JSON-lines log file
        console: Log to stderr (default True)
        use_colors: ANSI colors on the console (default True)

    Returns:
        The package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(level)
    logger.propagate = False

    if console:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(ConsoleFormatter(use_colors=use_colors))
        logger.addHandler(stream_handler)
    if json_file:
        file_handler = logging.FileHandler(Path(json_file), encoding='utf-8')
        file_handler.setFormatter(JSONFormatter())
        logger.addHandler(file_handler)
    for handler in logger.handlers:
        handler.setLevel(level)
        for context in LogContext._stack:
            handler.addFilter(context._filter)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a module (typically `__name__`)."""
    return logging.getLogger(name)


@contextmanager
def log_timing(
    logger: logging.Logger,
    operation: str,
    level: int = logging.DEBUG,
    **extra_fields: Any
):
    """Log start, completion (or failure) and elapsed time of a block.

    The yielded dict is merged into the completion record, so the block
    can report results:

        with log_timing(logger, "Building end caps", panels=4) as info:
            caps = build_end_cap_panels(...)
            info['n_triangles'] = sum(b.triangle_count for b in caps.values())

    A failure is logged at `level` too and then re-raised.
    """
    results: Dict[str, Any] = {}
    logger.log(level, "Starting: %s", operation,
               extra={'event': 'start', 'operation': operation, **extra_fields})
    started = time.perf_counter()
    try:
        yield results
    except Exception as exc:
        elapsed = time.perf_counter() - started
        logger.log(level, "Failed: %s (%.3fs) - %s", operation, elapsed, exc, extra={
            'event': 'error',
            'operation': operation,
            'elapsed_seconds': elapsed,
            'error': str(exc),
            **extra_fields,
        })
        raise
    results['elapsed_seconds'] = time.perf_counter() - started
    logger.log(level, "Completed: %s (%.3fs)", operation, results['elapsed_seconds'],
               extra={'event': 'complete', 'operation': operation, **extra_fields, **results})


def timed(
    logger: Optional[logging.Logger] = None,
    level: int = logging.DEBUG,
    operation: Optional[str] = None,
) -> Callable[[F], F]:
    """Decorator: run the function inside log_timing().

    When the function returns a mesh (vertex_count/triangle_count), the
    counts are added to the completion record.

    Args:
        logger: Logger (the function's module logger if None)
        level: Log level (default DEBUG)
        operation: Operation name (the function name if None)
    """
    def decorator(func: F) -> F:
        func_logger = logger or logging.getLogger(func.__module__)
        name = operation or func.__name__

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with log_timing(func_logger, name, level) as results:
                value = func(*args, **kwargs)
                counts = _mesh_counts(value)
                if counts is not None:
                    results.update(counts)
                return value

        return wrapper  # type: ignore
    return decorator


class _ContextFilter(logging.Filter):

    def __init__(self, fields: Dict[str, Any]):
        super().__init__()
        self.fields = fields

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in self.fields.items():
            setattr(record, key, value)
        return True


class LogContext:
    """Stamp fields on every rc_detail record emitted inside a scope.

    The filter goes on the package logger's handlers: logger filters
    would not see records from child loggers.

    Example:
        with LogContext(detail="end_anchorage", shape_id=7):
            build_wave_panel(spec)   # records carry detail and shape_id
    """

    _stack: List['LogContext'] = []

    def __init__(self, **fields: Any):
        self.fields = fields
        self._filter = _ContextFilter(fields)

    def __enter__(self) -> 'LogContext':
        LogContext._stack.append(self)
        for handler in logging.getLogger(PACKAGE_LOGGER).handlers:
            handler.addFilter(self._filter)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        for handler in logging.getLogger(PACKAGE_LOGGER).handlers:
            handler.removeFilter(self._filter)
        LogContext._stack.remove(self)

    @classmethod
    def current(cls) -> Optional['LogContext']:
        """Innermost active context, or None."""
        return cls._stack[-1] if cls._stack else None
