"""
Duty Rota: Logging Infrastructure
==================================
Console and rotating-file logging for allocation runs.

Levels used by the engine:
    TRACE (5): every eligibility check, function entry/exit
    DEBUG (10): each committed assignment, rejected candidates
    INFO (20): run start/end with counts
    WARNING (30): skipped slots, cleared slots, cancellation
    ERROR (40): runs that filled nothing
"""
import functools
import logging
import sys
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import IO, Any, Callable, Iterator, Optional, Union

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

ROOT_LOGGER = "dutyrota"

CONSOLE_FORMAT = "[%(asctime)s] %(levelname)-7s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"

# -v count on the command line -> console level
VERBOSITY_LEVELS = ("WARNING", "INFO", "DEBUG", "TRACE")

LEVEL_COLORS = {
    TRACE: "\033[90m",
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[35m",
}
RESET = "\033[0m"


class ColoredFormatter(logging.Formatter):
    """Colors whole lines by level when the target stream is a terminal."""

    def __init__(self, fmt: str, datefmt: Optional[str] = None, stream: Optional[IO] = None):
        super().__init__(fmt, datefmt=datefmt)
        isatty = getattr(stream, "isatty", None)
        self.use_color = bool(isatty and isatty())

    def format(self, record):
        message = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        if self.use_color and color:
            return f"{color}{message}{RESET}"
        return message


def parse_level(level: Union[str, int, None], default: int = logging.INFO) -> int:
    """Level name or number -> number; unknown names give ``default``."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level or "").upper())
    return value if isinstance(value, int) else default


def verbosity_to_level(verbose: int) -> str:
    """Map a ``-v`` count to a console level name."""
    return VERBOSITY_LEVELS[max(0, min(verbose, len(VERBOSITY_LEVELS) - 1))]


def _console_handler(level: int, stream: IO) -> logging.Handler:
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT, datefmt="%H:%M:%S", stream=stream))
    return handler


def _file_handler(path: Path, level: int, max_bytes: int, backup_count: int) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    console_level: Optional[str] = None,
    max_bytes: int = 5 * 1024 * 1024,  # 5 MB
    backup_count: int = 3,
    stream: Optional[IO] = None,
) -> logging.Logger:
    """
    Install handlers on the ``dutyrota`` logger, replacing any from an
    earlier call.

    Args:
        level: File log level (and console level unless given)
        log_file: Rotating log file path, or None for console only
        console_level: Console log level
        max_bytes: File size before rotation
        backup_count: Rotated files to keep
        stream: Console stream, stderr by default so stdout stays
                free for command output

    Returns:
        The ``dutyrota`` logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(TRACE)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    file_level = parse_level(level)
    cons_level = parse_level(console_level or level)
    logger.addHandler(_console_handler(cons_level, stream or sys.stderr))
    if log_file:
        logger.addHandler(_file_handler(Path(log_file), file_level, max_bytes, backup_count))

    logger.debug(
        f"Logging initialized: console={logging.getLevelName(cons_level)}, "
        f"file={logging.getLevelName(file_level) if log_file else 'disabled'}"
    )
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a module, e.g. ``get_logger("dutyrota.solver.allocator")``."""
    return logging.getLogger(name)


def _short(value: Any, limit: int) -> str:
    text = repr(value)
    return text if len(text) <= limit else text[: limit - 1] + "…"


def log_function_call(func: Callable) -> Callable:
    """Decorator: TRACE on entry and return, ERROR when the call raises."""
    logger = logging.getLogger(func.__module__)

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        if logger.isEnabledFor(TRACE):
            shown = [_short(a, 50) for a in args[:3]]
            shown += [f"{k}={_short(v, 30)}" for k, v in list(kwargs.items())[:3]]
            logger.log(TRACE, f"→ {func.__name__}({', '.join(shown)})")
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            logger.error(f"✖ {func.__name__} raised: {type(e).__name__}: {e}")
            raise
        logger.log(TRACE, f"← {func.__name__} returned: {_short(result, 100)}")
        return result

    return wrapper


def log_check(
    logger: logging.Logger,
    name: str,
    passed: bool,
    details: str = "",
    level: int = TRACE,
):
    """
    Log the outcome of one eligibility check.

    Failed checks are logged at DEBUG at least, so a DEBUG log shows
    rejections without the noise of every pass.
    """
    msg = f"[{'✓' if passed else '✗'}] {name}"
    if details:
        msg += f": {details}"
    logger.log(level if passed else max(level, logging.DEBUG), msg)


class RunLogger:
    """Indented progress narration for one allocation run."""

    def __init__(self, name: str = "dutyrota.solver"):
        self.logger = logging.getLogger(name)
        self.depth = 0

    def _pad(self) -> str:
        return "  " * self.depth

    def phase(self, title: str):
        self.logger.info(f"{'=' * 20} {title} {'=' * 20}")

    def step(self, description: str):
        self.logger.info(f"{self._pad()}▸ {description}")

    def detail(self, key: str, value: Any):
        self.logger.debug(f"{self._pad()}  {key}: {value}")

    @contextmanager
    def scope(self, label: str, summary: Optional[Callable[[], str]] = None) -> Iterator[None]:
        """
        Indent everything logged inside the block under ``label``.

        ``summary`` is called on exit and its text logged as the closing
        line, so it can report what happened inside the block.
        """
        self.logger.debug(f"{self._pad()}┌─ {label}")
        self.depth += 1
        try:
            yield
        finally:
            self.depth = max(0, self.depth - 1)
            if summary is not None:
                self.logger.debug(f"{self._pad()}└─ {summary()}")
