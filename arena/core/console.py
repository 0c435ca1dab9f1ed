import os
import sys
import time
import inspect
from enum import Enum
from datetime import datetime
from typeguard import typechecked
from contextlib import contextmanager
from rich.console import Console

__all__ = [
    "LogLevel",
    "set_log_level",
    "get_log_level",
    "error",
    "warning",
    "info",
    "success",
    "debug",
    "print_exception",
    "timed_block",
    "console",
]


class LogLevel(Enum):
    DEBUG = 0
    INFO = 1
    SUCCESS = 2
    WARNING = 3
    ERROR = 4


CURRENT_LOG_LEVEL = LogLevel.INFO

# Diagnostics go to stderr so match output on stdout stays clean
console = Console(stderr=True, highlight=False)

_STYLES = {
    LogLevel.DEBUG: ("cyan", "⚙︎ Debug"),
    LogLevel.INFO: ("blue", "ℹ Info"),
    LogLevel.SUCCESS: ("green", "✓ Success"),
    LogLevel.WARNING: ("yellow", "⚠ Warning"),
    LogLevel.ERROR: ("red", "✗ Error"),
}


@typechecked
def set_log_level(level: LogLevel) -> None:
    """Messages below ``level`` are dropped. Takes effect for every module at once."""
    global CURRENT_LOG_LEVEL
    CURRENT_LOG_LEVEL = level


def get_log_level() -> LogLevel:
    return CURRENT_LOG_LEVEL


@typechecked
def _should_log(level: LogLevel) -> bool:
    return level.value >= CURRENT_LOG_LEVEL.value


def _emit(level: LogLevel, text: str, frame) -> None:
    where = f"{os.path.basename(frame.f_code.co_filename)}::{frame.f_code.co_name}" if frame is not None else "?"
    stamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    style, label = _STYLES[level]
    console.print(f"[{stamp}][{where}] {label}: {text}", style=style, markup=False)


@typechecked
def error(text: str) -> None:
    """Highest level: shown whatever the current setting."""
    if _should_log(LogLevel.ERROR):
        _emit(LogLevel.ERROR, text, inspect.currentframe().f_back)


@typechecked
def warning(text: str) -> None:
    if _should_log(LogLevel.WARNING):
        _emit(LogLevel.WARNING, text, inspect.currentframe().f_back)


@typechecked
def info(text: str) -> None:
    if _should_log(LogLevel.INFO):
        _emit(LogLevel.INFO, text, inspect.currentframe().f_back)


@typechecked
def success(text: str) -> None:
    if _should_log(LogLevel.SUCCESS):
        _emit(LogLevel.SUCCESS, text, inspect.currentframe().f_back)


@typechecked
def debug(text: str) -> None:
    if _should_log(LogLevel.DEBUG):
        _emit(LogLevel.DEBUG, text, inspect.currentframe().f_back)


def print_exception() -> None:
    """
    Render the exception currently being handled, if errors are displayed.

    Must be called from inside an ``except`` block.
    """
    if _should_log(LogLevel.ERROR) and sys.exc_info()[0] is not None:
        console.print_exception(max_frames=8)


@contextmanager
@typechecked
def timed_block(name: str, level: LogLevel = LogLevel.INFO):
    """
    Log when a block starts and how long it took.

    Usage:
        with timed_block(f"round {n}", LogLevel.DEBUG):
            engine.run_single_step()
    """
    start_time = time.time()
    frame = inspect.currentframe().f_back.f_back
    if _should_log(level):
        _emit(level, f"⏱ {name} started", frame)
    try:
        yield
    finally:
        if _should_log(level):
            _emit(level, f"⏱ {name} took {time.time() - start_time:.4f}s", frame)
