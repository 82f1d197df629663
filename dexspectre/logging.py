"""Structured diagnostics for DexSpectre.

Components receive a ``DexSpectreLogger`` explicitly. Every entry is kept in
memory so a host can inspect what the analysis decided, and entries at or
above the configured level are also written to a stream.
"""

from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Any, TextIO


class LogLevel(IntEnum):
    """Log levels, from least to most verbose."""

    QUIET = 0
    WARNING = 1
    INFO = 2
    FINE = 3
    TRACE = 4

    @classmethod
    def parse(cls, name: str) -> LogLevel:
        """Parse a level name such as ``"fine"``."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown log level: {name!r}") from None


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    RED = "\033[31m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"
    GRAY = "\033[90m"


def supports_color(stream: TextIO) -> bool:
    """Check if the stream supports ANSI colors."""
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


@dataclass
class LogEntry:
    """A log entry with metadata."""

    level: LogLevel
    message: str
    category: str = "general"
    timestamp: float = field(default_factory=time.time)
    context: dict[str, Any] = field(default_factory=dict)

    def format(self, color: bool = True, show_time: bool = True) -> str:
        """Format the log entry for display."""
        parts = []
        if show_time:
            stamp = time.strftime("%H:%M:%S", time.localtime(self.timestamp))
            parts.append(f"{Colors.GRAY}{stamp}{Colors.RESET}" if color else stamp)
        indicator = self._level_str(color)
        if indicator:
            parts.append(indicator)
        if self.category != "general":
            tag = f"[{self.category}]"
            parts.append(f"{Colors.CYAN}{tag}{Colors.RESET}" if color else tag)
        parts.append(self.message)
        return " ".join(parts)

    def _level_str(self, color: bool) -> str:
        indicators = {
            LogLevel.WARNING: ("⚠", Colors.YELLOW),
            LogLevel.INFO: ("•", Colors.WHITE),
            LogLevel.FINE: ("→", Colors.BLUE),
            LogLevel.TRACE: ("⋯", Colors.GRAY),
        }
        char, col = indicators.get(self.level, ("", ""))
        if color and char:
            return f"{col}{char}{Colors.RESET}"
        return char


class DexSpectreLogger:
    """Logger injected into the analysis components."""

    def __init__(
        self,
        level: LogLevel = LogLevel.INFO,
        color: bool = True,
        stream: TextIO | None = None,
        file_path: Path | None = None,
    ):
        self.level = level
        self._stream = stream if stream is not None else sys.stderr
        self._color = color and supports_color(self._stream)
        self._file_handle: TextIO | None = None
        self._entries: list[LogEntry] = []
        self._counters: dict[str, int] = {}
        if file_path is not None:
            self.open_file(file_path)

    def set_level(self, level: LogLevel) -> None:
        self.level = level

    def is_enabled(self, level: LogLevel) -> bool:
        """Check if a message at this level would be displayed."""
        return level <= self.level

    def _emit(self, entry: LogEntry) -> None:
        self._entries.append(entry)
        if not self.is_enabled(entry.level):
            return
        self._stream.write(entry.format(color=self._color) + "\n")
        self._stream.flush()
        if self._file_handle:
            self._file_handle.write(entry.format(color=False) + "\n")
            self._file_handle.flush()

    def log(
        self,
        level: LogLevel,
        message: str,
        category: str = "general",
        **context: Any,
    ) -> None:
        """Log a message at the specified level."""
        self._emit(LogEntry(level=level, message=message, category=category, context=context))

    def warning(self, message: str, category: str = "general", **context: Any) -> None:
        self.log(LogLevel.WARNING, message, category, **context)

    def info(self, message: str, category: str = "general", **context: Any) -> None:
        self.log(LogLevel.INFO, message, category, **context)

    def fine(self, message: str, category: str = "general", **context: Any) -> None:
        """Log a per-register or per-lookup detail."""
        self.log(LogLevel.FINE, message, category, **context)

    def trace(self, message: str, category: str = "general", **context: Any) -> None:
        self.log(LogLevel.TRACE, message, category, **context)

    @contextmanager
    def timer(self, name: str, category: str = "timing"):
        """Context manager for timing operations."""
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start
            self.fine(f"{name}: {elapsed:.3f}s", category=category)

    def count(self, name: str, increment: int = 1) -> int:
        """Increment a counter and return new value."""
        self._counters[name] = self._counters.get(name, 0) + increment
        return self._counters[name]

    def get_count(self, name: str) -> int:
        return self._counters.get(name, 0)

    def get_entries(
        self,
        level: LogLevel | None = None,
        category: str | None = None,
    ) -> list[LogEntry]:
        """Get logged entries, optionally filtered."""
        entries = self._entries
        if level is not None:
            entries = [e for e in entries if e.level == level]
        if category is not None:
            entries = [e for e in entries if e.category == category]
        return list(entries)

    def clear(self) -> None:
        self._entries.clear()
        self._counters.clear()

    def open_file(self, path: Path) -> None:
        """Mirror displayed entries to a file."""
        self.close()
        self._file_handle = open(path, "w", encoding="utf-8")

    def close(self) -> None:
        if self._file_handle:
            self._file_handle.close()
            self._file_handle = None


_logger: DexSpectreLogger | None = None


def get_logger() -> DexSpectreLogger:
    """Get the default logger for hosts that do not inject one."""
    global _logger
    if _logger is None:
        _logger = DexSpectreLogger()
    return _logger


def configure_logging(
    level: LogLevel = LogLevel.INFO,
    color: bool = True,
    file_path: Path | None = None,
) -> DexSpectreLogger:
    """Configure and return the default logger."""
    global _logger
    if _logger is not None:
        _logger.close()
    _logger = DexSpectreLogger(level=level, color=color, file_path=file_path)
    return _logger


__all__ = [
    "LogLevel",
    "LogEntry",
    "Colors",
    "DexSpectreLogger",
    "get_logger",
    "configure_logging",
    "supports_color",
]
