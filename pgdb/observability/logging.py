"""Logging configuration for pgdb.

Structured logging via loguru. The package disables its own logger on
import; the CLI turns it on when ``--verbose`` or ``--log-file`` is given.

Example:
    from pgdb.observability.logging import LogConfig, setup_logging, teardown_logging

    ids = setup_logging(LogConfig(level="DEBUG", console=True))
    try:
        ...
    finally:
        teardown_logging(ids)
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, TypeAlias

from loguru import logger

LogLevel: TypeAlias = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"]

LOG_LEVELS: tuple[LogLevel, ...] = ("TRACE", "DEBUG", "INFO", "WARNING", "ERROR")

_CONTEXT_KEYS = ("component", "provider", "server_id", "host", "alias")


def _format_context(record: Any) -> str:
    extra = record.get("extra", {})
    parts = [f"{k}={extra[k]}" for k in _CONTEXT_KEYS if k in extra]
    return f" [{' '.join(parts)}]" if parts else ""


CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>"
    "<dim>{extra[_ctx]}</dim> - "
    "<level>{message}</level>"
)

FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{name}:{function}:{line}{extra[_ctx]} - {message}"
)


@dataclass(frozen=True, slots=True)
class LogConfig:
    """Logging configuration for a CLI invocation.

    Attributes:
        level: Minimum level for the console handler.
        console: Whether to log to stderr.
        file: Optional log file path (always written at DEBUG).
        rotation: File rotation policy (e.g., "10 MB", "1 day").
        retention: Number of old log files to keep.
    """

    level: LogLevel = "INFO"
    console: bool = False
    file: str | None = None
    rotation: str = "10 MB"
    retention: int = 5

    @property
    def enabled(self) -> bool:
        return self.console or self.file is not None


def setup_logging(config: LogConfig) -> list[int]:
    """Configure loguru handlers and return their IDs for cleanup."""
    # Drop loguru's default stderr handler; it would interleave with CLI output.
    logger.remove()

    if not config.enabled:
        logger.disable("pgdb")
        return []

    logger.enable("pgdb")
    logger.configure(patcher=lambda r: r["extra"].update(_ctx=_format_context(r)))
    handler_ids: list[int] = []

    if config.console:
        handler_ids.append(
            logger.add(
                sys.stderr,
                level=config.level,
                format=CONSOLE_FORMAT,
                colorize=True,
                filter="pgdb",
            )
        )

    if config.file:
        Path(config.file).parent.mkdir(parents=True, exist_ok=True)
        handler_ids.append(
            logger.add(
                config.file,
                level="DEBUG",
                format=FILE_FORMAT,
                rotation=config.rotation,
                retention=config.retention,
                diagnose=False,
                filter="pgdb",
            )
        )

    return handler_ids


def teardown_logging(handler_ids: list[int]) -> None:
    """Remove handlers added by setup_logging and silence pgdb again."""
    for hid in handler_ids:
        logger.remove(hid)
    logger.disable("pgdb")
