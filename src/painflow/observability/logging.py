"""Logging setup for painflow.

Modules log snake_case structlog events with key/value fields. The events
travel through the stdlib logging tree and are rendered per handler by
``structlog.stdlib.ProcessorFormatter``:

- a rich console on stderr, quiet unless ``-v`` is given;
- with ``--log``, one JSON object per event in ``<dir>/logs/debug.jsonl``.
"""

from __future__ import annotations

import logging
from pathlib import Path  # noqa: TC003 - Used at runtime for path operations
from typing import TYPE_CHECKING, Any

import structlog
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from structlog.typing import EventDict, Processor

LOG_FILE_NAME = "debug.jsonl"

_configured = False
_file_handler: logging.FileHandler | None = None
_logs_dir: Path | None = None

# Client libraries that log every request at INFO
_QUIET_LOGGERS = ("httpx", "httpcore", "openai", "langchain", "langchain_core", "asyncio")

# Applied to records from plain stdlib loggers before rendering
_FOREIGN_CHAIN: list[Processor] = [
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
]


def _console_line(_logger: Any, _method: str, event_dict: EventDict) -> str:
    # Rich already shows level and time
    for key in ("level", "timestamp", "logger"):
        event_dict.pop(key, None)
    event = str(event_dict.pop("event", ""))
    exception = event_dict.pop("exception", None)
    fields = " ".join(f"{key}={value}" for key, value in event_dict.items())
    line = f"{event} {fields}".rstrip()
    return f"{line}\n{exception}" if exception else line


def _console_handler(verbosity: int) -> logging.Handler:
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=verbosity >= 1,
        show_path=verbosity >= 2,
        markup=False,
    )
    handler.setLevel({0: logging.WARNING, 1: logging.INFO}.get(verbosity, logging.DEBUG))
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_FOREIGN_CHAIN,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                _console_line,
            ],
        )
    )
    return handler


def _jsonl_handler(logs_dir: Path) -> logging.FileHandler:
    handler = logging.FileHandler(logs_dir / LOG_FILE_NAME, mode="a", encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_FOREIGN_CHAIN,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                structlog.processors.EventRenamer("message"),
                structlog.processors.JSONRenderer(default=str),
            ],
        )
    )
    return handler


def configure_logging(
    verbosity: int = 0,
    log_to_file: bool = False,
    log_dir: Path | None = None,
) -> None:
    """Install the console handler and, optionally, the JSONL run log.

    Safe to call again; a previously opened log file is closed first.

    Args:
        verbosity: 0 shows warnings, 1 info, 2 or more debug.
        log_to_file: Also write every event to ``{log_dir}/logs/debug.jsonl``.
        log_dir: Directory that receives ``logs/``.

    Raises:
        ValueError: If ``log_to_file`` is set without ``log_dir``.
    """
    global _configured, _file_handler, _logs_dir

    if log_to_file and log_dir is None:
        raise ValueError("log_dir is required when log_to_file=True")

    close_file_logging()
    handlers = [_console_handler(verbosity)]
    if log_to_file and log_dir is not None:
        _logs_dir = log_dir / "logs"
        _logs_dir.mkdir(parents=True, exist_ok=True)
        _file_handler = _jsonl_handler(_logs_dir)
        handlers.append(_file_handler)

    # Handlers filter; the root stays open whenever anything wants detail
    root_level = logging.DEBUG if verbosity > 0 or log_to_file else logging.WARNING
    logging.basicConfig(level=root_level, handlers=handlers, force=True)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            *_FOREIGN_CHAIN,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Return a bound logger; sets up default logging on first call."""
    if not _configured:
        configure_logging()
    logger: structlog.typing.FilteringBoundLogger = structlog.get_logger(name)
    return logger


def get_logs_dir() -> Path | None:
    return _logs_dir


def close_file_logging() -> None:
    """Close the JSONL run log, if open."""
    global _file_handler
    if _file_handler is not None:
        _file_handler.close()
        _file_handler = None
