"""Structured logging for metrika.

Every module logs through structlog on top of the stdlib root logger, so
entries from the store, the recognizer and the CLI share one format.

Usage:
    from metrika.logging import configure_logging, get_logger

    configure_logging(log_level="INFO", log_format="json")
    get_logger(__name__).info("sample_saved", quantity_type="body_mass", value=72.5)

Routing output elsewhere:
    register_backend("memory", StreamBackend(stream=io.StringIO()))
    configure_logging(backend="memory")
"""

import logging
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, TextIO

import structlog
from structlog.types import EventDict, Processor


SERVICE_NAME = "metrika"


# =============================================================================
# Backends
# =============================================================================


class LoggingBackend(ABC):
    """Destination for rendered log lines."""

    @abstractmethod
    def get_handler(self) -> logging.Handler:
        """Handler that receives the rendered lines."""


class StreamBackend(LoggingBackend):
    """Writes to a text stream (stderr when none is given)."""

    def __init__(self, stream: TextIO = None):
        self.stream = stream or sys.stderr

    def get_handler(self) -> logging.Handler:
        return logging.StreamHandler(self.stream)


class FileBackend(LoggingBackend):
    """Appends UTF-8 log lines to a file."""

    def __init__(self, file_path: str):
        self.file_path = file_path

    def get_handler(self) -> logging.Handler:
        return logging.FileHandler(self.file_path, encoding="utf-8")


_backends: dict[str, LoggingBackend] = {}


def register_backend(name: str, backend: LoggingBackend) -> None:
    _backends[name] = backend


def unregister_backend(name: str) -> None:
    _backends.pop(name, None)


def get_registered_backends() -> list[str]:
    return list(_backends)


# =============================================================================
# Configuration
# =============================================================================


@dataclass
class LoggingConfig:
    """
    Settings of the last ``configure_logging`` call.

    Attributes:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_format: 'json' for one JSON object per line, 'text' for console
        stream: Stream used when no backend is selected
        service_name: Value of the ``service`` key on every entry
        backend: Name of a registered backend, if any
        extra_processors: Processors run after the service context, before rendering
        extra_context: Static keys added to every entry
    """

    log_level: str = "INFO"
    log_format: str = "json"
    stream: Optional[TextIO] = None
    service_name: str = SERVICE_NAME
    backend: Optional[str] = None
    extra_processors: list[Processor] = field(default_factory=list)
    extra_context: dict = field(default_factory=dict)

    @property
    def level(self) -> int:
        return getattr(logging, self.log_level.upper(), logging.INFO)

    @property
    def selected_backend(self) -> Optional[LoggingBackend]:
        return _backends.get(self.backend) if self.backend else None


_current_config: Optional[LoggingConfig] = None
_installed_handler: Optional[logging.Handler] = None


def get_current_config() -> Optional[LoggingConfig]:
    """The active configuration, or None before ``configure_logging``."""
    return _current_config


class _ServiceContext:
    """Processor stamping the service name and static context on entries."""

    def __init__(self, service_name: str, extra_context: dict):
        self.service_name = service_name
        self.extra_context = extra_context

    def __call__(self, logger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict["service"] = self.service_name
        event_dict.update(self.extra_context)
        return event_dict


def _build_processors(config: LoggingConfig) -> list[Processor]:
    processors: list[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _ServiceContext(config.service_name, config.extra_context),
        *config.extra_processors,
    ]

    if config.log_format == "json":
        processors.append(structlog.processors.format_exc_info)
        # Portuguese labels stay readable in the output
        processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))
    return processors


def _build_handler(config: LoggingConfig) -> logging.Handler:
    backend = config.selected_backend
    if backend is None:
        handler = logging.StreamHandler(config.stream)
    else:
        handler = backend.get_handler()
    # structlog has already rendered the line
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.setLevel(config.level)
    return handler


def configure_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    stream: Optional[TextIO] = None,
    service_name: str = SERVICE_NAME,
    backend: Optional[str] = None,
    extra_processors: Optional[list[Processor]] = None,
    extra_context: Optional[dict] = None,
) -> None:
    """
    Configure structlog and the root logger.

    Calling it again replaces the previous configuration, including the
    root logger's handlers.

    Args:
        log_level: Logging level name
        log_format: 'json' or 'text'
        stream: Output stream when no backend is used (default: sys.stderr)
        service_name: Value of the ``service`` key
        backend: Name of a registered backend to route output to
        extra_processors: Additional structlog processors
        extra_context: Static keys added to every entry
    """
    global _current_config, _installed_handler

    config = LoggingConfig(
        log_level=log_level,
        log_format=log_format,
        stream=stream or sys.stderr,
        service_name=service_name,
        backend=backend,
        extra_processors=list(extra_processors or []),
        extra_context=dict(extra_context or {}),
    )
    _current_config = config

    structlog.reset_defaults()
    structlog.configure(
        processors=_build_processors(config),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # tests reconfigure between cases
        cache_logger_on_first_use=False,
    )

    if _installed_handler is not None:
        _installed_handler.close()

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    _installed_handler = _build_handler(config)
    root_logger.addHandler(_installed_handler)
    root_logger.setLevel(config.level)


def configure_for_file(
    file_path: str,
    log_level: str = "INFO",
    log_format: str = "json",
    service_name: str = SERVICE_NAME,
) -> None:
    """Send all log output to ``file_path`` through a registered 'file' backend."""
    register_backend("file", FileBackend(file_path))
    configure_logging(
        log_level=log_level,
        log_format=log_format,
        service_name=service_name,
        backend="file",
    )


def get_logger(name: str = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


# =============================================================================
# Domain logger
# =============================================================================


class HealthLogger:
    """
    Logger with one method per health-tracking event.

    Event names and their keys are fixed here so that every module reports
    the same event the same way.
    """

    def __init__(self, name: str = None):
        self._logger = get_logger(name)

    # Store

    def authorization_requested(self, granted: bool, **extra) -> None:
        self._logger.info("authorization_requested", granted=granted, **extra)

    def store_unavailable(self, reason: str, **extra) -> None:
        self._logger.warning("store_unavailable", reason=reason, **extra)

    def sample_saved(self, quantity_type: str, value: float, unit: str, **extra) -> None:
        self._logger.info(
            "sample_saved", quantity_type=quantity_type, value=value, unit=unit, **extra
        )

    def save_failed(self, quantity_type: str, error: str, **extra) -> None:
        """Rejected value or failed write; the caller only sees False."""
        self._logger.error("save_failed", quantity_type=quantity_type, error=error, **extra)

    def query_failed(self, operation: str, error: str, **extra) -> None:
        """A read degraded to its empty value."""
        self._logger.warning("query_failed", operation=operation, error=error, **extra)

    # Recognition

    def recognition_started(self, source: str, **extra) -> None:
        self._logger.info("recognition_started", source=source, **extra)

    def recognition_failed(
        self, error: str, error_type: str = "RecognitionError", **extra
    ) -> None:
        self._logger.error("recognition_failed", error=error, error_type=error_type, **extra)

    def weight_detected(self, value: str, line_index: int, **extra) -> None:
        self._logger.info("weight_detected", value=value, line_index=line_index, **extra)

    def weight_not_found(self, line_count: int, **extra) -> None:
        self._logger.warning("weight_not_found", line_count=line_count, **extra)

    def capture_cancelled(self, **extra) -> None:
        self._logger.info("capture_cancelled", **extra)

    # Cache

    def cache_refreshed(self, categories: list[str], **extra) -> None:
        self._logger.debug("cache_refreshed", categories=categories, **extra)

    # Free-form events

    def info(self, event: str, **kwargs) -> None:
        self._logger.info(event, **kwargs)

    def warning(self, event: str, **kwargs) -> None:
        self._logger.warning(event, **kwargs)

    def error(self, event: str, **kwargs) -> None:
        self._logger.error(event, **kwargs)

    def debug(self, event: str, **kwargs) -> None:
        self._logger.debug(event, **kwargs)
