"""
Structured Logger.

JSON logging for Azure Functions with Application Insights. Loggers
created through LoggerFactory stamp every record with the component
that wrote it and with the context of the HTTP request being served
(request id, caller, operation), emitted as customDimensions.

Request context lives in a ContextVar, so concurrent requests on the
same worker never see each other's ids:

    token = bind_request_context(LogContext(request_id=rid, user_id=uid))
    try:
        ...
    finally:
        clear_request_context(token)

Exports:
    ComponentType: Enum for component types
    LogLevel: Enum for log levels
    LogContext: Request correlation fields
    bind_request_context / clear_request_context / current_request_context
    JSONFormatter: Application Insights friendly formatter
    LoggerFactory: Factory for creating loggers

Dependencies:
    Standard library only (logging, contextvars, dataclasses, json)
"""

from contextvars import ContextVar, Token
from enum import Enum
from typing import Optional, Dict, Any
from datetime import datetime, timezone
from dataclasses import dataclass, asdict
import logging
import sys
import os
import json


# ============================================================================
# COMPONENT TYPES - Architectural layers
# ============================================================================

class ComponentType(Enum):
    """Layer of the component writing the log record."""
    SERVICE = "service"        # Check-in, headcount, preference and audit services
    REPOSITORY = "repository"  # Table store access layer
    FACTORY = "factory"        # Store and repository wiring
    TRIGGER = "trigger"        # HTTP blueprints
    ADAPTER = "adapter"        # Directory API
    VALIDATOR = "validator"    # Startup validation


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_python_level(self) -> int:
        return getattr(logging, self.value)

    @classmethod
    def from_string(cls, level: Optional[str], default: Optional["LogLevel"] = None) -> "LogLevel":
        """Case-insensitive lookup; unknown or empty names give the default (INFO)."""
        try:
            return cls[(level or "").strip().upper()]
        except KeyError:
            return default or cls.INFO


# ============================================================================
# REQUEST CONTEXT
# ============================================================================

@dataclass
class LogContext:
    """Correlation fields for one HTTP request."""
    request_id: Optional[str] = None
    user_id: Optional[str] = None
    operation: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


_request_context: ContextVar[Optional[LogContext]] = ContextVar("request_context", default=None)


def bind_request_context(context: LogContext) -> Token:
    """Make context current for this task; pass the token to clear_request_context."""
    return _request_context.set(context)


def clear_request_context(token: Token) -> None:
    _request_context.reset(token)


def current_request_context() -> Optional[LogContext]:
    return _request_context.get()


# ============================================================================
# JSON FORMATTER - Structured logging for Azure Functions
# ============================================================================

class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging in Azure Functions.
    Outputs logs in a format that Application Insights can automatically parse.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name,
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        if hasattr(record, 'custom_dimensions'):
            log_obj['customDimensions'] = record.custom_dimensions

        if record.exc_info:
            log_obj['exception'] = {
                'type': record.exc_info[0].__name__ if record.exc_info[0] else None,
                'message': str(record.exc_info[1]) if record.exc_info[1] else None,
                'traceback': self.formatException(record.exc_info)
            }

        return json.dumps(log_obj, default=str)


class _ContextFilter(logging.Filter):
    """Adds component and request context to records as custom_dimensions."""

    def __init__(self, component_type: ComponentType, name: str):
        super().__init__()
        self.component_type = component_type
        self.component_name = name

    def filter(self, record: logging.LogRecord) -> bool:
        dimensions = {
            'component_type': self.component_type.value,
            'component_name': self.component_name,
        }
        context = current_request_context()
        if context:
            dimensions.update(context.to_dict())
        # extra={'custom_dimensions': {...}} from the call site wins
        dimensions.update(getattr(record, 'custom_dimensions', None) or {})
        record.custom_dimensions = dimensions
        return True


# ============================================================================
# LOGGER FACTORY - Creates component-specific loggers
# ============================================================================

class LoggerFactory:
    """
    Factory for creating component-specific loggers.

    The level comes from LOG_LEVEL (default INFO) when the logger is
    first created.

    Example:
        logger = LoggerFactory.create_logger(ComponentType.SERVICE, "CheckInService")
        logger.info("Creating check-in")
    """

    @classmethod
    def create_logger(
        cls,
        component_type: ComponentType,
        name: str,
        level: Optional[LogLevel] = None,
    ) -> logging.Logger:
        """
        Create (or fetch) the logger "<component_type>.<name>".

        Repeated calls return the same logger without stacking handlers.
        """
        logger = logging.getLogger(f"{component_type.value}.{name}")
        if level is None:
            level = LogLevel.from_string(os.environ.get('LOG_LEVEL'))
        logger.setLevel(level.to_python_level())

        if not any(isinstance(f, _ContextFilter) for f in logger.filters):
            logger.addFilter(_ContextFilter(component_type, name))

        if not any(isinstance(h.formatter, JSONFormatter) for h in logger.handlers):
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(JSONFormatter())
            logger.addHandler(handler)

        # Propagate to Azure's root logger for Application Insights
        logger.propagate = True
        return logger
