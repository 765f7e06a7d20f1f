"""Utility modules for logging and error handling."""

from .errors import (
    ConfigurationError,
    MQTTConnectionError,
    MQTTStreamError,
    OperationError,
    StreamClosedError,
    TopicErrorKind,
    TopicValidationError,
)
from .logger import get_logger, redact_sensitive

__all__ = [
    "ConfigurationError",
    "MQTTConnectionError",
    "MQTTStreamError",
    "OperationError",
    "StreamClosedError",
    "TopicErrorKind",
    "TopicValidationError",
    "get_logger",
    "redact_sensitive",
]
