"""Custom exception classes for the application."""

from enum import Enum
from typing import Any, Optional


class MQTTStreamError(Exception):
    """Base exception for all application errors."""
    pass


class ConfigurationError(MQTTStreamError):
    """Invalid or missing configuration."""
    pass


class MQTTConnectionError(MQTTStreamError):
    """MQTT connection errors."""
    pass


class StreamClosedError(MQTTStreamError):
    """Write attempted on a closed stream."""
    pass


class TopicErrorKind(Enum):
    """Kinds of topic and QoS validation failure."""
    EMPTY_TOPIC = "Invalid Topic; empty string"
    MISPLACED_MULTI_LEVEL_WILDCARD = "Invalid Topic; multi-level wildcard must be last level"
    INVALID_QOS = "Invalid QoS"


class TopicValidationError(MQTTStreamError, ValueError):
    """
    A topic string or QoS value was rejected.

    Match on ``kind`` rather than on the message or the instance.
    """

    def __init__(self, kind: TopicErrorKind, value: Any = None) -> None:
        self.kind: TopicErrorKind = kind
        self.value: Any = value
        super().__init__(kind.value if value is None else f"{kind.value}: {value!r}")

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TopicValidationError):
            return self.kind is other.kind
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.kind)


class OperationError(MQTTStreamError):
    """Subscribe, unsubscribe or publish reported failure by the MQTT client."""

    def __init__(self, operation: str, reason: str, rc: Optional[int] = None) -> None:
        self.operation: str = operation
        self.reason: str = reason
        self.rc: Optional[int] = rc
        super().__init__(f"{operation} failed: {reason}")
