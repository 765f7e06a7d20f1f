"""Byte-stream adapters over MQTT publish/subscribe and topic validation."""

from .mqtt.topic import (
    QoS,
    Topic,
    TopicErrorKind,
    new_topic,
    parse_topic,
    validate_qos,
    validate_subscriptions,
    validate_topic,
    validate_topic_and_qos,
)
from .streams import MQTTReader, MQTTWriter

__version__ = "0.1.0"

__all__ = [
    "MQTTReader",
    "MQTTWriter",
    "QoS",
    "Topic",
    "TopicErrorKind",
    "new_topic",
    "parse_topic",
    "validate_qos",
    "validate_subscriptions",
    "validate_topic",
    "validate_topic_and_qos",
]
