"""MQTT client capabilities and topic handling."""

from .topic import Topic, parse_topic
from .client import AckToken, PahoClient, Publisher, PublishToken, Subscriber, Token

__all__ = [
    "AckToken",
    "PahoClient",
    "PublishToken",
    "Publisher",
    "Subscriber",
    "Token",
    "Topic",
    "parse_topic",
]
