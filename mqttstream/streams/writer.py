"""Writable byte stream that publishes each write as one message."""

import io
from typing import Any

from ..mqtt.client import Publisher
from ..mqtt.topic import validate_topic_and_qos
from ..utils.logger import get_logger

logger = get_logger(__name__)


class MQTTWriter(io.RawIOBase):
    """
    Publishes every write() to ``topic`` and blocks until it is acknowledged.

    A write is never split: either the whole buffer is published and its
    length returned, or the publish error is raised.
    """

    def __init__(self, publisher: Publisher, qos: int, retained: bool, topic: str) -> None:
        super().__init__()
        validate_topic_and_qos(topic, qos)
        self.publisher: Publisher = publisher
        self.qos: int = qos
        self.retained: bool = retained
        self.topic: str = topic

    def writable(self) -> bool:
        return True

    def write(self, b: Any) -> int:
        self._checkClosed()
        payload = bytes(b)
        token = self.publisher.publish(self.topic, self.qos, self.retained, payload)
        token.wait()
        error = token.error()
        if error is not None:
            logger.error(f"Publish to {self.topic} failed: {error}")
            raise error
        logger.debug(f"Published {len(payload)} bytes to {self.topic}")
        return len(payload)
