"""Readable byte stream fed by MQTT subscriptions."""

import io
from typing import Any, List, Optional, Sequence

from ..mqtt.client import MessageHandler, Subscriber
from ..mqtt.topic import validate_topic_and_qos
from ..utils.errors import StreamClosedError
from ..utils.logger import get_logger
from .pipe import DEFAULT_BUFFER_SIZE, BytePipe

logger = get_logger(__name__)


class MQTTReader(io.RawIOBase):
    """
    Subscribes to ``topics`` and exposes the payloads of received messages
    as one continuous byte stream.

    Message boundaries are not preserved. read() blocks until bytes arrive
    or the reader is closed; there is no timeout.
    """

    _pipe: Optional[BytePipe] = None
    _subscribed: bool = False

    def __init__(
        self,
        subscriber: Subscriber,
        qos: int,
        *topics: str,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ) -> None:
        super().__init__()
        if not topics:
            raise ValueError("at least one topic is required")
        for topic in topics:
            validate_topic_and_qos(topic, qos)

        self.subscriber: Subscriber = subscriber
        self.qos: int = qos
        self.topics: List[str] = list(topics)
        self._pipe = BytePipe(buffer_size)

        self._subscribe_all(self._payload_handler)
        self._subscribed = True

    def _subscribe_all(self, handler: MessageHandler) -> None:
        """Subscribe to every topic; on failure undo the ones that succeeded."""
        subscribed: List[str] = []
        for topic in self.topics:
            token = self.subscriber.subscribe(topic, self.qos, handler)
            token.wait()
            error = token.error()
            if error is not None:
                logger.error(f"Subscribe to {topic} failed: {error}")
                self._rollback(subscribed)
                self._pipe.close()
                raise error
            logger.info(f"Subscribed to {topic} (qos={self.qos})")
            subscribed.append(topic)

    def _rollback(self, subscribed: Sequence[str]) -> None:
        if not subscribed:
            return
        token = self.subscriber.unsubscribe(*subscribed)
        token.wait()
        error = token.error()
        if error is not None:
            logger.warning(f"Rollback unsubscribe from {', '.join(subscribed)} failed: {error}")

    def _payload_handler(self, client: Any, message: Any) -> None:
        # Runs on the client's network thread: never raise from here.
        if self._pipe.closed:
            logger.debug(f"Dropping message on {getattr(message, 'topic', '?')}: reader closed")
            return
        try:
            self._pipe.write(message.payload)
        except StreamClosedError:
            logger.debug("Reader closed while delivering message")
        except Exception as e:
            logger.error(f"Failed to deliver message payload: {e}", exc_info=True)
            self._pipe.close(e)

    def readable(self) -> bool:
        return True

    def readinto(self, b: Any) -> int:
        self._checkClosed()
        view = memoryview(b).cast("B")
        if not len(view):
            return 0
        data = self._pipe.read(len(view))
        n = len(data)
        view[:n] = data
        return n

    def close(self) -> None:
        """Unsubscribe from all topics and signal end of stream to readers."""
        if self.closed:
            return
        # Pipe closes before the unsubscribe wait: a delivery blocked on it
        # would otherwise hold the thread that handles UNSUBACK.
        if self._pipe is not None:
            self._pipe.close()
        try:
            if self._subscribed:
                self._unsubscribe()
        finally:
            super().close()

    def _unsubscribe(self) -> None:
        self._subscribed = False
        token = self.subscriber.unsubscribe(*self.topics)
        token.wait()
        error = token.error()
        if error is not None:
            logger.error(f"Unsubscribe from {', '.join(self.topics)} failed: {error}")
            raise error
        logger.info(f"Unsubscribed from {', '.join(self.topics)}")
