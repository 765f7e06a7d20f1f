"""MQTT client wrapper exposing subscribe/unsubscribe/publish as waitable tokens."""

import threading
import time
from typing import Any, Callable, Dict, List, Optional, Protocol

import paho.mqtt.client as mqtt

from ..config.settings import MQTTConfig
from ..utils.errors import MQTTConnectionError, OperationError
from ..utils.logger import get_logger

logger = get_logger(__name__)

MessageHandler = Callable[[Any, Any], None]


class Token(Protocol):
    """Handle on an in-flight subscribe, unsubscribe or publish."""

    def wait(self, timeout: Optional[float] = None) -> bool:
        ...

    def error(self) -> Optional[Exception]:
        ...


class Subscriber(Protocol):
    def subscribe(self, topic: str, qos: int, handler: MessageHandler) -> Token:
        ...

    def unsubscribe(self, *topics: str) -> Token:
        ...


class Publisher(Protocol):
    def publish(self, topic: str, qos: int, retained: bool, payload: Any) -> Token:
        ...


class AckToken:
    """
    Token completed by the network thread when the broker acknowledges.

    A token can also be created already completed, for requests the client
    rejected before anything was sent.
    """

    def __init__(self, operation: str) -> None:
        self.operation: str = operation
        self._done: threading.Event = threading.Event()
        self._lock: threading.Lock = threading.Lock()
        self._error: Optional[Exception] = None

    @classmethod
    def failed(cls, operation: str, error: Exception) -> "AckToken":
        token = cls(operation)
        token.complete(error)
        return token

    def complete(self, error: Optional[Exception] = None) -> bool:
        """Complete the token; returns False if it was already complete."""
        with self._lock:
            if self._done.is_set():
                return False
            self._error = error
            self._done.set()
            return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._done.wait(timeout)

    def error(self) -> Optional[Exception]:
        return self._error


class PublishToken:
    """Token over paho's MQTTMessageInfo."""

    def __init__(self, info: mqtt.MQTTMessageInfo) -> None:
        self._info: mqtt.MQTTMessageInfo = info
        self._error: Optional[Exception] = None

    def wait(self, timeout: Optional[float] = None) -> bool:
        try:
            self._info.wait_for_publish(timeout)
        except (ValueError, RuntimeError) as e:
            self._error = OperationError("publish", str(e), self._info.rc)
            return True
        return self._info.is_published()

    def error(self) -> Optional[Exception]:
        if self._error is None and self._info.rc != mqtt.MQTT_ERR_SUCCESS:
            self._error = OperationError("publish", mqtt.error_string(self._info.rc), self._info.rc)
        return self._error


def _first_failure(reason_codes: List[Any]) -> Optional[Any]:
    for rc in reason_codes:
        if getattr(rc, "is_failure", False):
            return rc
    return None


class PahoClient:
    """
    Wrapper for paho.mqtt.client implementing the Subscriber and Publisher
    capabilities used by the stream adapters.
    """

    def __init__(self, config: MQTTConfig) -> None:
        self.config: MQTTConfig = config
        self.client: mqtt.Client = mqtt.Client(
            mqtt.CallbackAPIVersion.VERSION2, client_id=config.client_id
        )
        self.connected: bool = False
        self._connect_error: Optional[str] = None
        self._lock: threading.Lock = threading.Lock()
        # mid -> token waiting for SUBACK/UNSUBACK
        self._pending: Dict[int, AckToken] = {}
        # mid -> failure (or None) for acks that beat their token
        self._early_acks: Dict[int, Optional[Exception]] = {}
        # mid -> topic of a pending subscribe, to drop its callback if refused
        self._subscribe_topics: Dict[int, str] = {}
        self._setup_callbacks()
        self._setup_authentication()
        if config.use_tls:
            self._setup_tls()

    def _setup_callbacks(self) -> None:
        """Configure MQTT callbacks for connection and acknowledgment events."""
        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect
        self.client.on_subscribe = self._on_subscribe
        self.client.on_unsubscribe = self._on_unsubscribe

    def _setup_authentication(self) -> None:
        """Configure MQTT authentication if credentials provided."""
        if self.config.username and self.config.password:
            self.client.username_pw_set(
                self.config.username,
                self.config.password
            )

    def _setup_tls(self) -> None:
        """Configure TLS/SSL for secure connection."""
        self.client.tls_set()

    def _on_connect(self, client: Any, userdata: Any, flags: Any, reason_code: Any, properties: Any) -> None:
        if reason_code.is_failure:
            logger.error(f"Failed to connect to MQTT broker: {reason_code}")
            self._connect_error = str(reason_code)
            self.connected = False
        else:
            logger.info("Connected to MQTT broker")
            self.connected = True

    def _on_disconnect(self, client: Any, userdata: Any, flags: Any, reason_code: Any, properties: Any) -> None:
        logger.warning(f"Disconnected from MQTT broker ({reason_code})")
        self.connected = False

    def _on_subscribe(self, client: Any, userdata: Any, mid: int, reason_codes: List[Any], properties: Any) -> None:
        failure = _first_failure(reason_codes)
        error = OperationError("subscribe", str(failure), failure.value) if failure is not None else None
        with self._lock:
            topic = self._subscribe_topics.pop(mid, None)
        if failure is not None and topic is not None:
            self.client.message_callback_remove(topic)
        self._complete(mid, error)

    def _on_unsubscribe(self, client: Any, userdata: Any, mid: int, reason_codes: List[Any], properties: Any) -> None:
        failure = _first_failure(reason_codes)
        error = OperationError("unsubscribe", str(failure), failure.value) if failure is not None else None
        self._complete(mid, error)

    def _complete(self, mid: int, error: Optional[Exception]) -> None:
        with self._lock:
            token = self._pending.pop(mid, None)
            if token is None:
                self._early_acks[mid] = error
                return
        token.complete(error)

    def _track(self, operation: str, rc: int, mid: Optional[int], topic: Optional[str] = None) -> AckToken:
        if rc != mqtt.MQTT_ERR_SUCCESS or mid is None:
            return AckToken.failed(operation, OperationError(operation, mqtt.error_string(rc), rc))

        token = AckToken(operation)
        with self._lock:
            if mid in self._early_acks:
                error = self._early_acks.pop(mid)
            else:
                self._pending[mid] = token
                if topic is not None:
                    self._subscribe_topics[mid] = topic
                return token
        token.complete(error)
        return token

    def connect(self) -> None:
        """Connect and start the network thread, waiting for CONNACK."""
        logger.info(
            f"Connecting to MQTT broker {self.config.broker_host}:{self.config.broker_port}"
        )
        try:
            self.client.connect(
                self.config.broker_host,
                self.config.broker_port,
                keepalive=self.config.keepalive
            )
        except (OSError, ValueError) as e:
            logger.error(f"Failed to connect to MQTT broker: {e}")
            raise MQTTConnectionError(f"Connection failed: {e}") from e

        self.client.loop_start()

        deadline = time.monotonic() + self.config.connect_timeout
        while not self.connected and self._connect_error is None and time.monotonic() < deadline:
            time.sleep(0.1)

        if not self.connected:
            self.client.loop_stop()
            reason = self._connect_error or "timed out waiting for CONNACK"
            raise MQTTConnectionError(f"Failed to connect to MQTT broker: {reason}")

        logger.info("MQTT client connected successfully")

    def subscribe(self, topic: str, qos: int, handler: MessageHandler) -> Token:
        def on_message(client: Any, userdata: Any, message: Any) -> None:
            handler(self, message)

        self.client.message_callback_add(topic, on_message)
        rc, mid = self.client.subscribe(topic, qos)
        logger.debug(f"Subscribe requested for {topic} (qos={qos}, mid={mid})")
        token = self._track("subscribe", rc, mid, topic)
        if token.wait(0) and token.error() is not None:
            self.client.message_callback_remove(topic)
        return token

    def unsubscribe(self, *topics: str) -> Token:
        for topic in topics:
            self.client.message_callback_remove(topic)
        rc, mid = self.client.unsubscribe(list(topics))
        logger.debug(f"Unsubscribe requested for {', '.join(topics)} (mid={mid})")
        return self._track("unsubscribe", rc, mid)

    def publish(self, topic: str, qos: int, retained: bool, payload: Any) -> Token:
        info = self.client.publish(topic, payload, qos=qos, retain=retained)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            logger.warning(f"Failed to publish to {topic}: {mqtt.error_string(info.rc)}")
        return PublishToken(info)

    def disconnect(self) -> None:
        """Gracefully disconnect from MQTT broker, failing pending acks."""
        logger.info("Disconnecting from MQTT broker")
        self.client.disconnect()
        self.client.loop_stop()
        self.connected = False

        with self._lock:
            pending = list(self._pending.values())
            self._pending.clear()
            self._early_acks.clear()
            self._subscribe_topics.clear()
        for token in pending:
            token.complete(OperationError(token.operation, "client disconnected"))

        logger.info("Disconnected from MQTT broker")
