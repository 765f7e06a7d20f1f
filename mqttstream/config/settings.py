"""Configuration settings loaded from environment variables."""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from dotenv import load_dotenv

from ..utils.errors import ConfigurationError, TopicValidationError


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Direction(str, Enum):
    """Which way bytes flow between stdio and the broker."""
    PUBLISH = "publish"
    SUBSCRIBE = "subscribe"


@dataclass
class MQTTConfig:
    """MQTT broker configuration."""
    broker_host: str = "localhost"
    broker_port: int = 1883
    username: Optional[str] = None
    password: Optional[str] = None
    use_tls: bool = False
    client_id: str = "mqtt_stream"
    keepalive: int = 60
    connect_timeout: float = 10.0

    @staticmethod
    def from_env() -> 'MQTTConfig':
        """Load from environment variables with validation."""
        try:
            broker_port = int(os.getenv("MQTT_BROKER_PORT", "1883"))
            keepalive = int(os.getenv("MQTT_KEEPALIVE", "60"))
            connect_timeout = float(os.getenv("MQTT_CONNECT_TIMEOUT", "10"))
        except ValueError as e:
            raise ConfigurationError(f"Invalid MQTT port, keepalive or timeout configuration: {e}")

        return MQTTConfig(
            broker_host=os.getenv("MQTT_BROKER_HOST", "localhost"),
            broker_port=broker_port,
            username=os.getenv("MQTT_USERNAME"),
            password=os.getenv("MQTT_PASSWORD"),
            use_tls=_env_bool("MQTT_USE_TLS", "false"),
            client_id=os.getenv("MQTT_CLIENT_ID", "mqtt_stream"),
            keepalive=keepalive,
            connect_timeout=connect_timeout,
        )


@dataclass
class StreamConfig:
    """Stream direction, topics and delivery options."""
    direction: Direction
    topics: List[str] = field(default_factory=list)
    qos: int = 0
    retain: bool = False
    buffer_size: int = 64 * 1024

    def __post_init__(self) -> None:
        from ..mqtt.topic import validate_topic_and_qos

        if not self.topics:
            raise ConfigurationError("At least one topic is required (STREAM_TOPICS)")
        if self.direction is Direction.PUBLISH and len(self.topics) != 1:
            raise ConfigurationError("Publish direction takes exactly one topic")
        if self.buffer_size <= 0:
            raise ConfigurationError("STREAM_BUFFER_SIZE must be positive")

        try:
            for topic in self.topics:
                validate_topic_and_qos(topic, self.qos)
        except TopicValidationError as e:
            raise ConfigurationError(f"Invalid stream topic or QoS: {e}") from e

    @staticmethod
    def from_env() -> 'StreamConfig':
        """Load from environment variables with validation."""
        raw_direction = os.getenv("STREAM_DIRECTION")
        if not raw_direction:
            raise ConfigurationError("Missing required STREAM_DIRECTION (publish or subscribe)")
        try:
            direction = Direction(raw_direction.strip().lower())
        except ValueError:
            raise ConfigurationError(f"Invalid STREAM_DIRECTION: {raw_direction}")

        # Topics may legitimately contain spaces, so only split on commas
        topics = [t for t in os.getenv("STREAM_TOPICS", "").split(",") if t]

        try:
            qos = int(os.getenv("STREAM_QOS", "0"))
            buffer_size = int(os.getenv("STREAM_BUFFER_SIZE", str(64 * 1024)))
        except ValueError as e:
            raise ConfigurationError(f"Invalid stream QoS or buffer size configuration: {e}")

        return StreamConfig(
            direction=direction,
            topics=topics,
            qos=qos,
            retain=_env_bool("STREAM_RETAIN", "false"),
            buffer_size=buffer_size,
        )


@dataclass
class AppConfig:
    """Complete application configuration."""
    mqtt: MQTTConfig
    stream: StreamConfig
    log_level: str = "INFO"

    @staticmethod
    def from_env() -> 'AppConfig':
        """Load complete configuration from environment."""
        return AppConfig(
            mqtt=MQTTConfig.from_env(),
            stream=StreamConfig.from_env(),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


def load_config() -> AppConfig:
    """Load configuration from .env file and environment variables."""
    # Load .env file if it exists
    load_dotenv()

    return AppConfig.from_env()
