"""Configuration management for MQTT streams."""

from .settings import AppConfig, Direction, MQTTConfig, StreamConfig, load_config

__all__ = ["AppConfig", "Direction", "MQTTConfig", "StreamConfig", "load_config"]
