"""Readable and writable byte streams over MQTT."""

from .pipe import BytePipe
from .reader import MQTTReader
from .writer import MQTTWriter

__all__ = ["BytePipe", "MQTTReader", "MQTTWriter"]
