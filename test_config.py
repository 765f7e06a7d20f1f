#!/usr/bin/env python3
"""Tests for environment configuration loading."""

import pytest

from mqttstream.config.settings import AppConfig, Direction, MQTTConfig, StreamConfig
from mqttstream.utils.errors import ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in [
        "MQTT_BROKER_HOST", "MQTT_BROKER_PORT", "MQTT_USERNAME", "MQTT_PASSWORD",
        "MQTT_USE_TLS", "MQTT_CLIENT_ID", "MQTT_KEEPALIVE", "MQTT_CONNECT_TIMEOUT",
        "STREAM_DIRECTION", "STREAM_TOPICS", "STREAM_QOS", "STREAM_RETAIN",
        "STREAM_BUFFER_SIZE", "LOG_LEVEL",
    ]:
        monkeypatch.delenv(name, raising=False)


def test_mqtt_defaults():
    config = MQTTConfig.from_env()
    assert config.broker_host == "localhost"
    assert config.broker_port == 1883
    assert config.use_tls is False
    assert config.client_id == "mqtt_stream"


def test_mqtt_from_env(monkeypatch):
    monkeypatch.setenv("MQTT_BROKER_HOST", "broker.local")
    monkeypatch.setenv("MQTT_BROKER_PORT", "8883")
    monkeypatch.setenv("MQTT_USE_TLS", "yes")
    monkeypatch.setenv("MQTT_USERNAME", "user")
    monkeypatch.setenv("MQTT_PASSWORD", "secret")
    config = MQTTConfig.from_env()
    assert config.broker_host == "broker.local"
    assert config.broker_port == 8883
    assert config.use_tls is True
    assert config.password == "secret"


def test_mqtt_invalid_port(monkeypatch):
    monkeypatch.setenv("MQTT_BROKER_PORT", "not-a-port")
    with pytest.raises(ConfigurationError):
        MQTTConfig.from_env()


def test_stream_subscribe(monkeypatch):
    monkeypatch.setenv("STREAM_DIRECTION", "Subscribe")
    monkeypatch.setenv("STREAM_TOPICS", "sensors/+/temp,alerts/#")
    monkeypatch.setenv("STREAM_QOS", "1")
    config = StreamConfig.from_env()
    assert config.direction is Direction.SUBSCRIBE
    assert config.topics == ["sensors/+/temp", "alerts/#"]
    assert config.qos == 1
    assert config.retain is False


def test_stream_publish_requires_single_topic(monkeypatch):
    monkeypatch.setenv("STREAM_DIRECTION", "publish")
    monkeypatch.setenv("STREAM_TOPICS", "a,b")
    with pytest.raises(ConfigurationError):
        StreamConfig.from_env()


@pytest.mark.parametrize("topics,qos", [("a/#/b", "0"), ("a", "3"), ("", "0")])
def test_stream_rejects_invalid_topics(monkeypatch, topics, qos):
    monkeypatch.setenv("STREAM_DIRECTION", "subscribe")
    monkeypatch.setenv("STREAM_TOPICS", topics)
    monkeypatch.setenv("STREAM_QOS", qos)
    with pytest.raises(ConfigurationError):
        StreamConfig.from_env()


def test_stream_missing_direction(monkeypatch):
    monkeypatch.setenv("STREAM_TOPICS", "a")
    with pytest.raises(ConfigurationError):
        StreamConfig.from_env()


def test_stream_invalid_direction(monkeypatch):
    monkeypatch.setenv("STREAM_DIRECTION", "sideways")
    monkeypatch.setenv("STREAM_TOPICS", "a")
    with pytest.raises(ConfigurationError):
        StreamConfig.from_env()


def test_app_config(monkeypatch):
    monkeypatch.setenv("STREAM_DIRECTION", "publish")
    monkeypatch.setenv("STREAM_TOPICS", "out")
    monkeypatch.setenv("STREAM_RETAIN", "true")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    config = AppConfig.from_env()
    assert config.log_level == "DEBUG"
    assert config.stream.retain is True
    assert config.stream.direction is Direction.PUBLISH
