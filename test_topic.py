#!/usr/bin/env python3
"""Tests for topic parsing, wildcard filters and QoS validation."""

import pytest

from mqttstream.mqtt.topic import (
    QoS,
    Topic,
    new_topic,
    parse_topic,
    validate_qos,
    validate_subscriptions,
    validate_topic,
    validate_topic_and_qos,
)
from mqttstream.utils.errors import TopicErrorKind, TopicValidationError


@pytest.mark.parametrize("raw", [
    "a",
    "a/b/c",
    "/",
    "/leading",
    "trailing/",
    "a//b",
    "sport/+/player1",
    "sport/tennis/#",
    "#",
    "+",
    "with spaces/ok",
    "a+b/c",
    "café/über",
])
def test_parse_round_trip(raw):
    topic = parse_topic(raw)
    assert str(topic) == raw
    assert parse_topic(str(topic)) == topic


def test_parse_empty_topic():
    with pytest.raises(TopicValidationError) as excinfo:
        parse_topic("")
    assert excinfo.value.kind is TopicErrorKind.EMPTY_TOPIC


@pytest.mark.parametrize("raw", ["a/#/b", "#/a", "#/#", "a/#/"])
def test_parse_misplaced_multi_level_wildcard(raw):
    with pytest.raises(TopicValidationError) as excinfo:
        parse_topic(raw)
    assert excinfo.value.kind is TopicErrorKind.MISPLACED_MULTI_LEVEL_WILDCARD


def test_parse_levels():
    assert parse_topic("a/b/#") == ["a", "b", "#"]
    assert parse_topic("/") == ["", ""]
    assert isinstance(parse_topic("a"), Topic)


def test_validation_error_is_value_error_matched_by_kind():
    with pytest.raises(ValueError):
        validate_topic("")
    assert TopicValidationError(TopicErrorKind.INVALID_QOS, 3) == TopicValidationError(TopicErrorKind.INVALID_QOS)
    assert TopicValidationError(TopicErrorKind.INVALID_QOS) != TopicValidationError(TopicErrorKind.EMPTY_TOPIC)


def test_new_topic_does_not_validate():
    topic = new_topic("a", "#", "b")
    assert topic == ["a", "#", "b"]
    assert str(topic) == "a/#/b"
    assert not topic.is_valid()


def test_is_valid():
    assert parse_topic("sport/tennis/player1/#").is_valid()
    assert new_topic("a", "b").is_valid()
    assert not Topic().is_valid()


def test_with_wildcard_at_leaves_input_alone():
    topic = new_topic("a", "b", "c")
    assert topic.with_wildcard_at(1) == ["a", "#"]
    assert topic == ["a", "b", "c"]
    assert topic.with_wildcard_at(0) == ["#"]
    assert topic.with_wildcard_at(2) == ["a", "b", "#"]


def test_truncate_with_wildcard_at_mutates():
    topic = new_topic("a", "b", "c")
    result = topic.truncate_with_wildcard_at(1)
    assert result is topic
    assert topic == ["a", "#"]
    assert topic.is_valid()


@pytest.mark.parametrize("index", [3, -1, 10])
def test_wildcard_at_out_of_range(index):
    topic = new_topic("a", "b", "c")
    with pytest.raises(IndexError):
        topic.with_wildcard_at(index)
    with pytest.raises(IndexError):
        topic.truncate_with_wildcard_at(index)
    assert topic == ["a", "b", "c"]


@pytest.mark.parametrize("qos", [0, 1, 2, QoS.EXACTLY_ONCE])
def test_validate_qos_accepts(qos):
    validate_qos(qos)


@pytest.mark.parametrize("qos", [-1, 3, 128, 255, True, 1.0, "1", None])
def test_validate_qos_rejects(qos):
    with pytest.raises(TopicValidationError) as excinfo:
        validate_qos(qos)
    assert excinfo.value.kind is TopicErrorKind.INVALID_QOS


def test_validate_topic_and_qos_checks_topic_first():
    with pytest.raises(TopicValidationError) as excinfo:
        validate_topic_and_qos("", 7)
    assert excinfo.value.kind is TopicErrorKind.EMPTY_TOPIC

    with pytest.raises(TopicValidationError) as excinfo:
        validate_topic_and_qos("a/b", 7)
    assert excinfo.value.kind is TopicErrorKind.INVALID_QOS


def test_validate_subscriptions():
    subscriptions = {"a/b": 0, "c/#": 1}
    topics, qoss = validate_subscriptions(subscriptions)
    assert len(topics) == len(qoss) == 2
    assert dict(zip(topics, qoss)) == subscriptions


def test_validate_subscriptions_rejects_whole_batch():
    with pytest.raises(TopicValidationError) as excinfo:
        validate_subscriptions({"a/#/b": 0})
    assert excinfo.value.kind is TopicErrorKind.MISPLACED_MULTI_LEVEL_WILDCARD

    with pytest.raises(TopicValidationError) as excinfo:
        validate_subscriptions({"ok/topic": 1, "bad/qos": 3})
    assert excinfo.value.kind is TopicErrorKind.INVALID_QOS


def test_filter_shape_supports_external_matching():
    """A consumer can build "#" matching (including the parent level) from levels."""

    def matches(filter_topic, name):
        levels = parse_topic(name)
        for i, level in enumerate(filter_topic):
            if level == "#":
                return True
            if i >= len(levels) or (level != "+" and level != levels[i]):
                return False
        return len(levels) == len(filter_topic)

    subscription = parse_topic("sport/tennis/player1/#")
    assert subscription.is_valid()
    assert matches(subscription, "sport/tennis/player1")
    assert matches(subscription, "sport/tennis/player1/ranking")
    assert matches(subscription, "sport/tennis/player1/score/wimbledon")
    assert not matches(subscription, "sport/tennis/player2")
