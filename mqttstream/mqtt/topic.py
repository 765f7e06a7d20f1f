"""
Topic names, topic filters and QoS validation.

MQTT v3.1.1 rules relevant here:

- A topic is case sensitive, may contain whitespace and must be UTF-8.
- A leading "/" makes a different topic; "/" alone is two empty levels.
- Empty levels ("a//b") are allowed.
- A filter may hold any number of "+" levels, but "#" only as the last level.
- "foo/#" also matches "foo" itself. Matching is left to subscribers.
"""

from enum import IntEnum
from typing import Any, Iterable, List, Mapping, Tuple

from ..utils.errors import TopicErrorKind, TopicValidationError

LEVEL_SEPARATOR = "/"
SINGLE_LEVEL_WILDCARD = "+"
MULTI_LEVEL_WILDCARD = "#"


class QoS(IntEnum):
    """MQTT delivery guarantee levels."""
    AT_MOST_ONCE = 0
    AT_LEAST_ONCE = 1
    EXACTLY_ONCE = 2


class Topic(list):
    """
    A topic split into its levels.

    Building a Topic directly from levels does not validate them; use
    parse_topic() or is_valid() for that.
    """

    def __init__(self, levels: Iterable[str] = ()) -> None:
        super().__init__(levels)

    def __str__(self) -> str:
        return LEVEL_SEPARATOR.join(self)

    def __repr__(self) -> str:
        return f"Topic({list(self)!r})"

    def is_valid(self) -> bool:
        """Check the joined topic against the topic rules."""
        try:
            validate_topic(str(self))
        except TopicValidationError:
            return False
        return True

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self):
            raise IndexError(f"level index {index} out of range for {len(self)} levels")

    def with_wildcard_at(self, index: int) -> "Topic":
        """
        Return a new filter covering this topic from level ``index`` down.

        Topic(["a", "b", "c"]).with_wildcard_at(1) -> Topic(["a", "#"])
        """
        self._check_index(index)
        return Topic(self[:index] + [MULTI_LEVEL_WILDCARD])

    def truncate_with_wildcard_at(self, index: int) -> "Topic":
        """
        In-place variant of with_wildcard_at().

        Level ``index`` is overwritten with "#" and every later level is
        dropped from this same list, which is returned.
        """
        self._check_index(index)
        self[index] = MULTI_LEVEL_WILDCARD
        del self[index + 1:]
        return self


def new_topic(*levels: str) -> Topic:
    """Build a Topic from levels without validating them."""
    return Topic(levels)


def validate_topic(topic: str) -> None:
    """Raise TopicValidationError if ``topic`` is empty or has a misplaced "#"."""
    if len(topic) == 0:
        raise TopicValidationError(TopicErrorKind.EMPTY_TOPIC)

    levels = topic.split(LEVEL_SEPARATOR)
    for i, level in enumerate(levels):
        if level == MULTI_LEVEL_WILDCARD and i != len(levels) - 1:
            raise TopicValidationError(TopicErrorKind.MISPLACED_MULTI_LEVEL_WILDCARD, topic)


def parse_topic(raw: str) -> Topic:
    """Validate ``raw`` and split it into levels."""
    validate_topic(raw)
    return Topic(raw.split(LEVEL_SEPARATOR))


def validate_qos(qos: Any) -> None:
    """Raise TopicValidationError unless ``qos`` is 0, 1 or 2."""
    if isinstance(qos, bool) or not isinstance(qos, int):
        raise TopicValidationError(TopicErrorKind.INVALID_QOS, qos)
    if qos < QoS.AT_MOST_ONCE or qos > QoS.EXACTLY_ONCE:
        raise TopicValidationError(TopicErrorKind.INVALID_QOS, qos)


def validate_topic_and_qos(topic: str, qos: Any) -> None:
    """Validate the topic, then the QoS."""
    validate_topic(topic)
    validate_qos(qos)


def validate_subscriptions(subscriptions: Mapping[str, int]) -> Tuple[List[str], List[int]]:
    """
    Validate a topic -> QoS mapping for a batch subscribe.

    Returns parallel lists of topics and QoS values. The first invalid pair
    raises and nothing is returned.
    """
    topics: List[str] = []
    qoss: List[int] = []
    for topic, qos in subscriptions.items():
        validate_topic_and_qos(topic, qos)
        topics.append(topic)
        qoss.append(qos)
    return topics, qoss

