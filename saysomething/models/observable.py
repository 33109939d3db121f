"""Observable values backed by pypubsub topics."""

import itertools
import logging
from typing import Any, Callable, Generic, List, TypeVar

from pubsub import pub

logger = logging.getLogger(__name__)

T = TypeVar("T")

_topic_ids = itertools.count(1)


def _value_listener_proto(value):
    """Prototype listener defining the message data of every value topic."""


class ObservableValue(Generic[T]):
    """A value plus change notification, decoupled from any renderer.

    Every instance publishes on its own topic so that several screens (or
    tests) never see each other's messages. Listeners are called with a
    single ``value`` keyword argument.
    """

    def __init__(self, name: str, initial: T):
        self.topic = f"{name}_{next(_topic_ids)}"
        pub.getDefaultTopicMgr().getOrCreateTopic(self.topic, _value_listener_proto)
        self._value = initial
        # pypubsub holds listeners weakly; keep them alive here
        self._listeners: List[Callable[..., Any]] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> bool:
        """Store ``value`` and notify listeners if it changed.

        Returns:
            True if listeners were notified
        """
        if value == self._value:
            return False
        self._value = value
        logger.debug(f"{self.topic} -> {value!r}")
        pub.sendMessage(self.topic, value=value)
        return True

    def subscribe(self, listener: Callable[..., Any]) -> None:
        self._listeners.append(listener)
        pub.subscribe(listener, self.topic)

    def unsubscribe(self, listener: Callable[..., Any]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)
        pub.unsubscribe(listener, self.topic)
