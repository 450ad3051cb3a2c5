from __future__ import annotations

import logging
from dataclasses import dataclass, field

from livetrack.app.ports.output import IEventSink
from livetrack.domain.models import OutboundEvent

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TopicRouter:
    """Route-scoped fan-out of outbound events.

    Topics are route ids. Both position and seat events share the same topic.
    All methods are synchronous and run between I/O yields of the event loop,
    so no locking is needed; a threaded caller must serialize access.
    """

    _sinks: dict[str, IEventSink] = field(default_factory=dict, init=False)
    _subscribers: dict[str, set[str]] = field(default_factory=dict, init=False)
    _topics_by_connection: dict[str, set[str]] = field(
        default_factory=dict, init=False
    )

    def connect(self, connection_id: str, sink: IEventSink) -> None:
        self._sinks[connection_id] = sink
        self._topics_by_connection.setdefault(connection_id, set())

    def disconnect(self, connection_id: str) -> tuple[str, ...]:
        """Forget a connection and all its subscriptions; returns the topics it left."""

        self._sinks.pop(connection_id, None)
        topics = self._topics_by_connection.pop(connection_id, set())
        for route_id in topics:
            self._discard(route_id, connection_id)
        return tuple(sorted(topics))

    def is_connected(self, connection_id: str) -> bool:
        return connection_id in self._sinks

    def subscribe(self, connection_id: str, route_id: str) -> bool:
        if connection_id not in self._sinks:
            logger.debug("Ignoring subscribe from unknown connection %s", connection_id)
            return False

        members = self._subscribers.setdefault(route_id, set())
        if connection_id in members:
            return False
        members.add(connection_id)
        self._topics_by_connection[connection_id].add(route_id)
        return True

    def unsubscribe(self, connection_id: str, route_id: str) -> bool:
        topics = self._topics_by_connection.get(connection_id)
        if not topics or route_id not in topics:
            return False
        topics.discard(route_id)
        self._discard(route_id, connection_id)
        return True

    def close_topic(self, route_id: str) -> int:
        members = self._subscribers.pop(route_id, set())
        for connection_id in members:
            topics = self._topics_by_connection.get(connection_id)
            if topics is not None:
                topics.discard(route_id)
        return len(members)

    def subscribers(self, route_id: str) -> frozenset[str]:
        return frozenset(self._subscribers.get(route_id, ()))

    def topics_of(self, connection_id: str) -> frozenset[str]:
        return frozenset(self._topics_by_connection.get(connection_id, ()))

    def publish(self, route_id: str, event: OutboundEvent) -> int:
        # Copy: a sink may disconnect itself while we iterate.
        members = tuple(self._subscribers.get(route_id, ()))
        return sum(1 for cid in members if self._deliver(cid, event))

    def broadcast(self, event: OutboundEvent) -> int:
        return sum(1 for cid in tuple(self._sinks) if self._deliver(cid, event))

    def send(self, connection_id: str, event: OutboundEvent) -> bool:
        return self._deliver(connection_id, event)

    def _deliver(self, connection_id: str, event: OutboundEvent) -> bool:
        sink = self._sinks.get(connection_id)
        if sink is None:
            return False
        try:
            sink.deliver(event)
        except Exception:
            logger.exception(
                "Event sink failed", extra={"connection_id": connection_id}
            )
            return False
        return True

    def _discard(self, route_id: str, connection_id: str) -> None:
        members = self._subscribers.get(route_id)
        if members is None:
            return
        members.discard(connection_id)
        if not members:
            del self._subscribers[route_id]
