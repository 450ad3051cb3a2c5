from __future__ import annotations

from abc import ABC, abstractmethod

from livetrack.domain.models import OutboundEvent


class IEventSink(ABC):
    """A single viewer/publisher connection as seen by the topic router.

    `deliver` is called from the event loop thread and must not block.
    """

    @abstractmethod
    def deliver(self, event: OutboundEvent) -> None:
        raise NotImplementedError
