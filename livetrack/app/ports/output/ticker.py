from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable


class ITickHandle(ABC):
    @abstractmethod
    def cancel(self) -> None:
        """Stop further callbacks. Safe to call more than once."""


class ITicker(ABC):
    """Scheduled-tick capability used to drive viewer-side animations."""

    @abstractmethod
    def now(self) -> float:
        """Monotonic seconds."""

    @abstractmethod
    def schedule_repeating(
        self, interval_s: float, callback: Callable[[], None]
    ) -> ITickHandle:
        raise NotImplementedError
