"""Device source abstraction consumed by the publisher loop"""
import abc
from typing import Any, List, Optional, Tuple

from core.events import ControllerEvent
from core.state import Button


class DeviceSource(abc.ABC):
    """Enumerable controllers, a drainable event queue and direct state queries.

    Handles returned by `enumerate` are opaque to the core and only passed back
    into the query methods.
    """

    def open(self):
        pass

    def close(self):
        pass

    @abc.abstractmethod
    def enumerate(self) -> List[Tuple[int, Any]]:
        raise NotImplementedError

    @abc.abstractmethod
    def next_event(self) -> Optional[ControllerEvent]:
        """Pop the next queued event, or None when the queue is empty. Never blocks."""
        raise NotImplementedError

    @abc.abstractmethod
    def is_connected(self, handle) -> bool:
        raise NotImplementedError

    @abc.abstractmethod
    def name(self, handle) -> str:
        raise NotImplementedError

    @abc.abstractmethod
    def is_pressed(self, handle, button: Button) -> bool:
        raise NotImplementedError
