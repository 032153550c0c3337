"""State aggregator: merges queued events and direct polls into one Snapshot

Two entry points mutate the snapshot and each touches a fixed set of fields:

  apply_event           button_down_count, button_up_count, axis_value,
                        connected, last_event_time
  refresh_polled_state  connected, name, button_level

Controller entries are created on first sight and never removed.
"""
import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional, Tuple

from core.events import (
    AxisChanged,
    ButtonPressed,
    ButtonReleased,
    Connected,
    Disconnected,
)
from core.state import Button, ControllerState, Snapshot

LOG = logging.getLogger("padbridge.aggregator")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StateAggregator:
    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or utc_now
        self.snapshot = Snapshot(time=self._clock())

    def controller(self, controller_id: int) -> ControllerState:
        """Return the state for `controller_id`, creating a default one if new."""
        state = self.snapshot.controllers.get(controller_id)
        if state is None:
            state = ControllerState()
            self.snapshot.controllers[controller_id] = state
            LOG.debug("tracking new controller %d", controller_id)
        return state

    def _touch(self, state: ControllerState):
        now = self._clock()
        if now > state.last_event_time:
            state.last_event_time = now

    def apply_event(self, event):
        if isinstance(event, ButtonPressed):
            state = self.controller(event.controller_id)
            counts = state.button_down_count
            counts[event.button] = counts.get(event.button, 0) + 1
        elif isinstance(event, ButtonReleased):
            state = self.controller(event.controller_id)
            counts = state.button_up_count
            counts[event.button] = counts.get(event.button, 0) + 1
        elif isinstance(event, AxisChanged):
            state = self.controller(event.controller_id)
            state.axis_value[event.axis] = float(event.value)
        elif isinstance(event, Connected):
            state = self.controller(event.controller_id)
            state.connected = True
            LOG.info("controller %d (%s) connected", event.controller_id, state.name)
        elif isinstance(event, Disconnected):
            state = self.controller(event.controller_id)
            state.connected = False
            LOG.warning("controller %d (%s) disconnected", event.controller_id, state.name)
        else:
            LOG.debug("ignoring event %r", event)
            return
        self._touch(state)

    def refresh_polled_state(
        self,
        controller_id: int,
        is_connected: bool,
        name: str,
        button_levels: Iterable[Tuple[Button, bool]],
    ):
        """Overwrite the poll-refreshed fields of one controller.

        `button_levels` is only consumed when the controller is connected, so
        callers can pass a lazy generator that queries the device.
        """
        state = self.controller(controller_id)
        state.connected = bool(is_connected)
        state.name = name
        if not is_connected:
            return
        for button, pressed in button_levels:
            state.button_level[button] = bool(pressed)
