"""Game controller source using pygame.joystick (SDL2)

`PygameDeviceSource` turns SDL joystick events into controller events and answers
direct state queries for the publisher loop. Controller ids are SDL instance
ids: stable while a device stays plugged in, never reused within a process.
"""
import logging
import os
from collections import deque
from typing import Any, Deque, Dict, List, Optional, Tuple

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
import pygame  # noqa: E402

from core.events import (  # noqa: E402
    AxisChanged,
    ButtonPressed,
    ButtonReleased,
    Connected,
    ControllerEvent,
    Disconnected,
    OtherEvent,
)
from core.reader import DeviceSource  # noqa: E402
from core.state import Button  # noqa: E402
from mapper import HAT_X, HAT_Y, ControllerMapping  # noqa: E402

LOG = logging.getLogger("padbridge.pygame")

# DPad button -> (hat component, value meaning pressed)
HAT_BUTTONS = {
    Button.DPadLeft: (0, -1),
    Button.DPadRight: (0, 1),
    Button.DPadDown: (1, -1),
    Button.DPadUp: (1, 1),
}


class PygameDeviceSource(DeviceSource):
    def __init__(self, mapping: Optional[ControllerMapping] = None, joystick_factory=None):
        self.mapping = mapping or ControllerMapping.default()
        self._joystick_factory = joystick_factory
        self._joysticks: Dict[int, Any] = {}
        self._hats: Dict[int, Tuple[int, int]] = {}
        self._queue: Deque[ControllerEvent] = deque()
        self._opened = False

    def open(self):
        # Joystick events must keep flowing without a focused window.
        os.environ.setdefault("SDL_JOYSTICK_ALLOW_BACKGROUND_EVENTS", "1")
        os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
        pygame.init()
        pygame.joystick.init()
        self._opened = True
        for i in range(pygame.joystick.get_count()):
            self._queue.extend(self._attach(i))
        LOG.info("%d controller(s) found", len(self._joysticks))
        for cid, js in self._joysticks.items():
            LOG.info("controller %d: %s", cid, self.describe(js))

    def close(self):
        if not self._opened:
            return
        self._opened = False
        self._joysticks.clear()
        pygame.joystick.quit()
        pygame.quit()

    def describe(self, handle) -> str:
        return f"{handle.get_name()} is {handle.get_power_level()}"

    def _attach(self, device_index: int) -> List[ControllerEvent]:
        factory = self._joystick_factory or pygame.joystick.Joystick
        js = factory(device_index)
        js.init()
        cid = js.get_instance_id()
        if cid in self._joysticks:
            if self._joysticks[cid] is not js:
                js.quit()
            return []
        self._joysticks[cid] = js
        self._hats[cid] = (0, 0)
        LOG.info(
            "attached %s as controller %d (axes=%d, buttons=%d, hats=%d)",
            js.get_name(), cid, js.get_numaxes(), js.get_numbuttons(), js.get_numhats(),
        )
        return [Connected(cid)]

    def _detach(self, cid: int) -> List[ControllerEvent]:
        js = self._joysticks.pop(cid, None)
        if js is None:
            return []
        js.quit()
        self._hats.pop(cid, None)
        LOG.info("detached controller %d", cid)
        return [Disconnected(cid)]

    def _hat_events(self, cid: int, value) -> List[ControllerEvent]:
        prev = self._hats.get(cid, (0, 0))
        value = (int(value[0]), int(value[1]))
        self._hats[cid] = value
        events = []
        for component, (axis, negative, positive) in enumerate((HAT_X, HAT_Y)):
            old, new = prev[component], value[component]
            if old == new:
                continue
            events.append(AxisChanged(cid, axis, float(new)))
            for button, sign in ((negative, -1), (positive, 1)):
                if old == sign:
                    events.append(ButtonReleased(cid, button))
            for button, sign in ((negative, -1), (positive, 1)):
                if new == sign:
                    events.append(ButtonPressed(cid, button))
        return events

    def translate(self, ev) -> List[ControllerEvent]:
        """Translate one pygame event into zero or more controller events."""
        if ev.type == pygame.JOYBUTTONDOWN:
            return [ButtonPressed(ev.instance_id, self.mapping.button_for(ev.button))]
        if ev.type == pygame.JOYBUTTONUP:
            return [ButtonReleased(ev.instance_id, self.mapping.button_for(ev.button))]
        if ev.type == pygame.JOYAXISMOTION:
            axis, invert = self.mapping.axis_for(ev.axis)
            value = float(ev.value)
            return [AxisChanged(ev.instance_id, axis, -value if invert else value)]
        if ev.type == pygame.JOYHATMOTION:
            if ev.hat == 0:
                return self._hat_events(ev.instance_id, ev.value)
            return [OtherEvent(ev.instance_id, "hat")]
        if ev.type == pygame.JOYBALLMOTION:
            return [OtherEvent(ev.instance_id, "ball")]
        if ev.type == pygame.JOYDEVICEADDED:
            return self._attach(ev.device_index)
        if ev.type == pygame.JOYDEVICEREMOVED:
            return self._detach(ev.instance_id)
        return []

    def _pump(self):
        for ev in pygame.event.get():
            self._queue.extend(self.translate(ev))

    def next_event(self) -> Optional[ControllerEvent]:
        if not self._queue and self._opened:
            self._pump()
        if self._queue:
            return self._queue.popleft()
        return None

    def enumerate(self) -> List[Tuple[int, Any]]:
        return list(self._joysticks.items())

    def is_connected(self, handle) -> bool:
        return any(js is handle for js in self._joysticks.values())

    def name(self, handle) -> str:
        return handle.get_name() or ""

    def is_pressed(self, handle, button: Button) -> bool:
        numbuttons = handle.get_numbuttons()
        for index in self.mapping.button_indices(button):
            if index < numbuttons and handle.get_button(index):
                return True
        hat = HAT_BUTTONS.get(button)
        if hat is not None and handle.get_numhats() > 0:
            component, sign = hat
            return handle.get_hat(0)[component] == sign
        return False
