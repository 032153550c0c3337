"""In-memory collaborators for exercising the core without hardware or a broker"""
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Set

from core.errors import TransportError
from core.reader import DeviceSource
from core.state import Button
from transport.base import Transport


@dataclass
class FakePad:
    name: str = "Pad A"
    connected: bool = True
    pressed: Set[Button] = field(default_factory=set)


class FakeDeviceSource(DeviceSource):
    def __init__(self):
        self.events = deque()
        self.pads = []
        self.queries = []

    def push(self, *events):
        self.events.extend(events)

    def next_event(self):
        return self.events.popleft() if self.events else None

    def enumerate(self):
        return list(self.pads)

    def is_connected(self, handle):
        return handle.connected

    def name(self, handle):
        return handle.name

    def is_pressed(self, handle, button):
        self.queries.append(button)
        return button in handle.pressed


class StepClock:
    """Deterministic UTC clock advancing by `step` on every call."""

    def __init__(self, start=datetime(2024, 1, 1, tzinfo=timezone.utc), step=timedelta(milliseconds=1)):
        self.now = start
        self.step = step

    def __call__(self):
        self.now = self.now + self.step
        return self.now


class RecordingTransport(Transport):
    name = "recording"

    def __init__(self, topic="remote-control/gamepad"):
        super().__init__(topic)
        self.payloads = []

    async def publish(self, payload):
        self.payloads.append(payload)


class FailingTransport(RecordingTransport):
    name = "failing"

    def __init__(self, fail_after=0, topic="remote-control/gamepad"):
        super().__init__(topic)
        self.fail_after = fail_after

    async def publish(self, payload):
        if len(self.payloads) >= self.fail_after:
            raise TransportError(self.name, "broker went away")
        await super().publish(payload)
