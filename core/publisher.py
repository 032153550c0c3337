"""Snapshot publisher loop

Every tick: drain queued events, poll the first enumerated controller, stamp,
serialize and publish, then sleep for the configured interval. Any transport or
serialization failure ends the loop.
"""
import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from core.aggregator import StateAggregator, utc_now
from core.errors import SerializationError, TransportError
from core.reader import DeviceSource
from core.state import POLLED_BUTTONS
from core.wire import to_wire
from transport.base import Transport

LOG = logging.getLogger("padbridge.publisher")

_MIN_STEP = timedelta(microseconds=1)


class SnapshotPublisher:
    def __init__(
        self,
        source: DeviceSource,
        aggregator: StateAggregator,
        transport: Transport,
        interval_ms: int = 50,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        self.source = source
        self.aggregator = aggregator
        self.transport = transport
        self.interval = interval_ms / 1000.0
        self._clock = clock or utc_now
        self._last_stamp: Optional[datetime] = None
        self.ticks = 0

    def drain(self) -> int:
        count = 0
        while True:
            event = self.source.next_event()
            if event is None:
                return count
            self.aggregator.apply_event(event)
            count += 1

    def sample(self) -> Optional[int]:
        controllers = self.source.enumerate()
        if not controllers:
            return None
        controller_id, handle = controllers[0]
        connected = self.source.is_connected(handle)
        levels = ((button, self.source.is_pressed(handle, button)) for button in POLLED_BUTTONS)
        self.aggregator.refresh_polled_state(controller_id, connected, self.source.name(handle), levels)
        return controller_id

    def stamp(self) -> datetime:
        now = self._clock()
        if self._last_stamp is not None and now <= self._last_stamp:
            now = self._last_stamp + _MIN_STEP
        self._last_stamp = now
        self.aggregator.snapshot.time = now
        return now

    async def tick(self) -> bytes:
        drained = self.drain()
        sampled = self.sample()
        self.stamp()
        payload = to_wire(self.aggregator.snapshot)
        await self.transport.publish(payload)
        self.ticks += 1
        LOG.debug(
            "tick %d: %d event(s), sampled %s, %d bytes to %s",
            self.ticks, drained, sampled, len(payload), self.transport.topic,
        )
        return payload

    async def run(self):
        LOG.info("publishing every %d ms on %s", round(self.interval * 1000), self.transport.topic)
        while True:
            try:
                await self.tick()
            except TransportError as e:
                LOG.error("publish failed, stopping: %s", e)
                raise
            except SerializationError as e:
                LOG.error("snapshot serialization failed, stopping: %s", e)
                raise
            await asyncio.sleep(self.interval)
