"""Dry-run transport that only logs what would be published"""
import logging

from transport.base import Transport

LOG = logging.getLogger("padbridge.transport")


class LogTransport(Transport):
    name = "log"

    def __init__(self, topic: str):
        super().__init__(topic)
        self.published = 0

    async def open(self):
        LOG.warning("dry-run mode — snapshots for %r are logged, not published", self.topic)

    async def publish(self, payload: bytes):
        self.published += 1
        LOG.debug("dry-run publish #%d to %s: %s", self.published, self.topic, payload.decode("utf-8"))
