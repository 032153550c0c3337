"""zenoh publish transport using the eclipse-zenoh binding

`ZenohTransport` opens one zenoh session and declares a publisher on the topic
key expression. Endpoints given here replace the ones from the zenoh config
file, if any.
"""
import asyncio
import json
import logging
from typing import List, Optional, Sequence

import zenoh

from core.errors import TransportError
from transport.base import Transport

LOG = logging.getLogger("padbridge.zenoh")


class ZenohTransport(Transport):
    name = "zenoh"

    def __init__(
        self,
        topic: str,
        connect: Sequence[str] = (),
        listen: Sequence[str] = (),
        config_file: Optional[str] = None,
    ):
        super().__init__(topic)
        self.connect: List[str] = list(connect)
        self.listen: List[str] = list(listen)
        self.config_file = config_file
        self._session = None
        self._publisher = None

    def build_config(self):
        try:
            if self.config_file:
                conf = zenoh.Config.from_file(self.config_file)
            else:
                conf = zenoh.Config()
            if self.connect:
                conf.insert_json5("connect/endpoints", json.dumps(self.connect))
            if self.listen:
                conf.insert_json5("listen/endpoints", json.dumps(self.listen))
        except zenoh.ZError as e:
            raise TransportError(self.name, f"invalid zenoh config: {e}") from e
        return conf

    async def open(self):
        conf = self.build_config()
        LOG.info("Starting zenoh session")
        try:
            session = await asyncio.to_thread(zenoh.open, conf)
        except zenoh.ZError as e:
            raise TransportError(self.name, f"could not open session: {e}") from e
        try:
            publisher = session.declare_publisher(self.topic)
        except zenoh.ZError as e:
            session.close()
            raise TransportError(self.name, f"could not declare publisher on {self.topic!r}: {e}") from e
        self._session = session
        self._publisher = publisher
        LOG.info("declared publisher on %s", self.topic)

    async def close(self):
        if self._session is None:
            return
        session, publisher = self._session, self._publisher
        self._session = self._publisher = None
        try:
            publisher.undeclare()
            session.close()
            LOG.info("zenoh session closed")
        except zenoh.ZError as e:
            LOG.warning("error while closing zenoh session: %s", e)

    async def publish(self, payload: bytes):
        if self._publisher is None:
            raise TransportError(self.name, "publish called before the transport was opened")
        try:
            self._publisher.put(payload)
        except zenoh.ZError as e:
            raise TransportError(self.name, f"publish to {self.topic!r} failed: {e}") from e
