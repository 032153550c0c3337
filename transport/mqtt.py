"""MQTT publish transport using aiomqtt

`MqttTransport` connects to the first reachable broker from its endpoint list
and publishes every snapshot to one fixed topic. There is no reconnect: a lost
broker surfaces as TransportError on the next publish.
"""
import logging
from contextlib import AsyncExitStack
from typing import List, Optional, Sequence, Tuple

import aiomqtt

from core.errors import TransportError
from transport.base import Transport

LOG = logging.getLogger("padbridge.mqtt")

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 1883
_SCHEMES = ("mqtt://", "tcp://", "tcp/")


def parse_endpoint(endpoint: str) -> Tuple[str, int]:
    """Parse 'host', 'host:port', 'tcp/host:port' or 'mqtt://host:port'."""
    text = endpoint.strip()
    for scheme in _SCHEMES:
        if text.startswith(scheme):
            text = text[len(scheme):]
            break
    if not text:
        raise ValueError(f"empty endpoint {endpoint!r}")
    host, sep, port = text.rpartition(":")
    if not sep:
        return text, DEFAULT_PORT
    if not host:
        raise ValueError(f"missing host in endpoint {endpoint!r}")
    try:
        return host, int(port)
    except ValueError:
        raise ValueError(f"invalid port in endpoint {endpoint!r}") from None


class MqttTransport(Transport):
    name = "mqtt"

    def __init__(
        self,
        topic: str,
        endpoints: Sequence[str] = (),
        username: Optional[str] = None,
        password: Optional[str] = None,
        client_id: Optional[str] = None,
        keepalive: int = 60,
        qos: int = 0,
        retain: bool = False,
    ):
        super().__init__(topic)
        self.endpoints: List[Tuple[str, int]] = [parse_endpoint(e) for e in endpoints] or [
            (DEFAULT_HOST, DEFAULT_PORT)
        ]
        self.username = username
        self.password = password
        self.client_id = client_id
        self.keepalive = keepalive
        self.qos = qos
        self.retain = retain
        self._stack = None
        self._client = None

    def _make_client(self, host: str, port: int):
        return aiomqtt.Client(
            host,
            port,
            username=self.username,
            password=self.password,
            identifier=self.client_id,
            keepalive=self.keepalive,
        )

    async def open(self):
        last_error = None
        for host, port in self.endpoints:
            stack = AsyncExitStack()
            try:
                client = await stack.enter_async_context(self._make_client(host, port))
            except aiomqtt.MqttError as e:
                LOG.warning("could not connect to broker %s:%d: %s", host, port, e)
                last_error = e
                continue
            self._stack = stack
            self._client = client
            LOG.info("connected to broker %s:%d", host, port)
            return
        tried = ", ".join(f"{h}:{p}" for h, p in self.endpoints)
        raise TransportError(self.name, f"could not connect to any broker ({tried}): {last_error}") from last_error

    async def close(self):
        if self._stack is None:
            return
        stack, self._stack, self._client = self._stack, None, None
        try:
            await stack.aclose()
            LOG.info("disconnected from broker")
        except aiomqtt.MqttError as e:
            LOG.warning("error while disconnecting from broker: %s", e)

    async def publish(self, payload: bytes):
        if self._client is None:
            raise TransportError(self.name, "publish called before the transport was opened")
        try:
            await self._client.publish(self.topic, payload=payload, qos=self.qos, retain=self.retain)
        except aiomqtt.MqttError as e:
            raise TransportError(self.name, f"publish to {self.topic!r} failed: {e}") from e
