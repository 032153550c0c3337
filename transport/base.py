"""Publish transport contract"""
import abc


class Transport(abc.ABC):
    """A pub/sub publisher bound to one topic for its whole lifetime.

    Implementations raise core.errors.TransportError for every failure.
    """

    name = "transport"

    def __init__(self, topic: str):
        self.topic = topic

    async def open(self):
        pass

    async def close(self):
        pass

    @abc.abstractmethod
    async def publish(self, payload: bytes):
        raise NotImplementedError

    async def __aenter__(self):
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
