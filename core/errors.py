"""Exception hierarchy for padbridge"""


class BridgeError(Exception):
    """Base class for fatal padbridge errors"""


class ConfigError(BridgeError):
    pass


class SerializationError(BridgeError):
    pass


class TransportError(BridgeError):
    """Failure to open or use the publish channel.

    Always fatal: the publisher loop re-raises it and the process exits.
    """

    def __init__(self, transport: str, message: str):
        super().__init__(f"{transport} transport error: {message}")
        self.transport = transport
        self.message = message
