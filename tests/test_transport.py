import logging

import aiomqtt
import pytest

from core.errors import TransportError
from transport.log import LogTransport
from transport.mqtt import MqttTransport, parse_endpoint


@pytest.mark.parametrize(
    "endpoint,expected",
    [
        ("localhost", ("localhost", 1883)),
        ("broker.lan:1884", ("broker.lan", 1884)),
        ("tcp/10.0.0.2:7447", ("10.0.0.2", 7447)),
        ("mqtt://robot:1883", ("robot", 1883)),
    ],
)
def test_parse_endpoint(endpoint, expected):
    assert parse_endpoint(endpoint) == expected


@pytest.mark.parametrize("endpoint", ["", "tcp/", ":1883", "host:port"])
def test_parse_endpoint_rejects_garbage(endpoint):
    with pytest.raises(ValueError):
        parse_endpoint(endpoint)


class FakeClient:
    instances = []

    def __init__(self, hostname, port=1883, **kwargs):
        self.hostname = hostname
        self.port = port
        self.kwargs = kwargs
        self.published = []
        self.closed = False
        self.fail_publish = False
        FakeClient.instances.append(self)

    async def __aenter__(self):
        if self.hostname.startswith("down"):
            raise aiomqtt.MqttError("connection refused")
        return self

    async def __aexit__(self, *exc):
        self.closed = True

    async def publish(self, topic, payload=None, qos=0, retain=False):
        if self.fail_publish:
            raise aiomqtt.MqttError("not connected")
        self.published.append((topic, payload, qos, retain))


@pytest.fixture
def fake_client(monkeypatch):
    FakeClient.instances = []
    monkeypatch.setattr(aiomqtt, "Client", FakeClient)
    return FakeClient


async def test_mqtt_connects_to_first_reachable_broker(fake_client):
    transport = MqttTransport(
        "remote-control/gamepad",
        ["down-a:1883", "tcp/up:1884"],
        username="pad",
        password="secret",
        client_id="padbridge",
        qos=1,
        retain=True,
    )

    async with transport:
        await transport.publish(b"{}")

    good = fake_client.instances[-1]
    assert (good.hostname, good.port) == ("up", 1884)
    assert good.kwargs["identifier"] == "padbridge"
    assert good.kwargs["username"] == "pad"
    assert good.published == [("remote-control/gamepad", b"{}", 1, True)]
    assert good.closed is True


async def test_mqtt_defaults_to_localhost(fake_client):
    transport = MqttTransport("t")
    await transport.open()
    assert (fake_client.instances[0].hostname, fake_client.instances[0].port) == ("localhost", 1883)
    await transport.close()


async def test_mqtt_open_fails_when_no_broker_answers(fake_client):
    transport = MqttTransport("t", ["down-a", "down-b:1999"])

    with pytest.raises(TransportError) as err:
        await transport.open()

    assert "mqtt transport error" in str(err.value)
    assert "down-a:1883" in str(err.value)
    assert "down-b:1999" in str(err.value)


async def test_mqtt_publish_failure_is_transport_error(fake_client):
    transport = MqttTransport("t", ["up"])
    await transport.open()
    fake_client.instances[-1].fail_publish = True

    with pytest.raises(TransportError, match="publish to 't' failed"):
        await transport.publish(b"{}")
    await transport.close()


async def test_mqtt_publish_before_open():
    with pytest.raises(TransportError):
        await MqttTransport("t").publish(b"{}")


async def test_log_transport_counts_and_logs(caplog):
    caplog.set_level(logging.DEBUG, logger="padbridge.transport")
    transport = LogTransport("remote-control/gamepad")

    async with transport:
        await transport.publish(b'{"gamepads": {}}')
        await transport.publish(b'{"gamepads": {}}')

    assert transport.published == 2
    assert any("dry-run publish #2" in r.getMessage() for r in caplog.records)
