"""Process configuration: YAML config file plus command line overrides"""
import logging
import os
from dataclasses import dataclass, field, replace
from typing import List, Optional

import yaml

from core.errors import ConfigError
from mapper import ControllerMapping

LOG = logging.getLogger("padbridge.config")

DEFAULT_TOPIC = "remote-control/gamepad"
DEFAULT_SLEEP_MS = 50

TRANSPORTS = ("mqtt", "zenoh")

_TOP_LEVEL_KEYS = {"topic", "sleep_ms", "transport", "mqtt", "zenoh", "mapping", "profile"}
_MQTT_KEYS = {"connect", "username", "password", "client_id", "keepalive", "qos", "retain"}
_ZENOH_KEYS = {"connect", "listen", "config"}


@dataclass
class BridgeConfig:
    topic: str = DEFAULT_TOPIC
    sleep_ms: int = DEFAULT_SLEEP_MS
    transport: str = "mqtt"
    connect: List[str] = field(default_factory=list)
    listen: List[str] = field(default_factory=list)
    zenoh_config: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    client_id: Optional[str] = None
    keepalive: int = 60
    qos: int = 0
    retain: bool = False
    mapping: ControllerMapping = field(default_factory=ControllerMapping.default)
    dry_run: bool = False

    def with_overrides(self, **overrides):
        """Return a copy with every non-None override applied.

        Empty `connect` and `listen` lists keep the configured endpoints.
        """
        values = {k: v for k, v in overrides.items() if v is not None}
        for key in ("connect", "listen"):
            if not values.get(key, True):
                del values[key]
        return replace(self, **values)

    def validate(self):
        if not self.topic:
            raise ConfigError("topic must not be empty")
        if self.sleep_ms <= 0:
            raise ConfigError(f"sleep_ms must be positive, got {self.sleep_ms}")
        if self.qos not in (0, 1, 2):
            raise ConfigError(f"qos must be 0, 1 or 2, got {self.qos}")
        if self.transport not in TRANSPORTS:
            raise ConfigError(f"transport must be one of {list(TRANSPORTS)}, got {self.transport!r}")
        if self.transport != "zenoh" and (self.listen or self.zenoh_config):
            raise ConfigError("listen endpoints and zenoh config only apply to the zenoh transport")
        return self


def _expect(value, kind, key):
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ConfigError(f"{key}: expected {kind.__name__}, got {value!r}")
    return value


def _endpoints(value, key):
    if isinstance(value, str):
        value = [value]
    return [str(e) for e in _expect(value, list, key)]


def _section(data, name, allowed):
    section = data.get(name) or {}
    _expect(section, dict, name)
    unknown = set(section) - allowed
    if unknown:
        raise ConfigError(f"unknown {name} keys: {sorted(unknown)}")
    return section


def load_config(path: Optional[str] = None) -> BridgeConfig:
    if path is None:
        return BridgeConfig()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping")

    unknown = set(data) - _TOP_LEVEL_KEYS
    if unknown:
        raise ConfigError(f"unknown config keys: {sorted(unknown)}")

    values = {}
    if "topic" in data:
        values["topic"] = _expect(data["topic"], str, "topic")
    if "sleep_ms" in data:
        values["sleep_ms"] = _expect(data["sleep_ms"], int, "sleep_ms")

    base = os.path.dirname(os.path.abspath(path))
    transport = _expect(data.get("transport", "mqtt"), str, "transport")
    values["transport"] = transport

    mqtt = _section(data, "mqtt", _MQTT_KEYS)
    zenoh = _section(data, "zenoh", _ZENOH_KEYS)
    # endpoints come from the section of the selected transport only
    if transport == "zenoh":
        if "connect" in zenoh:
            values["connect"] = _endpoints(zenoh["connect"], "zenoh.connect")
        if "listen" in zenoh:
            values["listen"] = _endpoints(zenoh["listen"], "zenoh.listen")
        if zenoh.get("config") is not None:
            values["zenoh_config"] = os.path.join(base, _expect(zenoh["config"], str, "zenoh.config"))
    elif "connect" in mqtt:
        values["connect"] = _endpoints(mqtt["connect"], "mqtt.connect")
    for key in ("username", "password", "client_id"):
        if mqtt.get(key) is not None:
            values[key] = str(mqtt[key])
    for key in ("keepalive", "qos"):
        if key in mqtt:
            values[key] = _expect(mqtt[key], int, f"mqtt.{key}")
    if "retain" in mqtt:
        values["retain"] = _expect(mqtt["retain"], bool, "mqtt.retain")

    if "mapping" in data and "profile" in data:
        raise ConfigError("use either 'mapping' or 'profile', not both")
    if "mapping" in data:
        values["mapping"] = ControllerMapping.from_dict(data["mapping"])
    elif "profile" in data:
        profile = _expect(data["profile"], str, "profile")
        values["mapping"] = ControllerMapping.load_profile(os.path.join(base, profile))

    LOG.debug("loaded config %s: %s", path, sorted(values))
    return BridgeConfig(**values)
