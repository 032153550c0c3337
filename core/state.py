"""Snapshot models shared by the aggregator, publisher and wire codec"""
from datetime import datetime, timezone
from enum import Enum
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field, field_serializer

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class _OrderedEnum(str, Enum):
    """String enum ordered by declaration, so map keys sort like the layout."""

    def _index(self):
        return list(type(self)).index(self)

    def __lt__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self._index() < other._index()

    def __le__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self._index() <= other._index()

    def __gt__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self._index() > other._index()

    def __ge__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self._index() >= other._index()

    def __str__(self):
        return self.value


class Button(_OrderedEnum):
    South = "South"
    East = "East"
    North = "North"
    West = "West"
    C = "C"
    Z = "Z"
    LeftTrigger = "LeftTrigger"
    LeftTrigger2 = "LeftTrigger2"
    RightTrigger = "RightTrigger"
    RightTrigger2 = "RightTrigger2"
    Select = "Select"
    Start = "Start"
    Mode = "Mode"
    LeftThumb = "LeftThumb"
    RightThumb = "RightThumb"
    DPadUp = "DPadUp"
    DPadDown = "DPadDown"
    DPadLeft = "DPadLeft"
    DPadRight = "DPadRight"
    Unknown = "Unknown"


class Axis(_OrderedEnum):
    LeftStickX = "LeftStickX"
    LeftStickY = "LeftStickY"
    LeftZ = "LeftZ"
    RightStickX = "RightStickX"
    RightStickY = "RightStickY"
    RightZ = "RightZ"
    DPadX = "DPadX"
    DPadY = "DPadY"
    Unknown = "Unknown"


# Buttons queried on every level poll; Unknown has no physical level.
POLLED_BUTTONS = tuple(b for b in Button if b is not Button.Unknown)


class ControllerState(BaseModel):
    """Accumulated state of one physical controller.

    Event-accumulated: button_down_count, button_up_count, axis_value,
    last_event_time (and connected on connect/disconnect events).
    Poll-refreshed: name, connected, button_level.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    button_down_count: Dict[Button, int] = Field(
        default_factory=dict, alias="button_down_event_counter"
    )
    button_up_count: Dict[Button, int] = Field(
        default_factory=dict, alias="button_up_event_counter"
    )
    button_level: Dict[Button, bool] = Field(default_factory=dict, alias="button_pressed")
    axis_value: Dict[Axis, float] = Field(default_factory=dict, alias="axis_state")
    connected: bool = False
    last_event_time: datetime = EPOCH

    @field_serializer("button_down_count", "button_up_count", "button_level", "axis_value", mode="wrap")
    def _sorted_keys(self, value, handler):
        return handler(dict(sorted(value.items())))


class Snapshot(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    controllers: Dict[int, ControllerState] = Field(default_factory=dict, alias="gamepads")
    time: datetime
