"""Discrete controller events produced by a DeviceSource"""
from dataclasses import dataclass

from core.state import Axis, Button


@dataclass(frozen=True)
class ControllerEvent:
    controller_id: int


@dataclass(frozen=True)
class ButtonPressed(ControllerEvent):
    button: Button


@dataclass(frozen=True)
class ButtonReleased(ControllerEvent):
    button: Button


@dataclass(frozen=True)
class AxisChanged(ControllerEvent):
    axis: Axis
    value: float


@dataclass(frozen=True)
class Connected(ControllerEvent):
    pass


@dataclass(frozen=True)
class Disconnected(ControllerEvent):
    pass


@dataclass(frozen=True)
class OtherEvent(ControllerEvent):
    kind: str = "unknown"
