"""Mapping profiles: raw pygame joystick indices -> logical Button / Axis

A profile is a small YAML document:

  buttons:
    0: South
    1: East
  axes:
    0: LeftStickX
    1: {axis: LeftStickY, invert: true}

Indices missing from the profile translate to Button.Unknown / Axis.Unknown.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import yaml

from core.errors import ConfigError
from core.state import Axis, Button

LOG = logging.getLogger("padbridge.mapper")

# SDL / xpad layout of an Xbox-style pad. pygame reports stick Y as -1 for up,
# the published convention is +1 for up.
DEFAULT_BUTTONS = {
    0: Button.South,
    1: Button.East,
    2: Button.West,
    3: Button.North,
    4: Button.LeftTrigger,
    5: Button.RightTrigger,
    6: Button.Select,
    7: Button.Start,
    8: Button.Mode,
    9: Button.LeftThumb,
    10: Button.RightThumb,
}

DEFAULT_AXES = {
    0: (Axis.LeftStickX, False),
    1: (Axis.LeftStickY, True),
    2: (Axis.LeftZ, False),
    3: (Axis.RightStickX, False),
    4: (Axis.RightStickY, True),
    5: (Axis.RightZ, False),
}

# hat component -> (axis, button for -1, button for +1)
HAT_X = (Axis.DPadX, Button.DPadLeft, Button.DPadRight)
HAT_Y = (Axis.DPadY, Button.DPadDown, Button.DPadUp)


@dataclass
class ControllerMapping:
    buttons: Dict[int, Button] = field(default_factory=dict)
    axes: Dict[int, Tuple[Axis, bool]] = field(default_factory=dict)

    @classmethod
    def default(cls):
        return cls(buttons=dict(DEFAULT_BUTTONS), axes=dict(DEFAULT_AXES))

    def button_for(self, index: int) -> Button:
        return self.buttons.get(index, Button.Unknown)

    def axis_for(self, index: int) -> Tuple[Axis, bool]:
        """Return (axis, invert) for a raw axis index."""
        return self.axes.get(index, (Axis.Unknown, False))

    def button_indices(self, button: Button) -> List[int]:
        return sorted(i for i, b in self.buttons.items() if b is button)

    @staticmethod
    def _index(raw, section: str) -> int:
        if isinstance(raw, bool):
            raise ConfigError(f"{section}: index {raw!r} is not an integer")
        try:
            index = int(raw)
        except (TypeError, ValueError):
            raise ConfigError(f"{section}: index {raw!r} is not an integer") from None
        if index < 0:
            raise ConfigError(f"{section}: index {index} is negative")
        return index

    @staticmethod
    def _member(enum_cls, name, section: str):
        try:
            return enum_cls(name)
        except ValueError:
            choices = ", ".join(m.value for m in enum_cls)
            raise ConfigError(f"{section}: unknown {enum_cls.__name__} {name!r} (expected one of {choices})") from None

    @classmethod
    def from_dict(cls, data: dict):
        if data is None:
            return cls.default()
        if not isinstance(data, dict):
            raise ConfigError("mapping profile must be a mapping with 'buttons' and/or 'axes'")
        unknown = set(data) - {"buttons", "axes"}
        if unknown:
            raise ConfigError(f"unknown mapping profile keys: {sorted(unknown)}")

        buttons = {}
        for raw, name in (data.get("buttons") or {}).items():
            buttons[cls._index(raw, "buttons")] = cls._member(Button, name, "buttons")

        axes = {}
        for raw, spec in (data.get("axes") or {}).items():
            index = cls._index(raw, "axes")
            if isinstance(spec, dict):
                axes[index] = (cls._member(Axis, spec.get("axis"), "axes"), bool(spec.get("invert", False)))
            else:
                axes[index] = (cls._member(Axis, spec, "axes"), False)

        LOG.debug("loaded mapping: %d button(s), %d axis/axes", len(buttons), len(axes))
        return cls(buttons=buttons, axes=axes)

    @classmethod
    def load_profile(cls, path: str):
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"cannot read mapping profile {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"invalid YAML in mapping profile {path}: {e}") from e
        LOG.info("using mapping profile %s", path)
        return cls.from_dict(data)
