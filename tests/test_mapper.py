import pytest

from core.errors import ConfigError
from core.state import Axis, Button
from mapper import ControllerMapping


def test_default_layout():
    m = ControllerMapping.default()

    assert m.button_for(0) is Button.South
    assert m.button_for(8) is Button.Mode
    assert m.axis_for(1) == (Axis.LeftStickY, True)
    assert m.axis_for(0) == (Axis.LeftStickX, False)


def test_unmapped_indices_fall_back_to_unknown():
    m = ControllerMapping.default()

    assert m.button_for(42) is Button.Unknown
    assert m.axis_for(42) == (Axis.Unknown, False)


def test_profile_with_invert(tmp_path):
    path = tmp_path / "pad.yaml"
    path.write_text(
        "buttons: {0: East, 1: East, 2: C}\n"
        "axes:\n"
        "  '0': RightStickX\n"
        "  3: {axis: LeftStickY, invert: true}\n",
        encoding="utf-8",
    )

    m = ControllerMapping.load_profile(str(path))

    assert m.button_indices(Button.East) == [0, 1]
    assert m.button_for(2) is Button.C
    assert m.axis_for(0) == (Axis.RightStickX, False)
    assert m.axis_for(3) == (Axis.LeftStickY, True)


@pytest.mark.parametrize(
    "profile",
    [
        {"buttons": {0: "Turbo"}},
        {"axes": {0: {"axis": "Wheel"}}},
        {"buttons": {"a": "South"}},
        {"buttons": {-1: "South"}},
        {"triggers": {}},
        ["South"],
    ],
)
def test_bad_profiles_are_rejected(profile):
    with pytest.raises(ConfigError):
        ControllerMapping.from_dict(profile)


def test_missing_profile_file(tmp_path):
    with pytest.raises(ConfigError):
        ControllerMapping.load_profile(str(tmp_path / "missing.yaml"))


def test_enums_order_by_declaration():
    assert Button.South < Button.Unknown
    assert sorted([Button.DPadUp, Button.East, Button.South]) == [Button.South, Button.East, Button.DPadUp]
    assert Axis.DPadY > Axis.LeftStickX
