import dataclasses

import pytest

from variant_presets import (
    VARIANT_PRESETS,
    BlendMode,
    CurveType,
    PresetConfig,
    describe_presets,
    lookup,
    preset_keys,
)
from vf_errors import UnknownPresetError, ValidationError


def test_builtin_presets():
    assert preset_keys() == ["golden", "shadow", "crystal", "inferno", "spectral"]
    golden = lookup("golden")
    assert golden.tint == (255, 200, 50)
    assert (golden.opacity_min, golden.opacity_max) == (0.05, 0.45)
    assert golden.blend_mode is BlendMode.SCREEN
    assert golden.curve is CurveType.SHIMMER
    assert lookup("shadow").blend_mode is BlendMode.MULTIPLY


def test_each_curve_used_once():
    curves = [preset.curve for preset in VARIANT_PRESETS.values()]
    assert sorted(c.value for c in curves) == sorted(c.value for c in CurveType)


@pytest.mark.parametrize("key", ["rainbow", "", "GOLDEN", None, 3])
def test_unknown_preset(key):
    with pytest.raises(UnknownPresetError) as exc:
        lookup(key)
    assert isinstance(exc.value, ValidationError)
    assert exc.value.status_code == 400


def test_registry_is_read_only():
    with pytest.raises(TypeError):
        VARIANT_PRESETS["rainbow"] = VARIANT_PRESETS["golden"]
    with pytest.raises(dataclasses.FrozenInstanceError):
        VARIANT_PRESETS["golden"].opacity_max = 1.0


@pytest.mark.parametrize("low,high", [(0.5, 0.4), (-0.1, 0.3), (0.2, 1.1)])
def test_envelope_checked(low, high):
    with pytest.raises(ValueError):
        PresetConfig(
            key="bad", label="Bad", description="", tint=(0, 0, 0),
            opacity_min=low, opacity_max=high,
            blend_mode=BlendMode.SCREEN, curve=CurveType.GLOW, output_suffix="bad",
        )


def test_describe_presets():
    entries = describe_presets()
    assert [e["key"] for e in entries] == preset_keys()
    spectral = entries[-1]
    assert spectral["curve"] == "glow"
    assert spectral["blend_mode"] == "screen"
    assert spectral["tint"] == [140, 255, 140]
    assert spectral["default_multiplier"] == 170
