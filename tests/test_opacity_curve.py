import math

import pytest

from opacity_curve import curve_factor, frame_opacity, opacity_trace
from variant_presets import VARIANT_PRESETS, CurveType, lookup


@pytest.mark.parametrize("key", list(VARIANT_PRESETS))
@pytest.mark.parametrize("frame_count", [1, 2, 7, 20, 60])
def test_opacity_stays_in_envelope(key, frame_count):
    preset = lookup(key)
    for value in opacity_trace(preset, frame_count):
        assert preset.opacity_min <= value <= preset.opacity_max


def test_golden_trace():
    golden = lookup("golden")
    assert abs(frame_opacity(golden, 0, 20) - golden.opacity_min) < 1e-6
    assert abs(frame_opacity(golden, 10, 20) - golden.opacity_max) < 1e-6


@pytest.mark.parametrize(
    "curve,expected",
    [
        (CurveType.SHIMMER, lambda t: 0.5 - 0.5 * math.cos(2 * math.pi * t)),
        (CurveType.PULSE, lambda t: abs(math.sin(math.pi * t))),
        (CurveType.WAVE, lambda t: 0.5 + 0.5 * math.cos(2 * math.pi * t)),
        (CurveType.GLOW, lambda t: abs(math.sin(2 * math.pi * t)) ** 0.4),
        (
            CurveType.FLICKER,
            lambda t: min(1.0, max(0.0, 0.5 + 0.5 * math.sin(10 * math.pi * t + math.sin(17 * t) * 1.5))),
        ),
    ],
)
def test_curve_closed_forms(curve, expected):
    for i in range(20):
        t = i / 20
        assert abs(curve_factor(curve, t) - expected(t)) < 1e-12
        assert 0.0 <= curve_factor(curve, t) <= 1.0


def test_wave_is_inverted_shimmer():
    crystal = lookup("crystal")
    assert abs(frame_opacity(crystal, 0, 20) - crystal.opacity_max) < 1e-6
    assert abs(frame_opacity(crystal, 10, 20) - crystal.opacity_min) < 1e-6


def test_glow_rises_from_trough():
    spectral = lookup("spectral")
    assert frame_opacity(spectral, 5, 20) > frame_opacity(spectral, 0, 20)
    assert abs(frame_opacity(spectral, 5, 20) - spectral.opacity_max) < 1e-6


def test_trace_is_deterministic():
    inferno = lookup("inferno")
    assert opacity_trace(inferno, 20) == opacity_trace(inferno, 20)


@pytest.mark.parametrize("index,count", [(0, 0), (-1, 20), (20, 20), (0, -5)])
def test_invalid_frame_arguments(index, count):
    with pytest.raises(ValueError):
        frame_opacity(lookup("golden"), index, count)
