#!/usr/bin/env python3
"""Per-frame overlay opacity for each animation curve."""

from __future__ import annotations

import math
from typing import Callable

from variant_presets import CurveType, PresetConfig


def _shimmer(t: float) -> float:
    return 0.5 - 0.5 * math.cos(2 * math.pi * t)


def _pulse(t: float) -> float:
    return abs(math.sin(math.pi * t))


def _flicker(t: float) -> float:
    # Secondary sin(17t) phase term keeps the flicker from looking periodic.
    raw = 0.5 + 0.5 * math.sin(10 * math.pi * t + math.sin(17 * t) * 1.5)
    return max(0.0, min(1.0, raw))


def _wave(t: float) -> float:
    return 0.5 + 0.5 * math.cos(2 * math.pi * t)


def _glow(t: float) -> float:
    return abs(math.sin(2 * math.pi * t)) ** 0.4


CURVES: dict[CurveType, Callable[[float], float]] = {
    CurveType.SHIMMER: _shimmer,
    CurveType.PULSE: _pulse,
    CurveType.FLICKER: _flicker,
    CurveType.WAVE: _wave,
    CurveType.GLOW: _glow,
}


def curve_factor(curve: CurveType, t: float) -> float:
    """Normalised blend factor in ``[0, 1]`` at loop position ``t``."""
    return CURVES[curve](t)


def frame_opacity(preset: PresetConfig, frame_index: int, frame_count: int) -> float:
    """
    Overlay opacity for one frame of a ``frame_count`` loop.

    The result always lies in ``[preset.opacity_min, preset.opacity_max]``.
    """
    if frame_count <= 0:
        raise ValueError(f"frame_count must be positive, got {frame_count}")
    if not 0 <= frame_index < frame_count:
        raise ValueError(f"frame_index {frame_index} outside [0, {frame_count})")

    t = frame_index / frame_count
    value = preset.opacity_min + curve_factor(preset.curve, t) * preset.opacity_range
    return min(preset.opacity_max, max(preset.opacity_min, value))


def opacity_trace(preset: PresetConfig, frame_count: int) -> list[float]:
    return [frame_opacity(preset, i, frame_count) for i in range(frame_count)]
