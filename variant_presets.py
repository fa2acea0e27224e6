#!/usr/bin/env python3
"""
Preset registry for animated variants.

Each preset pairs a tint colour with an opacity envelope, a blend mode and
one animation curve. The table is built once at import and exposed through
a read-only mapping.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from vf_errors import UnknownPresetError


class BlendMode(enum.Enum):
    SCREEN = "screen"
    MULTIPLY = "multiply"


class CurveType(enum.Enum):
    SHIMMER = "shimmer"
    PULSE = "pulse"
    FLICKER = "flicker"
    WAVE = "wave"
    GLOW = "glow"


@dataclass(frozen=True)
class PresetConfig:
    key: str
    label: str
    description: str
    tint: tuple[int, int, int]
    opacity_min: float
    opacity_max: float
    blend_mode: BlendMode
    curve: CurveType
    output_suffix: str
    # Admin defaults shown when the preset is picked in the variant lab.
    default_name: str = ""
    default_multiplier: int = 100
    default_drop_rate: int = 5

    def __post_init__(self) -> None:
        if not 0.0 <= self.opacity_min <= self.opacity_max <= 1.0:
            raise ValueError(
                f"Preset {self.key!r}: need 0 <= opacity_min <= opacity_max <= 1, "
                f"got {self.opacity_min}..{self.opacity_max}"
            )
        if len(self.tint) != 3 or any(not 0 <= c <= 255 for c in self.tint):
            raise ValueError(f"Preset {self.key!r}: tint must be an RGB triple in 0..255")

    @property
    def opacity_range(self) -> float:
        return self.opacity_max - self.opacity_min

    def describe(self) -> dict:
        """JSON-ready catalogue entry."""
        return {
            "key": self.key,
            "label": self.label,
            "description": self.description,
            "tint": list(self.tint),
            "opacity": [self.opacity_min, self.opacity_max],
            "blend_mode": self.blend_mode.value,
            "curve": self.curve.value,
            "default_name": self.default_name,
            "default_multiplier": self.default_multiplier,
            "default_drop_rate": self.default_drop_rate,
        }


_PRESETS = (
    PresetConfig(
        key="golden",
        label="Golden",
        description="Animated shimmer gold tint",
        tint=(255, 200, 50),
        opacity_min=0.05,
        opacity_max=0.45,
        blend_mode=BlendMode.SCREEN,
        curve=CurveType.SHIMMER,
        output_suffix="golden",
        default_name="Golden",
        default_multiplier=200,
        default_drop_rate=3,
    ),
    PresetConfig(
        key="shadow",
        label="Shadow",
        description="Pulsing dark void overlay",
        tint=(60, 0, 120),
        opacity_min=0.10,
        opacity_max=0.55,
        blend_mode=BlendMode.MULTIPLY,
        curve=CurveType.PULSE,
        output_suffix="shadow",
        default_name="Shadow",
        default_multiplier=175,
        default_drop_rate=4,
    ),
    PresetConfig(
        key="crystal",
        label="Crystal",
        description="Icy blue wave shimmer",
        tint=(80, 200, 255),
        opacity_min=0.05,
        opacity_max=0.40,
        blend_mode=BlendMode.SCREEN,
        curve=CurveType.WAVE,
        output_suffix="crystal",
        default_name="Crystal",
        default_multiplier=160,
        default_drop_rate=5,
    ),
    PresetConfig(
        key="inferno",
        label="Inferno",
        description="Flickering fire red overlay",
        tint=(255, 70, 0),
        opacity_min=0.08,
        opacity_max=0.45,
        blend_mode=BlendMode.SCREEN,
        curve=CurveType.FLICKER,
        output_suffix="inferno",
        default_name="Inferno",
        default_multiplier=185,
        default_drop_rate=3,
    ),
    PresetConfig(
        key="spectral",
        label="Spectral",
        description="Ghostly green glow pulse",
        tint=(140, 255, 140),
        opacity_min=0.05,
        opacity_max=0.40,
        blend_mode=BlendMode.SCREEN,
        curve=CurveType.GLOW,
        output_suffix="spectral",
        default_name="Spectral",
        default_multiplier=170,
        default_drop_rate=4,
    ),
)

VARIANT_PRESETS: Mapping[str, PresetConfig] = MappingProxyType({p.key: p for p in _PRESETS})


def lookup(key) -> PresetConfig:
    """Return the preset for ``key`` or raise ``UnknownPresetError``."""
    preset = VARIANT_PRESETS.get(key) if isinstance(key, str) else None
    if preset is None:
        raise UnknownPresetError(key)
    return preset


def preset_keys() -> list[str]:
    return list(VARIANT_PRESETS)


def describe_presets() -> list[dict]:
    return [preset.describe() for preset in VARIANT_PRESETS.values()]
