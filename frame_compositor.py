#!/usr/bin/env python3
"""
Frame compositor for animated variants.

The source is resized once; every frame is then derived from that pristine
base by blending a full-frame tint layer at the frame's opacity. Frames
never read from one another, so tint cannot compound across the loop.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from PIL import Image, ImageChops

from opacity_curve import frame_opacity
from variant_presets import BlendMode, PresetConfig
from vf_errors import CompositingError

log = logging.getLogger("VariantForge")

DEFAULT_OUTPUT_CAP = 480

BLEND_OPS: dict[BlendMode, Callable[[Image.Image, Image.Image], Image.Image]] = {
    BlendMode.SCREEN: ImageChops.screen,
    BlendMode.MULTIPLY: ImageChops.multiply,
}


@dataclass
class Frame:
    index: int
    opacity: float
    pixels: Image.Image

    def close(self) -> None:
        self.pixels.close()


def compute_output_size(width: int, height: int, output_cap: int = DEFAULT_OUTPUT_CAP) -> tuple[int, int]:
    """Cap the longer side at ``output_cap``, keep aspect, never upscale."""
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid source size {width}x{height}")
    if output_cap <= 0:
        raise ValueError(f"output_cap must be positive, got {output_cap}")

    scale = min(1.0, output_cap / max(width, height))
    return max(1, round(width * scale)), max(1, round(height * scale))


def prepare_base(source: Image.Image, output_cap: int = DEFAULT_OUTPUT_CAP) -> Image.Image:
    """Return an RGBA copy of ``source`` scaled to fit ``output_cap``."""
    rgba = source.convert("RGBA")
    size = compute_output_size(rgba.width, rgba.height, output_cap)
    if size == rgba.size:
        return rgba
    try:
        return rgba.resize(size, Image.Resampling.LANCZOS)
    finally:
        rgba.close()


def blend_frame(
    base_rgb: Image.Image,
    blended: Image.Image,
    alpha: Image.Image,
    opacity: float,
) -> Image.Image:
    """Mix the fully blended layer over the base at ``opacity``."""
    frame = Image.blend(base_rgb, blended, opacity)
    frame.putalpha(alpha)
    return frame


def composite(
    source: Image.Image,
    preset: PresetConfig,
    frame_count: int,
    output_cap: int = DEFAULT_OUTPUT_CAP,
) -> list[Frame]:
    """Produce ``frame_count`` tinted RGBA frames, in index order."""
    if frame_count <= 0:
        raise ValueError(f"frame_count must be positive, got {frame_count}")

    frames: list[Frame] = []
    intermediates: list[Image.Image] = []
    try:
        base = prepare_base(source, output_cap)
        intermediates.append(base)
        base_rgb = base.convert("RGB")
        alpha = base.getchannel("A")
        tint_layer = Image.new("RGB", base.size, preset.tint)
        intermediates.extend((base_rgb, alpha, tint_layer))

        # Full-strength blend is identical for every frame; only the mix varies.
        blended = BLEND_OPS[preset.blend_mode](base_rgb, tint_layer)
        intermediates.append(blended)

        for index in range(frame_count):
            opacity = frame_opacity(preset, index, frame_count)
            frames.append(Frame(index, opacity, blend_frame(base_rgb, blended, alpha, opacity)))
    except (OSError, ValueError) as exc:
        for frame in frames:
            frame.close()
        raise CompositingError(f"Compositing failed: {exc}") from exc
    finally:
        for image in intermediates:
            image.close()

    log.debug(
        "Composited %d frames at %dx%d (%s, %s)",
        frame_count, frames[0].pixels.width, frames[0].pixels.height,
        preset.blend_mode.value, preset.curve.value,
    )
    return frames
