#!/usr/bin/env python3
"""
Animated GIF encoder.

All frames share one global palette, built by quantising a strip of every
frame at once. The palette is stored twice (a low and a high bank) and
frames alternate banks, so consecutive frames never carry identical index
data. Pillow's writer folds a frame into its predecessor when the two are
identical; alternating banks keeps every frame in the file while the
decoded colours stay the same.

The caller gets either the finished bytes or an ``EncodingError``; there is
no partial output.
"""

from __future__ import annotations

import io
import logging
from typing import Sequence

from PIL import Image

from frame_compositor import Frame
from vf_errors import EncodingError

log = logging.getLogger("VariantForge")

GIF_MIME_TYPE = "image/gif"
PALETTE_BANK_SIZE = 128
DEFAULT_PALETTE_COLORS = PALETTE_BANK_SIZE

# Maps a low-bank index to the same colour in the high bank.
_HIGH_BANK = bytes((i + PALETTE_BANK_SIZE) & 0xFF for i in range(256))


def build_global_palette(frames: Sequence[Frame], palette_colors: int) -> tuple[Image.Image, list[int]]:
    """
    Quantise all frames together.

    Returns the paletted strip (frames stacked top to bottom) and a 256-entry
    RGB palette whose high bank repeats the low bank.
    """
    width, height = frames[0].pixels.size
    strip = Image.new("RGB", (width, height * len(frames)))
    try:
        for slot, frame in enumerate(frames):
            rgb = frame.pixels.convert("RGB")
            strip.paste(rgb, (0, slot * height))
            rgb.close()
        paletted = strip.quantize(colors=palette_colors, method=Image.Quantize.MEDIANCUT)
    finally:
        strip.close()

    low_bank = (paletted.getpalette() or [])[: PALETTE_BANK_SIZE * 3]
    low_bank += [0] * (PALETTE_BANK_SIZE * 3 - len(low_bank))
    return paletted, low_bank + low_bank


def split_frames(paletted: Image.Image, palette: list[int], count: int) -> list[Image.Image]:
    """Cut the strip back into frames, odd frames using the high bank."""
    width = paletted.width
    height = paletted.height // count
    images = []
    for slot in range(count):
        data = paletted.crop((0, slot * height, width, (slot + 1) * height)).tobytes()
        if slot % 2:
            data = data.translate(_HIGH_BANK)
        image = Image.frombytes("P", (width, height), data)
        image.putpalette(palette)
        images.append(image)
    return images


def encode_gif(
    frames: Sequence[Frame],
    frame_delay_ms: int,
    palette_colors: int = DEFAULT_PALETTE_COLORS,
) -> bytes:
    """Encode ``frames`` (any order, written by index) as a looping GIF."""
    if not frames:
        raise EncodingError("No frames to encode")
    if frame_delay_ms < 0:
        raise EncodingError(f"frame_delay_ms must be >= 0, got {frame_delay_ms}")
    if not 2 <= palette_colors <= PALETTE_BANK_SIZE:
        raise EncodingError(f"palette_colors must be in 2..{PALETTE_BANK_SIZE}, got {palette_colors}")

    ordered = sorted(frames, key=lambda frame: frame.index)
    size = ordered[0].pixels.size
    if any(frame.pixels.size != size for frame in ordered):
        raise EncodingError("All frames must share the same dimensions")

    paletted: list[Image.Image] = []
    try:
        strip, palette = build_global_palette(ordered, palette_colors)
        try:
            paletted = split_frames(strip, palette, len(ordered))
        finally:
            strip.close()

        with io.BytesIO() as buffer:
            paletted[0].save(
                buffer,
                format="GIF",
                save_all=True,
                append_images=paletted[1:],
                duration=frame_delay_ms,
                loop=0,
                # Palette optimisation would drop the unused bank.
                optimize=False,
            )
            data = buffer.getvalue()
    except (OSError, ValueError) as exc:
        raise EncodingError(f"GIF encoding failed: {exc}") from exc
    finally:
        for image in paletted:
            image.close()

    log.debug("Encoded %d frames into %d bytes", len(ordered), len(data))
    return data
