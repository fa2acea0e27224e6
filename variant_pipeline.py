#!/usr/bin/env python3
"""
Variant generation pipeline for VariantForge.

One request is one synchronous job:

  Idle -> Fetching -> Decoding -> Compositing -> Encoding -> Uploading -> Done

Any stage can move the job to Failed. Nothing is cached between jobs, so a
retried request always starts again from the source fetch.
"""

from __future__ import annotations

import enum
import io
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional
from urllib.parse import urlparse

import requests
from PIL import Image, UnidentifiedImageError

from animation_encoder import GIF_MIME_TYPE, encode_gif
from frame_compositor import composite, compute_output_size
from pinata_client import PinataClient, variant_filename
from variant_presets import PresetConfig, lookup
from vf_errors import SourceFetchError, ValidationError, VariantError

log = logging.getLogger("VariantForge")

FETCH_CHUNK_BYTES = 64 * 1024


class JobStage(enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    DECODING = "decoding"
    COMPOSITING = "compositing"
    ENCODING = "encoding"
    UPLOADING = "uploading"
    DONE = "done"
    FAILED = "failed"


_TERMINAL = (JobStage.DONE, JobStage.FAILED)


class JobState:
    """Tracks one job through its stages; Done and Failed are terminal."""

    def __init__(self, job_id: str = "-"):
        self.job_id = job_id
        self.stage = JobStage.IDLE
        self.failed_stage: Optional[JobStage] = None
        self.reason: Optional[str] = None

    @property
    def finished(self) -> bool:
        return self.stage in _TERMINAL

    def advance(self, stage: JobStage) -> None:
        if self.finished:
            raise RuntimeError(f"Job {self.job_id} already {self.stage.value}")
        if stage is JobStage.FAILED:
            raise ValueError("Use fail() to mark a job as failed")
        log.info("Job %s: %s -> %s", self.job_id, self.stage.value, stage.value)
        self.stage = stage

    def fail(self, reason: str) -> None:
        if self.finished:
            raise RuntimeError(f"Job {self.job_id} already {self.stage.value}")
        self.failed_stage = self.stage
        self.reason = reason
        self.stage = JobStage.FAILED
        log.error("Job %s failed during %s: %s", self.job_id, self.failed_stage.value, reason)


@dataclass(frozen=True)
class VariantRequest:
    source_image_url: str
    preset: PresetConfig
    nft_name: Optional[str] = None
    group_id: Optional[str] = None


@dataclass(frozen=True)
class GenerationJob:
    source_bytes: bytes
    source_width: int
    source_height: int
    preset: PresetConfig
    frame_count: int
    frame_delay_ms: int
    output_cap: int

    def __post_init__(self) -> None:
        if self.frame_count <= 0:
            raise ValueError(f"frame_count must be positive, got {self.frame_count}")
        if self.frame_delay_ms < 0:
            raise ValueError(f"frame_delay_ms must be >= 0, got {self.frame_delay_ms}")
        if self.output_cap <= 0:
            raise ValueError(f"output_cap must be positive, got {self.output_cap}")

    @property
    def output_size(self) -> tuple[int, int]:
        return compute_output_size(self.source_width, self.source_height, self.output_cap)


@dataclass(frozen=True)
class VariantResult:
    url: str
    preset: str
    content_hash: str
    filename: str
    frame_count: int
    width: int
    height: int

    def to_response(self) -> dict:
        return {"url": self.url, "preset": self.preset}


def _optional_str(payload: Mapping[str, Any], field: str) -> Optional[str]:
    value = payload.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    return value


def validate_request(payload: Any) -> VariantRequest:
    """Turn a raw JSON body into a ``VariantRequest``. Makes no network calls."""
    if not isinstance(payload, Mapping):
        raise ValidationError("Request body must be a JSON object")

    source_url = payload.get("sourceImageUrl")
    preset_key = payload.get("preset")
    if not source_url or not preset_key:
        raise ValidationError("sourceImageUrl and preset are required")
    if not isinstance(source_url, str):
        raise ValidationError("sourceImageUrl must be a string")

    parsed = urlparse(source_url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError(f"sourceImageUrl must be an http(s) URL: {source_url}")

    return VariantRequest(
        source_image_url=source_url,
        preset=lookup(preset_key),
        nft_name=_optional_str(payload, "nftName"),
        group_id=_optional_str(payload, "groupId"),
    )


def decode_source(data: bytes) -> Image.Image:
    """Fully decode image bytes; undecodable input is a ``SourceFetchError``."""
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise SourceFetchError(f"Failed to decode source image: {exc}") from exc
    return image


class VariantPipeline:
    """Fetch, tint, animate and pin one source image per call."""

    def __init__(
        self,
        cfg: dict,
        uploader: Optional[PinataClient] = None,
        session: Optional[requests.Session] = None,
    ):
        self.cfg = cfg
        gen_cfg = cfg.get("generation", {})
        source_cfg = cfg.get("source", {})
        self.frame_count = int(gen_cfg.get("frame_count", 20))
        self.frame_delay_ms = int(gen_cfg.get("frame_delay_ms", 60))
        self.output_cap = int(gen_cfg.get("output_cap", 480))
        self.palette_colors = int(gen_cfg.get("palette_colors", 128))
        self.fetch_timeout = float(source_cfg.get("timeout_seconds", 30.0))
        self.max_source_bytes = int(source_cfg.get("max_bytes", 25 * 1024 * 1024))
        self.default_group_id = cfg.get("storage", {}).get("group_id")
        # None means per-call sessions via the module-level requests helpers.
        self.session = session
        self.uploader = uploader or PinataClient.from_config(cfg, session=session)
        log.info(
            "VariantPipeline initialized (%d frames @ %dms, cap %dpx)",
            self.frame_count, self.frame_delay_ms, self.output_cap,
        )

    def fetch_source(self, url: str) -> bytes:
        """Download the source image, stopping as soon as it exceeds ``max_bytes``."""
        http = self.session or requests
        limit = self.max_source_bytes
        chunks: list[bytes] = []
        try:
            with http.get(url, timeout=self.fetch_timeout, stream=True) as resp:
                if not resp.ok:
                    raise SourceFetchError(
                        f"Failed to fetch source image: {resp.status_code} {resp.reason}"
                    )
                declared = (resp.headers or {}).get("Content-Length", "")
                if declared.isdigit() and int(declared) > limit:
                    raise SourceFetchError(
                        f"Source image is {declared} bytes, limit is {limit}"
                    )
                received = 0
                for chunk in resp.iter_content(chunk_size=FETCH_CHUNK_BYTES):
                    received += len(chunk)
                    if received > limit:
                        raise SourceFetchError(f"Source image exceeds limit of {limit} bytes")
                    chunks.append(chunk)
        except requests.RequestException as exc:
            raise SourceFetchError(f"Failed to fetch source image: {exc}") from exc

        data = b"".join(chunks)
        if not data:
            raise SourceFetchError("Failed to fetch source image: empty response")
        return data

    def build_job(self, source_bytes: bytes, image: Image.Image, preset: PresetConfig) -> GenerationJob:
        return GenerationJob(
            source_bytes=source_bytes,
            source_width=image.width,
            source_height=image.height,
            preset=preset,
            frame_count=self.frame_count,
            frame_delay_ms=self.frame_delay_ms,
            output_cap=self.output_cap,
        )

    def render(self, image: Image.Image, preset: PresetConfig, state: Optional[JobState] = None) -> bytes:
        """Composite and encode ``image``; frames are released before returning."""
        if state:
            state.advance(JobStage.COMPOSITING)
        frames = composite(image, preset, self.frame_count, self.output_cap)
        try:
            if state:
                state.advance(JobStage.ENCODING)
            return encode_gif(frames, self.frame_delay_ms, self.palette_colors)
        finally:
            for frame in frames:
                frame.close()

    def generate(
        self,
        request: VariantRequest,
        job_id: str = "-",
        state: Optional[JobState] = None,
    ) -> VariantResult:
        """
        Run one full job and return the pinned variant.

        Raises the ``VariantError`` subclass for the stage that failed. Pass
        ``state`` to observe the stage the job ended in.
        """
        state = state or JobState(job_id)
        preset = request.preset
        try:
            state.advance(JobStage.FETCHING)
            source_bytes = self.fetch_source(request.source_image_url)

            state.advance(JobStage.DECODING)
            with decode_source(source_bytes) as image:
                job = self.build_job(source_bytes, image, preset)
                log.info(
                    "Job %s: %s preset on %dx%d source",
                    job_id, preset.key, job.source_width, job.source_height,
                )
                gif_bytes = self.render(image, preset, state)

            state.advance(JobStage.UPLOADING)
            filename = variant_filename(request.nft_name, preset)
            upload = self.uploader.upload(
                gif_bytes,
                GIF_MIME_TYPE,
                filename,
                group_id=request.group_id or self.default_group_id,
            )
            state.advance(JobStage.DONE)
        except VariantError as exc:
            state.fail(str(exc))
            raise
        except Exception as exc:
            state.fail(f"{type(exc).__name__}: {exc}")
            raise

        width, height = job.output_size
        return VariantResult(
            url=upload.resolved_uri,
            preset=preset.key,
            content_hash=upload.content_hash,
            filename=filename,
            frame_count=job.frame_count,
            width=width,
            height=height,
        )
