#!/usr/bin/env python3
"""
Error taxonomy for the VariantForge generator.

Every failure a job can hit is one of these. The HTTP layer maps
``status_code`` straight onto the response; nothing here is retried.
"""

from __future__ import annotations


class VariantError(Exception):
    """Base class for all generation failures."""

    status_code = 500


class ValidationError(VariantError):
    """Malformed request or missing fields. Raised before any network call."""

    status_code = 400


class UnknownPresetError(ValidationError):
    def __init__(self, key):
        super().__init__(f"Unknown preset: {key}")
        self.key = key


class SourceFetchError(VariantError):
    """Source image unreachable, too large, or undecodable."""


class CompositingError(VariantError):
    pass


class EncodingError(VariantError):
    """Frame assembly or stream fault while building the GIF."""


class UploadError(VariantError):
    """Storage backend rejected the upload or could not be reached."""
