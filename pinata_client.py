#!/usr/bin/env python3
"""
Pinata (IPFS) upload client.

Pins a finished animation with ``pinFileToIPFS`` and returns the gateway
URI built from the content hash the backend hands back. Failures surface as
``UploadError``; nothing is retried here.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

import requests

from variant_presets import PresetConfig
from vf_errors import UploadError

log = logging.getLogger("VariantForge")

DEFAULT_API_URL = "https://api.pinata.cloud/pinning/pinFileToIPFS"
DEFAULT_GATEWAY_URL = "https://gateway.pinata.cloud"

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9]")


@dataclass(frozen=True)
class UploadResult:
    content_hash: str
    resolved_uri: str


def sanitize_name(name: Optional[str]) -> str:
    """Replace anything outside ``[A-Za-z0-9]`` with ``_`` and lower-case."""
    return _UNSAFE_NAME_CHARS.sub("_", name or "nft").lower()


def variant_filename(name: Optional[str], preset: PresetConfig, extension: str = "gif") -> str:
    return f"{sanitize_name(name)}_{preset.output_suffix}_variant.{extension}"


class PinataClient:
    """Thin wrapper over the Pinata pinning endpoint."""

    def __init__(
        self,
        jwt: str,
        api_url: str = DEFAULT_API_URL,
        gateway_url: str = DEFAULT_GATEWAY_URL,
        timeout: float = 120.0,
        source_tag: str = "variant-generator",
        cid_version: int = 1,
        session: Optional[requests.Session] = None,
    ):
        self.jwt = jwt
        self.api_url = api_url
        self.gateway_url = gateway_url.rstrip("/")
        self.timeout = timeout
        self.source_tag = source_tag
        self.cid_version = cid_version
        self.session = session

    @classmethod
    def from_config(cls, cfg: dict, session: Optional[requests.Session] = None) -> "PinataClient":
        storage = cfg.get("storage", {})
        return cls(
            jwt=storage.get("jwt") or "",
            api_url=storage.get("api_url", DEFAULT_API_URL),
            gateway_url=storage.get("gateway_url", DEFAULT_GATEWAY_URL),
            timeout=float(storage.get("timeout_seconds", 120.0)),
            source_tag=storage.get("source_tag", "variant-generator"),
            cid_version=int(storage.get("cid_version", 1)),
            session=session,
        )

    def gateway_uri(self, content_hash: str) -> str:
        return f"{self.gateway_url}/ipfs/{content_hash}"

    def _form_fields(self, display_name: str, group_id: Optional[str]) -> dict[str, str]:
        options: dict[str, Any] = {"cidVersion": self.cid_version}
        if group_id:
            options["groupId"] = group_id
        metadata = {"name": display_name, "keyvalues": {"source": self.source_tag}}
        return {
            "pinataMetadata": json.dumps(metadata),
            "pinataOptions": json.dumps(options),
        }

    def upload(
        self,
        data: bytes,
        mime_type: str,
        display_name: str,
        group_id: Optional[str] = None,
    ) -> UploadResult:
        """Pin ``data`` under ``display_name``; ``group_id`` only routes it."""
        if not self.jwt:
            raise UploadError("Pinata upload failed: PINATA_JWT is not configured")

        log.info("Uploading %s (%d bytes) to Pinata", display_name, len(data))
        try:
            resp = (self.session or requests).post(
                self.api_url,
                headers={"Authorization": f"Bearer {self.jwt}"},
                files={"file": (display_name, data, mime_type)},
                data=self._form_fields(display_name, group_id),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise UploadError(f"Pinata upload failed: {exc}") from exc

        if not resp.ok:
            raise UploadError(f"Pinata upload failed: {resp.text}")

        try:
            content_hash = resp.json()["IpfsHash"]
        except (ValueError, KeyError, TypeError) as exc:
            raise UploadError(f"Pinata upload failed: unexpected response {resp.text!r}") from exc

        result = UploadResult(content_hash=content_hash, resolved_uri=self.gateway_uri(content_hash))
        log.info("Pinned %s -> %s", display_name, result.resolved_uri)
        return result
