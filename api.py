#!/usr/bin/env python3
"""FastAPI layer for VariantForge animated variant generation."""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from variant_pipeline import VariantPipeline, validate_request
from variant_presets import describe_presets
from vf_config import load_config
from vf_errors import VariantError

log = logging.getLogger("VariantForge")

CFG = load_config()
PIPELINE = VariantPipeline(CFG)

app = FastAPI(
    title="VariantForge API",
    version="1.0",
    description="Turn a static NFT image into a tinted, looping GIF pinned to IPFS.",
)


class VariantImageRequest(BaseModel):
    # All optional so missing fields report as 400 rather than 422.
    sourceImageUrl: Optional[str] = None
    preset: Optional[str] = None
    nftName: Optional[str] = None
    groupId: Optional[str] = None


def configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)-7s %(message)s",
        datefmt="%H:%M:%S",
    )


@app.exception_handler(RequestValidationError)
async def handle_malformed_body(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "Malformed request body"})


@app.exception_handler(VariantError)
async def handle_variant_error(request: Request, exc: VariantError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("[variant-image] %s: %s", type(exc).__name__, exc)
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


@app.exception_handler(Exception)
async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    log.exception("[variant-image] unexpected failure")
    return JSONResponse(status_code=500, content={"error": str(exc) or "Internal error"})


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/presets")
def list_presets() -> list[dict]:
    return describe_presets()


@app.post("/api/variant-image")
def create_variant_image(body: VariantImageRequest) -> dict:
    """Validate, generate, pin, and return ``{url, preset}``."""
    request = validate_request(body.model_dump())
    job_id = uuid.uuid4().hex[:12]
    result = PIPELINE.generate(request, job_id=job_id)
    return result.to_response()


if __name__ == "__main__":
    import uvicorn

    configure_logging()
    api_cfg = CFG.get("api", {})
    uvicorn.run(app, host=api_cfg.get("host", "127.0.0.1"), port=int(api_cfg.get("port", 8000)))
