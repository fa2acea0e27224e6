#!/usr/bin/env python3
"""Command-line variant generator: render a preset locally and optionally pin it."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from animation_encoder import GIF_MIME_TYPE
from pinata_client import variant_filename
from variant_pipeline import VariantPipeline, decode_source
from variant_presets import lookup, preset_keys
from vf_config import load_config
from vf_errors import ValidationError, VariantError


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)-7s %(message)s",
        datefmt="%H:%M:%S",
    )


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate an animated NFT variant GIF")
    parser.add_argument("source", help="Local image path or http(s) URL")
    parser.add_argument("--preset", required=True, choices=preset_keys(), help="Variant preset")
    parser.add_argument("--name", default=None, help="NFT name used for the stored filename")
    parser.add_argument("--out", default=None, help="Write the GIF to this path")
    parser.add_argument("--upload", action="store_true", help="Pin the GIF to IPFS via Pinata")
    parser.add_argument("--group-id", default=None, help="Pinata group for the upload")
    parser.add_argument("--config", default=None, help="Optional path to config.yaml")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def read_source(pipeline: VariantPipeline, source: str) -> bytes:
    if source.startswith(("http://", "https://")):
        return pipeline.fetch_source(source)
    path = Path(source).expanduser()
    if not path.is_file():
        raise ValidationError(f"Source image not found: {path}")
    return path.read_bytes()


def run(args: argparse.Namespace, pipeline: Optional[VariantPipeline] = None) -> int:
    log = logging.getLogger("VariantForge")
    if not args.out and not args.upload:
        log.error("Nothing to do: pass --out and/or --upload")
        return 2

    if pipeline is None:
        pipeline = VariantPipeline(load_config(args.config))

    try:
        preset = lookup(args.preset)
        source_bytes = read_source(pipeline, args.source)
        with decode_source(source_bytes) as image:
            gif_bytes = pipeline.render(image, preset)

        if args.out:
            out_path = Path(args.out).expanduser()
            out_path.parent.mkdir(parents=True, exist_ok=True)
            out_path.write_bytes(gif_bytes)
            log.info("Wrote %s (%d bytes)", out_path, len(gif_bytes))

        if args.upload:
            result = pipeline.uploader.upload(
                gif_bytes,
                GIF_MIME_TYPE,
                variant_filename(args.name, preset),
                group_id=args.group_id or pipeline.default_group_id,
            )
            print(result.resolved_uri)
    except ValidationError as exc:
        log.error("%s", exc)
        return 2
    except VariantError as exc:
        log.error("%s: %s", type(exc).__name__, exc)
        return 1
    return 0


def main(argv: Optional[list[str]] = None) -> None:
    args = parse_args(argv)
    configure_logging(args.verbose)
    sys.exit(run(args))


if __name__ == "__main__":
    main()
