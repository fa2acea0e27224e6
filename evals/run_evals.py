#!/usr/bin/env python3
"""
Golden-trace evaluation runner.
Checks the opacity curves against hand-computed values so commits can't
silently change how a preset animates.
"""

import json
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from opacity_curve import frame_opacity  # noqa: E402
from variant_presets import lookup  # noqa: E402

TOLERANCE = 1e-6
DEFAULT_DATASET = os.path.join(os.path.dirname(os.path.abspath(__file__)), "golden_opacity.jsonl")


def load_golden_dataset(path=DEFAULT_DATASET):
    data = []
    if not os.path.exists(path):
        return data
    with open(path, 'r') as f:
        for line in f:
            if line.strip():
                data.append(json.loads(line))
    return data


def run_evals(path=DEFAULT_DATASET):
    print("--- Running VariantForge opacity evals ---")
    dataset = load_golden_dataset(path)
    if not dataset:
        print("No golden dataset found. Passing trivially.")
        return True

    failed = 0
    for item in dataset:
        preset = lookup(item["preset"])
        actual = frame_opacity(preset, item["frame_index"], item["frame_count"])
        if abs(actual - item["expected_opacity"]) > TOLERANCE:
            print(f"[FAIL] {item['id']}: expected {item['expected_opacity']:.6f}, got {actual:.6f}")
            failed += 1

    passed = len(dataset) - failed
    print(f"Results: {passed}/{len(dataset)} passed.")

    if failed:
        print("ERROR: Opacity curve regression detected! Commit blocked.")
        return False

    print("SUCCESS: All evals passed. Commit allowed.")
    return True


if __name__ == "__main__":
    sys.exit(0 if run_evals() else 1)
