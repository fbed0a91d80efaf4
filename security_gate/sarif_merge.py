#!/usr/bin/env python3
"""
SARIF Merge Utility

Merges multiple SARIF files into a single SARIF 2.1.0 log, e.g. for one
upload to GitHub code scanning when ``settings.upload_sarif`` is enabled.

Usage:
    security-gate-sarif-merge --input "reports/*.sarif" --output merged.sarif
"""

from __future__ import annotations

import argparse
import glob
import json
import logging
import sys
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence, Union

from security_gate.exceptions import ScannerOutputError
from security_gate.parsers.base import read_report

logger = logging.getLogger(__name__)

SARIF_VERSION = "2.1.0"
SARIF_SCHEMA = (
    "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/master/"
    "Schemata/sarif-schema-2.1.0.json"
)


def merge_sarif(sarif_files: Iterable[Union[str, Path]]) -> dict[str, Any]:
    """Concatenate the runs of every readable SARIF file.

    Unreadable or run-less files are logged and skipped.
    """
    merged_runs: list[Any] = []

    for file_path in sarif_files:
        try:
            sarif = read_report(file_path)
        except ScannerOutputError as exc:
            logger.warning("⚠️  Skipping %s: %s", file_path, exc)
            continue

        runs = sarif.get("runs") if isinstance(sarif, dict) else None
        if isinstance(runs, list):
            merged_runs.extend(runs)
            logger.info("✓ Merged %d run(s) from %s", len(runs), Path(file_path).name)
        else:
            logger.warning("⚠️  No runs in %s", file_path)

    return {"version": SARIF_VERSION, "$schema": SARIF_SCHEMA, "runs": merged_runs}


def expand_patterns(patterns: Iterable[str]) -> list[str]:
    """Expand glob patterns into a sorted, de-duplicated file list."""
    files: set[str] = set()
    for pattern in patterns:
        files.update(glob.glob(pattern, recursive=True))
    return sorted(files)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="security-gate-sarif-merge",
        description="Merge SARIF files into a single SARIF log",
    )
    parser.add_argument("--input", action="append", required=True, help="Glob pattern of SARIF files (repeatable)")
    parser.add_argument("--output", required=True, help="Path of the merged SARIF file")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

    files = expand_patterns(args.input)
    if not files:
        logger.warning("⚠️  No SARIF files found matching: %s", ", ".join(args.input))
        return 0

    logger.info("Found %d SARIF file(s) to merge", len(files))
    merged = merge_sarif(files)

    try:
        with open(args.output, "w", encoding="utf-8") as fh:
            json.dump(merged, fh, indent=2)
    except OSError:
        logger.exception("❌ Failed to write merged SARIF to %s", args.output)
        return 1

    logger.info("✅ Merged SARIF written to: %s", args.output)
    logger.info("   Total runs: %d", len(merged["runs"]))
    return 0


if __name__ == "__main__":
    sys.exit(main())
