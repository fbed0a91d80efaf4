#!/usr/bin/env python3
"""
Security Gate Evaluator CLI

Evaluates scanner reports against the threshold file and decides whether
the CI/CD pipeline may proceed.

Usage:
    security-gate --config thresholds.yml --results-dir reports

Exit codes:
    0: All gates passed
    1: Security gate failed (thresholds exceeded)
    2: Configuration or runtime error
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional, Sequence, TextIO, Union

from security_gate.config_loader import (
    DEFAULT_CONFIG_PATH,
    DEFAULT_RESULTS_DIR,
    GateConfig,
    load_config,
    load_env_overrides,
)
from security_gate.exceptions import ConfigurationError, SecurityGateError
from security_gate.exemptions import parse_expiry
from security_gate.manifest import DEFAULT_MANIFEST, ReportSource, collect_scan_results
from security_gate.models import EvaluationResult, ScanResult
from security_gate.report import print_report
from security_gate.thresholds import GateEvaluator

logger = logging.getLogger(__name__)

EXIT_PASSED = 0
EXIT_BLOCKED = 1
EXIT_ERROR = 2


def evaluate_results_dir(
    config: GateConfig,
    results_dir: Union[str, Path],
    now: datetime,
    manifest: Iterable[ReportSource] = DEFAULT_MANIFEST,
) -> tuple[EvaluationResult, list[ScanResult]]:
    """Discover, parse and evaluate every report under *results_dir*."""
    scan_results = collect_scan_results(results_dir, manifest)
    result = GateEvaluator(config).evaluate(scan_results, now)
    return result, scan_results


def run_gate(
    config_path: Union[str, Path],
    results_dir: Union[str, Path],
    now: datetime,
    manifest: Iterable[ReportSource] = DEFAULT_MANIFEST,
    profile: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> int:
    """Run one full gate evaluation and return the process exit code.

    Configuration problems stop the run before any report is read.
    """
    try:
        config = load_config(config_path)
        if profile:
            config = config.with_profile(profile)
    except ConfigurationError as exc:
        logger.error("❌ Failed to load configuration: %s", exc)
        return EXIT_ERROR

    result, scan_results = evaluate_results_dir(config, results_dir, now, manifest)
    print_report(result, scan_results, profile=config.active_profile, stream=stream)
    return EXIT_PASSED if result.passed else EXIT_BLOCKED


def _timestamp(value: str) -> datetime:
    parsed = parse_expiry(value)
    if parsed is None:
        raise argparse.ArgumentTypeError(f"not an ISO-8601 timestamp: {value!r}")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="security-gate",
        description="Evaluate security scan results against severity thresholds",
    )
    parser.add_argument(
        "--config",
        help=f"Threshold YAML file (default: {DEFAULT_CONFIG_PATH.name} next to this package)",
    )
    parser.add_argument(
        "--results-dir",
        help=f"Directory holding scanner reports (default: ./{DEFAULT_RESULTS_DIR})",
    )
    parser.add_argument(
        "--profile",
        choices=["production", "development"],
        help="Override settings.active_profile from the threshold file",
    )
    parser.add_argument(
        "--now",
        type=_timestamp,
        help="Evaluation time for exemption expiry (ISO-8601, default: current UTC time)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point for the security gate"""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    env = load_env_overrides()
    config_path = args.config or env.get("config") or DEFAULT_CONFIG_PATH
    results_dir = args.results_dir or env.get("results_dir") or DEFAULT_RESULTS_DIR
    profile = args.profile or env.get("profile")
    # The only clock read; everything downstream takes it as an argument
    now = args.now or datetime.now(timezone.utc)

    logger.info("Config: %s | Results: %s", config_path, results_dir)
    try:
        return run_gate(config_path, results_dir, now, profile=profile)
    except SecurityGateError as exc:
        logger.error("❌ Security gate error: %s", exc)
        return EXIT_ERROR
    except Exception:
        logger.exception("❌ Unexpected error during gate evaluation")
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
