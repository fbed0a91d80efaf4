"""Shared fixtures for the security gate test suite."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from security_gate.config_loader import validate_config
from security_gate.models import NormalizedFinding

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture
def fixtures_dir():
    """Directory holding sample scanner reports and a threshold file."""
    return FIXTURES_DIR


@pytest.fixture
def now():
    """Fixed evaluation clock."""
    return datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def make_finding():
    """Factory for findings with sensible defaults."""

    def _make(tool="semgrep", severity="high", rule_id="rule-1", **kwargs):
        defaults = {
            "category": "security",
            "title": f"{rule_id} title",
            "file": "src/app.py",
            "message": "Issue found",
        }
        defaults.update(kwargs)
        return NormalizedFinding(tool=tool, severity=severity, rule_id=rule_id, **defaults)

    return _make


@pytest.fixture
def make_config():
    """Factory building a validated GateConfig from keyword sections."""

    def _make(production=None, development=None, tool_overrides=None, exemptions=None, profile="production"):
        raw = {
            "production": production if production is not None else {"block": {}, "warn": {}},
            "development": development if development is not None else {"block": {}, "warn": {}},
            "settings": {"active_profile": profile},
        }
        if tool_overrides is not None:
            raw["tool_overrides"] = tool_overrides
        if exemptions is not None:
            raw["exemptions"] = exemptions
        return validate_config(raw)

    return _make
