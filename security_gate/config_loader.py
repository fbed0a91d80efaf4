"""
Configuration Loader for the security gate.

Reads the threshold YAML file and validates it into frozen pydantic models.
Layering for the values that locate inputs:
    hardcoded defaults < env vars < CLI args

Usage:
    from security_gate.config_loader import load_config
    config = load_config("thresholds.yml")
    thresholds = config.active_thresholds
"""

from __future__ import annotations

import logging
import os
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

from security_gate.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_CONFIG_PATH = PACKAGE_DIR / "thresholds.yml"
DEFAULT_RESULTS_DIR = Path("reports")

Profile = Literal["production", "development"]

# info is accepted but never thresholded
_SEVERITY_KEYS = frozenset({"critical", "high", "medium", "low", "info"})

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


class SeverityCounts(BaseModel):
    """Per-severity limits. ``None`` means the severity is not thresholded.

    ``info`` is never thresholded, so an ``info`` key is ignored.
    """

    critical: Optional[int] = Field(default=None, ge=0)
    high: Optional[int] = Field(default=None, ge=0)
    medium: Optional[int] = Field(default=None, ge=0)
    low: Optional[int] = Field(default=None, ge=0)

    model_config = {"frozen": True, "extra": "ignore"}

    @model_validator(mode="before")
    @classmethod
    def _warn_unknown_keys(cls, data: Any) -> Any:
        # Unknown keys are dropped by "extra: ignore"; name them in the log
        if isinstance(data, dict):
            for key in data:
                if key not in _SEVERITY_KEYS:
                    logger.warning("⚠️  Unknown severity '%s' in thresholds (ignored)", key)
        return data

    def limit_for(self, severity: str) -> Optional[int]:
        return getattr(self, severity, None)


class ThresholdConfig(BaseModel):
    block: SeverityCounts = Field(default_factory=SeverityCounts)
    warn: SeverityCounts = Field(default_factory=SeverityCounts)

    model_config = {"frozen": True}

    @field_validator("block", "warn", mode="before")
    @classmethod
    def _empty_section(cls, v: Any) -> Any:
        # "warn:" with no body parses as None
        return {} if v is None else v


class ToolOverride(BaseModel):
    """Block-only thresholds scoped to one tool's findings."""

    block: SeverityCounts = Field(default_factory=SeverityCounts)

    model_config = {"frozen": True}

    @field_validator("block", mode="before")
    @classmethod
    def _empty_section(cls, v: Any) -> Any:
        return {} if v is None else v


class Exemption(BaseModel):
    """Time-bounded allow-list entry for one ``(tool, ruleId)`` pair.

    ``expiresAfter`` is kept as ISO text; YAML dates and timestamps are
    converted on load. Whether it is in the future is decided at evaluation
    time against an explicit clock.
    """

    tool: str
    rule_id: str = Field(alias="ruleId")
    reason: str = ""
    expires_after: str = Field(alias="expiresAfter")

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("tool", "rule_id", mode="before")
    @classmethod
    def _stringify_number(cls, v: Any) -> Any:
        # Unquoted YAML advisory ids (npm "source") load as numbers
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("expires_after", mode="before")
    @classmethod
    def _stringify_date(cls, v: Any) -> Any:
        if isinstance(v, (date, datetime)):
            return v.isoformat()
        return v


class Settings(BaseModel):
    active_profile: Profile = "production"
    fail_on_scanner_error: bool = False
    require_all_scanners: bool = False
    detailed_reports: bool = True
    upload_sarif: bool = False

    model_config = {"frozen": True}


class GateConfig(BaseModel):
    """Full contents of the threshold file."""

    production: Optional[ThresholdConfig] = None
    development: Optional[ThresholdConfig] = None
    tool_overrides: Dict[str, ToolOverride] = Field(default_factory=dict)
    exemptions: List[Exemption] = Field(default_factory=list)
    settings: Settings = Field(default_factory=Settings)

    model_config = {"frozen": True}

    @field_validator("tool_overrides", "exemptions", "settings", mode="before")
    @classmethod
    def _empty_section(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None:
            return [] if info.field_name == "exemptions" else {}
        return v

    @property
    def active_profile(self) -> str:
        return self.settings.active_profile

    @property
    def active_thresholds(self) -> ThresholdConfig:
        profile = getattr(self, self.settings.active_profile)
        if profile is None:
            raise ConfigurationError(
                f"Active profile '{self.settings.active_profile}' is not defined"
            )
        return profile

    def with_profile(self, profile: str) -> "GateConfig":
        """Return a validated copy with ``settings.active_profile`` replaced."""
        raw = self.model_dump(by_alias=True)
        raw["settings"]["active_profile"] = profile
        return validate_config(raw)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def validate_config(raw: Any) -> GateConfig:
    """Validate a decoded threshold document.

    Raises
    ------
    ConfigurationError
        If the document is not a mapping, violates the schema, or its active
        profile has no thresholds.
    """
    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"Threshold file must contain a mapping, got {type(raw).__name__}"
        )

    try:
        config = GateConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid threshold configuration: {exc}") from exc

    if getattr(config, config.active_profile) is None:
        raise ConfigurationError(
            f"Active profile '{config.active_profile}' is not defined"
        )
    return config


def load_config(path: Union[str, Path]) -> GateConfig:
    """Load and validate the threshold YAML file at *path*."""
    config_path = Path(path)
    if not config_path.is_file():
        raise ConfigurationError(f"Threshold file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse {config_path}: {exc}") from exc
    except OSError as exc:
        raise ConfigurationError(f"Cannot read {config_path}: {exc}") from exc

    config = validate_config(raw)
    logger.info(
        "🔧 Using '%s' threshold profile from %s", config.active_profile, config_path
    )
    return config


# ---------------------------------------------------------------------------
# Environment overrides
# ---------------------------------------------------------------------------

# (env var names, option key). First name present wins; INPUT_* names are
# what GitHub Actions sets for action inputs.
_ENV_MAPPINGS = [
    (("SECURITY_GATE_CONFIG", "INPUT_CONFIG"), "config"),
    (("SECURITY_GATE_RESULTS_DIR", "INPUT_RESULTS_DIR"), "results_dir"),
    (("SECURITY_GATE_PROFILE", "INPUT_PROFILE"), "profile"),
]


def load_env_overrides(environ: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """Return the option values explicitly set in the environment.

    Empty variables are skipped so that an unset action input does not
    clobber defaults.
    """
    env = os.environ if environ is None else environ
    overrides: Dict[str, str] = {}

    for env_names, key in _ENV_MAPPINGS:
        for env_name in env_names:
            value = env.get(env_name)
            if value:
                overrides[key] = value
                break

    return overrides
