"""
Security gate evaluator for CI/CD pipelines.

Ingests SARIF and tool-specific JSON scanner reports, normalizes them into
one finding schema, applies time-bounded exemptions and severity thresholds,
and maps the verdict to a process exit code.

Key components:
- ``parsers`` -- per-format report parsers
- ``config_loader`` -- threshold file loading and validation
- ``exemptions`` -- allow-list resolution against an explicit clock
- ``thresholds`` -- aggregation and block/warn evaluation
- ``cli`` -- the evaluation driver
"""

from .config_loader import GateConfig, load_config
from .exceptions import ConfigurationError, SecurityGateError
from .models import EvaluationResult, NormalizedFinding, ScanResult
from .thresholds import GateEvaluator

__version__ = "1.0.0"

__all__ = [
    "GateConfig",
    "load_config",
    "ConfigurationError",
    "SecurityGateError",
    "EvaluationResult",
    "NormalizedFinding",
    "ScanResult",
    "GateEvaluator",
]
