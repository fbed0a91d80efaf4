#!/usr/bin/env python3
"""
Security Gate Exceptions Module

Custom exception classes for the security gate evaluator.
Centralized exception definitions for consistent error handling.
"""

__all__ = [
    "SecurityGateError",
    "ConfigurationError",
    "ScannerOutputError",
    "ScannerOutputMissing",
    "ScannerOutputMalformed",
]


class SecurityGateError(Exception):
    """Base exception for all security gate errors"""
    pass


class ConfigurationError(SecurityGateError):
    """Raised when the threshold file is missing or cannot be parsed"""
    pass


class ScannerOutputError(SecurityGateError):
    """Raised when a scanner report cannot be ingested"""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


class ScannerOutputMissing(ScannerOutputError):
    """Raised when an expected scanner report file does not exist"""
    pass


class ScannerOutputMalformed(ScannerOutputError):
    """Raised when a scanner report exists but is not in the expected format"""
    pass
