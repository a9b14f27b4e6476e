"""jaegerlite error hierarchy and exceptions."""

from __future__ import annotations


class JaegerliteError(Exception):
    """Base exception for all jaegerlite errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class ConfigurationError(JaegerliteError):
    """Raised when the tracer, sampler or agent configuration is invalid."""
    pass


class ExportError(JaegerliteError):
    """Raised inside the exporter when a batch cannot be framed or sent."""
    pass
