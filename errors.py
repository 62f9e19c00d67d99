"""Exception types raised by the label engine."""

from __future__ import annotations


class LabelValidationError(ValueError):
    """Raised when label content or geometry cannot be laid out."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class ZplConsistencyError(RuntimeError):
    """Raised when generated ZPL fails its own structural check."""
