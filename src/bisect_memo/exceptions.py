"""
Custom exceptions for bisect-memo.

Producer and transform errors are never wrapped; they reach the caller
unchanged. These classes cover failures of the library itself.
"""

from typing import Any, Optional


class BisectMemoError(Exception):
    """
    Base exception for all library-level failures.

    Args:
        message (str): Short explanation of the error.
        details (Any | None): Optional offending value or context.
    """

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.details = details


class ConfigurationError(BisectMemoError):
    """Raised when a MemoizedTask is constructed with invalid arguments."""
