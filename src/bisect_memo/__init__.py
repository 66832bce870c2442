"""
bisect-memo - single-slot memoization for asynchronous producers.

This package provides:
- MemoizedTask: one shared in-flight/last result with optional expiry
- bisect(): factory returning a MemoizedTask
- memoized(): decorator form for producer functions
- MemoSettings: environment-driven defaults
"""

from .cache import memoized
from .config import MemoSettings
from .exceptions import BisectMemoError
from .exceptions import ConfigurationError
from .task import MemoizedTask
from .task import bisect

__version__ = "1.0.0"

__all__ = [
    "MemoizedTask",
    "bisect",
    "memoized",
    "MemoSettings",
    "BisectMemoError",
    "ConfigurationError",
]
