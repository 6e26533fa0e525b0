"""Shared utilities for template tree operations.

This module provides the configuration object, result and diagnostic types,
exceptions, and logging helpers used by the tree engine and the composer.
"""

from .config import (
    DEFAULT_CONFIG,
    ConfigError,
    ConfigValidationError,
    TreeConfig,
)
from .errors import (
    TreeError,
    TreePathError,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)
from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    TreeStatistics,
)

__all__ = [
    "DEFAULT_CONFIG",
    "ConfigError",
    "ConfigValidationError",
    "TreeConfig",
    "TreeError",
    "TreePathError",
    "CorrelationLogger",
    "get_logger",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "TreeStatistics",
]
