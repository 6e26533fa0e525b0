"""Result objects and diagnostic types for template tree operations.

This module defines the diagnostics and statistics attached to template
composition results.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()
    INFO = auto()
    WARNING = auto()
    ERROR = auto()
    CRITICAL = auto()   # Composition aborted


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    path: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")


@dataclass
class TreeStatistics:
    """Size and timing figures for a tree or a composition run."""

    processing_time_ms: float = 0.0
    node_count: int = 0
    leaf_count: int = 0
    max_depth: int = 0
    attribute_count: int = 0

    @property
    def internal_count(self) -> int:
        """Number of nodes that have at least one child."""
        return self.node_count - self.leaf_count

    @property
    def nodes_per_ms(self) -> float:
        """Nodes handled per millisecond of processing."""
        if self.processing_time_ms <= 0:
            return 0.0
        return self.node_count / self.processing_time_ms
