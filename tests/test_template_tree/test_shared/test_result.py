"""Tests for diagnostic and statistics result types."""

import pytest

from template_tree.shared.result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    TreeStatistics,
)


class TestTreeStatistics:
    """Test suite for TreeStatistics."""

    def test_nodes_per_ms(self) -> None:
        """Test throughput is nodes divided by processing time."""
        stats = TreeStatistics(processing_time_ms=2.0, node_count=10)

        assert stats.nodes_per_ms == 5.0

    def test_nodes_per_ms_without_timing(self) -> None:
        """Test throughput is zero when no time was recorded."""
        assert TreeStatistics(node_count=10).nodes_per_ms == 0.0

    def test_internal_count(self) -> None:
        """Test internal nodes are the non-leaf nodes."""
        stats = TreeStatistics(node_count=7, leaf_count=4)

        assert stats.internal_count == 3


class TestDiagnosticEntry:
    """Test suite for DiagnosticEntry."""

    def test_empty_message_raises(self) -> None:
        """Test diagnostics require a message."""
        with pytest.raises(ValueError, match="Diagnostic message cannot be empty"):
            DiagnosticEntry(DiagnosticSeverity.INFO, "", "composer")

    def test_empty_component_raises(self) -> None:
        """Test diagnostics require a component."""
        with pytest.raises(ValueError, match="Diagnostic component cannot be empty"):
            DiagnosticEntry(DiagnosticSeverity.INFO, "merged", "")
