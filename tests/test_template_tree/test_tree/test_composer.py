"""Tests for template composition."""

import logging

import pytest

from template_tree.shared import DiagnosticSeverity, TreeConfig
from template_tree.tree import (
    CompositionResult,
    Node,
    TemplateComposer,
    collect_statistics,
    compose_templates,
)


def label_agent_template(name: str, split: str) -> Node:
    root = Node.new_plain("template")
    root.new_child("name", name)
    root.new_child("plugins").new_child("LabelAgent").new_child("split", split)
    return root


class TestTemplateComposer:
    """Test TemplateComposer behaviour."""

    def test_missing_override_keeps_base(self) -> None:
        """Test composing without an override leaves the base unchanged."""
        base = label_agent_template("Volume", "a")
        before = base.to_dict()

        result = TemplateComposer(TreeConfig(preprocess=False)).compose(base)

        assert isinstance(result, CompositionResult)
        assert result.success
        assert not result.merged
        assert result.template is base
        assert base.to_dict() == before
        info = result.get_diagnostics_by_severity(DiagnosticSeverity.INFO)
        assert len(info) == 1
        assert "No override template" in info[0].message

    def test_override_values_win(self) -> None:
        """Test override values replace base values."""
        base = label_agent_template("Volume", "a")
        override = label_agent_template("CustomVolume", "b")

        result = TemplateComposer().compose(base, override)

        assert result.success
        assert result.merged
        assert base.get_child_content("name") == "CustomVolume"

    def test_preprocessed_label_entries_accumulate(self) -> None:
        """Test values below the sentinel become merged list entries."""
        base = label_agent_template("Volume", "a")
        override = label_agent_template("Volume", "b")

        TemplateComposer().compose(base, override)

        matches, found = base.search_children(["template", "plugins", "LabelAgent", "split"])
        assert found
        split = matches[0]
        assert split.content == ""
        assert split.get_all_child_content() == ["a", "b"]

    def test_skip_overwrite_from_config(self) -> None:
        """Test the configured skip list makes values accumulate."""
        base = Node.new_plain("template")
        base.new_child("labels").new_child("x", "a")
        override = Node.new_plain("template")
        override.new_child("labels").new_child("x", "b")

        config = TreeConfig(skip_overwrite=("labels",), preprocess=False)
        compose_templates(base, override, config)

        assert base.get_child("labels").get_child_content("x") == "a,b"

    def test_root_name_mismatch_warns(self) -> None:
        """Test differing root names are reported."""
        base = Node.new_plain("template")
        override = Node.new_plain("custom")

        result = compose_templates(base, override)

        assert result.success
        warnings = result.get_diagnostics_by_severity(DiagnosticSeverity.WARNING)
        assert len(warnings) == 1
        assert "Root names differ" in warnings[0].message

    def test_failure_is_captured(self) -> None:
        """Test unexpected errors produce a failed result instead of raising."""
        base = Node.new_plain("template")
        override = Node.new_plain("template")
        override.children.append("not a node")  # type: ignore

        result = compose_templates(base, override)

        assert not result.success
        assert result.has_errors()
        critical = result.get_diagnostics_by_severity(DiagnosticSeverity.CRITICAL)
        assert critical[0].details == {"exception_type": "AttributeError"}

    def test_correlation_id_is_propagated(self) -> None:
        """Test diagnostics carry the configured correlation ID."""
        config = TreeConfig(correlation_id="req-42")

        result = compose_templates(Node.new_plain("template"), None, config)

        assert result.correlation_id == "req-42"
        assert all(d.correlation_id == "req-42" for d in result.diagnostics)

    def test_statistics_are_collected(self) -> None:
        """Test the result reports the composed tree size."""
        base = label_agent_template("Volume", "a")
        override = label_agent_template("Volume", "b")

        result = compose_templates(base, override)

        assert result.statistics.node_count == sum(1 for _ in base.iter_nodes())
        assert result.statistics.processing_time_ms >= 0.0

    def test_logs_include_component(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test composition logs carry structured component information."""
        caplog.set_level(logging.INFO, logger="template_tree.tree.composer")

        compose_templates(Node.new_plain("template"), Node.new_plain("template"))

        records = [r for r in caplog.records if r.getMessage() == "Template composition completed"]
        assert len(records) == 1
        assert records[0].component == "template_composer"
        assert records[0].success is True


class TestCollectStatistics:
    """Test tree statistics."""

    def test_counts(self) -> None:
        """Test node, leaf, attribute and depth counts."""
        root = Node.new_plain("root")
        counters = root.new_child("counters")
        counters.new_child("a", "1").new_attr("unit", "ms")
        counters.new_child("b", "2")
        root.new_child("name", "x")

        stats = collect_statistics(root)

        assert stats.node_count == 5
        assert stats.leaf_count == 3
        assert stats.internal_count == 2
        assert stats.attribute_count == 1
        assert stats.max_depth == 2


class TestComposerLogging:
    """Test structured log output of the composer."""

    def test_root_name_mismatch_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test differing root names produce a warning record."""
        caplog.set_level(logging.WARNING, logger="template_tree.tree.composer")

        compose_templates(Node.new_plain("template"), Node.new_plain("custom"))

        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert warnings[0].getMessage() == "Root names differ"
        assert warnings[0].base == "template"
        assert warnings[0].override == "custom"

    def test_completion_record_reports_throughput(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test the completion record carries the statistics throughput."""
        caplog.set_level(logging.INFO, logger="template_tree.tree.composer")

        result = compose_templates(
            label_agent_template("Volume", "a"), label_agent_template("Volume", "b")
        )

        record = next(
            r for r in caplog.records if r.getMessage() == "Template composition completed"
        )
        assert record.nodes_per_ms == result.statistics.nodes_per_ms
        assert record.node_count == result.statistics.node_count
