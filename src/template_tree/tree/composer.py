"""Layering of custom templates over default templates.

The composer wraps ``Node.preprocess_template`` and ``Node.merge`` with the
configured policy and reports what happened through a result object, so
callers can compose an optional override unconditionally.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from template_tree.shared import (
    DEFAULT_CONFIG,
    DiagnosticEntry,
    DiagnosticSeverity,
    TreeConfig,
    TreeStatistics,
    get_logger,
)
from template_tree.tree.node import Node

_COMPONENT = "template_composer"


def collect_statistics(root: Node) -> TreeStatistics:
    """Count nodes, leaves, attributes and depth below ``root``."""
    stats = TreeStatistics()
    stack = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        stats.node_count += 1
        stats.attribute_count += len(node.attributes)
        stats.max_depth = max(stats.max_depth, depth)
        if not node.children:
            stats.leaf_count += 1
        stack.extend((child, depth + 1) for child in node.children)
    return stats


@dataclass
class CompositionResult:
    """Outcome of composing an override template over a base template."""

    template: Optional[Node] = None
    success: bool = True
    merged: bool = False
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    statistics: TreeStatistics = field(default_factory=TreeStatistics)
    correlation_id: Optional[str] = None

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str = _COMPONENT,
        path: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        self.diagnostics.append(
            DiagnosticEntry(
                severity=severity,
                message=message,
                component=component,
                path=path,
                details=details,
                correlation_id=self.correlation_id,
            )
        )

    def has_errors(self) -> bool:
        return any(
            d.severity in (DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL)
            for d in self.diagnostics
        )

    def get_diagnostics_by_severity(
        self, severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        return [d for d in self.diagnostics if d.severity == severity]


class TemplateComposer:
    """Composes custom templates over default templates.

    The base template is modified in place, and nodes of the override are
    adopted into it by reference.
    """

    def __init__(self, config: Optional[TreeConfig] = None) -> None:
        """Initialize composer.

        Args:
            config: Tree configuration; ``skip_overwrite`` and ``preprocess``
                drive composition, ``correlation_id`` tags logs and diagnostics
        """
        self.config = config or DEFAULT_CONFIG
        self.correlation_id = self.config.correlation_id
        self.logger = get_logger(__name__, self.correlation_id, _COMPONENT)

    def compose(self, base: Node, override: Optional[Node] = None) -> CompositionResult:
        """Merge ``override`` into ``base``.

        Args:
            base: Default template, modified in place
            override: Custom template; None leaves ``base`` unchanged

        Returns:
            CompositionResult holding ``base`` and composition diagnostics
        """
        start = time.perf_counter()
        result = CompositionResult(template=base, correlation_id=self.correlation_id)

        if override is None:
            result.add_diagnostic(
                DiagnosticSeverity.INFO,
                "No override template supplied - base template kept as is",
                path=base.name,
            )
            result.statistics = collect_statistics(base)
            return result

        self.logger.info(
            "Starting template composition",
            extra={
                "base": base.name,
                "override": override.name,
                "skip_overwrite": list(self.config.skip_overwrite),
            }
        )

        try:
            if self.config.preprocess:
                base.preprocess_template(self.config)
                override.preprocess_template(self.config)
            if base.name != override.name:
                self.logger.warning(
                    "Root names differ",
                    extra={"base": base.name, "override": override.name}
                )
                result.add_diagnostic(
                    DiagnosticSeverity.WARNING,
                    f"Root names differ: '{base.name}' and '{override.name}'",
                    path=base.name,
                )
            base.merge(override, self.config.skip_overwrite, self.config)
            result.merged = True
        except Exception as e:
            self.logger.exception(
                "Template composition failed",
                extra={"base": base.name}
            )
            result.success = False
            result.add_diagnostic(
                DiagnosticSeverity.CRITICAL,
                f"Template composition failed: {e}",
                path=base.name,
                details={"exception_type": type(e).__name__},
            )

        result.statistics = collect_statistics(base)
        result.statistics.processing_time_ms = (time.perf_counter() - start) * 1000

        self.logger.info(
            "Template composition completed",
            extra={
                "success": result.success,
                "node_count": result.statistics.node_count,
                "processing_time_ms": result.statistics.processing_time_ms,
                "nodes_per_ms": result.statistics.nodes_per_ms,
            }
        )
        return result


def compose_templates(
    base: Node,
    override: Optional[Node] = None,
    config: Optional[TreeConfig] = None
) -> CompositionResult:
    """Compose ``override`` over ``base`` with a one-off ``TemplateComposer``."""
    return TemplateComposer(config).compose(base, override)
