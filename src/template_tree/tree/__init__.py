"""Template tree engine.

Key Components:
    Node: Named tree vertex with attributes, content, children and the
        structural operations (union, merge, path search, flattening)
    TemplateComposer: Layers a custom template over a default template
    node_from_element / node_to_element: Bridges to ElementTree and lxml
"""

from .adapters import decode_html, node_from_element, node_to_element
from .composer import (
    CompositionResult,
    TemplateComposer,
    collect_statistics,
    compose_templates,
)
from .node import MARKUP_MARKER, Attribute, NameMode, Node, simple_name

__all__ = [
    "MARKUP_MARKER",
    "Attribute",
    "NameMode",
    "Node",
    "simple_name",
    "CompositionResult",
    "TemplateComposer",
    "collect_statistics",
    "compose_templates",
    "decode_html",
    "node_from_element",
    "node_to_element",
]
