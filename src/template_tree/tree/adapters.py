"""Conversion between decoded markup elements and template trees.

Parsing serialized documents is left to ``xml.etree.ElementTree`` or lxml.
These helpers only translate their element objects into ``Node`` trees and
back, so anything exposing the ElementTree element API is accepted.
"""

import xml.etree.ElementTree as ET
from typing import Any, Callable, Optional

from template_tree.shared import get_logger
from template_tree.tree.node import MARKUP_MARKER, Node

_logger = get_logger(__name__, component="template_tree.adapters")

_HTML_REPLACEMENTS = (
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&apos;", "'"),
    ("&quot;", "\""),
    (" ", "_"),  # not an entity, but names must not contain spaces
    ("-", "_"),
)


def decode_html(text: str) -> str:
    """Unescape the basic markup entities and turn spaces and hyphens into underscores."""
    for old, new in _HTML_REPLACEMENTS:
        text = text.replace(old, new)
    return text


def _local_name(tag: str) -> str:
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def _fill_node(root: Node, root_element: Any) -> None:
    stack = [(root, root_element)]
    while stack:
        node, element = stack.pop()
        for key, value in element.attrib.items():
            node.new_attr(_local_name(key), value)
        node.content = element.text or ""
        pending = []
        for child_element in element:
            # Comments and processing instructions carry non-string tags
            if not isinstance(child_element.tag, str):
                continue
            pending.append((node.new_child(_local_name(child_element.tag)), child_element))
        stack.extend(reversed(pending))


def node_from_element(element: Any) -> Node:
    """Build a qualified-mode ``Node`` tree from a decoded element.

    Attributes keep document order, element text becomes raw content, and
    every child is created through ``new_child`` so parent links are set.

    Args:
        element: ``xml.etree.ElementTree.Element`` or ``lxml.etree._Element``

    Returns:
        Root node of the converted tree
    """
    if not isinstance(element.tag, str):
        raise TypeError("Element must be a regular element, not a comment or PI")
    root = Node.new_qualified(_local_name(element.tag))
    _fill_node(root, element)
    _logger.debug(
        "Converted element tree",
        extra={"root": root.name, "node_count": sum(1 for _ in root.iter_nodes())}
    )
    return root


def node_to_element(
    node: Node,
    factory: Optional[Callable[..., Any]] = None,
    anonymous_tag: str = "item"
) -> Any:
    """Write a ``Node`` tree into elements created by ``factory``.

    Args:
        node: Root of the tree to convert
        factory: Element constructor, ``xml.etree.ElementTree.Element`` by
            default; pass ``lxml.etree.Element`` for lxml output
        anonymous_tag: Tag used for nodes without a name

    Returns:
        Root element of the converted tree
    """
    factory = factory or ET.Element
    root = factory(node.name or anonymous_tag)
    stack = [(node, root)]
    while stack:
        current, element = stack.pop()
        for attr in current.attributes:
            element.set(attr.name, attr.value)
        if current.content and not current.content.lstrip().startswith(MARKUP_MARKER):
            element.text = current.content
        for child in current.children:
            child_element = factory(child.name or anonymous_tag)
            element.append(child_element)
            stack.append((child, child_element))
    return root
