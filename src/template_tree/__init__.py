"""Template Tree.

Hierarchical, attribute-bearing node trees for loading, merging and querying
configuration templates.

Progressive API Disclosure:
- Level 1: Node - build trees, look up children and attributes, search paths
- Level 2: Node.union / Node.merge - combine templates
- Level 3: TemplateComposer - configured composition with diagnostics
"""

__version__ = "0.1.0"
__author__ = "Template Tree Team"

from .shared.config import ConfigError, ConfigValidationError, TreeConfig
from .shared.errors import TreeError, TreePathError
from .tree import (
    Attribute,
    CompositionResult,
    NameMode,
    Node,
    TemplateComposer,
    compose_templates,
    decode_html,
    node_from_element,
    node_to_element,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Tree model
    "Attribute",
    "NameMode",
    "Node",

    # Level 3: Composition
    "CompositionResult",
    "TemplateComposer",
    "compose_templates",

    # Element bridges
    "decode_html",
    "node_from_element",
    "node_to_element",

    # Configuration and errors
    "TreeConfig",
    "ConfigError",
    "ConfigValidationError",
    "TreeError",
    "TreePathError",
]
