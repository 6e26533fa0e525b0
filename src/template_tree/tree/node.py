"""Attribute-bearing node tree used to load and compose templates.

A template is a tree of named nodes carrying ordered attributes, raw text
content, and ordered children. Trees are combined with two structural
operations:

    union: receiver-favoring OR-merge. Missing children are adopted, populated
        subtrees only gain missing children, leaf values are overwritten.
    merge: base/override composition. The override always descends into
        same-named children and either replaces or accumulates values depending
        on the name of the colliding node's parent.

Both operations adopt source children by reference. After a union or merge the
source tree shares nodes with the receiver and must not be mutated on its own.
"""

import re
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from template_tree.shared import (
    DEFAULT_CONFIG,
    TreeConfig,
    TreePathError,
    get_logger,
)

# Content starting with this character holds nested markup rather than a value
MARKUP_MARKER = "<"

_WORD_REGEX = re.compile(r"[\w-]+", re.ASCII)

_logger = get_logger(__name__, component="template_tree.node")

Text = Union[str, bytes]


def _to_text(value: Optional[Text]) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


def simple_name(text: str) -> str:
    """Return the first run of word characters or hyphens in ``text``.

    Everything else is ignored, so ``"cpu_busy (percent)"`` gives
    ``"cpu_busy"`` and ``"=> read-ops"`` gives ``"read-ops"``.
    """
    match = _WORD_REGEX.search(text)
    return match.group(0) if match else ""


class NameMode(Enum):
    """How a node was named when it was constructed."""

    PLAIN = auto()       # Plain name only
    QUALIFIED = auto()   # Markup-qualified name, round-trips through an encoder


@dataclass(frozen=True)
class Attribute:
    """Single attribute of a node."""

    name: str
    value: str


@dataclass(eq=False)
class Node:
    """Vertex of a template tree.

    Identity for lookups is the node's ``name``: the qualified name when the
    node is in QUALIFIED mode and has one, otherwise the plain name. Children
    may share names; lookups return the first match.

    ``parent`` is a non-owning upward link. It is set by ``new_child`` only;
    nodes appended with ``add_child`` or adopted by ``union``/``merge`` keep
    whatever link they had.
    """

    plain_name: str = ""
    qualified_name: str = ""
    mode: NameMode = NameMode.PLAIN
    attributes: List[Attribute] = field(default_factory=list)
    content: str = ""
    children: List["Node"] = field(default_factory=list)
    parent: Optional["Node"] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.plain_name = _to_text(self.plain_name)
        self.qualified_name = _to_text(self.qualified_name)
        self.content = _to_text(self.content)
        if self.qualified_name:
            self.mode = NameMode.QUALIFIED

    @classmethod
    def new_plain(cls, name: Text) -> "Node":
        """Create a root node with a plain name."""
        return cls(plain_name=_to_text(name))

    @classmethod
    def new_qualified(cls, name: Text) -> "Node":
        """Create a root node with a markup-qualified name."""
        return cls(qualified_name=_to_text(name), mode=NameMode.QUALIFIED)

    # Names

    @property
    def name(self) -> str:
        """Name used for all identity comparisons."""
        if self.mode is NameMode.QUALIFIED and self.qualified_name:
            return self.qualified_name
        return self.plain_name

    @property
    def is_qualified(self) -> bool:
        return self.mode is NameMode.QUALIFIED

    def set_name(self, name: Text) -> None:
        """Set the plain name.

        A qualified name, when present, keeps taking precedence.
        """
        self.plain_name = _to_text(name)

    def set_qualified_name(self, name: Text) -> None:
        """Set the qualified name and switch the node to QUALIFIED mode."""
        self.qualified_name = _to_text(name)
        self.mode = NameMode.QUALIFIED

    def get_parent(self) -> Optional["Node"]:
        return self.parent

    # Attributes

    def get_attr(self, name: str) -> Optional[Attribute]:
        """Return the first attribute called ``name``, or None."""
        for attr in self.attributes:
            if attr.name == name:
                return attr
        return None

    def get_attr_value(self, name: str) -> Tuple[str, bool]:
        """Return ``(value, True)`` for the first match, ``("", False)`` otherwise."""
        attr = self.get_attr(name)
        if attr is None:
            return "", False
        return attr.value, True

    def add_attr(self, attr: Attribute) -> None:
        self.attributes.append(attr)

    def new_attr(self, name: str, value: str) -> Attribute:
        attr = Attribute(name, value)
        self.add_attr(attr)
        return attr

    # Content

    @property
    def effective_content(self) -> str:
        """Trimmed content, or "" when the content holds nested markup."""
        content = self.content.strip()
        if content and not content.startswith(MARKUP_MARKER):
            return content
        return ""

    def set_content(self, content: Text) -> None:
        self.content = _to_text(content)

    # Children

    def get_children(self) -> List["Node"]:
        return self.children

    def get_child(self, name: Text) -> Optional["Node"]:
        """Return the first child called ``name``, or None."""
        name = _to_text(name)
        for child in self.children:
            if child.name == name:
                return child
        return None

    def has_child(self, name: Text) -> bool:
        return self.get_child(name) is not None

    def pop_child(self, name: Text) -> Optional["Node"]:
        """Detach and return the first child called ``name``.

        The remaining children keep their order.
        """
        name = _to_text(name)
        for index, child in enumerate(self.children):
            if child.name == name:
                del self.children[index]
                if child.parent is self:
                    child.parent = None
                return child
        return None

    def new_child(self, name: Text, content: Text = "") -> "Node":
        """Create a child using this node's naming mode and append it.

        The child's parent link points back at this node.
        """
        if self.is_qualified:
            child = Node.new_qualified(name)
        else:
            child = Node.new_plain(name)
        child.parent = self
        child.content = _to_text(content)
        self.add_child(child)
        return child

    def add_child(self, child: "Node") -> None:
        """Append ``child`` as is, without touching its parent link."""
        if not isinstance(child, Node):
            raise TypeError("Child must be a Node instance")
        self.children.append(child)

    def get_child_content(self, name: Text) -> str:
        """Raw content of the first child called ``name``, or ""."""
        child = self.get_child(name)
        return child.content if child is not None else ""

    def get_child_by_content(self, content: Text) -> Optional["Node"]:
        """Return the first child whose raw content equals ``content``."""
        content = _to_text(content)
        for child in self.children:
            if child.content == content:
                return child
        return None

    def set_child_content(self, name: Text, content: Text) -> "Node":
        """Update the first child called ``name``, creating it if missing."""
        child = self.get_child(name)
        if child is None:
            return self.new_child(name, content)
        child.set_content(content)
        return child

    def get_all_child_content(self) -> List[str]:
        return [child.content for child in self.children]

    def get_all_child_names(self) -> List[str]:
        return [child.name for child in self.children]

    def iter_nodes(self) -> Iterator["Node"]:
        """Iterate over this node and its descendants in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def get_depth(self) -> int:
        """Number of parent links between this node and its root."""
        depth = 0
        node = self.parent
        while node is not None:
            depth += 1
            node = node.parent
        return depth

    # Structural operations
    #
    # Every walk below keeps an explicit stack so tree depth is not bounded
    # by the interpreter's recursion limit. Union, merge and preprocessing
    # keep one frame per visited pair with an iterator over the children
    # captured on entry, which replays the depth-first order of a recursive
    # walk exactly.

    def copy(self) -> "Node":
        """Deep copy of the subtree.

        The copy holds the effective content of each node and owns its own
        child lists; parent links inside the copy point at copied nodes.
        """
        root = self._clone_one()
        stack = [(child, root) for child in reversed(self.children)]
        while stack:
            node, parent_clone = stack.pop()
            clone = node._clone_one()
            clone.parent = parent_clone
            parent_clone.children.append(clone)
            stack.extend((child, clone) for child in reversed(node.children))
        return root

    def _clone_one(self) -> "Node":
        if self.is_qualified:
            clone = Node.new_qualified(self.name)
        else:
            clone = Node.new_plain(self.name)
        clone.content = self.effective_content
        clone.attributes = list(self.attributes)
        return clone

    def union(self, source: Optional["Node"]) -> None:
        """OR-merge ``source`` into this node, favoring existing data.

        Children missing here are adopted from ``source`` by reference. When a
        same-named child exists and has children of its own, the union
        recurses into it; when it is a leaf, the source value replaces it.
        """
        if source is None:
            return
        stack = [self._enter_union(source)]
        while stack:
            receiver, children = stack[-1]
            child = next(children, None)
            if child is None:
                stack.pop()
                continue
            mine = receiver.get_child(child.name)
            if mine is None:
                receiver.add_child(child)
            elif mine.children:
                stack.append(mine._enter_union(child))
            else:
                mine.content = child.content

    def _enter_union(self, source: "Node") -> Tuple["Node", Iterator["Node"]]:
        _logger.debug(
            "Union",
            extra={"node": self.name, "source": source.name,
                   "source_children": len(source.children)}
        )
        if not self.effective_content:
            self.content = source.effective_content
        return self, iter(list(source.children))

    def search_ancestor(self, ancestor: str) -> Optional["Node"]:
        """Find the node on the upward chain whose parent is called ``ancestor``.

        Returns None when no ancestor has that name or a parent link is missing.
        """
        node = self
        parent = node.parent
        while parent is not None:
            if parent.name == ancestor:
                return node
            node, parent = parent, parent.parent
        return None

    def preprocess_template(self, config: Optional[TreeConfig] = None) -> None:
        """Move inline values under the sentinel ancestor into anonymous children.

        A node living below ``config.sentinel_label`` with non-empty content
        gets that content as a new unnamed child and its own content cleared,
        so every value below the sentinel is a list entry.
        """
        config = config or DEFAULT_CONFIG
        stack = [(self, iter(list(self.children)))]
        while stack:
            node, children = stack[-1]
            child = next(children, None)
            if child is None:
                stack.pop()
                continue
            if not child.name:
                continue
            mine = node.get_child(child.name)
            if mine is None:
                continue
            if mine.search_ancestor(config.sentinel_label) is not None and mine.content:
                _logger.debug(
                    "Demoting content to list entry",
                    extra={"node": mine.name, "label": config.sentinel_label}
                )
                mine.new_child("", child.content)
                mine.content = ""
            stack.append((mine, iter(list(mine.children))))

    def merge(
        self,
        subtemplate: Optional["Node"],
        skip_overwrite: Optional[Iterable[str]] = None,
        config: Optional[TreeConfig] = None
    ) -> None:
        """Compose ``subtemplate`` over this node in place.

        Args:
            subtemplate: Override tree; None leaves this node unchanged
            skip_overwrite: Parent names whose children accumulate values
                (joined with ``config.content_separator``) instead of being
                replaced
            config: Optional configuration, defaults to ``DEFAULT_CONFIG``

        Raises:
            TypeError: If ``skip_overwrite`` is a single string
        """
        if subtemplate is None:
            return
        if isinstance(skip_overwrite, (str, bytes)):
            raise TypeError(
                "skip_overwrite must be a collection of names, not a string"
            )
        config = config or DEFAULT_CONFIG
        skip = frozenset(skip_overwrite or ())

        _logger.debug(
            "Merge",
            extra={"node": self.name, "subtemplate": subtemplate.name,
                   "skip_overwrite": sorted(skip)}
        )

        stack = [self._enter_merge(subtemplate)]
        while stack:
            receiver, children = stack[-1]
            child = next(children, None)
            if child is None:
                stack.pop()
                continue
            mine = receiver.get_child(child.name)
            if not child.name:
                # Unnamed entries are deduplicated by content
                holder = mine.parent if mine is not None else None
                if holder is not None and holder.get_child_by_content(child.content) is None:
                    holder.add_child(child)
                elif receiver.get_child_by_content(child.content) is None:
                    receiver.add_child(child)
            elif mine is None:
                receiver.add_child(child)
            else:
                if mine.parent is not None and mine.parent.name in skip:
                    mine.content = mine.content + config.content_separator + child.content
                else:
                    mine.content = child.content
                stack.append(mine._enter_merge(child))

    def _enter_merge(self, subtemplate: "Node") -> Tuple["Node", Iterator["Node"]]:
        if not self.content:
            self.content = subtemplate.content
        return self, iter(list(subtemplate.children))

    # Path search

    def search_content(
        self,
        prefix: Sequence[str],
        paths: Iterable[Sequence[str]]
    ) -> Tuple[List[str], bool]:
        """Collect the content of every node whose name path matches a candidate.

        The running path starts at the first node named ``prefix[0]``; names
        of nodes above it are not recorded. A branch is abandoned once the
        running path is as long as the longest candidate.

        Returns:
            Matching contents in pre-order and whether anything matched

        Raises:
            TreePathError: If ``prefix`` is empty
        """
        if not prefix:
            raise TreePathError("Search prefix cannot be empty", prefix)
        candidates = [list(path) for path in paths]
        limit = max((len(path) for path in candidates), default=0)
        matches: List[str] = []

        for node, path in self._walk_paths(prefix[0], limit, stop_on_match=None):
            if path in candidates:
                matches.append(node.content)
        return matches, len(matches) > 0

    def search_children(self, path: Sequence[str]) -> Tuple[List["Node"], bool]:
        """Collect the nodes whose name path equals ``path`` exactly.

        Uses the same anchoring as ``search_content``. Matched nodes are not
        searched further.

        Raises:
            TreePathError: If ``path`` is empty
        """
        if not path:
            raise TreePathError("Search path cannot be empty", path)
        target = list(path)
        matches = [
            node
            for node, node_path in self._walk_paths(target[0], len(target), target)
            if node_path == target
        ]
        return matches, len(matches) > 0

    def _walk_paths(
        self,
        anchor: str,
        limit: int,
        stop_on_match: Optional[List[str]]
    ) -> Iterator[Tuple["Node", List[str]]]:
        """Yield ``(node, running path)`` in pre-order.

        Children are visited while the running path is shorter than ``limit``
        and differs from ``stop_on_match``.
        """
        stack: List[Tuple[Node, List[str]]] = [(self, [])]
        while stack:
            node, current = stack.pop()
            if current or node.name == anchor:
                path = current + [node.name]
            else:
                path = current
            yield node, path
            if path == stop_on_match or len(path) >= limit:
                continue
            stack.extend((child, path) for child in reversed(node.children))

    # Output

    def flat_list(
        self,
        accumulator: Optional[List[str]] = None,
        prefix: str = "",
        config: Optional[TreeConfig] = None
    ) -> List[str]:
        """Flatten the tree into one string per leaf, in pre-order.

        Each entry is the space-joined names of the leaf's ancestors (skipping
        unnamed nodes and ``config.reserved_container``) followed by the first
        word of the leaf's content.
        """
        config = config or DEFAULT_CONFIG
        if accumulator is None:
            accumulator = []
        stack = [(self, prefix)]
        while stack:
            node, node_prefix = stack.pop()
            if not node.children:
                word = simple_name(node.content)
                accumulator.append(f"{node_prefix} {word}" if node_prefix else word)
                continue
            name = node.name
            if name and name != config.reserved_container:
                node_prefix = f"{node_prefix} {name}" if node_prefix else name
            stack.extend((child, node_prefix) for child in reversed(node.children))
        return accumulator

    def print_tree(self, depth: int = 0, config: Optional[TreeConfig] = None) -> str:
        """Indented debug dump of the subtree."""
        config = config or DEFAULT_CONFIG
        lines: List[str] = []
        stack = [(self, depth)]
        while stack:
            node, level = stack.pop()
            name = node.name or "* "
            content = " *"
            if node.content and not node.content.startswith(MARKUP_MARKER):
                content = node.content
            label = f"{config.print_indent * level}[{name}]"
            lines.append(
                f"{label:<{config.print_name_width}} - "
                f"{content:>{config.print_content_width}}\n"
            )
            stack.extend((child, level + 1) for child in reversed(node.children))
        return "".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the subtree to a dictionary representation."""
        root: List[Dict[str, Any]] = []
        stack: List[Tuple[Node, List[Dict[str, Any]]]] = [(self, root)]
        while stack:
            node, siblings = stack.pop()
            result: Dict[str, Any] = {
                "name": node.name,
                "mode": node.mode.name.lower(),
            }
            if node.attributes:
                result["attributes"] = [[a.name, a.value] for a in node.attributes]
            if node.content:
                result["content"] = node.content
            if node.children:
                result["children"] = []
                stack.extend(
                    (child, result["children"]) for child in reversed(node.children)
                )
            siblings.append(result)
        return root[0]
