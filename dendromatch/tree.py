from __future__ import annotations

import json
import weakref
from typing import Any, Callable, Dict, Iterator, List, Optional, Self

ROOT_ID = "r"


def child_id(parent_id: str, index: int) -> str:
    """
    Build the id of the index-th child of a node.

    Positions 0-9 are appended as a single digit ("r" -> "r0" -> "r01").
    Wider positions are bracketed so that ids stay unique in multifurcations.
    """
    if index < 10:
        return f"{parent_id}{index}"
    return f"{parent_id}[{index}]"


class Node:
    """
    Dendrogram node.

    A node owns its children. The link back to the parent is a weak
    reference, so a subtree never keeps its ancestors alive.

    Derived quantities each get their own field:
    - value: number of leaves below (and including) this node
    - distance: cumulative distance from this node down to its leaves
    - label: synthesized name used for cross-tree matching (None when unset)
    - x, y: display coordinates
    """

    __slots__ = (
        "id",
        "name",
        "length",
        "distance",
        "label",
        "value",
        "children",
        "x",
        "y",
        "_parent_ref",
        "__weakref__",
    )

    id: str
    name: str
    length: float
    distance: float
    label: Optional[str]
    value: int
    children: List[Self]
    x: float
    y: float

    def __init__(
        self,
        children: Optional[List[Self]] = None,
        name: str = "",
        length: float = 0.0,
        id: str = ROOT_ID,
    ):
        self.id = id
        self.name = name
        self.length = length
        self.distance = 0.0
        self.label = None
        self.value = 1
        self.x = 0.0
        self.y = 0.0
        self._parent_ref: Optional[weakref.ReferenceType[Self]] = None
        self.children = []
        for child in children or []:
            self.append_child(child)

    # ------------------------------------------------------------------------
    # Parent link
    # ------------------------------------------------------------------------
    @property
    def parent(self) -> Optional[Self]:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @parent.setter
    def parent(self, node: Optional[Self]) -> None:
        self._parent_ref = weakref.ref(node) if node is not None else None

    def append_child(self, node: Self) -> None:
        node.parent = self
        self.children.append(node)

    def __repr__(self) -> str:
        if self.is_leaf():
            return f"Node('{self.id}', name='{self.name}')"
        return f"Node('{self.id}', label={self.label!r})"

    # ------------------------------------------------------------------------
    # Structure queries
    # ------------------------------------------------------------------------
    def is_leaf(self) -> bool:
        return len(self.children) == 0

    def is_internal(self) -> bool:
        return bool(self.children)

    def is_root(self) -> bool:
        return self.parent is None

    def get_root(self) -> Self:
        cur = self
        while cur.parent is not None:
            cur = cur.parent
        return cur

    def edge_id(self) -> Optional[str]:
        """Identifier of the edge leading into this node, None for a root."""
        parent = self.parent
        if parent is None:
            return None
        return parent.id + self.id

    # ------------------------------------------------------------------------
    # Traversals
    # ------------------------------------------------------------------------
    def traverse(self) -> List[Self]:
        """
        Return a list of all nodes in the subtree rooted at this node (Pre-order).
        Uses an iterative stack approach to avoid recursion depth issues.
        """
        nodes: List[Self] = []
        stack: List[Self] = [self]
        while stack:
            current = stack.pop()
            nodes.append(current)
            # Add children in reverse to maintain left-to-right visit order
            stack.extend(reversed(current.children))
        return nodes

    def traverse_postorder(self) -> List[Self]:
        """Return all nodes of the subtree, every node after its children."""
        nodes: List[Self] = []
        stack: List[tuple[Self, bool]] = [(self, False)]
        while stack:
            current, expanded = stack.pop()
            if expanded or not current.children:
                nodes.append(current)
                continue
            stack.append((current, True))
            for child in reversed(current.children):
                stack.append((child, False))
        return nodes

    def find_first(self, predicate: Callable[[Self], bool]) -> Optional[Self]:
        """Pre-order search; returns the first node satisfying the predicate."""
        stack: List[Self] = [self]
        while stack:
            current = stack.pop()
            if predicate(current):
                return current
            stack.extend(reversed(current.children))
        return None

    def descendants(self) -> List[Self]:
        """All nodes of the subtree, including this node, in pre-order."""
        return self.traverse()

    def get_leaves(self) -> List[Self]:
        """Return all leaf nodes in the subtree rooted at this node, left to right."""
        return [node for node in self.traverse() if not node.children]

    @property
    def leaves(self) -> List[Self]:
        return self.get_leaves()

    def get_current_order(self) -> tuple[str, ...]:
        """Return the current order of leaf names as a tuple."""
        return tuple(leaf.name for leaf in self.get_leaves())

    def iter_edges(self) -> Iterator[str]:
        """Yield the ids of all edges below this node (the incoming edge is excluded)."""
        for node in self.traverse():
            if node is self:
                continue
            yield node.parent.id + node.id  # type: ignore[union-attr]

    # ------------------------------------------------------------------------
    # Counting
    # ------------------------------------------------------------------------
    def count(self) -> int:
        """Set `value` (number of leaves) for every node of the subtree, bottom-up."""
        for node in self.traverse_postorder():
            if not node.children:
                node.value = 1
            else:
                node.value = sum(child.value for child in node.children)
        return self.value

    # ------------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "length": self.length,
            "distance": self.distance,
            "label": self.label,
            "value": self.value,
            "x": self.x,
            "y": self.y,
            "children": [child.to_dict() for child in self.children],
        }
        if self.is_leaf():
            data["name"] = self.name
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=4)
