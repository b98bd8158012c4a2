import logging
import math
import re
from typing import List, Tuple

from dendromatch.exceptions import NewickParseError
from dendromatch.tree import ROOT_ID, Node, child_id

logger = logging.getLogger(__name__)

QUOTE_CHARS = ("'", '"')
_ROOT_SUFFIX = re.compile(r"^(:\s*[^,()]*)?$")


# ===================================================================
# 1. TEXT PREPARATION
# ===================================================================


def check_balanced(text: str) -> None:
    """
    Ensure every '(' in text is closed by a later ')'.

    Raises:
        NewickParseError: On a ')' without opener or an unclosed '('.
    """
    depth = 0
    for index, char in enumerate(text):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                raise NewickParseError(
                    f"Unbalanced ')' at position {index}", text[: index + 1]
                )
    if depth != 0:
        raise NewickParseError(f"{depth} unclosed '(' in tree description", text)


def _matching_paren(text: str, start: int) -> int:
    depth = 0
    for index in range(start, len(text)):
        if text[index] == "(":
            depth += 1
        elif text[index] == ")":
            depth -= 1
            if depth == 0:
                return index
    return -1


def strip_tree_wrapper(text: str) -> str:
    """
    Turn a complete Newick line into the bare child list accepted by the parser.

    Removes surrounding whitespace, a trailing ';', the parentheses that wrap
    the whole tree and the root distance written after them:

        "('A':0.5,('B':0.3,'C':0.3):0.2);"  ->  "'A':0.5,('B':0.3,'C':0.3):0.2"

    Text that is not wrapped in a single outer group is returned stripped only.
    """
    text = text.strip()
    if text.endswith(";"):
        text = text[:-1].rstrip()
    if not text.startswith("("):
        return text

    closing = _matching_paren(text, 0)
    if closing == -1:
        raise NewickParseError("Unclosed '(' around tree description", text)
    if not _ROOT_SUFFIX.match(text[closing + 1 :].strip()):
        return text
    return text[1:closing].strip()


# ===================================================================
# 2. TOKEN SPLITTING
# ===================================================================


def split_into_children(text: str) -> List[str]:
    """
    Split a comma separated child list at its top level.

    A comma separates two children only when the text before it holds as
    many '(' as ')'; commas inside an open group belong to a deeper level.

    Example:
        "'A':0.5,('B':0.3,'C':0.3):0.2" -> ["'A':0.5", "('B':0.3,'C':0.3):0.2"]
    """
    components: List[str] = []
    depth = 0
    start = 0
    for index, char in enumerate(text):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                raise NewickParseError(
                    f"Unbalanced ')' at position {index}", text[: index + 1]
                )
        elif char == "," and depth == 0:
            components.append(text[start:index].strip())
            start = index + 1
    if depth != 0:
        raise NewickParseError("Unbalanced parentheses in child list", text)
    components.append(text[start:].strip())

    if any(not component for component in components):
        raise NewickParseError("Empty child expression", text)
    return components


def split_distance(expression: str) -> Tuple[str, float]:
    """
    Split an expression on its last ':' into key and distance-to-parent.

    Raises:
        NewickParseError: If the distance is missing, not a number,
            negative or not finite.
    """
    key, colon, raw_value = expression.rpartition(":")
    if not colon:
        raise NewickParseError("Missing distance to parent", expression)
    key = key.strip()
    raw_value = raw_value.strip()
    # A ':' inside a group's children does not count as the node's own distance
    if not raw_value or ")" in raw_value:
        raise NewickParseError("Missing distance to parent", expression)
    try:
        distance = float(raw_value)
    except ValueError:
        raise NewickParseError("Invalid distance to parent", expression) from None
    if math.isnan(distance) or math.isinf(distance) or distance < 0:
        raise NewickParseError(
            "Distance to parent must be a finite non-negative number", expression
        )
    if not key:
        raise NewickParseError("Empty node expression", expression)
    return key, distance


def strip_quotes(name: str) -> str:
    """Remove one pair of matching quote characters around a leaf name."""
    if len(name) >= 2 and name[0] == name[-1] and name[0] in QUOTE_CHARS:
        return name[1:-1]
    return name


# ===================================================================
# 3. PUBLIC API
# ===================================================================


def parse_dendrogram(text: str, root_id: str = ROOT_ID) -> Node:
    """
    Parse a bracket-delimited child list into a node hierarchy.

    Every child expression is either a leaf `'<name>':<distance>` or a group
    `(<children>):<distance>`. The returned root is synthesized: it has no
    name and no meaningful distance to parent. Node ids are built by appending
    each node's position among its siblings to its parent's id.

    Args:
        text: Child list of the root, without the outer parentheses,
              root distance or terminating ';' (see strip_tree_wrapper).
        root_id: Id given to the synthesized root.

    Returns:
        The root Node of the parsed tree.

    Raises:
        NewickParseError: If the text is not well formed. No partial tree
            is ever returned.
    """
    if not text or not text.strip():
        raise NewickParseError("Empty tree description")
    check_balanced(text)

    root = Node(id=root_id)
    pending: List[Tuple[str, Node]] = [(text, root)]
    node_count = 1

    while pending:
        child_list, parent = pending.pop()
        for index, expression in enumerate(split_into_children(child_list)):
            key, distance = split_distance(expression)
            node = Node(length=distance, id=child_id(parent.id, index))

            if key.startswith("("):
                if not key.endswith(")"):
                    raise NewickParseError(
                        "Unexpected text after closing ')'", expression
                    )
                inner = key[1:-1]
                if not inner.strip():
                    raise NewickParseError("Empty child list", expression)
                pending.append((inner, node))
            else:
                if "(" in key or ")" in key:
                    raise NewickParseError("Invalid leaf expression", expression)
                node.name = strip_quotes(key)
                if not node.name:
                    raise NewickParseError("Leaf without a name", expression)

            parent.append_child(node)
            node_count += 1

    logger.debug(
        "Parsed tree '%s' with %d nodes and %d leaves",
        root_id,
        node_count,
        len(root.get_leaves()),
    )
    return root
