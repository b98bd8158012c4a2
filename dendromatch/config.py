"""
Configuration objects for label synthesis, branch highlighting and scene layout.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


class ClusterMatchType(Enum):
    """
    Levels of similarity recognised between two sub-clusters.

    BIOISOMORPHIC: the sub-trees are equal up to branch rotation.
    REARRANGED: the sub-trees hold the same children labels, structure ignored.
    CONTAINED: the sub-trees hold the same set of atomic labels.
    """

    BIOISOMORPHIC = 1
    REARRANGED = 2
    CONTAINED = 3


class HighlightMode(Enum):
    NONE = "none"
    SIMI = "simi"
    DIFF = "diff"

    @classmethod
    def coerce(cls, mode: "HighlightMode | str") -> "HighlightMode":
        if isinstance(mode, cls):
            return mode
        try:
            return cls(str(mode).lower())
        except ValueError:
            raise ValueError(
                f"Unknown highlight mode {mode!r}; expected one of "
                f"{[m.value for m in cls]}"
            ) from None


# Marker wrapped around labels that keep the structure of their sub-tree
STRUCTURE_MARKER = "_"


@dataclass(frozen=True)
class LabelPolicy:
    """Parameters controlling how leaf and internal node labels are built."""

    keep_structure: bool = True
    keep_duplicates: bool = True
    separator: str = "-"
    trim_leaf_names: bool = True
    leaf_separator: str = "."

    def __post_init__(self) -> None:
        if not self.separator:
            raise ValueError("Label separator cannot be empty")
        if self.trim_leaf_names and not self.leaf_separator:
            raise ValueError("Leaf separator cannot be empty when trimming names")

    @classmethod
    def for_match_type(
        cls, match_type: ClusterMatchType, **overrides: object
    ) -> "LabelPolicy":
        """
        Build the label policy used for a given cluster match type.

        Bioisomorphic matches keep the structure, contained matches drop
        duplicated components; rearranged matches do neither.
        """
        return cls(**overrides).with_match_type(match_type)  # type: ignore[arg-type]

    def with_match_type(self, match_type: ClusterMatchType) -> "LabelPolicy":
        """Return a copy of this policy with the flags of the given match type."""
        match_type = ClusterMatchType(match_type)
        return replace(
            self,
            keep_structure=match_type is ClusterMatchType.BIOISOMORPHIC,
            keep_duplicates=match_type is not ClusterMatchType.CONTAINED,
        )


@dataclass
class SceneLayout:
    """Pixel geometry used when several dendrograms are laid out side by side."""

    title_height: float = 50
    axis_height: float = 50
    left_padding: float = 50
    right_padding: float = 150
    graph_width: float = 350
    dendro_height: float = 200
    leaf_padding: float = 30
    label_width: float = 100

    @property
    def dendro_width(self) -> float:
        """Width of a single dendrogram slot including padding and labels."""
        return (
            self.left_padding + self.right_padding + self.graph_width + self.label_width
        )
