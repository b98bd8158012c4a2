"""
Side-by-side comparison of several dendrograms.

A scene keeps an ordered list of dendrograms, matches every consecutive pair,
colours the matches and lays the trees out next to each other. Drawing is
left to the caller, who reads node coordinates, edge ids and matches.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from dendromatch.colors import ColorTable, assign_colors, build_color_table, flatten
from dendromatch.config import ClusterMatchType, HighlightMode, LabelPolicy, SceneLayout
from dendromatch.dendrogram import Dendrogram, load_dendrogram
from dendromatch.matching import ClusterMatch, find_matching_clusters

logger = logging.getLogger(__name__)


class Scene:
    def __init__(
        self,
        palette: Sequence[str] = (),
        layout: Optional[SceneLayout] = None,
        match_type: ClusterMatchType = ClusterMatchType.BIOISOMORPHIC,
        highlight: HighlightMode | str = HighlightMode.NONE,
        min_leaves: int = 3,
    ):
        self.palette = list(palette)
        self.layout = layout or SceneLayout()
        self.label_policy = LabelPolicy.for_match_type(match_type)
        self.highlight = HighlightMode.coerce(highlight)
        self.min_leaves = min_leaves
        self.dendrograms: List[Dendrogram] = []
        # row i holds the matches between dendrograms i and i+1
        self.matches: List[List[ClusterMatch]] = []
        self.color_table: ColorTable = {}
        self.dendro_height = 0.0
        self.width = self.layout.dendro_width
        self.height = (
            self.layout.dendro_height + self.layout.title_height + self.layout.axis_height
        )

    def __len__(self) -> int:
        return len(self.dendrograms)

    # ------------------------------------------------------------------------
    # Adding & removing dendrograms
    # ------------------------------------------------------------------------
    def load(self, text: str, title: str) -> Dendrogram:
        """Parse a Newick line and append the resulting dendrogram to the scene."""
        dendrogram = load_dendrogram(text, title, self.label_policy)
        self.dendrograms.append(dendrogram)
        self._refresh()
        return dendrogram

    def add(self, dendrogram: Dendrogram) -> None:
        dendrogram.init_leaf_count()
        dendrogram.relabel(self.label_policy)
        self.dendrograms.append(dendrogram)
        self._refresh()

    def remove(self, index: int) -> Dendrogram:
        dendrogram = self.dendrograms.pop(index)
        self._refresh()
        return dendrogram

    def _refresh(self) -> None:
        self.update_size()
        self.init_coordinates()
        self.update_cluster_matches()

    # ------------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------------
    def update_size(self) -> Tuple[float, float]:
        """
        Recompute the scene size; the tallest dendrogram sets the height.
        """
        self.dendro_height = max(
            (d.leaf_count * self.layout.leaf_padding for d in self.dendrograms),
            default=0.0,
        )
        self.width = len(self.dendrograms) * self.layout.dendro_width
        self.height = (
            self.dendro_height + self.layout.title_height + self.layout.axis_height
        )
        return self.width, self.height

    def init_coordinates(self, index: Optional[int] = None) -> None:
        """Lay out one dendrogram (or all of them) in its slot of the scene."""
        dx = self.layout.dendro_width
        dy = self.dendro_height + self.layout.title_height + self.layout.axis_height
        indices = range(len(self.dendrograms)) if index is None else [index]
        for i in indices:
            self.dendrograms[i].update_coordinates(
                dx * i + self.layout.left_padding,
                dy,
                self.layout.graph_width,
                self.dendro_height,
                self.layout.label_width,
            )

    # ------------------------------------------------------------------------
    # Matches
    # ------------------------------------------------------------------------
    def update_cluster_matches(self, min_leaves: Optional[int] = None) -> None:
        """
        Match every consecutive pair of dendrograms, then colour the matches
        and compute their highlighted branches.
        """
        if min_leaves is not None:
            self.min_leaves = min_leaves
        self.matches = []
        self.color_table = {}
        if len(self.dendrograms) < 2:
            return

        for source, target in zip(self.dendrograms, self.dendrograms[1:]):
            self.matches.append(
                find_matching_clusters(source.root, target, self.min_leaves)
            )

        if self.palette:
            self.color_table = build_color_table(self.matches, self.palette)
            assign_colors(self.matches, self.color_table)
        for match in flatten(self.matches):
            match.init_equal_branches(self.highlight)
        logger.debug(
            "Scene matched %d pairs: %s",
            len(self.matches),
            [len(pair) for pair in self.matches],
        )

    def update_match_highlight(self, mode: HighlightMode | str) -> None:
        self.highlight = HighlightMode.coerce(mode)
        for match in flatten(self.matches):
            match.init_equal_branches(self.highlight)

    # ------------------------------------------------------------------------
    # User driven changes
    # ------------------------------------------------------------------------
    def apply_match_type(self, match_type: ClusterMatchType) -> None:
        self.label_policy = self.label_policy.with_match_type(match_type)
        for dendrogram in self.dendrograms:
            dendrogram.relabel(self.label_policy)
        self.update_cluster_matches()

    def apply_cutoff(self, index: int, cutoff: float) -> float:
        dendrogram = self.dendrograms[index]
        value = dendrogram.set_cutoff(cutoff)
        dendrogram.relabel(self.label_policy)
        self.update_cluster_matches()
        return value

    def flip(self, index: int) -> None:
        self.dendrograms[index].toggle_flipped()
        self.init_coordinates(index)

    def sort(self, index: int) -> None:
        self.dendrograms[index].sort()
        self.init_coordinates(index)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "dendrograms": [d.to_dict() for d in self.dendrograms],
            "matches": [
                [
                    {
                        "label": m.label,
                        "color": m.color,
                        "source": m.source.id,
                        "target": m.target.id,
                        "branches": [list(m.equal_branches[0]), list(m.equal_branches[1])],
                    }
                    for m in pair
                ]
                for pair in self.matches
            ],
        }
