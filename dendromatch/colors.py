"""
Colour table for cluster matches.

Matches carrying the same label get the same colour across every pair of
dendrograms in a scene. The palette is supplied by the caller; colours are
reused cyclically once it is exhausted.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from dendromatch.matching import ClusterMatch

ColorTable = Dict[str, str]


def build_color_table(
    matches: Iterable[Iterable[ClusterMatch]], palette: Sequence[str]
) -> ColorTable:
    """
    Give every distinct match label the next palette colour, in first-seen order.

    Args:
        matches: Matches grouped per dendrogram pair.
        palette: Colours to hand out.

    Raises:
        ValueError: If matches exist but the palette is empty.
    """
    table: ColorTable = {}
    for pair_matches in matches:
        for match in pair_matches:
            if match.label is None or match.label in table:
                continue
            if not palette:
                raise ValueError("Cannot colour cluster matches with an empty palette")
            table[match.label] = palette[len(table) % len(palette)]
    return table


def assign_colors(matches: Iterable[Iterable[ClusterMatch]], table: ColorTable) -> None:
    for pair_matches in matches:
        for match in pair_matches:
            match.color = table.get(match.label) if match.label is not None else None


def flatten(matches: Iterable[Iterable[ClusterMatch]]) -> List[ClusterMatch]:
    return [match for pair_matches in matches for match in pair_matches]
