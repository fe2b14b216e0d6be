"""Edge hypothesis generation.

Every unordered pair of notes becomes a candidate relationship when the two
notes share a tag. When tag data is sparse a serendipity draw proposes a few
random pairs as well, so the web is never empty.
"""

import logging
import random
from collections.abc import Sequence
from itertools import combinations

from synaptic.config import settings
from synaptic.models import Edge, Note

logger = logging.getLogger(__name__)


def shares_tag(a: Note, b: Note) -> bool:
    """True when the notes have at least one normalized tag in common."""
    return not a.tag_set.isdisjoint(b.tag_set)


def generate_hypotheses(
    notes: Sequence[Note],
    rng: random.Random | None = None,
    serendipity: float | None = None,
) -> list[Edge]:
    """
    Propose unconfirmed edges for the current note set.

    Args:
        notes: Valid notes, one per node
        rng: Random source for the serendipity draw (unseeded if omitted)
        serendipity: Probability of linking a pair with no shared tag

    Returns:
        Unique edges, at most one per unordered pair
    """
    rng = rng or random.Random()
    probability = settings.serendipity if serendipity is None else serendipity

    edges: dict[str, Edge] = {}
    tagged = 0

    for a, b in combinations(notes, 2):
        if a.id == b.id:
            continue
        # Draw for every pair so the sequence only depends on the pair count
        lucky = rng.random() < probability
        related = shares_tag(a, b)
        if not (related or lucky):
            continue

        edge = Edge(source_id=a.id, target_id=b.id)
        if edge.id in edges:
            continue
        edges[edge.id] = edge
        if related:
            tagged += 1

    logger.debug(
        f"Generated {len(edges)} hypotheses for {len(notes)} notes "
        f"({tagged} tag-based, {len(edges) - tagged} serendipitous)"
    )
    return list(edges.values())
