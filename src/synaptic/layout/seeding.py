"""Node store seeding.

A seed places one node per note at a random position inside the viewport
and asks the hypothesis generator for the edges. Reseeding happens only when
the set of note ids changes; edits to note content leave the layout alone.
"""

import logging
import random
from collections.abc import Iterable, Sequence
from typing import Any

from synaptic.config import Settings, settings as default_settings
from synaptic.errors import DataError
from synaptic.layout.hypotheses import generate_hypotheses
from synaptic.models import Bounds, Node, Note, SimulationState, coerce_note

logger = logging.getLogger(__name__)


def valid_notes(notes: Iterable[Any]) -> list[Note]:
    """Coerce note records, skipping malformed ones and duplicate ids."""
    result: list[Note] = []
    seen: set[str] = set()
    for raw in notes:
        try:
            note = coerce_note(raw)
        except DataError as e:
            logger.warning(f"Skipping malformed note: {e}")
            continue
        if note.id in seen:
            logger.warning(f"Skipping duplicate note id: {note.id}")
            continue
        seen.add(note.id)
        result.append(note)
    return result


def _uniform(rng: random.Random, size: float, margin: float) -> float:
    """Uniform coordinate in [margin, size - margin], or the center if too small."""
    low, high = margin, size - margin
    if high < low:
        return size / 2
    return rng.uniform(low, high)


def seed(
    notes: Iterable[Any],
    bounds: Bounds,
    rng: random.Random | None = None,
    settings: Settings | None = None,
) -> SimulationState:
    """
    Build a fresh simulation state for the given notes.

    Args:
        notes: Note snapshots or collaborator records
        bounds: Viewport width/height
        rng: Random source for positions and serendipity edges
        settings: Seeding configuration (global settings if omitted)

    Returns:
        New SimulationState with zero-velocity nodes and unconfirmed edges
    """
    cfg = settings or default_settings
    rng = rng or random.Random()

    notes = valid_notes(notes)
    state = SimulationState(bounds=bounds)

    for note in notes:
        node = Node(
            id=note.id,
            x=_uniform(rng, bounds.width, cfg.seed_margin),
            y=_uniform(rng, bounds.height, cfg.seed_margin),
        )
        state.add_node(node, note)

    for edge in generate_hypotheses(notes, rng=rng, serendipity=cfg.serendipity):
        state.add_edge(edge)

    logger.info(
        f"Seeded layout: {len(state.nodes)} nodes, {len(state.edges)} hypotheses "
        f"in {bounds.width:.0f}x{bounds.height:.0f}"
    )
    return state


def membership_changed(state: SimulationState | None, notes: Sequence[Any]) -> bool:
    """True when the valid note ids differ from the seeded node ids."""
    if state is None:
        return True
    ids = frozenset(note.id for note in valid_notes(notes))
    return ids != state.node_ids()


def refresh_notes(state: SimulationState, notes: Sequence[Any]) -> int:
    """
    Replace the render snapshots of already-seeded notes without reseeding.

    Returns:
        Number of note snapshots updated
    """
    updated = 0
    for note in valid_notes(notes):
        if note.id in state.nodes and state.notes.get(note.id) != note:
            state.notes[note.id] = note
            updated += 1
    return updated
