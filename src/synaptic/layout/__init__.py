"""Layout layer: seeding, hypothesis generation, and the physics stepper."""

from synaptic.layout.hypotheses import generate_hypotheses, shares_tag
from synaptic.layout.physics import (
    PhysicsParams,
    StepReport,
    attraction_forces,
    reflect,
    repulsion_forces,
    step,
)
from synaptic.layout.seeding import membership_changed, refresh_notes, seed, valid_notes

__all__ = [
    # Seeding
    "seed",
    "membership_changed",
    "refresh_notes",
    "valid_notes",
    # Hypotheses
    "generate_hypotheses",
    "shares_tag",
    # Physics
    "PhysicsParams",
    "StepReport",
    "step",
    "repulsion_forces",
    "attraction_forces",
    "reflect",
]
