"""Synaptic data models."""

from synaptic.models.artifact import ArtifactRequest
from synaptic.models.graph import Bounds, Edge, Node, SimulationState, edge_id
from synaptic.models.note import Note, coerce_note, normalize_tag

__all__ = [
    "Note",
    "coerce_note",
    "normalize_tag",
    "Node",
    "Edge",
    "Bounds",
    "SimulationState",
    "edge_id",
    "ArtifactRequest",
]
