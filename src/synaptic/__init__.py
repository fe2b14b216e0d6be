"""Synaptic - force-directed note web with relationship solidification.

Seeds a layout from notes, proposes tag-based and serendipitous edges,
runs a per-frame force simulation, and turns confirmed edges into
flashcard requests.
"""

from synaptic.errors import DataError, InteractionError, SynapticError
from synaptic.interaction import ConfirmationForm, InteractionController
from synaptic.layout import PhysicsParams, generate_hypotheses, seed, step
from synaptic.models import ArtifactRequest, Bounds, Edge, Node, Note, SimulationState, edge_id
from synaptic.render import EdgeView, FrameSnapshot, NodeView, PointerCallbacks
from synaptic.runtime import AsyncioFrameClock, ManualFrameClock, Simulation, SimulationStatus

__version__ = "0.1.0"

__all__ = [
    "Simulation",
    "SimulationStatus",
    "AsyncioFrameClock",
    "ManualFrameClock",
    "InteractionController",
    "ConfirmationForm",
    "seed",
    "generate_hypotheses",
    "step",
    "PhysicsParams",
    "Note",
    "Node",
    "Edge",
    "Bounds",
    "SimulationState",
    "ArtifactRequest",
    "edge_id",
    "FrameSnapshot",
    "NodeView",
    "EdgeView",
    "PointerCallbacks",
    "SynapticError",
    "DataError",
    "InteractionError",
    "__version__",
]
