"""Interaction layer: pointer gestures and the solidify confirmation protocol."""

from synaptic.interaction.protocol import (
    ArtifactDispatcher,
    ArtifactSink,
    ArtifactStore,
    ConfirmationForm,
    InteractionController,
    NoteDetailView,
)

__all__ = [
    "InteractionController",
    "ConfirmationForm",
    "ArtifactDispatcher",
    "ArtifactSink",
    "ArtifactStore",
    "NoteDetailView",
]
