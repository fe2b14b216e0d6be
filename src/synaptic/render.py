"""Render adapter contract.

Each frame the engine hands the drawing surface a read-only snapshot of
node positions and edges. The surface turns it into visible primitives and
forwards pointer gestures back through `PointerCallbacks`.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from synaptic.models import SimulationState


@dataclass(frozen=True)
class NodeView:
    id: str
    x: float
    y: float
    title: str = ""
    excerpt: str = ""
    selected: bool = False
    hovered: bool = False


@dataclass(frozen=True)
class EdgeView:
    id: str
    source_id: str
    target_id: str
    confirmed: bool
    highlighted: bool = False


@dataclass(frozen=True)
class FrameSnapshot:
    """Everything a renderer needs for one frame."""

    frame: int
    nodes: tuple[NodeView, ...]
    edges: tuple[EdgeView, ...]
    solidify_edge: str | None = None  # Edge offering the solidify affordance

    def to_dict(self) -> dict:
        """Convert to the plain {id, x, y} / {id, sourceId, targetId, confirmed} shape."""
        return {
            "frame": self.frame,
            "nodes": [{"id": n.id, "x": n.x, "y": n.y} for n in self.nodes],
            "edges": [
                {
                    "id": e.id,
                    "sourceId": e.source_id,
                    "targetId": e.target_id,
                    "confirmed": e.confirmed,
                }
                for e in self.edges
            ],
        }


class RenderAdapter(Protocol):
    """Drawing surface."""

    def draw(self, snapshot: FrameSnapshot) -> Any: ...


@dataclass(frozen=True)
class PointerCallbacks:
    """Opaque callbacks the drawing surface invokes on user gestures."""

    on_node_activate: Callable[[str], None]
    on_edge_hover_change: Callable[[str | None], None]
    on_edge_solidify: Callable[[str], Any]
    on_node_hover_change: Callable[[str | None], None] | None = None


def build_snapshot(
    state: SimulationState,
    hovered_edge: str | None = None,
    hovered_node: str | None = None,
    selected_node: str | None = None,
    excerpt_length: int = 30,
) -> FrameSnapshot:
    """Freeze the current state into a render snapshot."""
    nodes = []
    for node in state.nodes.values():
        note = state.notes.get(node.id)
        nodes.append(
            NodeView(
                id=node.id,
                x=node.x,
                y=node.y,
                title=(note.title or "") if note else "",
                excerpt=note.excerpt(excerpt_length) if note else "",
                selected=node.id == selected_node,
                hovered=node.id == hovered_node,
            )
        )

    edges = tuple(
        EdgeView(
            id=edge.id,
            source_id=edge.source_id,
            target_id=edge.target_id,
            confirmed=edge.confirmed,
            highlighted=edge.id == hovered_edge,
        )
        for edge in state.edges.values()
    )

    solidify = None
    if hovered_edge is not None:
        edge = state.edges.get(hovered_edge)
        if edge is not None and not edge.confirmed:
            solidify = edge.id

    return FrameSnapshot(frame=state.frame, nodes=tuple(nodes), edges=edges, solidify_edge=solidify)
