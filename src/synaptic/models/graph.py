"""Layout graph models - simulated nodes, hypothesis edges, and their aggregate."""

import logging
import math
from dataclasses import dataclass, field

from synaptic.models.note import Note

logger = logging.getLogger(__name__)


def edge_id(source_id: str, target_id: str) -> str:
    """Identity of the unordered pair {source_id, target_id}.

    The length prefix keeps ids containing the separator unambiguous:
    ("a-b", "c") and ("a", "b-c") map to "3:a-b-c" and "1:a-b-c".
    """
    first, second = sorted((source_id, target_id))
    return f"{len(first)}:{first}-{second}"


@dataclass(frozen=True)
class Bounds:
    """Viewport size in layout units."""

    width: float
    height: float

    @property
    def center(self) -> tuple[float, float]:
        return self.width / 2, self.height / 2


@dataclass
class Node:
    """Position and velocity state for one note in the layout."""

    id: str  # Same as the note id
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0

    # Pinned nodes push and pull others but are not integrated (hover/selection)
    pinned: bool = False

    def is_finite(self) -> bool:
        """True when no component is NaN or infinite."""
        return all(math.isfinite(v) for v in (self.x, self.y, self.vx, self.vy))

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {"id": self.id, "x": self.x, "y": self.y, "vx": self.vx, "vy": self.vy}


@dataclass
class Edge:
    """
    A candidate relationship between two notes.

    Edges start as hypotheses and may be promoted to confirmed exactly once;
    there is deliberately no way back.
    """

    source_id: str
    target_id: str
    confirmed: bool = False
    id: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            self.id = edge_id(self.source_id, self.target_id)

    def confirm(self) -> bool:
        """Promote to confirmed. Returns False if it already was."""
        if self.confirmed:
            return False
        self.confirmed = True
        return True

    def other(self, node_id: str) -> str:
        """The endpoint opposite `node_id`."""
        return self.target_id if node_id == self.source_id else self.source_id

    def touches(self, node_id: str) -> bool:
        return node_id in (self.source_id, self.target_id)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "sourceId": self.source_id,
            "targetId": self.target_id,
            "confirmed": self.confirmed,
        }


@dataclass
class SimulationState:
    """
    The single aggregate read and mutated by the stepper and the interaction layer.

    Nodes are keyed by note id; edges by pair id. Both collections are
    rebuilt wholesale on reseed, never diffed.
    """

    bounds: Bounds
    nodes: dict[str, Node] = field(default_factory=dict)
    edges: dict[str, Edge] = field(default_factory=dict)
    notes: dict[str, Note] = field(default_factory=dict)
    frame: int = 0

    def add_node(self, node: Node, note: Note | None = None) -> bool:
        """Add a node; returns False if the id is already taken."""
        if node.id in self.nodes:
            return False
        self.nodes[node.id] = node
        if note is not None:
            self.notes[node.id] = note
        return True

    def add_edge(self, edge: Edge) -> bool:
        """Add an edge between existing nodes; duplicates and dangling edges are refused."""
        if edge.source_id == edge.target_id:
            return False
        if edge.source_id not in self.nodes or edge.target_id not in self.nodes:
            logger.debug(f"Refusing dangling edge {edge.id}")
            return False
        if edge.id in self.edges:
            return False
        self.edges[edge.id] = edge
        return True

    def node_ids(self) -> frozenset[str]:
        return frozenset(self.nodes)

    def edges_of(self, node_id: str) -> list[Edge]:
        """Edges touching `node_id`."""
        return [e for e in self.edges.values() if e.touches(node_id)]

    @property
    def confirmed_count(self) -> int:
        return sum(1 for e in self.edges.values() if e.confirmed)
