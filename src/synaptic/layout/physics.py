"""Physics stepper - one frame of force-directed integration.

Per frame, every node feels:
1. Repulsion from every other node: d/dist * k_rep / dist², dist floored
2. Attraction along each edge touching it, tighter for confirmed edges
3. A weak pull toward the viewport center
then velocity = (velocity + force) * damping and position += velocity,
with velocity reflected at the viewport margins.

Forces are computed from the start-of-frame positions, so a frame is a
deterministic function of the state. There is no wall-clock delta: the
layout is decorative, not a physically exact simulation.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

import numpy as np

from synaptic.config import Settings, settings as default_settings
from synaptic.models import Bounds, Edge, SimulationState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhysicsParams:
    """Constants of the force model."""

    repulsion: float = 2000.0
    confirmed_strength: float = 0.05
    hypothesis_strength: float = 0.01
    center_gravity: float = 0.005
    damping: float = 0.9
    min_distance: float = 1.0
    boundary_margin: float = 20.0

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "PhysicsParams":
        cfg = settings or default_settings
        return cls(
            repulsion=cfg.repulsion,
            confirmed_strength=cfg.confirmed_strength,
            hypothesis_strength=cfg.hypothesis_strength,
            center_gravity=cfg.center_gravity,
            damping=cfg.damping,
            min_distance=cfg.min_distance,
            boundary_margin=cfg.boundary_margin,
        )


@dataclass
class StepReport:
    """What happened during one frame."""

    frame: int
    nodes: int = 0
    edges: int = 0
    skipped_edges: list[str] = field(default_factory=list)
    sanitized_nodes: list[str] = field(default_factory=list)
    max_speed: float = 0.0


def repulsion_forces(positions: np.ndarray, k: float, min_distance: float = 1.0) -> np.ndarray:
    """
    Pairwise inverse-square repulsion.

    Exactly coincident nodes have no direction to push along, so the lower
    indexed one is pushed toward -x and the higher toward +x.

    Args:
        positions: (n, 2) array of node positions
        k: Repulsion constant
        min_distance: Distance floor

    Returns:
        (n, 2) array of summed forces
    """
    n = len(positions)
    if n < 2:
        return np.zeros_like(positions)

    delta = positions[:, None, :] - positions[None, :, :]  # p_i - p_j
    dist = np.hypot(delta[..., 0], delta[..., 1])

    coincident = dist == 0
    np.fill_diagonal(coincident, False)
    if coincident.any():
        idx = np.arange(n)
        order = np.sign(idx[:, None] - idx[None, :]).astype(float)
        delta[..., 0] = np.where(coincident, order * min_distance, delta[..., 0])
        dist = np.where(coincident, min_distance, dist)

    floored = np.maximum(dist, min_distance)
    scale = k / floored**3  # (d / dist) * (k / dist²)
    np.fill_diagonal(scale, 0.0)
    return (delta * scale[..., None]).sum(axis=1)


def attraction_forces(
    positions: np.ndarray,
    edges: Iterable[Edge],
    index: dict[str, int],
    confirmed_strength: float,
    hypothesis_strength: float,
) -> tuple[np.ndarray, list[str]]:
    """
    Spring-like pull between edge endpoints.

    Returns:
        (n, 2) forces and the ids of edges skipped for dangling endpoints
    """
    forces = np.zeros_like(positions)
    sources: list[int] = []
    targets: list[int] = []
    strengths: list[float] = []
    skipped: list[str] = []

    for edge in edges:
        s = index.get(edge.source_id)
        t = index.get(edge.target_id)
        if s is None or t is None:
            skipped.append(edge.id)
            continue
        sources.append(s)
        targets.append(t)
        strengths.append(confirmed_strength if edge.confirmed else hypothesis_strength)

    if not sources:
        return forces, skipped

    src = np.asarray(sources)
    dst = np.asarray(targets)
    pull = (positions[dst] - positions[src]) * np.asarray(strengths)[:, None]
    np.add.at(forces, src, pull)
    np.add.at(forces, dst, -pull)
    return forces, skipped


def reflect(positions: np.ndarray, velocities: np.ndarray, bounds: Bounds, margin: float) -> None:
    """Invert velocity components of nodes moving out past the margin. In place."""
    limits = ((0, bounds.width), (1, bounds.height))
    for axis, size in limits:
        coord = positions[:, axis]
        speed = velocities[:, axis]
        outward = ((coord < margin) & (speed < 0)) | ((coord > size - margin) & (speed > 0))
        velocities[outward, axis] *= -1


def _sanitize(positions: np.ndarray, velocities: np.ndarray, center: np.ndarray) -> np.ndarray:
    """Reset rows with a non-finite component to the center at rest. Returns the mask."""
    broken = ~(np.isfinite(positions).all(axis=1) & np.isfinite(velocities).all(axis=1))
    if broken.any():
        positions[broken] = center
        velocities[broken] = 0.0
    return broken


def step(state: SimulationState, params: PhysicsParams | None = None) -> StepReport:
    """
    Advance the simulation by one frame, mutating node positions and velocities.

    Dangling edges are skipped for this frame. Any node that would end the
    frame with a non-finite component is reset to the viewport center at rest.

    Args:
        state: Simulation state to advance
        params: Force model constants (from global settings if omitted)

    Returns:
        StepReport for the frame
    """
    params = params or PhysicsParams.from_settings()
    state.frame += 1
    report = StepReport(frame=state.frame, nodes=len(state.nodes), edges=len(state.edges))
    if not state.nodes:
        return report

    nodes = list(state.nodes.values())
    index = {node.id: i for i, node in enumerate(nodes)}
    positions = np.array([(node.x, node.y) for node in nodes], dtype=float)
    velocities = np.array([(node.vx, node.vy) for node in nodes], dtype=float)
    pinned = np.array([node.pinned for node in nodes], dtype=bool)
    center = np.asarray(state.bounds.center, dtype=float)

    # Corrupted nodes are reset before any pairwise force is computed
    sanitized = _sanitize(positions, velocities, center)

    forces = repulsion_forces(positions, params.repulsion, params.min_distance)
    pull, report.skipped_edges = attraction_forces(
        positions,
        state.edges.values(),
        index,
        params.confirmed_strength,
        params.hypothesis_strength,
    )
    forces += pull
    forces += (center - positions) * params.center_gravity

    new_velocities = (velocities + forces) * params.damping
    new_positions = positions + new_velocities
    reflect(new_positions, new_velocities, state.bounds, params.boundary_margin)

    new_positions[pinned] = positions[pinned]
    new_velocities[pinned] = velocities[pinned]

    sanitized |= _sanitize(new_positions, new_velocities, center)
    if sanitized.any():
        report.sanitized_nodes = [nodes[i].id for i in np.flatnonzero(sanitized)]
        logger.warning(f"Reset {len(report.sanitized_nodes)} non-finite nodes to center")

    for i, node in enumerate(nodes):
        node.x, node.y = float(new_positions[i, 0]), float(new_positions[i, 1])
        node.vx, node.vy = float(new_velocities[i, 0]), float(new_velocities[i, 1])

    if report.skipped_edges:
        logger.debug(f"Frame {state.frame}: skipped dangling edges {report.skipped_edges}")

    report.max_speed = float(np.hypot(new_velocities[:, 0], new_velocities[:, 1]).max())
    return report
