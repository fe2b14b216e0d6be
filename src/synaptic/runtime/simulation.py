"""Simulation engine - owns the layout state and drives the frame loop.

Lifecycle: IDLE -> RUNNING -> IDLE, with an optional PAUSED detour where
frames keep rendering but physics holds still. The loop is one callback
per host frame; `stop()` cancels the pending registration and must be
called on teardown (or use the engine as a context manager).
"""

import logging
import random
from collections.abc import Iterable
from enum import Enum
from typing import Any

from synaptic.config import Settings, settings as default_settings
from synaptic.interaction import ArtifactSink, InteractionController, NoteDetailView
from synaptic.layout import (
    PhysicsParams,
    StepReport,
    membership_changed,
    refresh_notes,
    seed,
    step,
)
from synaptic.models import Bounds, SimulationState
from synaptic.render import FrameSnapshot, PointerCallbacks, RenderAdapter, build_snapshot
from synaptic.runtime.frame_clock import AsyncioFrameClock, FrameClock, FrameHandle

logger = logging.getLogger(__name__)


class SimulationStatus(str, Enum):
    """Frame loop state."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"  # Frames render, physics is frozen


class Simulation:
    """
    Force-directed note web.

    Seeding, stepping, rendering, and gesture handling all happen on one
    thread between frames. The state object is shared by reference with the
    interaction controller, so what is drawn is what physics operates on.
    """

    def __init__(
        self,
        notes: Iterable[Any],
        bounds: Bounds,
        artifact_sink: ArtifactSink,
        renderer: RenderAdapter | None = None,
        clock: FrameClock | None = None,
        note_detail: NoteDetailView | None = None,
        rng: random.Random | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or default_settings
        self.params = PhysicsParams.from_settings(self.settings)
        self.rng = rng or random.Random()
        self.clock = clock or AsyncioFrameClock(fps=self.settings.fps)
        self.renderer = renderer

        self.state: SimulationState = seed(notes, bounds, rng=self.rng, settings=self.settings)
        self.controller = InteractionController(self.state, artifact_sink, note_detail)

        self.status = SimulationStatus.IDLE
        self.last_report: StepReport | None = None
        self.failed_frames = 0
        self._handle: FrameHandle | None = None

    # Lifecycle

    def start(self) -> None:
        """Register the first frame. No-op if already running."""
        if self.status is not SimulationStatus.IDLE:
            return
        self.status = SimulationStatus.RUNNING
        self._schedule()
        logger.info(f"Simulation started with {len(self.state.nodes)} nodes")

    def stop(self) -> None:
        """Cancel the pending frame and return to IDLE."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self.status is not SimulationStatus.IDLE:
            self.status = SimulationStatus.IDLE
            logger.info(f"Simulation stopped at frame {self.state.frame}")

    def pause(self) -> None:
        if self.status is SimulationStatus.RUNNING:
            self.status = SimulationStatus.PAUSED

    def resume(self) -> None:
        if self.status is SimulationStatus.PAUSED:
            self.status = SimulationStatus.RUNNING

    @property
    def running(self) -> bool:
        return self.status is not SimulationStatus.IDLE

    def __enter__(self) -> "Simulation":
        self.start()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.stop()
        self.controller.dispatcher.close()

    async def __aenter__(self) -> "Simulation":
        self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.stop()
        await self.controller.dispatcher.drain()
        self.controller.dispatcher.close()

    # Frame loop

    def _schedule(self) -> None:
        self._handle = self.clock.request_frame(self._on_frame)

    def _on_frame(self) -> None:
        self._handle = None
        if self.status is SimulationStatus.IDLE:
            return
        try:
            self.tick()
        finally:
            # A renderer or gesture may have stopped us during the frame
            if self.status is not SimulationStatus.IDLE and self._handle is None:
                self._schedule()

    def tick(self) -> FrameSnapshot | None:
        """
        Run one frame: step (unless paused) and hand a snapshot to the renderer.

        Exceptions from the stepper, snapshot, or renderer are logged, never
        raised, so a bad frame cannot halt the loop. A frame whose snapshot
        cannot be built is not drawn and returns None.
        """
        if self.status is not SimulationStatus.PAUSED:
            try:
                self.last_report = step(self.state, self.params)
            except Exception:
                self.failed_frames += 1
                logger.exception(f"Physics step failed at frame {self.state.frame}")

        try:
            snapshot = self.snapshot()
        except Exception:
            self.failed_frames += 1
            logger.exception(f"Snapshot failed at frame {self.state.frame}; skipping draw")
            return None

        if self.renderer is not None:
            try:
                self.renderer.draw(snapshot)
            except Exception:
                logger.exception(f"Renderer failed at frame {snapshot.frame}")
        return snapshot

    def snapshot(self) -> FrameSnapshot:
        """Read-only view of the current frame."""
        return build_snapshot(
            self.state,
            hovered_edge=self.controller.hovered_edge,
            hovered_node=self.controller.hovered_node,
            selected_node=self.controller.selected_node,
            excerpt_length=self.settings.excerpt_length,
        )

    # Host updates

    def sync_notes(self, notes: Iterable[Any]) -> bool:
        """
        Accept a new note snapshot from the note collaborator.

        Reseeds (fresh positions and hypotheses) only when note membership
        changed; content edits just refresh titles and excerpts.

        Returns:
            True if the layout was reseeded
        """
        notes = list(notes)
        if not membership_changed(self.state, notes):
            refresh_notes(self.state, notes)
            return False

        self.state = seed(notes, self.state.bounds, rng=self.rng, settings=self.settings)
        self.controller.attach(self.state)
        return True

    def resize(self, bounds: Bounds) -> None:
        """Change the viewport; nodes keep their positions and reflect back inside."""
        self.state.bounds = bounds

    def callbacks(self) -> PointerCallbacks:
        """Gesture callbacks for the drawing surface."""
        controller = self.controller
        return PointerCallbacks(
            on_node_activate=controller.on_node_activate,
            on_edge_hover_change=controller.on_edge_hover_change,
            on_edge_solidify=controller.on_edge_solidify,
            on_node_hover_change=controller.on_node_hover_change,
        )
