"""Interaction and confirmation protocol.

Turns pointer gestures from the render adapter into state mutations:
1. Hovering an edge highlights it and, if unconfirmed, offers "solidify"
2. Solidify opens a front/back form; submitting confirms the edge and
   emits exactly one flashcard request to the artifact store
3. Clicking a node selects it and opens the external note-detail view

Mutations happen between frames on the event loop thread, so the stepper
never sees a half-applied change.
"""

import asyncio
import inspect
import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Any, Protocol, Union, runtime_checkable

from synaptic.errors import InteractionError
from synaptic.models import ArtifactRequest, Note, SimulationState
from synaptic.models.artifact import now_ms

logger = logging.getLogger(__name__)


@runtime_checkable
class ArtifactStore(Protocol):
    """External flashcard store."""

    def create_artifact(self, request: ArtifactRequest) -> Any: ...


# A store object, or a plain callable taking the request (sync or async)
ArtifactSink = Union[ArtifactStore, Callable[[ArtifactRequest], Any]]
NoteDetailView = Callable[[Note], Any]


@dataclass
class ConfirmationForm:
    """An open solidify form for one edge."""

    edge_id: str
    front: str = ""
    back: str = ""
    error: str | None = None
    invalid_fields: list[str] = field(default_factory=list)


class ArtifactDispatcher:
    """
    Fire-and-forget delivery of artifact requests.

    Synchronous sinks are called inline. Coroutines are scheduled as tasks
    on the running loop and never awaited by the caller. Task references
    are held until they finish. Without a running loop (a host driving
    frames synchronously) coroutines run on a background worker thread.
    """

    def __init__(self, sink: ArtifactSink) -> None:
        self.sink = sink
        self._pending: set[asyncio.Task] = set()
        self._background: set[Future] = set()
        self._executor: ThreadPoolExecutor | None = None
        self._executor_lock = threading.Lock()

    def emit(self, request: ArtifactRequest) -> None:
        handler = self.sink.create_artifact if isinstance(self.sink, ArtifactStore) else self.sink
        try:
            result = handler(request)
        except Exception:
            logger.exception(f"Artifact store rejected request {request.id}")
            return

        if not inspect.isawaitable(result):
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"No event loop for artifact {request.id}; delivering on a worker thread")
            future = self._get_executor().submit(asyncio.run, _await(result))
            self._background.add(future)
            future.add_done_callback(self._finished_background)
            return

        task = loop.create_task(_await(result))
        self._pending.add(task)
        task.add_done_callback(self._finished)

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="artifact-delivery"
                )
            return self._executor

    def _finished(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Artifact delivery failed: {error!r}")

    def _finished_background(self, future: Future) -> None:
        self._background.discard(future)
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error(f"Artifact delivery failed: {error!r}")

    @property
    def pending(self) -> int:
        return len(self._pending) + len(self._background)

    async def drain(self) -> None:
        """Wait for in-flight deliveries (teardown and tests)."""
        waiting = [*self._pending, *(asyncio.wrap_future(f) for f in list(self._background))]
        if waiting:
            await asyncio.gather(*waiting, return_exceptions=True)

    def flush(self, timeout: float | None = None) -> None:
        """Block until worker-thread deliveries finish. For synchronous hosts."""
        wait(list(self._background), timeout=timeout)

    def close(self) -> None:
        """Stop the worker thread once queued deliveries are done."""
        with self._executor_lock:
            if self._executor is not None:
                self._executor.shutdown(wait=True)
                self._executor = None


async def _await(awaitable: Any) -> Any:
    return await awaitable


class InteractionController:
    """
    Gesture handler sharing the simulation state with the stepper.

    The controller holds the state by reference; replacing the state on
    reseed goes through `attach` so hover, selection, and any open form are
    dropped together with the old ids.
    """

    def __init__(
        self,
        state: SimulationState,
        artifact_sink: ArtifactSink,
        note_detail: NoteDetailView | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.state = state
        self.dispatcher = ArtifactDispatcher(artifact_sink)
        self.note_detail = note_detail
        self.clock = clock

        self.hovered_edge: str | None = None
        self.hovered_node: str | None = None
        self.selected_node: str | None = None
        self.form: ConfirmationForm | None = None

    def attach(self, state: SimulationState) -> None:
        """Point the controller at a freshly seeded state."""
        self.state = state
        self.hovered_edge = None
        self.hovered_node = None
        self.selected_node = None
        self.form = None

    # Edge gestures

    def on_edge_hover_change(self, edge_id: str | None) -> None:
        """Highlight an edge, or clear the highlight with None."""
        self.hovered_edge = edge_id if edge_id in self.state.edges else None

    @property
    def solidify_available(self) -> bool:
        """True when the highlighted edge can still be solidified."""
        if self.hovered_edge is None:
            return False
        edge = self.state.edges.get(self.hovered_edge)
        return edge is not None and not edge.confirmed

    def on_edge_solidify(self, edge_id: str) -> ConfirmationForm | None:
        """Open the confirmation form for an unconfirmed edge."""
        edge = self.state.edges.get(edge_id)
        if edge is None:
            logger.debug(f"Solidify requested for unknown edge {edge_id}")
            return None
        if edge.confirmed:
            return None
        self.form = ConfirmationForm(edge_id=edge_id)
        return self.form

    def submit(self, front: str, back: str) -> ArtifactRequest | None:
        """
        Confirm the form's edge and emit its flashcard.

        Args:
            front: Question / concept side
            back: Answer / principle side

        Returns:
            The emitted request, or None when there is no open form or the
            edge was already confirmed

        Raises:
            InteractionError: if a field is empty; the form stays open
        """
        form = self.form
        if form is None:
            return None

        form.front, form.back = front, back
        missing = [name for name, value in (("front", front), ("back", back)) if not value.strip()]
        if missing:
            form.error = f"Required: {', '.join(missing)}"
            form.invalid_fields = missing
            raise InteractionError(form.error, fields=missing)

        edge = self.state.edges.get(form.edge_id)
        self.form = None
        if edge is None or not edge.confirm():
            logger.info(f"Edge {form.edge_id} already solidified; no artifact emitted")
            return None

        request = ArtifactRequest(
            front=front.strip(),
            back=back.strip(),
            next_review=self.clock(),
            edge_id=edge.id,
        )
        self.dispatcher.emit(request)
        logger.info(f"Solidified edge {edge.id} into artifact {request.id}")
        return request

    def cancel(self) -> None:
        """Close the form without touching any state."""
        self.form = None

    # Node gestures

    def on_node_hover_change(self, node_id: str | None) -> None:
        """Track the hovered node; hovered and selected nodes hold still."""
        self.hovered_node = node_id if node_id in self.state.nodes else None
        self._apply_pins()

    def on_node_activate(self, node_id: str) -> None:
        """Toggle selection and open the note-detail view."""
        if node_id not in self.state.nodes:
            return
        if self.selected_node == node_id:
            self.selected_node = None
        else:
            self.selected_node = node_id
            note = self.state.notes.get(node_id)
            if self.note_detail is not None and note is not None:
                try:
                    self.note_detail(note)
                except Exception:
                    logger.exception(f"Note detail view failed for {node_id}")
        self._apply_pins()

    def clear_selection(self) -> None:
        self.selected_node = None
        self._apply_pins()

    def _apply_pins(self) -> None:
        held = {self.hovered_node, self.selected_node}
        for node in self.state.nodes.values():
            node.pinned = node.id in held
