"""Unit tests for the simulation engine and frame loop."""

import asyncio
import random
from unittest.mock import MagicMock, patch

import pytest

from synaptic.models import ArtifactRequest, Bounds, Note, edge_id
from synaptic.render import FrameSnapshot
from synaptic.runtime import AsyncioFrameClock, ManualFrameClock, Simulation, SimulationStatus

TAG_EDGE = edge_id("n2", "n4")


@pytest.fixture
def renderer() -> MagicMock:
    """Mock drawing surface."""
    return MagicMock(spec=["draw"])


@pytest.fixture
def simulation(sample_notes, bounds, artifact_store, renderer, manual_clock, test_settings) -> Simulation:
    return Simulation(
        sample_notes,
        bounds,
        artifact_store,
        renderer=renderer,
        clock=manual_clock,
        rng=random.Random(42),
        settings=test_settings,
    )


class TestManualClock:
    """Tests for the host-driven frame clock."""

    def test_callbacks_run_on_advance(self, manual_clock) -> None:
        calls = []
        manual_clock.request_frame(lambda: calls.append(1))

        assert calls == []
        assert manual_clock.advance() == 1
        assert calls == [1]
        assert manual_clock.pending == 0

    def test_cancelled_callback_skipped(self, manual_clock) -> None:
        calls = []
        handle = manual_clock.request_frame(lambda: calls.append(1))
        handle.cancel()

        assert manual_clock.pending == 0
        assert manual_clock.advance() == 0
        assert calls == []

    def test_reregistration_runs_next_frame(self, manual_clock) -> None:
        calls = []

        def callback() -> None:
            calls.append(manual_clock.frames)
            manual_clock.request_frame(callback)

        manual_clock.request_frame(callback)
        manual_clock.advance(3)

        assert calls == [1, 2, 3]


class TestLifecycle:
    """Tests for IDLE -> RUNNING -> IDLE."""

    def test_starts_idle(self, simulation, manual_clock) -> None:
        assert simulation.status is SimulationStatus.IDLE
        assert manual_clock.pending == 0

    def test_frames_step_and_render(self, simulation, manual_clock, renderer) -> None:
        simulation.start()
        manual_clock.advance(10)

        assert simulation.status is SimulationStatus.RUNNING
        assert simulation.state.frame == 10
        assert renderer.draw.call_count == 10
        snapshot = renderer.draw.call_args.args[0]
        assert isinstance(snapshot, FrameSnapshot)
        assert snapshot.frame == 10
        assert manual_clock.pending == 1

    def test_start_twice_registers_once(self, simulation, manual_clock) -> None:
        simulation.start()
        simulation.start()
        assert manual_clock.pending == 1

    def test_stop_cancels_pending_frame(self, simulation, manual_clock, renderer) -> None:
        """Test teardown leaves no registered frame behind."""
        simulation.start()
        manual_clock.advance(2)

        simulation.stop()

        assert simulation.status is SimulationStatus.IDLE
        assert manual_clock.pending == 0
        manual_clock.advance(5)
        assert simulation.state.frame == 2
        assert renderer.draw.call_count == 2

    def test_stop_from_renderer(self, simulation, manual_clock, renderer) -> None:
        renderer.draw.side_effect = lambda snapshot: simulation.stop()
        simulation.start()

        manual_clock.advance(3)

        assert simulation.state.frame == 1
        assert manual_clock.pending == 0

    def test_context_manager(self, simulation, manual_clock) -> None:
        with simulation as sim:
            assert sim.running
            manual_clock.advance(1)
        assert manual_clock.pending == 0
        assert not simulation.running

    def test_restart(self, simulation, manual_clock) -> None:
        simulation.start()
        manual_clock.advance(2)
        simulation.stop()
        simulation.start()
        manual_clock.advance(2)
        assert simulation.state.frame == 4

    def test_pause_freezes_physics_keeps_rendering(self, simulation, manual_clock, renderer) -> None:
        simulation.start()
        manual_clock.advance(1)
        positions = {n.id: (n.x, n.y) for n in simulation.state.nodes.values()}

        simulation.pause()
        manual_clock.advance(5)

        assert simulation.status is SimulationStatus.PAUSED
        assert simulation.state.frame == 1
        assert {n.id: (n.x, n.y) for n in simulation.state.nodes.values()} == positions
        assert renderer.draw.call_count == 6

        simulation.resume()
        manual_clock.advance(1)
        assert simulation.state.frame == 2

    def test_pause_when_idle_is_noop(self, simulation) -> None:
        simulation.pause()
        assert simulation.status is SimulationStatus.IDLE


class TestFailureIsolation:
    """Tests that no single frame halts the loop."""

    def test_step_exception_does_not_halt_loop(self, simulation, manual_clock, renderer) -> None:
        simulation.start()
        with patch("synaptic.runtime.simulation.step", side_effect=RuntimeError("boom")):
            manual_clock.advance(3)

        assert simulation.failed_frames == 3
        assert renderer.draw.call_count == 3
        assert manual_clock.pending == 1

        manual_clock.advance(1)
        assert simulation.state.frame == 1

    def test_renderer_exception_does_not_halt_loop(self, simulation, manual_clock, renderer) -> None:
        renderer.draw.side_effect = RuntimeError("canvas lost")
        simulation.start()

        manual_clock.advance(4)

        assert simulation.state.frame == 4
        assert manual_clock.pending == 1

    def test_snapshot_exception_does_not_halt_loop(self, simulation, manual_clock, renderer) -> None:
        simulation.start()
        with patch("synaptic.runtime.simulation.build_snapshot", side_effect=AttributeError("bad note")):
            manual_clock.advance(2)

        assert simulation.state.frame == 2
        assert simulation.failed_frames == 2
        renderer.draw.assert_not_called()
        assert manual_clock.pending == 1

        manual_clock.advance(1)
        assert renderer.draw.call_count == 1

    def test_tick_without_snapshot_returns_none(self, simulation) -> None:
        with patch("synaptic.runtime.simulation.build_snapshot", side_effect=RuntimeError("boom")):
            assert simulation.tick() is None

    def test_dangling_edge_reported(self, simulation, manual_clock) -> None:
        from synaptic.models import Edge

        stale = Edge(source_id="n1", target_id="gone")
        simulation.state.edges[stale.id] = stale
        simulation.start()

        manual_clock.advance(1)

        assert simulation.last_report.skipped_edges == [stale.id]


class TestSnapshot:
    """Tests for the render contract."""

    def test_snapshot_shape(self, simulation) -> None:
        data = simulation.snapshot().to_dict()

        assert {n["id"] for n in data["nodes"]} == {"n1", "n2", "n3", "n4", "n5"}
        assert set(data["nodes"][0]) == {"id", "x", "y"}
        assert data["edges"] == [
            {"id": TAG_EDGE, "sourceId": "n2", "targetId": "n4", "confirmed": False}
        ]

    def test_snapshot_labels(self, simulation) -> None:
        nodes = {n.id: n for n in simulation.snapshot().nodes}
        assert nodes["n2"].title == "Amor fati"
        assert nodes["n2"].excerpt == "Love whatever happens"

    def test_snapshot_is_a_copy(self, simulation) -> None:
        snapshot = simulation.snapshot()
        simulation.tick()
        moved = {n.id: (n.x, n.y) for n in simulation.snapshot().nodes}
        assert {n.id: (n.x, n.y) for n in snapshot.nodes} != moved

    def test_hover_highlight_and_affordance(self, simulation) -> None:
        callbacks = simulation.callbacks()
        callbacks.on_edge_hover_change(TAG_EDGE)

        snapshot = simulation.snapshot()

        assert snapshot.solidify_edge == TAG_EDGE
        assert [e.highlighted for e in snapshot.edges] == [True]

    def test_selection_in_snapshot(self, simulation) -> None:
        simulation.callbacks().on_node_activate("n3")
        selected = [n.id for n in simulation.snapshot().nodes if n.selected]
        assert selected == ["n3"]


class TestSolidifyThroughEngine:
    """Tests for confirmation against the running engine."""

    def test_confirmed_edge_visible_next_frame(self, simulation, manual_clock, artifact_store, renderer) -> None:
        simulation.start()
        manual_clock.advance(1)

        form = simulation.callbacks().on_edge_solidify(TAG_EDGE)
        assert form is not None
        simulation.controller.submit("What is amor fati?", "Loving one's fate")
        manual_clock.advance(1)

        snapshot = renderer.draw.call_args.args[0]
        assert [e.confirmed for e in snapshot.edges] == [True]
        artifact_store.create_artifact.assert_called_once()
        assert manual_clock.pending == 1


class TestSyncNotes:
    """Tests for reseeding on note-set changes."""

    def test_content_edit_keeps_layout(self, simulation, sample_notes) -> None:
        before = {n.id: (n.x, n.y) for n in simulation.state.nodes.values()}
        state = simulation.state
        edited = [Note(id=n.id, title=n.title, content=n.content + "!", tags=n.tags) for n in sample_notes]

        assert simulation.sync_notes(edited) is False

        assert simulation.state is state
        assert {n.id: (n.x, n.y) for n in simulation.state.nodes.values()} == before
        assert simulation.state.notes["n1"].content.endswith("!")

    def test_membership_change_reseeds(self, simulation, sample_notes, bounds) -> None:
        simulation.controller.on_edge_solidify(TAG_EDGE)
        simulation.controller.submit("Q", "A")

        reseeded = simulation.sync_notes(sample_notes + [Note(id="n6", content="new")])

        assert reseeded is True
        assert "n6" in simulation.state.nodes
        assert simulation.controller.state is simulation.state
        assert simulation.controller.form is None
        # Full rebuild: confirmations do not survive a reseed
        assert not any(e.confirmed for e in simulation.state.edges.values())
        for node in simulation.state.nodes.values():
            assert 50 <= node.x <= bounds.width - 50
            assert node.vx == 0.0

    def test_malformed_note_in_sync(self, simulation, sample_notes) -> None:
        assert simulation.sync_notes(sample_notes + [{"content": "no id"}]) is False

    def test_resize(self, simulation) -> None:
        simulation.resize(Bounds(1024, 768))
        assert simulation.state.bounds == Bounds(1024, 768)


class TestAsyncioClock:
    """Tests for the asyncio-backed frame loop."""

    @pytest.mark.asyncio
    async def test_runs_until_stopped(self, sample_notes, bounds, artifact_store, test_settings) -> None:
        sim = Simulation(
            sample_notes,
            bounds,
            artifact_store,
            clock=AsyncioFrameClock(fps=500),
            rng=random.Random(1),
            settings=test_settings,
        )

        async with sim:
            await asyncio.sleep(0.05)
            assert sim.state.frame > 0

        frames = sim.state.frame
        await asyncio.sleep(0.05)
        assert sim.state.frame == frames
        assert sim.status is SimulationStatus.IDLE

    @pytest.mark.asyncio
    async def test_async_store_does_not_block_frames(self, sample_notes, bounds, test_settings) -> None:
        """Test a slow artifact store never pauses the frame loop."""
        received: list[ArtifactRequest] = []
        release = asyncio.Event()

        async def slow_store(request: ArtifactRequest) -> None:
            await release.wait()
            received.append(request)

        sim = Simulation(
            sample_notes,
            bounds,
            slow_store,
            clock=AsyncioFrameClock(fps=500),
            rng=random.Random(1),
            settings=test_settings,
        )

        async with sim:
            sim.controller.on_edge_solidify(TAG_EDGE)
            sim.controller.submit("Q", "A")
            frames = sim.state.frame
            await asyncio.sleep(0.05)
            assert sim.state.frame > frames
            assert received == []
            release.set()

        assert len(received) == 1

    def test_default_fps_from_settings(self) -> None:
        clock = AsyncioFrameClock()
        assert clock.interval == pytest.approx(1 / 60)
