"""Runtime: frame clocks and the simulation engine."""

from synaptic.runtime.frame_clock import (
    AsyncioFrameClock,
    FrameCallback,
    FrameClock,
    FrameHandle,
    ManualFrameClock,
)
from synaptic.runtime.simulation import Simulation, SimulationStatus

__all__ = [
    "Simulation",
    "SimulationStatus",
    "FrameClock",
    "FrameHandle",
    "FrameCallback",
    "AsyncioFrameClock",
    "ManualFrameClock",
]
