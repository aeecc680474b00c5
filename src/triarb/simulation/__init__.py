"""Feasibility simulation of cycles under live precision and fees."""

from triarb.simulation.simulator import FeasibilitySimulator, SimulationFailure


__all__ = ["FeasibilitySimulator", "SimulationFailure"]
