"""
Engine package - per-frame simulation stepping.
"""

from simlib.engine.simulation_driver import FrameDriver, SimulationDriver

__all__ = ['FrameDriver', 'SimulationDriver']
