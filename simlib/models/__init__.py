"""
Models package - value records for simulation state and challenges.
"""

from simlib.models.state import (
    PointerState, OvenState, ControllerGains, PointerParams, OvenParams,
    TickTelemetry, FilterSpec, IIRSpec,
)
from simlib.models.history import HistoryBuffer
from simlib.models.challenge import (
    Challenge, FilterChallenge, Outcome, RunResult,
)

__all__ = [
    'PointerState', 'OvenState', 'ControllerGains', 'PointerParams', 'OvenParams',
    'TickTelemetry', 'FilterSpec', 'IIRSpec', 'HistoryBuffer',
    'Challenge', 'FilterChallenge', 'Outcome', 'RunResult',
]
