"""
Numeric core - pure controller, plant and filter math.
"""

from simlib.numeric.control import (
    clamp, pid_step, pointer_step, oven_step, heater_duty,
    predict_settling_angle, steady_state_error_degrees, PIDStep,
)
from simlib.numeric.filters import (
    design_fir, apply_fir, frequency_response, response_index,
    IIRFilter, apply_iir, iir_frequency_response,
)

__all__ = [
    'clamp', 'pid_step', 'pointer_step', 'oven_step', 'heater_duty',
    'predict_settling_angle', 'steady_state_error_degrees', 'PIDStep',
    'design_fir', 'apply_fir', 'frequency_response', 'response_index',
    'IIRFilter', 'apply_iir', 'iir_frequency_response',
]
