"""
Unit tests for the first and second order IIR smoothers.
"""

import numpy as np
import pytest

from simlib.numeric.filters import (
    IIRFilter, apply_iir, iir1_step, iir2_step, iir_coefficients, iir_frequency_response,
)


@pytest.mark.unit
class TestIIRSteps:

    def test_first_order_step(self):
        assert np.isclose(iir1_step(1.0, 0.0, 0.2), 0.2)
        assert np.isclose(iir1_step(1.0, 0.5, 0.2), 0.6)

    def test_second_order_coefficients(self):
        b0, a1, a2 = iir_coefficients(0.3)
        assert np.isclose(b0, 0.09)
        assert np.isclose(a1, 1.4)
        assert np.isclose(a2, 0.49)

    def test_second_order_step(self):
        # 0.09*1 + 1.4*0.5 - 0.49*0.25
        assert np.isclose(iir2_step(1.0, 0.5, 0.25, 0.3), 0.6675)

    def test_first_order_step_response(self):
        out = apply_iir([1.0] * 5, 0.5, order=1)
        assert np.allclose(out, [0.5, 0.75, 0.875, 0.9375, 0.96875])

    def test_second_order_converges_to_input(self):
        out = apply_iir([1.0] * 300, 0.2, order=2)
        assert np.isclose(out[-1], 1.0, atol=1e-6)
        assert all(y <= 1.0 + 1e-12 for y in out), "Critically damped smoother must not overshoot"


@pytest.mark.unit
class TestIIRFilter:

    def test_invalid_order(self):
        with pytest.raises(ValueError):
            IIRFilter(0.2, order=3)

    def test_streaming_matches_batch(self):
        signal = np.sin(np.arange(50) * 0.3)
        filt = IIRFilter(0.3, order=2)
        streamed = [filt.step(x) for x in signal]
        assert np.allclose(streamed, apply_iir(signal, 0.3, order=2))

    def test_reset_clears_history(self):
        filt = IIRFilter(0.5, order=2)
        filt.step(1.0)
        filt.step(1.0)
        filt.reset()
        assert filt.y1 == 0.0 and filt.y2 == 0.0
        assert np.isclose(filt.step(1.0), 0.25)


@pytest.mark.unit
class TestIIRResponse:

    def test_unity_dc_gain(self):
        for order in (1, 2):
            response = iir_frequency_response(0.2, order)
            assert np.isclose(response[0], 1.0), f"order {order} DC gain {response[0]}"

    def test_response_is_lowpass(self):
        response = iir_frequency_response(0.2, 1)
        assert np.all(np.diff(response) <= 1e-12)
        assert response[-1] < 0.2

    def test_second_order_is_first_order_squared(self):
        first = iir_frequency_response(0.3, 1)
        second = iir_frequency_response(0.3, 2)
        assert np.allclose(second, first ** 2)

    def test_second_order_capped(self):
        assert np.all(iir_frequency_response(0.99, 2) <= 1.5)

    def test_invalid_order(self):
        with pytest.raises(ValueError):
            iir_frequency_response(0.2, 0)
