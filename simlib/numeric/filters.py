"""
FIR and IIR filter math for the filter widgets.

FIR filters are windowed-sinc designs; IIR filters are the fixed first and
second order smoothing forms derived from a single alpha coefficient.
Frequency responses are evaluated by direct summation over a small grid,
which is all the plots need.
"""

import logging
import math
from typing import List, Sequence

import numpy as np
from scipy.signal import windows

logger = logging.getLogger(__name__)

FILTER_KINDS = ("lowpass", "highpass", "bandpass")
WINDOW_TYPES = ("rectangular", "hamming", "blackman")

MIN_CUTOFF = 0.01
MAX_CUTOFF = 0.49
MIN_TAPS = 3
RESPONSE_POINTS = 100
IIR_RESPONSE_CAP = 1.5


def make_window(window: str, taps: int) -> np.ndarray:
    """Return a symmetric window of length ``taps``."""
    if window == "rectangular":
        return windows.boxcar(taps)
    if window == "hamming":
        return windows.hamming(taps, sym=True)
    if window == "blackman":
        return windows.blackman(taps, sym=True)
    raise ValueError(f"Unknown window type: {window}")


def _normalize_taps(taps: int) -> int:
    """Taps are kept odd so the kernel has a centre sample."""
    taps = max(MIN_TAPS, int(taps))
    if taps % 2 == 0:
        taps += 1
    return taps


def sinc_kernel(cutoff: float, taps: int) -> np.ndarray:
    """
    Ideal lowpass impulse response sampled around the centre tap.

    h[n] = sin(2*pi*fc*d) / (pi*d) with d = n - M/2. At d == 0 numpy's sinc
    returns the analytic limit, so the centre tap is exactly 2*fc.
    """
    d = np.arange(taps) - (taps - 1) / 2.0
    return 2.0 * cutoff * np.sinc(2.0 * cutoff * d)


def design_fir(kind: str, cutoff: float, taps: int, window: str = "hamming",
               bandwidth: float = 0.1) -> np.ndarray:
    """
    Design FIR coefficients by the windowed-sinc method.

    Args:
        kind: 'lowpass', 'highpass' or 'bandpass'.
        cutoff: Normalized cutoff (cycles/sample, Nyquist = 0.5). For a
            bandpass this is the centre frequency.
        taps: Filter length; even values are bumped to the next odd length.
        window: 'rectangular', 'hamming' or 'blackman'.
        bandwidth: Half-width of the bandpass around ``cutoff``.

    Returns:
        Coefficient array. The lowpass has unity DC gain, the highpass is the
        unit impulse minus that lowpass, and the bandpass is normalized by its
        absolute sum (doubled to restore passband gain).
    """
    if kind not in FILTER_KINDS:
        raise ValueError(f"Unknown filter kind: {kind}")
    taps = _normalize_taps(taps)
    cutoff = min(MAX_CUTOFF, max(MIN_CUTOFF, float(cutoff)))
    win = make_window(window, taps)

    if kind == "bandpass":
        fc1 = max(MIN_CUTOFF, cutoff - bandwidth)
        fc2 = min(MAX_CUTOFF, cutoff + bandwidth)
        h = (sinc_kernel(fc2, taps) - sinc_kernel(fc1, taps)) * win
        abs_sum = np.sum(np.abs(h))
        return h / abs_sum * 2.0

    lowpass = sinc_kernel(cutoff, taps) * win
    lowpass = lowpass / np.sum(lowpass)
    if kind == "lowpass":
        return lowpass

    impulse = np.zeros(taps)
    impulse[(taps - 1) // 2] = 1.0
    return impulse - lowpass


def apply_fir(signal: Sequence[float], coeffs: Sequence[float]) -> np.ndarray:
    """Causal convolution; samples before the start of the signal are zero."""
    signal = np.asarray(signal, dtype=float)
    if signal.size == 0:
        return signal.copy()
    return np.convolve(signal, np.asarray(coeffs, dtype=float))[:signal.size]


def response_frequencies(points: int = RESPONSE_POINTS) -> np.ndarray:
    """Normalized frequencies 0.5*i/points for i in [0, points)."""
    return np.arange(points) / points * 0.5


def frequency_response(coeffs: Sequence[float], points: int = RESPONSE_POINTS) -> np.ndarray:
    """DTFT magnitude of ``coeffs`` sampled on ``response_frequencies``."""
    coeffs = np.asarray(coeffs, dtype=float)
    k = np.arange(coeffs.size)
    omega = 2.0 * math.pi * response_frequencies(points)
    phase = np.outer(omega, k)
    real = np.cos(phase) @ coeffs
    imag = -np.sin(phase) @ coeffs
    return np.hypot(real, imag)


def response_index(freq: float, points: int = RESPONSE_POINTS) -> int:
    """Bin of the response grid holding normalized frequency ``freq``."""
    idx = int(math.floor(freq / 0.5 * points))
    return min(points - 1, max(0, idx))


# -- IIR ---------------------------------------------------------------------

def iir_coefficients(alpha: float) -> tuple:
    """Second-order coefficients (b0, a1, a2) derived from alpha."""
    return alpha * alpha, 2.0 * (1.0 - alpha), (1.0 - alpha) ** 2


def iir1_step(x: float, y: float, alpha: float) -> float:
    """First-order exponential smoother: y' = a*x + (1-a)*y."""
    return alpha * x + (1.0 - alpha) * y


def iir2_step(x: float, y1: float, y2: float, alpha: float) -> float:
    """Second-order smoother: y' = b0*x + a1*y1 - a2*y2."""
    b0, a1, a2 = iir_coefficients(alpha)
    return b0 * x + a1 * y1 - a2 * y2


class IIRFilter:
    """Streaming first or second order IIR smoother."""

    def __init__(self, alpha: float = 0.2, order: int = 1):
        if order not in (1, 2):
            raise ValueError(f"IIR order must be 1 or 2, got {order}")
        self.alpha = alpha
        self.order = order
        self.y1 = 0.0
        self.y2 = 0.0

    def reset(self):
        self.y1 = 0.0
        self.y2 = 0.0

    def step(self, x: float) -> float:
        if self.order == 1:
            y = iir1_step(x, self.y1, self.alpha)
        else:
            y = iir2_step(x, self.y1, self.y2, self.alpha)
        self.y2 = self.y1
        self.y1 = y
        return y


def apply_iir(signal: Sequence[float], alpha: float, order: int = 1) -> List[float]:
    """Run a fresh IIRFilter over a whole sequence."""
    filt = IIRFilter(alpha, order)
    return [filt.step(float(x)) for x in signal]


def iir_frequency_response(alpha: float, order: int = 1,
                           points: int = RESPONSE_POINTS) -> np.ndarray:
    """
    Closed-form magnitude response of the IIR smoother.

    The second-order curve is capped at 1.5 so resonant settings still fit
    the plot.
    """
    if order not in (1, 2):
        raise ValueError(f"IIR order must be 1 or 2, got {order}")
    omega = 2.0 * math.pi * response_frequencies(points)

    if order == 1:
        real = 1.0 - (1.0 - alpha) * np.cos(omega)
        imag = (1.0 - alpha) * np.sin(omega)
        return alpha / np.hypot(real, imag)

    b0, a1, a2 = iir_coefficients(alpha)
    real = 1.0 - a1 * np.cos(omega) + a2 * np.cos(2.0 * omega)
    imag = a1 * np.sin(omega) - a2 * np.sin(2.0 * omega)
    return np.minimum(b0 / np.hypot(real, imag), IIR_RESPONSE_CAP)
