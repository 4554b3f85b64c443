"""
Synthetic test signals for the filter widgets.

The noise component is read from a fixed table so that a paused widget
redraws the same trace every frame; only simulated time scrolls it.
"""

import math
from typing import Optional, Sequence

import numpy as np

NOISE_TABLE_SIZE = 2000
SAMPLE_RATE = 60.0
WINDOW_SAMPLES = 200


class NoiseTable:
    """Uniform noise in [-1, 1] drawn once per widget."""

    def __init__(self, size: int = NOISE_TABLE_SIZE, seed: Optional[int] = None):
        rng = np.random.default_rng(seed)
        self.values = rng.uniform(-1.0, 1.0, size)

    def __len__(self):
        return self.values.size

    def window(self, time: float, count: int) -> np.ndarray:
        """``count`` consecutive samples starting at the frame for ``time``."""
        start = int(math.floor(time * SAMPLE_RATE))
        idx = (start + np.arange(count)) % self.values.size
        return self.values[idx]


def two_tone_signal(time: float, noise: NoiseTable, low_freq: float,
                    high_freq: float, high_amp: float, noise_amp: float,
                    count: int = WINDOW_SAMPLES) -> np.ndarray:
    """
    A unit sine at ``low_freq`` Hz plus a weaker ``high_freq`` Hz tone and
    table noise, sampled at 60 Hz. The tones are fixed; the noise scrolls
    with ``time``.
    """
    t = np.arange(count) / SAMPLE_RATE
    return (np.sin(2.0 * math.pi * low_freq * t)
            + high_amp * np.sin(2.0 * math.pi * high_freq * t)
            + noise_amp * noise.window(time, count))


def fir_demo_signal(time: float, noise: NoiseTable, count: int = WINDOW_SAMPLES) -> np.ndarray:
    return two_tone_signal(time, noise, 2.0, 15.0, 0.3, 0.2, count)


def iir_demo_signal(time: float, noise: NoiseTable, count: int = WINDOW_SAMPLES) -> np.ndarray:
    return two_tone_signal(time, noise, 1.5, 12.0, 0.4, 0.25, count)


def challenge_signal(time: float, signal_freqs: Sequence[float],
                     noise_freqs: Sequence[float],
                     count: int = WINDOW_SAMPLES) -> np.ndarray:
    """Sum of half-amplitude tones at each normalized frequency.

    Frequencies are scaled by 30 so that normalized values map onto visible
    oscillations at the 60 Hz plot rate.
    """
    t = time + np.arange(count) / SAMPLE_RATE
    value = np.zeros(count)
    for freq in list(signal_freqs) + list(noise_freqs):
        value += 0.5 * np.sin(2.0 * math.pi * freq * t * 30.0)
    return value
