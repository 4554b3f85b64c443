"""
Challenge definitions and run records for the tuning and filter challenges.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class Outcome(Enum):
    """Lifecycle of a single challenge run."""
    IDLE = "idle"
    RUNNING = "running"
    PASSED = "passed"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class Challenge:
    """A step-response tuning scenario for the pointer plant."""
    name: str
    description: str
    start_angle: float
    target_angle: float
    mass: float
    par_time: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Challenge":
        return cls(
            name=data["name"],
            description=data.get("description", ""),
            start_angle=float(data["start_angle"]),
            target_angle=float(data["target_angle"]),
            mass=float(data.get("mass", 0.0)),
            par_time=float(data.get("par_time", 0.0)),
        )


@dataclass(frozen=True)
class RunResult:
    """One finished run. ``time`` is None when the run timed out."""
    challenge: str
    kp: float
    ki: float
    kd: float
    time: Optional[float]

    @property
    def passed(self) -> bool:
        return self.time is not None


@dataclass(frozen=True)
class FilterChallenge:
    """Design a filter that keeps every signal tone and rejects every noise tone."""
    id: str
    name: str
    description: str
    kind: str
    target_cutoff: float
    signal_freqs: Tuple[float, ...]
    noise_freqs: Tuple[float, ...]
    tolerance: float = 0.15

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FilterChallenge":
        return cls(
            id=data["id"],
            name=data["name"],
            description=data.get("description", ""),
            kind=data["kind"],
            target_cutoff=float(data["target_cutoff"]),
            signal_freqs=tuple(float(f) for f in data["signal_freqs"]),
            noise_freqs=tuple(float(f) for f in data["noise_freqs"]),
            tolerance=float(data.get("tolerance", 0.15)),
        )


DEFAULT_CHALLENGES = [
    {
        "name": "Basics",
        "description": "No mass, simple step",
        "start_angle": math.pi / 2,
        "target_angle": 3 * math.pi / 4,
        "mass": 0.0,
        "par_time": 1.5,
    },
    {
        "name": "Weighted",
        "description": "Add mass, fight gravity",
        "start_angle": math.pi / 2,
        "target_angle": 3 * math.pi / 4,
        "mass": 0.4,
        "par_time": 2.5,
    },
    {
        "name": "Big Step",
        "description": "Large angle change",
        "start_angle": math.pi / 4 + 0.1,
        "target_angle": 3 * math.pi / 4 - 0.1,
        "mass": 0.2,
        "par_time": 2.0,
    },
    {
        "name": "Heavy",
        "description": "Maximum mass",
        "start_angle": math.pi / 2,
        "target_angle": 2 * math.pi / 3,
        "mass": 0.8,
        "par_time": 3.5,
    },
]

DEFAULT_FILTER_CHALLENGES = [
    {
        "id": "remove-hum",
        "name": "Remove Power Line Hum",
        "description": "A 50Hz hum is contaminating your 10Hz sensor signal. Design a low-pass filter to remove it.",
        "kind": "lowpass",
        "target_cutoff": 0.3,
        "signal_freqs": [0.1],
        "noise_freqs": [0.5],
        "tolerance": 0.15,
    },
    {
        "id": "extract-carrier",
        "name": "Extract High Frequency",
        "description": "Extract the high-frequency carrier signal from a low-frequency envelope.",
        "kind": "highpass",
        "target_cutoff": 0.35,
        "signal_freqs": [0.4],
        "noise_freqs": [0.1],
        "tolerance": 0.15,
    },
    {
        "id": "isolate-band",
        "name": "Isolate Frequency Band",
        "description": "Isolate the mid-frequency component from both low and high frequency interference.",
        "kind": "bandpass",
        "target_cutoff": 0.25,
        "signal_freqs": [0.25],
        "noise_freqs": [0.05, 0.45],
        "tolerance": 0.1,
    },
]
