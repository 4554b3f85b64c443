"""
Pytest configuration and shared fixtures for the control and filter widget tests.
"""

import math
import os
import sys
from pathlib import Path

# Add parent directory to path so we can import the project packages
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Widgets render into offscreen images; no display is needed
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt5.QtWidgets import QApplication


# Need a QApplication instance for PyQt tests
@pytest.fixture(scope="session")
def qapp():
    """Create QApplication instance for tests that need Qt."""
    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    yield app


@pytest.fixture
def pointer_params():
    """Pointer constants with the full [0, pi] target range and no mass."""
    from simlib.models.state import PointerParams
    return PointerParams(min_target=0.0, max_target=math.pi)


@pytest.fixture
def pointer_driver(pointer_params):
    """P-only pointer loop starting straight up, target at 3pi/4."""
    from blocks.pid import PIDController
    from blocks.pointer import PointerPlant
    from simlib.engine.simulation_driver import SimulationDriver
    from simlib.models.state import ControllerGains
    return SimulationDriver(
        PointerPlant(), PIDController("P"), ControllerGains(kp=1.5), pointer_params,
        target=3 * math.pi / 4,
    )


@pytest.fixture
def oven_driver():
    """PI oven loop at the default gains, starting at ambient."""
    from blocks.oven import OvenPlant
    from blocks.pid import PIDController
    from simlib.engine.simulation_driver import SimulationDriver
    from simlib.models.state import ControllerGains, OvenParams
    return SimulationDriver(
        OvenPlant(), PIDController("PI"), ControllerGains(kp=5.0, ki=0.5), OvenParams(),
        target=350.0, dt=1.0 / 30.0, history_capacity=300,
    )


@pytest.fixture
def temp_config_file(tmp_path):
    """Provide a temporary path for configuration files."""
    return tmp_path / "config.json"
