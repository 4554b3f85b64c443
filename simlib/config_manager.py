"""
Configuration management for the control and filter widgets.

Widget defaults (gains, slider ranges, presets, challenge lists) live in
config/default_config.json. Anything missing from the file falls back to
the built-in defaults below.
"""

import copy
import json
import math
import os
from typing import Dict, Any, Optional
import logging

from simlib.models.challenge import DEFAULT_CHALLENGES, DEFAULT_FILTER_CHALLENGES

logger = logging.getLogger(__name__)

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


class ConfigManager:
    """Configuration manager for widget defaults."""

    def __init__(self, config_file: Optional[str] = None):
        self.config_file = config_file or os.path.join(PROJECT_ROOT, "config", "default_config.json")
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file, layered over the defaults."""
        defaults = self._get_default_config()
        try:
            if os.path.exists(self.config_file):
                with open(self.config_file, 'r') as f:
                    self._config = _deep_merge(defaults, json.load(f))
                logger.info(f"Configuration loaded from {self.config_file}")
            else:
                logger.warning(f"Configuration file {self.config_file} not found, using defaults")
                self._config = defaults
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading configuration: {e}")
            self._config = defaults

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        quarter = math.pi / 4
        return {
            "display": {
                "theme": "dark",
                "window_size": [1120, 860],
                "scaling_factor": 1.0,
            },
            "simulation": {
                "dt": 1.0 / 60.0,
                "frame_interval_ms": 16,
                "max_device_pixel_ratio": 2.0,
            },
            "pointer": {
                "inertia": 0.12,
                "friction": 0.02,
                "max_torque": 2.0,
                "restitution": 0.5,
                "integral_limit": 10.0,
                "start_angle": 2 * quarter,
                "target": 3 * quarter,
                "min_target": quarter,
                "max_target": 3 * quarter,
                "history_capacity": 200,
                "canvas": [440, 280],
                "plot": [440, 280],
                "hover_radius": 20.0,
                "noise_amplitude": 0.05,
            },
            "p_controller": {
                "kp": 1.5,
                "mass": 0.5,
                "show_mass": False,
                "ranges": {"kp": [0.1, 5.0], "mass": [0.0, 1.0]},
            },
            "pi_controller": {
                "kp": 3.5,
                "ki": 0.15,
                "mass": 0.8,
                "ranges": {"kp": [0.5, 5.0], "ki": [0.0, 1.0], "mass": [0.0, 1.0]},
            },
            "pid_controller": {
                "kp": 2.0,
                "ki": 0.3,
                "kd": 0.8,
                "mass": 0.5,
                "noise": False,
                "ranges": {"kp": [0.1, 5.0], "ki": [0.0, 2.0], "kd": [0.0, 2.0], "mass": [0.0, 1.0]},
            },
            "oven": {
                "dt": 1.0 / 30.0,
                "kp": 5.0,
                "ki": 0.5,
                "target": 350.0,
                "thermal_mass": 50.0,
                "heat_loss_coeff": 0.02,
                "heater_power": 100.0,
                "ambient": 70.0,
                "door_loss_multiplier": 5.0,
                "time_scale": 60.0,
                "integral_limit": 1000.0,
                "integration_band": 50.0,
                "history_capacity": 300,
                "plot_range": [0.0, 500.0],
                "canvas": [320, 280],
                "plot": [400, 280],
                "presets": [
                    {"name": "Baking", "temp": 350},
                    {"name": "Broiling", "temp": 450},
                    {"name": "Low Heat", "temp": 200},
                ],
                "ranges": {"kp": [0.1, 20.0], "ki": [0.0, 2.0]},
            },
            "tuning_challenge": {
                "kp": 0.5,
                "ki": 0.0,
                "kd": 0.0,
                "friction": 0.3,
                "tolerance": 0.02,
                "velocity_threshold": 0.1,
                "dwell": 0.5,
                "max_time": 15.0,
                "result_limit": 10,
                "canvas": [260, 260],
                "ranges": {"kp": [0.0, 15.0], "ki": [0.0, 5.0], "kd": [0.0, 5.0]},
                "challenges": copy.deepcopy(DEFAULT_CHALLENGES),
            },
            "fir_demo": {
                "taps": 7,
                "cutoff": 0.25,
                "window": "hamming",
                "canvas": [600, 400],
                "ranges": {"taps": [3, 31], "cutoff": [0.05, 0.45]},
            },
            "filter_challenge": {
                "kind": "lowpass",
                "taps": 15,
                "cutoff": 0.25,
                "bandwidth": 0.1,
                "pass_threshold": 0.5,
                "reject_threshold": 0.3,
                "canvas": [600, 320],
                "ranges": {"taps": [5, 51], "cutoff": [0.05, 0.45]},
                "challenges": copy.deepcopy(DEFAULT_FILTER_CHALLENGES),
            },
            "iir_demo": {
                "alpha": 0.2,
                "order": 1,
                "canvas": [600, 400],
                "ranges": {"alpha": [0.01, 0.99]},
            },
            "diagrams": {
                "flow_speed": 0.8,
                "time_step": 0.012,
                "control_loop_canvas": [540, 155],
                "cascade_canvas": [820, 210],
            },
        }

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key_path: Path to the configuration key (e.g., "oven.kp")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value = self._config
        for key in key_path.split('.'):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation."""
        keys = key_path.split('.')
        config_ref = self._config
        for key in keys[:-1]:
            config_ref = config_ref.setdefault(key, {})
        config_ref[keys[-1]] = value

    def section(self, name: str, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        A copy of one top-level section with ``overrides`` merged in.

        Widgets call this with the static configuration they were built
        with, so host-supplied values win over file and built-in defaults.
        """
        base = self._config.get(name, {})
        return _deep_merge(base, overrides or {})

    def validate_config(self) -> tuple:
        """Validate current configuration."""
        errors = []

        dt = self.get("simulation.dt")
        if dt is not None and dt <= 0:
            errors.append("simulation.dt must be positive")

        dpr = self.get("simulation.max_device_pixel_ratio")
        if dpr is not None and dpr < 1:
            errors.append("simulation.max_device_pixel_ratio must be at least 1")

        lo = self.get("pointer.min_target")
        hi = self.get("pointer.max_target")
        if lo is not None and hi is not None and not (0 <= lo < hi <= math.pi):
            errors.append("pointer target range must lie inside [0, pi]")

        for section in ("p_controller", "pi_controller", "pid_controller", "oven",
                        "tuning_challenge", "fir_demo", "filter_challenge", "iir_demo"):
            for name, bounds in (self.get(f"{section}.ranges") or {}).items():
                if len(bounds) != 2 or bounds[0] >= bounds[1]:
                    errors.append(f"{section}.ranges.{name} must be [min, max] with min < max")

        return len(errors) == 0, errors

    def get_all(self) -> Dict[str, Any]:
        """Get all configuration as dictionary."""
        return copy.deepcopy(self._config)

    def reset_to_defaults(self) -> None:
        """Reset configuration to defaults."""
        self._config = self._get_default_config()
        logger.info("Configuration reset to defaults")


# Global configuration instance for easy access
_global_config: Optional[ConfigManager] = None


def get_config() -> ConfigManager:
    """Get global configuration instance."""
    global _global_config
    if _global_config is None:
        _global_config = ConfigManager()
    return _global_config


def reload_config(config_file: Optional[str] = None) -> ConfigManager:
    """Reload configuration from file."""
    global _global_config
    _global_config = ConfigManager(config_file)
    return _global_config
