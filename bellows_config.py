#!/usr/bin/env python3
"""
BELLOWS_CONFIG.PY - Geometry constants and JSON configuration

Contains:
- GeometryConfig: every dimension and tuning constant used by the engine
- get_defaults / load_config / save_config: JSON persistence
"""

import json
import os
from dataclasses import asdict, dataclass, fields
from typing import Dict, Optional


# Config file path
CONFIG_PATH = os.path.join(os.path.dirname(__file__), "bellows_config.json")


@dataclass(frozen=True)
class GeometryConfig:
    """Dimensions in logical canvas units (800x500 canvas, y down)."""

    # Canvas
    canvas_width: float = 800.0
    canvas_height: float = 500.0

    # Bellows cross-section
    bellows_radius: float = 60.0        # inner (valley) radius
    convolution_height: float = 25.0    # peak radius = radius + height

    # Assembly length and travel
    base_length: float = 350.0          # nominal flange-to-flange length
    axial_travel: float = 40.0          # length change at 100 % axial
    lateral_travel: float = 320.0       # lateral offset at 100 % lateral

    # Convolutions
    single_convolutions: int = 10       # axial, hinged, gimbal
    universal_convolutions: int = 5     # per bellows in a universal joint
    handle_ratio: float = 0.35          # Bezier handle / convolution width

    # Bending
    bend_epsilon: float = 1e-3          # rad, below this a segment is straight

    # Universal joint split
    universal_bellows_fraction: float = 0.25
    universal_spool_fraction: float = 0.5
    tilt_clamp: float = 0.8             # limit on asin() argument

    # Flanges
    flange_thickness: float = 20.0
    flange_height: float = 180.0
    hub_length: float = 20.0

    # Pressure overlay
    max_pressure: float = 50.0
    pressure_opacity_divisor: float = 200.0

    # Animation
    animation_speed: float = 0.03       # rad of phase per tick

    @property
    def peak_radius(self) -> float:
        return self.bellows_radius + self.convolution_height

    @classmethod
    def from_dict(cls, data: Dict) -> "GeometryConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown geometry config keys: {', '.join(unknown)}")
        config = cls(**data)
        config.check()
        return config

    def to_dict(self) -> Dict:
        return asdict(self)

    def check(self):
        """Raise ValueError for values the engine cannot draw."""
        if self.base_length <= 0:
            raise ValueError(f"base_length must be positive, got {self.base_length}")
        if self.base_length - self.axial_travel <= 0:
            raise ValueError("axial_travel must be smaller than base_length")
        if self.bellows_radius <= 0 or self.convolution_height < 0:
            raise ValueError("bellows_radius must be positive and convolution_height non-negative")
        if not 0 < self.tilt_clamp < 1:
            raise ValueError(f"tilt_clamp must be in (0, 1), got {self.tilt_clamp}")
        if self.bend_epsilon <= 0:
            raise ValueError(f"bend_epsilon must be positive, got {self.bend_epsilon}")
        for name in ("single_convolutions", "universal_convolutions"):
            count = getattr(self, name)
            if not isinstance(count, int) or isinstance(count, bool) or count < 0:
                raise ValueError(f"{name} must be a non-negative integer, got {count!r}")
        if self.universal_bellows_fraction <= 0 or self.universal_spool_fraction <= 0:
            raise ValueError("universal segment fractions must be positive")
        split = 2 * self.universal_bellows_fraction + self.universal_spool_fraction
        if abs(split - 1.0) > 1e-9:
            raise ValueError(f"universal segment fractions must sum to 1, got {split}")
        if self.pressure_opacity_divisor <= 0:
            raise ValueError("pressure_opacity_divisor must be positive")


def get_defaults() -> Dict:
    """Return default config values."""
    return GeometryConfig().to_dict()


def load_config(path: Optional[str] = None) -> GeometryConfig:
    """Load config from a JSON file, overlaid on the defaults."""
    path = path or CONFIG_PATH
    data = get_defaults()
    if os.path.exists(path):
        with open(path, 'r') as f:
            data.update(json.load(f))
    return GeometryConfig.from_dict(data)


def save_config(config: GeometryConfig, path: Optional[str] = None):
    """Save config to a JSON file."""
    path = path or CONFIG_PATH
    with open(path, 'w') as f:
        json.dump(config.to_dict(), f, indent=2)
