import math
from dataclasses import dataclass, fields
from typing import Optional, Tuple

from .errors import ConfigError


@dataclass
class LayoutConfig:
    # Link springs
    link_distance: float = 100.0
    link_strength: Optional[float] = None  # None -> 1 / max endpoint degree

    # Many-body repulsion
    charge_strength: float = -1000.0
    theta: float = 0.9
    distance_min: float = 1.0

    # Centering
    center: Tuple[float, float] = (0.0, 0.0)
    center_strength: float = 0.1

    # Collision
    collide_padding: float = 2.0
    collide_strength: float = 0.7
    radius_min: float = 5.0
    radius_max: float = 20.0
    radius_scale: float = 0.1

    # Cooling and integration
    alpha_decay: float = 1 - 0.001 ** (1 / 300)
    alpha_min: float = 0.001
    settle_tolerance: float = 1e-5
    velocity_decay: float = 0.6
    bounds: Optional[Tuple[float, float]] = None

    # Initial placement
    initial_radius: float = 10.0
    initial_jitter: float = 2.5

    # Interaction
    drag_reheat: float = 0.3

    def __post_init__(self):
        self.center = _pair(self.center, "center")
        if self.bounds is not None:
            self.bounds = _pair(self.bounds, "bounds")
            if self.bounds[0] <= 0 or self.bounds[1] <= 0:
                raise ConfigError(f"bounds must be positive, got {self.bounds}")

        if not self.link_distance > 0:
            raise ConfigError(f"link_distance must be > 0, got {self.link_distance}")
        if self.link_strength is not None and self.link_strength < 0:
            raise ConfigError(f"link_strength must be >= 0, got {self.link_strength}")
        if self.theta < 0:
            raise ConfigError(f"theta must be >= 0, got {self.theta}")
        if not self.distance_min > 0:
            raise ConfigError(f"distance_min must be > 0, got {self.distance_min}")
        if not 0 < self.alpha_decay < 1:
            raise ConfigError(f"alpha_decay must be in (0, 1), got {self.alpha_decay}")
        if not 0 <= self.alpha_min < 1:
            raise ConfigError(f"alpha_min must be in [0, 1), got {self.alpha_min}")
        if not self.settle_tolerance > 0:
            raise ConfigError(f"settle_tolerance must be > 0, got {self.settle_tolerance}")
        if not 0 < self.velocity_decay <= 1:
            raise ConfigError(f"velocity_decay must be in (0, 1], got {self.velocity_decay}")
        if not 0 < self.radius_min <= self.radius_max:
            raise ConfigError(f"need 0 < radius_min <= radius_max, got {self.radius_min}, {self.radius_max}")
        if self.radius_scale < 0 or self.collide_padding < 0 or self.collide_strength < 0:
            raise ConfigError("radius_scale, collide_padding and collide_strength must be >= 0")
        if self.center_strength < 0 or self.drag_reheat < 0:
            raise ConfigError("center_strength and drag_reheat must be >= 0")
        if self.initial_radius < 0 or self.initial_jitter < 0:
            raise ConfigError("initial_radius and initial_jitter must be >= 0")

    @classmethod
    def from_mapping(cls, settings):
        """Builds a config from plain settings, e.g. a parsed JSON/TOML table."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(settings) - known)
        if unknown:
            raise ConfigError(f"Unknown layout settings: {', '.join(unknown)}")
        return cls(**settings)

    def radius_for(self, weight):
        """Maps an external weight to a display/collision radius."""
        return min(max(weight * self.radius_scale, self.radius_min), self.radius_max)

    def clamp(self, x, y):
        if self.bounds is None:
            return x, y
        width, height = self.bounds
        return min(max(x, 0.0), width), min(max(y, 0.0), height)


def _pair(value, name):
    try:
        a, b = value
        a, b = float(a), float(b)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a pair of numbers, got {value!r}") from None
    if not (math.isfinite(a) and math.isfinite(b)):
        raise ConfigError(f"{name} must be finite, got {value!r}")
    return a, b
