"""
Tiling configuration.

``TilingConfig`` holds every recognised option. It can be built directly,
from a plain dict (unknown keys are rejected) or from a YAML file:

.. code-block:: yaml

    shape: hexagon
    width: 2500
    tilt: 15
    center: [4.9, 52.37]
"""

import logging
import math
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml

from .errors import ConfigError
from .lattice import SHAPES, SQUARE
from .projection import DEFAULT_WIDTH, clamp_width, validate_projection

logger = logging.getLogger(__name__)


@dataclass
class TilingConfig:
    """Options for one tiling run."""

    shape: str = SQUARE
    tilt: float = 0.0
    width: float = DEFAULT_WIDTH  # meters, clamped to [500, 500000]
    center: Optional[Tuple[float, float]] = None  # (lon, lat); bbox midpoint if None
    projection: Optional[Any] = None  # object with forward/inverse

    # Execution
    workers: int = 1
    progress: bool = False

    def __post_init__(self):
        if self.shape is None:
            self.shape = SQUARE
        self.shape = str(self.shape).lower()
        if self.shape not in SHAPES:
            raise ConfigError(f"Unknown shape '{self.shape}', expected one of {SHAPES}")

        self.tilt = 0.0 if self.tilt is None else float(self.tilt)
        if not math.isfinite(self.tilt):
            raise ConfigError(f"Tilt must be finite, got {self.tilt}")

        self.width = clamp_width(DEFAULT_WIDTH if self.width is None else self.width)

        if self.center is not None:
            if len(self.center) != 2:
                raise ConfigError(f"Center must be [lon, lat], got {self.center}")
            center = (float(self.center[0]), float(self.center[1]))
            if not all(math.isfinite(c) for c in center):
                raise ConfigError(f"Center must be finite, got {self.center}")
            self.center = center

        if self.projection is not None:
            validate_projection(self.projection)

        self.workers = int(self.workers)
        if self.workers < 1:
            raise ConfigError(f"workers must be >= 1, got {self.workers}")

    @classmethod
    def from_dict(cls, options: Dict[str, Any]) -> "TilingConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(options) - known
        if unknown:
            raise ConfigError(f"Unknown tiling options: {sorted(unknown)}")
        return cls(**{k: v for k, v in options.items() if v is not None})

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "TilingConfig":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path, 'r') as f:
            try:
                options = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Could not parse {path}: {e}") from e
        if not isinstance(options, dict):
            raise ConfigError(f"{path} must contain a mapping of options")
        if "projection" in options:
            raise ConfigError("A projection override cannot be set from YAML")
        logger.info(f"Loaded tiling config from {path}")
        return cls.from_dict(options)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shape": self.shape,
            "tilt": self.tilt,
            "width": self.width,
            "center": list(self.center) if self.center is not None else None,
            "workers": self.workers,
            "progress": self.progress,
        }
