"""Transform controller configuration."""
from dataclasses import dataclass, fields, replace, asdict
import json
import logging

from constants import (
    DEFAULT_ROTATION, DEFAULT_SCALING, DEFAULT_UNIFORM_SCALING,
    DEFAULT_EDGES_COUNT, MAX_EDGES_COUNT, DEFAULT_HANDLE_LENGTH,
    DEFAULT_MAX_ZOOM, HANDLE_RADIUS, HANDLE_HIT_TOLERANCE
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransformOptions:
    """Options for one TransformController.

    rotation: show rotation handles
    scaling: show corner scale handles
    uniform_scaling: keep the aspect ratio while dragging a corner
    edges_count: number of corner handles (1-4)
    handle_length: rotation handle offset from the edge midpoint (px)
    max_zoom: natural zoom used when the map has no max zoom
    handle_radius, hit_tolerance: handle size and hit area (px)
    """
    rotation: bool = DEFAULT_ROTATION
    scaling: bool = DEFAULT_SCALING
    uniform_scaling: bool = DEFAULT_UNIFORM_SCALING
    edges_count: int = DEFAULT_EDGES_COUNT
    handle_length: float = DEFAULT_HANDLE_LENGTH
    max_zoom: int = DEFAULT_MAX_ZOOM
    handle_radius: float = HANDLE_RADIUS
    hit_tolerance: float = HANDLE_HIT_TOLERANCE

    def __post_init__(self):
        if not 1 <= self.edges_count <= MAX_EDGES_COUNT:
            raise ValueError(f"edges_count must be between 1 and {MAX_EDGES_COUNT}, got {self.edges_count}")
        if self.handle_length < 0:
            raise ValueError(f"handle_length must be >= 0, got {self.handle_length}")
        if self.handle_radius <= 0:
            raise ValueError(f"handle_radius must be > 0, got {self.handle_radius}")
        if self.max_zoom < 0:
            raise ValueError(f"max_zoom must be >= 0, got {self.max_zoom}")

    def merged(self, overrides=None):
        """Copy with `overrides` applied; unknown keys are logged and ignored."""
        if not overrides:
            return self
        if isinstance(overrides, TransformOptions):
            return overrides
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            logger.warning("Ignoring unknown transform options: %s", sorted(unknown))
        return replace(self, **{k: v for k, v in overrides.items() if k in known})

    @classmethod
    def from_dict(cls, data):
        return cls().merged(data)

    @classmethod
    def from_json(cls, path):
        """Load options from a JSON object file"""
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Transform options file must hold a JSON object: {path}")
        return cls.from_dict(data)

    def to_dict(self):
        return asdict(self)
