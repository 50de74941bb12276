"""Bounding box and bounding sphere helpers for 2D position buffers."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

logger = logging.getLogger(__name__)

Vec3 = Tuple[float, float, float]


@dataclass(frozen=True)
class Box:
    """Axis-aligned box.  An empty box has ``min > max``."""

    min: Vec3
    max: Vec3

    @classmethod
    def empty(cls) -> "Box":
        return cls((math.inf, math.inf, math.inf), (-math.inf, -math.inf, -math.inf))

    def is_empty(self) -> bool:
        return any(lo > hi for lo, hi in zip(self.min, self.max))

    def size(self) -> Vec3:
        if self.is_empty():
            return (0.0, 0.0, 0.0)
        return tuple(hi - lo for lo, hi in zip(self.min, self.max))

    def center(self) -> Vec3:
        if self.is_empty():
            return (0.0, 0.0, 0.0)
        return tuple((lo + hi) / 2.0 for lo, hi in zip(self.min, self.max))


@dataclass(frozen=True)
class Sphere:
    center: Vec3
    radius: float


def _as_points(positions) -> np.ndarray:
    arr = np.asarray(positions, dtype=np.float64)
    return arr.reshape(-1, 2) if arr.size % 2 == 0 else arr[: arr.size - 1].reshape(-1, 2)


def bounds2d(positions) -> Tuple[Tuple[float, float], Tuple[float, float]]:
    """Componentwise (min, max) of a flat or ``(n, 2)`` position buffer.

    The caller guarantees at least one point.
    """
    pts = _as_points(positions)
    lo = pts.min(axis=0)
    hi = pts.max(axis=0)
    return (float(lo[0]), float(lo[1])), (float(hi[0]), float(hi[1]))


def compute_bounding_box(positions) -> Box:
    if positions is None or np.size(positions) < 2:
        return Box.empty()
    (x0, y0), (x1, y1) = bounds2d(positions)
    return Box((x0, y0, 0.0), (x1, y1, 0.0))


def compute_bounding_sphere(positions) -> Sphere:
    """Sphere centred on the box midpoint, radius half the box diagonal."""

    if positions is None or np.size(positions) < 2:
        return Sphere((0.0, 0.0, 0.0), 0.0)
    (x0, y0), (x1, y1) = bounds2d(positions)
    width = x1 - x0
    height = y1 - y0
    radius = math.sqrt(width * width + height * height) / 2.0
    if math.isnan(radius):
        logger.error("computed bounding sphere radius is NaN; "
                     "the position buffer likely contains NaN values")
    return Sphere((x0 + width / 2.0, y0 + height / 2.0, 0.0), radius)
