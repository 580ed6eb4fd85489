"""Geometric primitives for joint angle computation.

Provides functions for:
- Converting landmark-like inputs to numpy points
- Three-point joint angles (2-D or 3-D) with degenerate-input handling
- Distances, midpoints and simple angle normalization
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import Any, Optional

import numpy as np


def _from_attributes(p: Any) -> Optional[list]:
    if isinstance(p, Mapping):
        if "x" not in p or "y" not in p:
            return None
        values = [p["x"], p["y"]]
        if p.get("z") is not None:
            values.append(p["z"])
        return values
    if hasattr(p, "x") and hasattr(p, "y"):
        values = [p.x, p.y]
        z = getattr(p, "z", None)
        if z is not None:
            values.append(z)
        return values
    return None


def as_point(p: Any) -> Optional[np.ndarray]:
    """Convert a landmark-like value to a (2,) or (3,) float array.

    Accepts Landmark records, objects or mappings exposing ``x``/``y``
    (and optionally ``z``), and 2- or 3-element sequences or arrays.

    Returns:
        Point array, or None if the input is missing, malformed or not finite.
    """
    if p is None:
        return None

    values = _from_attributes(p)
    if values is None:
        if isinstance(p, np.ndarray):
            values = p.ravel().tolist() if p.ndim == 1 else None
        elif isinstance(p, Sequence) and not isinstance(p, (str, bytes)):
            values = list(p)
    if values is None or len(values) not in (2, 3):
        return None

    try:
        arr = np.asarray(values, dtype=float)
    except (TypeError, ValueError):
        return None
    if not np.isfinite(arr).all():
        return None
    return arr


def angle_degrees(
    p1: Any,
    p2: Any,
    p3: Any,
    decimals: Optional[int] = None,
) -> Optional[float]:
    """Angle at vertex ``p2`` formed by ``p1`` and ``p3``.

    Works on 2-D or 3-D points (all three must share a dimensionality).
    0° = folded back onto itself, 180° = straight line.

    Args:
        p1: First endpoint.
        p2: Vertex.
        p3: Second endpoint.
        decimals: Optional rounding for display-grade output.

    Returns:
        Angle in degrees within [0, 180], or None when any point is malformed
        or either arm of the angle has zero length.
    """
    a, b, c = as_point(p1), as_point(p2), as_point(p3)
    if a is None or b is None or c is None:
        return None
    if not (a.shape == b.shape == c.shape):
        return None

    v1 = a - b
    v2 = c - b

    norm1 = np.linalg.norm(v1)
    norm2 = np.linalg.norm(v2)
    if norm1 == 0.0 or norm2 == 0.0:
        return None

    cos_angle = float(np.dot(v1, v2) / (norm1 * norm2))
    if not math.isfinite(cos_angle):
        return None
    cos_angle = max(-1.0, min(1.0, cos_angle))

    angle = math.degrees(math.acos(cos_angle))
    if decimals is not None:
        angle = round(angle, decimals)
    return angle


def distance(p1: Any, p2: Any) -> Optional[float]:
    """Euclidean distance between two points, or None if either is malformed."""
    a, b = as_point(p1), as_point(p2)
    if a is None or b is None or a.shape != b.shape:
        return None
    return float(np.linalg.norm(b - a))


def midpoint(p1: Any, p2: Any) -> Optional[np.ndarray]:
    a, b = as_point(p1), as_point(p2)
    if a is None or b is None or a.shape != b.shape:
        return None
    return (a + b) / 2.0


def normalize_angle(angle: float) -> float:
    """Wrap an angle in degrees to [0, 360)."""
    wrapped = math.fmod(angle, 360.0)
    if wrapped < 0:
        wrapped += 360.0
    # fmod of a tiny negative value can round up to exactly 360
    return 0.0 if wrapped >= 360.0 else wrapped


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))
