"""Unit normalization for angle and length number nodes."""

from __future__ import annotations

import math
from collections.abc import Callable

import numpy as np

from calcstyle.nodes import ZERO, NumberNode
from calcstyle.warning_policy import UNSUPPORTED_UNIT, emit_warning


def degrees_to_radians(node: NumberNode, fallback: NumberNode = ZERO) -> NumberNode:
    """Convert a ``deg`` node to ``rad``. Unitless and ``rad`` nodes pass through."""
    if node.unit == "deg":
        return NumberNode(number=node.number * math.pi / 180, unit="rad")
    if node.unit is None or node.unit == "rad":
        return node
    return fallback


def radians_to_degrees(node: NumberNode, fallback: NumberNode = ZERO) -> NumberNode:
    """Convert a ``rad`` node to ``deg``. Unitless and ``deg`` nodes pass through."""
    if node.unit == "rad":
        return NumberNode(number=node.number * 180 / math.pi, unit="deg")
    if node.unit is None or node.unit == "deg":
        return node
    return fallback


def length_to_meters(node: NumberNode, fallback: NumberNode = ZERO) -> NumberNode:
    """Convert ``cm`` and ``mm`` nodes to ``m``."""
    if node.unit == "cm":
        return NumberNode(number=node.number / 100, unit="m")
    if node.unit == "mm":
        return NumberNode(number=node.number / 1000, unit="m")
    if node.unit is None or node.unit == "m":
        return node
    return fallback


def _identity(node: NumberNode) -> NumberNode:
    return node


_UNIT_NORMALIZERS: dict[str, Callable[[NumberNode], NumberNode]] = {
    "rad": _identity,
    "deg": degrees_to_radians,
    "m": _identity,
    "cm": length_to_meters,
    "mm": length_to_meters,
}


def normalize_unit(node: NumberNode, fallback: NumberNode = ZERO) -> NumberNode:
    """Normalize a node to the base unit of its family.

    Angles become radians and lengths become meters; unitless nodes are
    returned unchanged. Any other unit yields ``fallback``.
    """
    if node.unit is None:
        return node
    normalizer = _UNIT_NORMALIZERS.get(node.unit)
    if normalizer is None:
        emit_warning(UNSUPPORTED_UNIT, f"unsupported unit {node.unit!r}")
        return fallback
    return normalizer(node)


def spherical_to_cartesian(
    style: tuple[float, float, float | str], default_radius: float = 1.0
) -> np.ndarray:
    """Convert an evaluated (azimuth, inclination, radius) triple to a Y-up position.

    Angles are in radians and the radius in meters; an ``auto`` radius is
    replaced by ``default_radius``.
    """
    azimuth, inclination, radius = style
    r = default_radius if isinstance(radius, str) else float(radius)
    sin_inclination = math.sin(inclination)
    return np.array(
        [
            r * sin_inclination * math.sin(azimuth),
            r * math.cos(inclination),
            r * sin_inclination * math.cos(azimuth),
        ],
        dtype=np.float64,
    )
