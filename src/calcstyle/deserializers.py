"""Deserializers from style strings to plain Python values.

These never raise: unparseable input yields ``None``, an empty set or the
default spherical triple.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Literal as TypingLiteral

from calcstyle.conversions import degrees_to_radians, radians_to_degrees
from calcstyle.environment import EnvironmentSource
from calcstyle.errors import ParseError
from calcstyle.evaluators import SphericalEvaluator, SphericalStyle
from calcstyle.nodes import IdentNode, NumberNode
from calcstyle.parser import parse_expressions


def deserialize_angle(
    angle_string: str, unit: TypingLiteral["deg", "rad"] = "deg"
) -> float | None:
    """Parse an angle string and express it in ``unit``.

    >>> deserialize_angle("1rad", "rad")
    1.0
    >>> deserialize_angle("180deg", "rad")
    3.141592653589793

    Returns None when the string is not a single number with an angle unit
    (or no unit, which is taken to already be in ``unit``).
    """
    try:
        expressions = parse_expressions(angle_string)
    except ParseError:
        return None

    if not expressions or not expressions[0].terms:
        return None

    angle_node = expressions[0].terms[0]
    if not isinstance(angle_node, NumberNode):
        return None
    if angle_node.unit not in (None, "deg", "rad"):
        return None

    if unit == "deg":
        return radians_to_degrees(angle_node).number
    return degrees_to_radians(angle_node).number


def enumeration_deserializer(allowed_names: Iterable[str]) -> Callable[[str], frozenset[str]]:
    """Build a deserializer for a fixed set of CSS-compatible names.

    The returned function parses a whitespace-separated list of identifiers
    and returns those that are members of ``allowed_names``:

    >>> days = enumeration_deserializer(["monday", "tuesday"])
    >>> sorted(days("tuesday friday monday"))
    ['monday', 'tuesday']
    """
    allowed = frozenset(allowed_names)

    def deserialize(value_string: str) -> frozenset[str]:
        try:
            expressions = parse_expressions(value_string)
        except ParseError:
            return frozenset()
        terms = expressions[0].terms if expressions else ()
        return frozenset(
            term.value
            for term in terms
            if isinstance(term, IdentNode) and term.value in allowed
        )

    return deserialize


def deserialize_spherical(
    source: str, environment: EnvironmentSource | None = None
) -> SphericalStyle:
    """Parse and evaluate a spherical position string such as ``"0 90deg 2m"``."""
    try:
        expressions = parse_expressions(source)
    except ParseError:
        expressions = ()
    return SphericalEvaluator(expressions, environment).evaluate()
