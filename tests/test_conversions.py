"""Tests for unit normalization."""

import math

import numpy as np
import pytest

from calcstyle.conversions import (
    degrees_to_radians,
    length_to_meters,
    normalize_unit,
    radians_to_degrees,
    spherical_to_cartesian,
)
from calcstyle.nodes import ZERO, NumberNode
from calcstyle.warning_policy import StyleWarning


def num(number, unit=None):
    return NumberNode(number=number, unit=unit)


class TestAngles:
    def test_degrees_to_radians(self):
        result = degrees_to_radians(num(90, "deg"))
        assert result.unit == "rad"
        assert result.number == pytest.approx(math.pi / 2)

    def test_radians_pass_through(self):
        assert degrees_to_radians(num(2, "rad")) == num(2, "rad")

    def test_unitless_passes_through(self):
        assert degrees_to_radians(num(2)) == num(2)

    def test_radians_to_degrees(self):
        result = radians_to_degrees(num(math.pi, "rad"))
        assert result.unit == "deg"
        assert result.number == pytest.approx(180)

    def test_length_is_not_an_angle(self):
        assert degrees_to_radians(num(1, "m")) == ZERO
        assert radians_to_degrees(num(1, "m"), fallback=num(-1)) == num(-1)


class TestLengths:
    def test_centimeters(self):
        assert length_to_meters(num(100, "cm")) == num(1, "m")

    def test_millimeters(self):
        assert length_to_meters(num(1000, "mm")) == num(1, "m")

    def test_meters_pass_through(self):
        assert length_to_meters(num(3, "m")) == num(3, "m")

    def test_angle_is_not_a_length(self):
        assert length_to_meters(num(1, "deg")) == ZERO


class TestNormalizeUnit:
    @pytest.mark.parametrize(
        "node, expected",
        [
            (num(5), num(5)),
            (num(5, "m"), num(5, "m")),
            (num(250, "cm"), num(2.5, "m")),
            (num(5, "mm"), num(0.005, "m")),
            (num(1, "rad"), num(1, "rad")),
        ],
    )
    def test_base_units(self, node, expected):
        assert normalize_unit(node) == expected

    def test_degrees(self):
        result = normalize_unit(num(180, "deg"))
        assert result.unit == "rad"
        assert result.number == pytest.approx(math.pi)

    def test_unsupported_unit_uses_fallback(self):
        with pytest.warns(StyleWarning, match=r"\[W06\].*'px'"):
            assert normalize_unit(num(10, "px")) == ZERO

    def test_custom_fallback(self):
        with pytest.warns(StyleWarning):
            assert normalize_unit(num(10, "%"), fallback=num(1)) == num(1)


class TestSphericalToCartesian:
    def test_pole(self):
        position = spherical_to_cartesian((0.0, 0.0, 2.0))
        np.testing.assert_allclose(position, [0.0, 2.0, 0.0], atol=1e-12)

    def test_equator_forward(self):
        position = spherical_to_cartesian((0.0, math.pi / 2, 3.0))
        np.testing.assert_allclose(position, [0.0, 0.0, 3.0], atol=1e-12)

    def test_equator_quarter_turn(self):
        position = spherical_to_cartesian((math.pi / 2, math.pi / 2, 1.0))
        np.testing.assert_allclose(position, [1.0, 0.0, 0.0], atol=1e-12)

    def test_auto_radius_uses_default(self):
        position = spherical_to_cartesian((0.0, 0.0, "auto"), default_radius=5.0)
        np.testing.assert_allclose(position, [0.0, 5.0, 0.0], atol=1e-12)
        assert position.dtype == np.float64
