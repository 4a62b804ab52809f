"""Tests for string deserializers."""

import math

import pytest

from calcstyle.deserializers import (
    deserialize_angle,
    deserialize_spherical,
    enumeration_deserializer,
)


class TestDeserializeAngle:
    def test_radians_to_radians(self):
        assert deserialize_angle("1rad", "rad") == 1

    def test_radians_to_degrees(self):
        assert deserialize_angle("1rad", "deg") == pytest.approx(57.29577951308232)

    def test_degrees_to_radians(self):
        assert deserialize_angle("180deg", "rad") == pytest.approx(math.pi)

    def test_default_unit_is_degrees(self):
        assert deserialize_angle("45deg") == 45

    def test_unitless_taken_as_target_unit(self):
        assert deserialize_angle("12", "rad") == 12

    def test_non_number(self):
        assert deserialize_angle("auto") is None

    def test_length_is_rejected(self):
        assert deserialize_angle("1m") is None

    def test_empty(self):
        assert deserialize_angle("") is None

    def test_unparseable(self):
        assert deserialize_angle("1deg)") is None


class TestEnumerationDeserializer:
    @pytest.fixture
    def deserialize_days(self):
        return enumeration_deserializer(
            ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
        )

    def test_members_found(self, deserialize_days):
        assert deserialize_days("monday friday") == {"monday", "friday"}

    def test_non_members_dropped(self, deserialize_days):
        assert deserialize_days("monday caturday 5 sunday") == {"monday", "sunday"}

    def test_duplicates_collapse(self, deserialize_days):
        assert deserialize_days("monday monday") == frozenset({"monday"})

    def test_empty(self, deserialize_days):
        assert deserialize_days("") == frozenset()

    def test_unparseable(self, deserialize_days):
        assert deserialize_days("monday )") == frozenset()


class TestDeserializeSpherical:
    def test_basic(self):
        result = deserialize_spherical("0 90deg 150cm")
        assert result.azimuth == 0
        assert result.inclination == pytest.approx(math.pi / 2)
        assert result.radius == 1.5

    def test_defaults(self):
        assert deserialize_spherical("") == (0, 0, "auto")

    def test_unparseable_is_default(self):
        assert deserialize_spherical("0 90deg (") == (0, 0, "auto")

    def test_with_environment(self, half_scrolled):
        result = deserialize_spherical("calc(env(window-scroll-y) * 1rad) 0 auto", half_scrolled)
        assert result == (0.5, 0, "auto")
