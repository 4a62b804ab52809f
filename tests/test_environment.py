"""Tests for environment sources."""

import pytest

from calcstyle.environment import NULL_ENVIRONMENT, EnvironmentSource, StaticEnvironment


class TestStaticEnvironment:
    def test_extent_is_largest_height(self, half_scrolled):
        assert half_scrolled.get_scroll_extent() == 1200

    def test_extent_falls_back_to_viewport(self):
        env = StaticEnvironment(scroll_offset=0, document_heights=(300,), viewport_height=800)
        assert env.get_scroll_extent() == 800

    def test_accessors(self, half_scrolled):
        assert half_scrolled.get_scroll_offset() == 500
        assert half_scrolled.get_viewport_height() == 200

    def test_frozen(self, half_scrolled):
        with pytest.raises(AttributeError):
            half_scrolled.scroll_offset = 1

    def test_satisfies_protocol(self, half_scrolled):
        assert isinstance(half_scrolled, EnvironmentSource)


class TestNullEnvironment:
    def test_all_zero(self):
        assert NULL_ENVIRONMENT.get_scroll_offset() == 0
        assert NULL_ENVIRONMENT.get_scroll_extent() == 0
        assert NULL_ENVIRONMENT.get_viewport_height() == 0
