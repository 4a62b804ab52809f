"""Shared fixtures for calcstyle tests."""

import pytest

from calcstyle.environment import StaticEnvironment


@pytest.fixture
def half_scrolled():
    """A page scrolled halfway: (500 - 0) / (1200 - 200)."""
    return StaticEnvironment(scroll_offset=500, document_heights=(1200, 1000), viewport_height=200)


@pytest.fixture
def sheet_yaml():
    return """\
environment:
  scroll_offset: 250
  document_heights: [1200]
  viewport_height: 200
properties:
  orbit:
    kind: spherical
    value: "calc(env(window-scroll-y) * 180deg) 90deg 150cm"
  field-of-view:
    value: "45deg"
  offset:
    value: "calc(1m + 250mm * 2)"
"""
