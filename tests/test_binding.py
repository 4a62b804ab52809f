"""Tests for style bindings."""

import math

import pytest

from calcstyle.binding import StyleBinding, build_evaluator
from calcstyle.environment import StaticEnvironment
from calcstyle.evaluators import CalcEvaluator, Literal
from calcstyle.nodes import ZERO, NumberNode
from calcstyle.parser import parse_expressions
from calcstyle.warning_policy import StyleWarning


class TestBuildEvaluator:
    def test_number_uses_first_term(self):
        evaluator = build_evaluator(parse_expressions("calc(1 + 1) 5"), "number")
        assert isinstance(evaluator, CalcEvaluator)
        assert evaluator.evaluate() == NumberNode(number=2)

    def test_number_from_nothing_is_zero(self):
        evaluator = build_evaluator((), "number")
        assert isinstance(evaluator, Literal)
        assert evaluator.evaluate() == ZERO

    def test_spherical(self):
        evaluator = build_evaluator(parse_expressions("1rad 2rad 3m"), "spherical")
        assert evaluator.evaluate() == (1, 2, 3)


class TestStyleBinding:
    def test_initial_value(self):
        assert StyleBinding().value() == ZERO
        assert StyleBinding("spherical").value() == (0, 0, "auto")

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="Unknown binding kind"):
            StyleBinding("color")

    def test_assign_builds_tree(self):
        binding = StyleBinding()
        assert binding.assign("calc(2m * 3)") is True
        assert binding.source == "calc(2m * 3)"
        assert binding.value() == NumberNode(number=6, unit="m")
        assert binding.is_constant

    def test_same_source_keeps_tree(self):
        binding = StyleBinding()
        binding.assign("calc(1 + 1)")
        first = binding._evaluator
        assert binding.assign("calc(1 + 1)") is False
        assert binding._evaluator is first

    def test_new_source_replaces_tree(self):
        binding = StyleBinding()
        binding.assign("1m")
        binding.assign("2m")
        assert binding.value() == NumberNode(number=2, unit="m")

    def test_dynamic_binding_follows_environment(self):
        class Page:
            offset = 0.0

            def get_scroll_offset(self):
                return self.offset

            def get_scroll_extent(self):
                return 300.0

            def get_viewport_height(self):
                return 100.0

        page = Page()
        binding = StyleBinding("spherical", page)
        binding.assign("calc(env(window-scroll-y) * 360deg) 90deg auto")
        assert not binding.is_constant
        assert binding.value().azimuth == 0
        page.offset = 100
        assert binding.value().azimuth == pytest.approx(math.pi)

    def test_unparseable_source_is_neutral(self):
        binding = StyleBinding("spherical")
        with pytest.warns(StyleWarning, match=r"\[W07\]"):
            assert binding.assign("0 (") is True
        assert binding.source == "0 ("
        assert binding.value() == (0, 0, "auto")

    def test_environment_is_passed(self):
        env = StaticEnvironment(scroll_offset=10, document_heights=(30,), viewport_height=10)
        binding = StyleBinding(environment=env)
        binding.assign("env(window-scroll-y)")
        assert binding.value() == NumberNode(number=0.5)

    def test_overlong_source_is_neutral(self):
        binding = StyleBinding()
        with pytest.warns(StyleWarning, match=r"\[W07\].*too long"):
            binding.assign("calc(" + " + ".join(["1"] * 3000) + ")")
        assert binding.value() == ZERO
        assert binding.is_constant

    def test_long_calc_evaluates(self):
        binding = StyleBinding()
        binding.assign("calc(" + " + ".join(["1"] * 100) + ")")
        assert binding.value() == NumberNode(number=100)
