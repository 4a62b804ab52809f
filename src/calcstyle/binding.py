"""Binding of a style property to its current expression tree."""

from __future__ import annotations

from typing import Literal as TypingLiteral

from calcstyle.environment import EnvironmentSource
from calcstyle.errors import ParseError
from calcstyle.evaluators import (
    Evaluator,
    Literal,
    SphericalEvaluator,
    SphericalStyle,
    evaluatable_for,
)
from calcstyle.nodes import ZERO, ExpressionNode, NumberNode
from calcstyle.parser import parse_expressions
from calcstyle.warning_policy import UNPARSEABLE_SOURCE, emit_warning

BindingKind = TypingLiteral["number", "spherical"]


def build_evaluator(
    expressions: tuple[ExpressionNode, ...],
    kind: BindingKind,
    environment: EnvironmentSource | None = None,
) -> Evaluator[NumberNode] | Evaluator[SphericalStyle]:
    """Build the evaluator tree for a parsed property value.

    ``number`` properties use the first term of the first expression;
    ``spherical`` properties use the first expression as a triple.
    """
    if kind == "spherical":
        return SphericalEvaluator(expressions, environment)
    if not expressions or not expressions[0].terms:
        return Literal(ZERO)
    return evaluatable_for(expressions[0].terms[0], environment)


class StyleBinding:
    """Holds the evaluator tree for one style property.

    The tree is rebuilt only when a different source string is assigned.
    Source that fails to parse installs the neutral tree (zero, or the default
    spherical triple) so ``value()`` keeps working.
    """

    def __init__(
        self,
        kind: BindingKind = "number",
        environment: EnvironmentSource | None = None,
    ) -> None:
        if kind not in ("number", "spherical"):
            raise ValueError(f"Unknown binding kind: {kind!r}")
        self.kind = kind
        self.environment = environment
        self._source: str | None = None
        self._evaluator = build_evaluator((), kind, environment)

    @property
    def source(self) -> str | None:
        return self._source

    @property
    def is_constant(self) -> bool:
        return self._evaluator.is_constant

    def assign(self, source: str) -> bool:
        """Set the expression source. Returns True if the tree was rebuilt."""
        if source == self._source:
            return False
        try:
            expressions = parse_expressions(source)
        except ParseError as e:
            emit_warning(UNPARSEABLE_SOURCE, f"{self.kind} style {source!r} ignored: {e}")
            expressions = ()
        self._evaluator = build_evaluator(expressions, self.kind, self.environment)
        self._source = source
        return True

    def value(self) -> NumberNode | SphericalStyle:
        return self._evaluator.evaluate()
