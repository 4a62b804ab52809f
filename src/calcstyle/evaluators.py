"""Evaluators for calc(), env() and spherical style expressions.

An Evaluator derives a computed value from part (or all) of a parsed
expression AST. Trees are built once per expression and evaluated as often as
the host needs. Subtrees that cannot change between evaluations are marked
constant and compute their value only once; anything containing an env()
lookup is re-evaluated on every call.

Nothing in this module raises on malformed input. Unsupported functions,
operators, identifiers and mixed units degrade to ``ZERO`` (or the default
spherical triple) and are reported as coded ``StyleWarning`` diagnostics.
"""

from __future__ import annotations

import math
import operator
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import Generic, NamedTuple, TypeVar, Union

from calcstyle.conversions import normalize_unit
from calcstyle.environment import NULL_ENVIRONMENT, EnvironmentSource
from calcstyle.nodes import (
    AUTO,
    ZERO,
    ExpressionNode,
    FunctionNode,
    IdentNode,
    NumberNode,
    OperatorNode,
)
from calcstyle.warning_policy import (
    MALFORMED_CALC,
    UNIT_MISMATCH,
    UNKNOWN_ENV,
    UNKNOWN_FUNCTION,
    UNKNOWN_OPERATOR,
    emit_warning,
)

T = TypeVar("T")


class Evaluator(ABC, Generic[T]):
    """Lazily evaluated node of a style expression tree."""

    def __init__(self) -> None:
        self._last_value: T | None = None

    @property
    def is_constant(self) -> bool:
        """If true, the tree is evaluated once and the result reused forever."""
        return False

    @abstractmethod
    def _evaluate(self) -> T:
        """Compute a fresh value for this node."""

    def evaluate(self) -> T:
        """Return the value of this node, recomputing it unless it is constant."""
        if not self.is_constant or self._last_value is None:
            self._last_value = self._evaluate()
        return self._last_value


class Literal(Evaluator[T]):
    """A raw AST value presented through the Evaluator interface."""

    def __init__(self, value: T) -> None:
        super().__init__()
        self._last_value = value

    @property
    def value(self) -> T:
        return self._last_value

    @property
    def is_constant(self) -> bool:
        return True

    def _evaluate(self) -> T:
        return self._last_value

    def __repr__(self) -> str:
        return f"Literal({self._last_value!r})"


Evaluatable = Union[Evaluator[T], T]


def as_evaluatable(value: Evaluatable[T]) -> Evaluator[T]:
    """Wrap a raw value in a Literal; evaluators are returned unchanged."""
    if isinstance(value, Evaluator):
        return value
    return Literal(value)


def evaluate(evaluatable: Evaluatable[T]) -> T:
    """Return the evaluated value of an evaluator, or the raw value itself."""
    if isinstance(evaluatable, Evaluator):
        return evaluatable.evaluate()
    return evaluatable


def is_constant(evaluatable: Evaluatable[object]) -> bool:
    """Raw values are always constant; evaluators report their own constancy."""
    if isinstance(evaluatable, Evaluator):
        return evaluatable.is_constant
    return True


def evaluatable_for(
    term: object, environment: EnvironmentSource | None = None
) -> Evaluator[NumberNode]:
    """Return the evaluator that resolves ``term`` to a NumberNode.

    Numbers become literals and evaluators pass through unchanged. Function
    nodes are dispatched by name; unknown functions and any other kind of
    term resolve to ``ZERO``.
    """
    if isinstance(term, Evaluator):
        return term
    if isinstance(term, NumberNode):
        return Literal(term)
    if isinstance(term, FunctionNode):
        evaluator_type = _FUNCTION_EVALUATORS.get(term.name.value)
        if evaluator_type is not None:
            return evaluator_type(term, environment)
        emit_warning(UNKNOWN_FUNCTION, f"unknown function {term.name.value}()")
    else:
        emit_warning(UNKNOWN_FUNCTION, f"unexpected {_describe(term)} where a number is required")
    return Literal(ZERO)


def _describe(term: object) -> str:
    if isinstance(term, IdentNode):
        return f"identifier {term.value!r}"
    if isinstance(term, OperatorNode):
        return f"operator {term.value!r}"
    return type(term).__name__


# ---------------------------------------------------------------------------
# env()
# ---------------------------------------------------------------------------


def _window_scroll_y(environment: EnvironmentSource) -> float:
    """Fraction of the page scrolled, 0 when the page cannot scroll."""
    divisor = environment.get_scroll_extent() - environment.get_viewport_height()
    if divisor == 0:
        return 0.0
    fraction = environment.get_scroll_offset() / divisor
    return fraction if math.isfinite(fraction) else 0.0


_ENV_VARIABLES: dict[str, Callable[[EnvironmentSource], float]] = {
    "window-scroll-y": _window_scroll_y,
}


class EnvEvaluator(Evaluator[NumberNode]):
    """Evaluator for env() functions.

    Only one environment variable is supported: ``window-scroll-y``. The
    second (fallback) argument of a CSS env() call is not supported.

    An env() evaluator is never constant since it reads external state that
    changes as the user scrolls.
    """

    def __init__(
        self, env_function: FunctionNode, environment: EnvironmentSource | None = None
    ) -> None:
        super().__init__()
        self._environment = environment if environment is not None else NULL_ENVIRONMENT
        self._ident: IdentNode | None = None

        arguments = env_function.arguments
        ident = arguments[0].terms[0] if arguments and arguments[0].terms else None
        if isinstance(ident, IdentNode):
            self._ident = ident

        if self._ident is None:
            emit_warning(UNKNOWN_ENV, "env() requires an identifier argument")
        elif self._ident.value not in _ENV_VARIABLES:
            emit_warning(UNKNOWN_ENV, f"unknown environment variable {self._ident.value!r}")

    @property
    def is_constant(self) -> bool:
        return False

    def _evaluate(self) -> NumberNode:
        if self._ident is not None:
            resolve = _ENV_VARIABLES.get(self._ident.value)
            if resolve is not None:
                return NumberNode(number=resolve(self._environment), unit=None)
        return ZERO


# ---------------------------------------------------------------------------
# calc()
# ---------------------------------------------------------------------------

_MULTIPLICATIVE = frozenset({"*", "/"})


class CalcEvaluator(Evaluator[NumberNode]):
    """Evaluator for calc() functions.

    Supports nested function calls, any number of terms and the four
    arithmetic operators. Multiplication and division bind tighter than
    addition and subtraction; operators of equal precedence fold left to
    right. Parenthesized grouping is only available through nested calc().

    The evaluator is constant unless an env() appears at any depth.
    Building and evaluating recurse once per operand, so term lists far longer
    than the parser accepts can exceed the interpreter recursion limit.
    """

    def __init__(
        self, calc_function: FunctionNode, environment: EnvironmentSource | None = None
    ) -> None:
        super().__init__()
        self._environment = environment
        self._evaluator: Evaluator[NumberNode] | None = None

        if len(calc_function.arguments) != 1:
            emit_warning(
                MALFORMED_CALC,
                f"calc() expects exactly one argument, got {len(calc_function.arguments)}",
            )
            return

        self._evaluator = self._build(calc_function.arguments[0].terms)

    def _operand(self, term: object) -> Evaluator[NumberNode] | None:
        if isinstance(term, OperatorNode):
            return None
        return evaluatable_for(term, self._environment)

    def _build(self, terms: Sequence[object]) -> Evaluator[NumberNode] | None:
        """Fold a flat term list into a tree of OperatorEvaluators."""
        # Multiplicative pass: collapse every `a * b` / `a / b` as soon as
        # its right operand arrives. Operators are kept raw on the stack.
        stack: list[Evaluator[NumberNode] | OperatorNode] = []
        for term in terms:
            top = stack[-1] if stack else None
            if isinstance(top, OperatorNode) and top.value in _MULTIPLICATIVE:
                op = stack.pop()
                left = stack.pop() if stack else None
                right = self._operand(term)
                if not isinstance(left, Evaluator) or right is None:
                    emit_warning(MALFORMED_CALC, f"operator {op.value!r} is missing an operand")
                    return None
                stack.append(OperatorEvaluator(op, left, right))
                continue

            stack.append(term if isinstance(term, OperatorNode) else self._operand(term))

        # Additive pass: whatever remains folds strictly left to right.
        while len(stack) > 2:
            left, op, right = stack[:3]
            if (
                not isinstance(op, OperatorNode)
                or not isinstance(left, Evaluator)
                or not isinstance(right, Evaluator)
            ):
                emit_warning(MALFORMED_CALC, "calc() terms must alternate operands and operators")
                return None
            stack[:3] = [OperatorEvaluator(op, left, right)]

        if len(stack) != 1 or not isinstance(stack[0], Evaluator):
            emit_warning(MALFORMED_CALC, "calc() expression does not reduce to a single value")
            return None
        return stack[0]

    @property
    def is_constant(self) -> bool:
        return self._evaluator is None or self._evaluator.is_constant

    def _evaluate(self) -> NumberNode:
        if self._evaluator is None:
            return ZERO
        return self._evaluator.evaluate()


# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------


def _divide(left: float, right: float) -> float:
    """IEEE-754 division: x/0 is a signed infinity and 0/0 is nan."""
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


_OPERATIONS: dict[str, Callable[[float, float], float]] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": _divide,
}


class OperatorEvaluator(Evaluator[NumberNode]):
    """Evaluator for a single binary operator inside calc().

    Operands may be any evaluatable term. Both are normalized to the base unit
    of their family (radians or meters) before the operation; operands from
    different families cannot be combined and yield ``ZERO``.
    """

    def __init__(
        self,
        op: OperatorNode,
        left: Evaluatable[NumberNode],
        right: Evaluatable[NumberNode],
    ) -> None:
        super().__init__()
        self._operator = op
        self._left = as_evaluatable(left)
        self._right = as_evaluatable(right)
        self._operation = _OPERATIONS.get(op.value)
        if self._operation is None:
            emit_warning(UNKNOWN_OPERATOR, f"unknown operator {op.value!r}")

    @property
    def is_constant(self) -> bool:
        return self._left.is_constant and self._right.is_constant

    def _evaluate(self) -> NumberNode:
        left = normalize_unit(self._left.evaluate())
        right = normalize_unit(self._right.evaluate())

        if left.unit is not None and right.unit is not None and left.unit != right.unit:
            emit_warning(
                UNIT_MISMATCH,
                f"cannot combine {left.unit!r} and {right.unit!r} with {self._operator.value!r}",
            )
            return ZERO

        # NOTE: a simplification of CSS calc() type checking; it holds only
        # while each unit family has a single base unit.
        unit = left.unit or right.unit

        if self._operation is None:
            return ZERO
        return NumberNode(number=self._operation(left.number, right.number), unit=unit)


# ---------------------------------------------------------------------------
# Spherical positions
# ---------------------------------------------------------------------------


class SphericalStyle(NamedTuple):
    azimuth: float
    inclination: float
    radius: float | str


class SphericalEvaluator(Evaluator[SphericalStyle]):
    """Evaluator for spherical position expressions such as ``0 10deg auto``.

    The first expression holds up to three terms: an azimuth and an
    inclination in degrees or radians, and a radius in meters (or cm/mm) or
    the keyword ``auto``. Missing angles default to zero and a missing radius
    defaults to ``auto``. The result holds both angles in radians and the
    radius in meters, or the radius keyword unchanged.
    """

    def __init__(
        self,
        expressions: Sequence[ExpressionNode],
        environment: EnvironmentSource | None = None,
    ) -> None:
        super().__init__()
        terms = expressions[0].terms if expressions else ()
        azimuth_term = terms[0] if len(terms) > 0 else ZERO
        inclination_term = terms[1] if len(terms) > 1 else ZERO
        radius_term = terms[2] if len(terms) > 2 else AUTO

        self._azimuth = evaluatable_for(azimuth_term, environment)
        self._inclination = evaluatable_for(inclination_term, environment)
        self._radius: Evaluator[NumberNode | IdentNode]
        if isinstance(radius_term, IdentNode):
            self._radius = Literal(radius_term)
        else:
            self._radius = evaluatable_for(radius_term, environment)

    @property
    def is_constant(self) -> bool:
        return (
            self._azimuth.is_constant
            and self._inclination.is_constant
            and self._radius.is_constant
        )

    def _evaluate(self) -> SphericalStyle:
        radius = self._radius.evaluate()
        return SphericalStyle(
            normalize_unit(self._azimuth.evaluate()).number,
            normalize_unit(self._inclination.evaluate()).number,
            radius.value if isinstance(radius, IdentNode) else normalize_unit(radius).number,
        )


_FUNCTION_EVALUATORS: dict[str, type[Evaluator[NumberNode]]] = {
    "calc": CalcEvaluator,
    "env": EnvEvaluator,
}
