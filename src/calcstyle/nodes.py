"""Pydantic v2 models for the parsed expression AST.

All nodes are frozen so they compare and hash by value. The ``type`` field
discriminates the term union inside ``ExpressionNode.terms``.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

ANGLE_UNITS: frozenset[str] = frozenset({"deg", "rad"})
LENGTH_UNITS: frozenset[str] = frozenset({"m", "cm", "mm"})

OPERATORS: frozenset[str] = frozenset({"+", "-", "*", "/"})


class NumberNode(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    type: Literal["number"] = "number"
    number: float
    unit: str | None = None


class IdentNode(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    type: Literal["ident"] = "ident"
    value: str


class OperatorNode(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    type: Literal["operator"] = "operator"
    # Not restricted to OPERATORS: unknown symbols degrade at evaluation time.
    value: str


class FunctionNode(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    type: Literal["function"] = "function"
    name: IdentNode
    arguments: tuple[ExpressionNode, ...] = ()


ExpressionTerm = Annotated[
    Union[NumberNode, IdentNode, OperatorNode, FunctionNode],
    Field(discriminator="type"),
]


class ExpressionNode(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    type: Literal["expression"] = "expression"
    terms: tuple[ExpressionTerm, ...] = ()


FunctionNode.model_rebuild()
ExpressionNode.model_rebuild()

# Fallback values used whenever an expression cannot be built or evaluated.
ZERO = NumberNode(number=0, unit=None)
AUTO = IdentNode(value="auto")
