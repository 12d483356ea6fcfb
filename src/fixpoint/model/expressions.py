"""Expression tree nodes for fixpoint equations."""

from __future__ import annotations

from enum import Enum
from numbers import Real
from typing import Annotated, Literal, Self, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class BinaryOp(str, Enum):
    ADD = "ADD"
    SUB = "SUB"
    MUL = "MUL"
    DIV = "DIV"


class UnaryOp(str, Enum):
    CEIL = "CEIL"
    FLOOR = "FLOOR"


class PatternKind(str, Enum):
    CONSTANT = "constant"
    VARIABLE = "variable"


class _Node(BaseModel):
    """Base for all expression nodes.

    Nodes are frozen once built.  The arithmetic operators build new
    ``BinaryExpr`` nodes, so equations can be written as ``x * 0.5 + 5``.  Operands other
    than numbers and nodes are left to their own reflected operators.
    """

    model_config = ConfigDict(frozen=True)

    def _binary(self, op: BinaryOp, other: object, reflected: bool = False):
        operand = coerce_operand(other)
        if operand is None:
            return NotImplemented
        if reflected:
            return BinaryExpr(op=op, left=operand, right=self)
        return BinaryExpr(op=op, left=self, right=operand)

    def __add__(self, other):
        return self._binary(BinaryOp.ADD, other)

    def __radd__(self, other):
        return self._binary(BinaryOp.ADD, other, reflected=True)

    def __sub__(self, other):
        return self._binary(BinaryOp.SUB, other)

    def __rsub__(self, other):
        return self._binary(BinaryOp.SUB, other, reflected=True)

    def __mul__(self, other):
        return self._binary(BinaryOp.MUL, other)

    def __rmul__(self, other):
        return self._binary(BinaryOp.MUL, other, reflected=True)

    def __truediv__(self, other):
        return self._binary(BinaryOp.DIV, other)

    def __rtruediv__(self, other):
        return self._binary(BinaryOp.DIV, other, reflected=True)


def coerce_operand(obj: object) -> _Node | None:
    """Node for a number or node operand, ``None`` for anything else."""
    if isinstance(obj, _Node):
        return obj
    if isinstance(obj, Real) and not isinstance(obj, bool):
        return LiteralExpr(value=float(obj))
    return None


class CellKey(BaseModel):
    """Stable handle of a cell inside a workspace arena.

    Two keys are equal only if they name the same slot of the same
    workspace, so keys double as cache identities.
    """

    model_config = ConfigDict(frozen=True)

    workspace: str
    index: int = Field(ge=0)


class LiteralExpr(_Node):
    """A constant numeric value."""

    kind: Literal["literal"] = "literal"
    value: float


class ParameterExpr(_Node):
    """A clause pattern, also usable as a leaf.

    A CONSTANT pattern matches only an equal argument and evaluates to its
    own value.  A VARIABLE pattern matches any argument and evaluates to
    the parameter bound by the enclosing call.
    """

    kind: Literal["parameter"] = "parameter"
    pattern: PatternKind = PatternKind.VARIABLE
    value: float | None = None

    @model_validator(mode="after")
    def _value_matches_pattern(self) -> Self:
        if self.pattern == PatternKind.CONSTANT and self.value is None:
            raise ValueError("constant parameter pattern requires a value")
        if self.pattern == PatternKind.VARIABLE and self.value is not None:
            raise ValueError("variable parameter pattern cannot carry a value")
        return self


class CellRef(_Node):
    """Reference to a workspace cell, or an embedded value.

    Exactly one of *cell* and *value* is set.
    """

    kind: Literal["cell_ref"] = "cell_ref"
    cell: CellKey | None = None
    value: float | None = None

    @model_validator(mode="after")
    def _exactly_one_target(self) -> Self:
        if (self.cell is None) == (self.value is None):
            raise ValueError("CellRef needs exactly one of 'cell' or 'value'")
        return self

    @property
    def is_cell(self) -> bool:
        return self.cell is not None


class BinaryExpr(_Node):
    kind: Literal["binary"] = "binary"
    op: BinaryOp
    left: Expression
    right: Expression


class UnaryExpr(_Node):
    kind: Literal["unary"] = "unary"
    op: UnaryOp
    operand: Expression


class NextLayerExpr(_Node):
    """Self-referential equation: iterate *body* into *cell* until it settles."""

    kind: Literal["next_layer"] = "next_layer"
    cell: CellRef
    body: Expression


class CallExpr(_Node):
    """Parametrized call: ``cell(argument)``."""

    kind: Literal["call"] = "call"
    cell: CellRef
    argument: Expression


class ClauseExpr(_Node):
    """One piece of a piecewise definition: ``cell(pattern) = body``.

    ``call.argument`` holds the clause pattern.
    """

    kind: Literal["clause"] = "clause"
    call: CallExpr
    body: Expression

    @property
    def pattern(self) -> Expression:
        return self.call.argument


Expression = Annotated[
    Union[
        LiteralExpr,
        ParameterExpr,
        CellRef,
        BinaryExpr,
        UnaryExpr,
        NextLayerExpr,
        CallExpr,
        ClauseExpr,
    ],
    Field(discriminator="kind"),
]

# Rebuild models with recursive Expression references.
BinaryExpr.model_rebuild()
UnaryExpr.model_rebuild()
NextLayerExpr.model_rebuild()
CallExpr.model_rebuild()
ClauseExpr.model_rebuild()
