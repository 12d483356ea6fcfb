"""Expression builders.

Every builder accepts numbers, cell handles and expression nodes in any
position and wraps them into fresh nodes.  Nothing is evaluated here;
the only builder with a side effect is ``define_clause``, which
registers the clause on its cell.
"""

from __future__ import annotations

from numbers import Real
from typing import Any

from fixpoint.model.expressions import (
    BinaryExpr,
    BinaryOp,
    CallExpr,
    CellRef,
    ClauseExpr,
    LiteralExpr,
    NextLayerExpr,
    ParameterExpr,
    PatternKind,
    UnaryExpr,
    UnaryOp,
    _Node,
    coerce_operand,
)

from ._protocols import CellHandle


# ---------------------------------------------------------------------------
# Operand coercion
# ---------------------------------------------------------------------------

def as_expression(obj: Any) -> _Node:
    """Coerce a number, cell handle or node into an expression node."""
    node = coerce_operand(obj)
    if node is not None:
        return node
    if isinstance(obj, CellHandle):
        return obj.ref()
    raise TypeError(
        f"Cannot use {type(obj).__name__} as an expression operand"
    )


def _cell_target(cell: Any, context: str) -> CellRef:
    if isinstance(cell, CellHandle):
        return cell.ref()
    if isinstance(cell, CellRef) and cell.is_cell:
        return cell
    raise TypeError(f"{context} expects a cell, got {type(cell).__name__}")


# ---------------------------------------------------------------------------
# Leaves
# ---------------------------------------------------------------------------

def literal(value: float) -> LiteralExpr:
    return LiteralExpr(value=float(value))


def reference(cell: Any) -> CellRef:
    """Reference node for a cell handle, or an embedded value for a number."""
    if isinstance(cell, CellHandle):
        return cell.ref()
    if isinstance(cell, Real) and not isinstance(cell, bool):
        return CellRef(value=float(cell))
    raise TypeError(f"reference() expects a cell or a number, got {type(cell).__name__}")


def param(value: float | None = None) -> ParameterExpr:
    """Clause pattern: constant if *value* is given, variable otherwise."""
    if value is None:
        return ParameterExpr(pattern=PatternKind.VARIABLE)
    return ParameterExpr(pattern=PatternKind.CONSTANT, value=float(value))


def var() -> ParameterExpr:
    return ParameterExpr(pattern=PatternKind.VARIABLE)


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

def binary_op(op: BinaryOp, lhs: Any, rhs: Any) -> BinaryExpr:
    return BinaryExpr(op=BinaryOp(op), left=as_expression(lhs), right=as_expression(rhs))


def unary_op(op: UnaryOp, child: Any) -> UnaryExpr:
    return UnaryExpr(op=UnaryOp(op), operand=as_expression(child))


def add(lhs: Any, rhs: Any) -> BinaryExpr:
    return binary_op(BinaryOp.ADD, lhs, rhs)


def sub(lhs: Any, rhs: Any) -> BinaryExpr:
    return binary_op(BinaryOp.SUB, lhs, rhs)


def mul(lhs: Any, rhs: Any) -> BinaryExpr:
    return binary_op(BinaryOp.MUL, lhs, rhs)


def div(lhs: Any, rhs: Any) -> BinaryExpr:
    return binary_op(BinaryOp.DIV, lhs, rhs)


def ceil(child: Any) -> UnaryExpr:
    return unary_op(UnaryOp.CEIL, child)


def floor(child: Any) -> UnaryExpr:
    return unary_op(UnaryOp.FLOOR, child)


# ---------------------------------------------------------------------------
# Equations
# ---------------------------------------------------------------------------

def next_layer_expr(cell: Any, body: Any) -> NextLayerExpr:
    return NextLayerExpr(cell=_cell_target(cell, "next_layer"), body=as_expression(body))


def call_expr(cell: Any, argument: Any) -> CallExpr:
    return CallExpr(cell=_cell_target(cell, "call"), argument=as_expression(argument))


def clause_expr(cell: Any, pattern: Any, body: Any) -> ClauseExpr:
    """Build (but do not register) the clause ``cell(pattern) = body``."""
    if not isinstance(pattern, ParameterExpr):
        pattern = param(pattern)
    return ClauseExpr(call=call_expr(cell, pattern), body=as_expression(body))
