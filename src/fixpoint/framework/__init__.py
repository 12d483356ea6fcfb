"""fixpoint framework: public API.

Users import everything from this single flat namespace::

    from fixpoint.framework import Workspace, var

    ws = Workspace()
    fib = ws.cell(0, name="fib")
    n = var()
    fib.clause(0, 1)
    fib.clause(1, 1)
    fib.clause(n, fib(n - 1) + fib(n - 2))
    fib.call(9)     # 55.0

Evaluation entry points and error types live in ``fixpoint.evaluate``.
"""

from fixpoint.model.config import EvaluationConfig
from fixpoint.model.expressions import BinaryOp, PatternKind, UnaryOp

from ._builder import (
    add,
    as_expression,
    binary_op,
    ceil,
    div,
    floor,
    literal,
    mul,
    param,
    reference,
    sub,
    unary_op,
    var,
)

from ._workspace import (
    Cell,
    Equation,
    Workspace,
    create_cell,
    default_workspace,
    define_clause,
    define_next_layer,
)

__all__ = [
    # Workspace / cells
    "Workspace",
    "Cell",
    "Equation",
    "create_cell",
    "default_workspace",
    # Builders
    "literal",
    "reference",
    "param",
    "var",
    "binary_op",
    "unary_op",
    "add",
    "sub",
    "mul",
    "div",
    "ceil",
    "floor",
    "as_expression",
    # Equations
    "define_next_layer",
    "define_clause",
    # Configuration
    "EvaluationConfig",
    # Enums
    "BinaryOp",
    "UnaryOp",
    "PatternKind",
]
