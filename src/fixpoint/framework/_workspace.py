"""Workspaces, cell handles and equations.

A ``Workspace`` owns a ``CellStore`` and the default evaluation config.
``Cell`` is the user-facing handle on one of its cells; ``Equation``
binds an expression to the workspace it must be evaluated in.
"""

from __future__ import annotations

from typing import Any

from fixpoint.model.cells import CellStore
from fixpoint.model.config import EvaluationConfig
from fixpoint.model.expressions import (
    BinaryOp,
    CallExpr,
    CellKey,
    CellRef,
    ClauseExpr,
)

from ._builder import as_expression, binary_op, call_expr, clause_expr, next_layer_expr


class Workspace:
    """Owner scope for a set of cells.

    Parameters
    ----------
    config : EvaluationConfig, optional
        Default settings for evaluations started from this workspace.
    """

    def __init__(self, config: EvaluationConfig | None = None) -> None:
        self.store = CellStore()
        self.config = config or EvaluationConfig()

    def cell(self, initial_value: float, name: str | None = None) -> Cell:
        """Declare a new cell seeded with *initial_value*."""
        if name is None:
            name = f"cell{len(self.store)}"
        key = self.store.allocate(name, initial_value)
        return Cell(self, key)

    def cells(self) -> list[Cell]:
        return [Cell(self, key) for key in self.store]

    def __len__(self) -> int:
        return len(self.store)

    def __repr__(self) -> str:
        return f"Workspace(cells={len(self.store)})"


_default_workspace: Workspace | None = None


def default_workspace() -> Workspace:
    """Process-wide workspace used when none is passed explicitly."""
    global _default_workspace
    if _default_workspace is None:
        _default_workspace = Workspace()
    return _default_workspace


# ---------------------------------------------------------------------------
# Cell handle
# ---------------------------------------------------------------------------

class Cell:
    """Handle on a workspace cell.

    Supports direct reads and writes through ``value``, arithmetic
    operators producing expression nodes, and ``cell(arg)`` producing a
    parametrized call node.
    """

    __slots__ = ("workspace", "key")

    def __init__(self, workspace: Workspace, key: CellKey) -> None:
        self.workspace = workspace
        self.key = key

    # -- State ---------------------------------------------------------------

    @property
    def name(self) -> str:
        return self.workspace.store[self.key].name

    @property
    def value(self) -> float:
        return self.workspace.store.read(self.key)

    @value.setter
    def value(self, new_value: float) -> None:
        self.workspace.store.write(self.key, new_value)

    @property
    def clauses(self) -> list[ClauseExpr]:
        return self.workspace.store.clauses(self.key)

    def ref(self) -> CellRef:
        return CellRef(cell=self.key)

    # -- Equations -----------------------------------------------------------

    def next_layer(self, body: Any) -> Equation:
        return define_next_layer(self, body)

    def clause(self, pattern: Any, body: Any) -> Equation:
        return Equation(define_clause(self, pattern, body), self.workspace)

    def call(self, argument: float, *, config: EvaluationConfig | None = None) -> float:
        from fixpoint.evaluate import call

        return call(self, argument, config=config)

    def __call__(self, argument: Any) -> CallExpr:
        return call_expr(self, argument)

    # -- Arithmetic sugar ----------------------------------------------------

    def __add__(self, other):
        return binary_op(BinaryOp.ADD, self, other)

    def __radd__(self, other):
        return binary_op(BinaryOp.ADD, other, self)

    def __sub__(self, other):
        return binary_op(BinaryOp.SUB, self, other)

    def __rsub__(self, other):
        return binary_op(BinaryOp.SUB, other, self)

    def __mul__(self, other):
        return binary_op(BinaryOp.MUL, self, other)

    def __rmul__(self, other):
        return binary_op(BinaryOp.MUL, other, self)

    def __truediv__(self, other):
        return binary_op(BinaryOp.DIV, self, other)

    def __rtruediv__(self, other):
        return binary_op(BinaryOp.DIV, other, self)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Cell):
            return self.key == other.key
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.key)

    def __repr__(self) -> str:
        return f"Cell({self.name!r}, value={self.value!r})"


# ---------------------------------------------------------------------------
# Equation
# ---------------------------------------------------------------------------

class Equation:
    """An expression together with the workspace it is evaluated in.

    Calling a next-layer equation runs it to convergence.  Calling a
    clause equation with an argument dispatches through all clauses of
    its cell, exactly like ``cell.call(argument)``.
    """

    __slots__ = ("expression", "workspace")

    def __init__(self, expression: Any, workspace: Workspace) -> None:
        self.expression = as_expression(expression)
        self.workspace = workspace

    def evaluate(
        self,
        parameter: float | None = None,
        *,
        config: EvaluationConfig | None = None,
    ) -> float:
        from fixpoint.evaluate import evaluate

        return evaluate(self, parameter=parameter, config=config)

    __call__ = evaluate

    def __repr__(self) -> str:
        return f"Equation({self.expression.kind})"


# ---------------------------------------------------------------------------
# Module-level API
# ---------------------------------------------------------------------------

def create_cell(
    initial_value: float,
    name: str | None = None,
    workspace: Workspace | None = None,
) -> Cell:
    """Declare a cell in *workspace* (the default workspace if omitted)."""
    if workspace is None:
        workspace = default_workspace()
    return workspace.cell(initial_value, name)


def define_next_layer(cell: Cell, body: Any) -> Equation:
    """Build the self-referential equation ``cell = body``."""
    if not isinstance(cell, Cell):
        raise TypeError(
            f"define_next_layer() expects a Cell, got {type(cell).__name__}"
        )
    return Equation(next_layer_expr(cell, body), cell.workspace)


def define_clause(cell: Cell, pattern: Any, body: Any) -> ClauseExpr:
    """Register the clause ``cell(pattern) = body`` and return it.

    Clauses are tried in registration order when the cell is called.
    """
    if not isinstance(cell, Cell):
        raise TypeError(
            f"define_clause() expects a Cell, got {type(cell).__name__}"
        )
    clause = clause_expr(cell, pattern, body)
    cell.workspace.store.add_clause(cell.key, clause)
    return clause
