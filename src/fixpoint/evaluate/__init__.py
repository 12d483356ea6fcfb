"""fixpoint evaluation: entry points for running equations.

Entry point::

    from fixpoint.evaluate import evaluate, call
    from fixpoint.framework import create_cell

    x = create_cell(0.0)
    eq = x.next_layer(x * 0.5 + 5)
    evaluate(eq)        # ~10.0, and x.value is updated
"""

from __future__ import annotations

from typing import Any

from fixpoint.model.cells import CellStore
from fixpoint.model.config import EvaluationConfig
from fixpoint.model.expressions import ClauseExpr

from fixpoint.framework._builder import as_expression
from fixpoint.framework._protocols import CellHandle, EquationLike
from fixpoint.framework._workspace import default_workspace

from ._cache import EvaluationCache
from ._executor import Evaluator
from ._matcher import match_clause
from ._values import (
    ConvergenceError,
    EvaluationError,
    NoMatchingClauseError,
    StructureError,
    UnboundParameterError,
)


def evaluate(
    target: Any,
    *,
    parameter: float | None = None,
    store: CellStore | None = None,
    config: EvaluationConfig | None = None,
) -> float:
    """Evaluate an equation under a fresh cache.

    Parameters
    ----------
    target
        An ``Equation`` (carries its own workspace), a cell handle, a
        number, or a bare expression node.  Bare nodes resolve their cell
        references against the default workspace unless *store* is given.
    parameter
        Binds the call parameter for the top-level cache.  For a clause
        equation the argument is dispatched through the clauses of its
        cell instead.
    store
        Cell arena to evaluate against; overrides the workspace of the
        target.
    config
        Evaluation settings; defaults to the workspace's config.

    Returns
    -------
    float
        The value of the equation.
    """
    expr, store, config = _resolve_target(target, store, config)
    evaluator = Evaluator(store, config)

    if isinstance(expr, ClauseExpr):
        if parameter is None:
            raise StructureError(
                "A clause equation needs an argument: evaluate(eq, parameter=...)"
            )
        return evaluator.call(
            evaluator.target_key(expr.call.cell, "Clause"), float(parameter),
        )

    if parameter is not None:
        parameter = float(parameter)
    return evaluator.evaluate(expr, EvaluationCache(parameter=parameter))


def call(
    cell: Any,
    argument: float,
    *,
    config: EvaluationConfig | None = None,
) -> float:
    """Call a parametrized cell with *argument*."""
    if not isinstance(cell, CellHandle):
        raise TypeError(
            f"call() expects a cell handle, got {type(cell).__name__}"
        )
    evaluator = Evaluator(cell.workspace.store, config or cell.workspace.config)
    return evaluator.call(cell.key, float(argument))


def _resolve_target(
    target: Any,
    store: CellStore | None,
    config: EvaluationConfig | None,
) -> tuple[Any, CellStore, EvaluationConfig | None]:
    """Split a target into (expression, store, config).

    Cell handles run against their own workspace and bare expressions
    against the default one, unless *store* is given.
    """
    if isinstance(target, EquationLike):
        workspace = target.workspace
        return (
            target.expression,
            workspace.store if store is None else store,
            workspace.config if config is None else config,
        )
    expr = as_expression(target)
    if store is None:
        if isinstance(target, CellHandle):
            workspace = target.workspace
        else:
            workspace = default_workspace()
        return expr, workspace.store, workspace.config if config is None else config
    return expr, store, config


__all__ = [
    "evaluate",
    "call",
    "Evaluator",
    "EvaluationCache",
    "match_clause",
    "EvaluationError",
    "StructureError",
    "UnboundParameterError",
    "NoMatchingClauseError",
    "ConvergenceError",
]
