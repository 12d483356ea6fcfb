"""Evaluator: tree-walking interpreter for fixpoint expressions.

The ``Evaluator`` resolves cell references against a ``CellStore`` and
threads an ``EvaluationCache`` through the walk.  It owns the fixed-point
convergence loop and the dispatch of parametrized calls.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from fixpoint.model.cells import CellStore
from fixpoint.model.config import DEFAULT_CONFIG, EvaluationConfig
from fixpoint.model.expressions import (
    BinaryExpr,
    BinaryOp,
    CallExpr,
    CellKey,
    CellRef,
    ClauseExpr,
    Expression,
    LiteralExpr,
    NextLayerExpr,
    ParameterExpr,
    PatternKind,
    UnaryExpr,
)

from ._cache import EvaluationCache
from ._matcher import match_clause
from ._values import ConvergenceError, StructureError, converged, round_value

logger = logging.getLogger(__name__)


class Evaluator:
    """Interpreter for one top-level invocation.

    Parametrized calls recurse on the Python stack, a handful of frames
    per call level.  Under the default interpreter recursion limit this
    allows call chains roughly 150 levels deep; deeper chains raise
    ``RecursionError`` unless the limit is raised with
    ``sys.setrecursionlimit``.

    Parameters
    ----------
    store : CellStore
        Arena the cell references of the evaluated tree point into.
    config : EvaluationConfig, optional
        Tolerance, iteration guard and call memoization settings.
    """

    def __init__(
        self,
        store: CellStore,
        config: EvaluationConfig | None = None,
    ) -> None:
        self.store = store
        self.config = config or DEFAULT_CONFIG
        # Only populated when config.memoize_calls is set.
        self._call_memo: dict[tuple[CellKey, float], float] = {}

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    def evaluate(
        self,
        expr: Expression,
        cache: EvaluationCache | None = None,
    ) -> float:
        """Evaluate *expr* under *cache* (a fresh one if omitted)."""
        if cache is None:
            cache = EvaluationCache()
        return self._eval(expr, cache)

    def call(self, key: CellKey, argument: float) -> float:
        """Invoke the parametrized cell *key* with *argument*."""
        if self.config.memoize_calls:
            memo_key = (key, argument)
            if memo_key in self._call_memo:
                return self._call_memo[memo_key]

        cell = self._cell(key)
        clause = match_clause(cell.clauses, argument, cell.name)
        logger.debug("call %s(%r) -> clause %r", cell.name, argument, clause.pattern)
        result = self._eval(clause.body, EvaluationCache(parameter=argument))

        if self.config.memoize_calls:
            self._call_memo[(key, argument)] = result
        return result

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    def _cell(self, key: CellKey):
        try:
            return self.store[key]
        except KeyError as e:
            raise StructureError(str(e.args[0])) from e

    def target_key(self, ref: CellRef, context: str) -> CellKey:
        if ref.cell is None:
            raise StructureError(
                f"{context} needs a cell target, got embedded value {ref.value!r}"
            )
        return ref.cell

    # -----------------------------------------------------------------------
    # Expression dispatch
    # -----------------------------------------------------------------------

    def _eval(self, expr: Expression, cache: EvaluationCache) -> float:
        handler = self._EXPR_DISPATCH.get(getattr(expr, "kind", None))
        if handler is None:
            raise StructureError(
                f"Unsupported expression: {type(expr).__name__}"
            )
        return handler(self, expr, cache)

    def _eval_literal(self, expr: LiteralExpr, cache: EvaluationCache) -> float:
        return expr.value

    def _eval_parameter(self, expr: ParameterExpr, cache: EvaluationCache) -> float:
        if expr.pattern == PatternKind.CONSTANT:
            return expr.value
        return cache.parameter

    def _eval_cell_ref(self, expr: CellRef, cache: EvaluationCache) -> float:
        if expr.cell is None:
            return expr.value
        key = expr.cell
        if not cache.contains(key):
            cache.remember(key, self._cell(key).value)
        return cache.get(key)

    def _eval_binary(self, expr: BinaryExpr, cache: EvaluationCache) -> float:
        left = self._eval(expr.left, cache)
        right = self._eval(expr.right, cache)
        if expr.op == BinaryOp.ADD:
            return left + right
        if expr.op == BinaryOp.SUB:
            return left - right
        if expr.op == BinaryOp.MUL:
            return left * right
        if expr.op == BinaryOp.DIV:
            return left / right
        raise StructureError(f"Unsupported binary op: {expr.op}")

    def _eval_unary(self, expr: UnaryExpr, cache: EvaluationCache) -> float:
        return round_value(expr.op, self._eval(expr.operand, cache))

    def _eval_next_layer(self, expr: NextLayerExpr, cache: EvaluationCache) -> float:
        key = self.target_key(expr.cell, "Next-layer equation")
        cell = self._cell(key)
        tolerance = self.config.tolerance
        max_iterations = self.config.max_iterations

        cache.remember(key, cell.value)
        iterations = 0
        while True:
            new_layer = self._eval(expr.body, cache)
            old_layer = cache.get(key)
            cell.value = new_layer
            cache.remember(key, new_layer)
            iterations += 1
            logger.debug(
                "%s: iteration %d, %r -> %r", cell.name, iterations, old_layer, new_layer,
            )
            if converged(new_layer, old_layer, tolerance):
                break
            if max_iterations is not None and iterations >= max_iterations:
                raise ConvergenceError(cell.name, iterations, abs(new_layer - old_layer))

        logger.debug("%s converged to %r after %d iterations", cell.name, cell.value, iterations)
        return cell.value

    def _eval_call(self, expr: CallExpr, cache: EvaluationCache) -> float:
        key = self.target_key(expr.cell, "Parametrized call")
        argument = self._eval(expr.argument, cache)
        return self.call(key, argument)

    def _eval_clause(self, expr: ClauseExpr, cache: EvaluationCache) -> float:
        raise StructureError(
            "A clause definition has no value; call its cell instead"
        )

    # Expression dispatch table
    _EXPR_DISPATCH: dict[str, Callable[[Evaluator, Expression, EvaluationCache], float]] = {
        "literal": _eval_literal,
        "parameter": _eval_parameter,
        "cell_ref": _eval_cell_ref,
        "binary": _eval_binary,
        "unary": _eval_unary,
        "next_layer": _eval_next_layer,
        "call": _eval_call,
        "clause": _eval_clause,
    }
