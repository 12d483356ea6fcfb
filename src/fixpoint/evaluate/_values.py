"""Error types and numeric helpers for the evaluator."""

from __future__ import annotations

import math

from fixpoint.model.expressions import UnaryOp


class EvaluationError(Exception):
    """Runtime error during evaluation of an equation."""


class StructureError(EvaluationError):
    """A node has a shape the evaluator cannot interpret."""


class UnboundParameterError(EvaluationError):
    """A parameter leaf was evaluated outside any clause call."""


class NoMatchingClauseError(EvaluationError):
    """No registered clause of a cell matches the call argument."""

    def __init__(self, cell_name: str, argument: float):
        super().__init__(
            f"No clause of cell '{cell_name}' matches argument {argument!r}"
        )
        self.cell_name = cell_name
        self.argument = argument


class ConvergenceError(EvaluationError):
    """A next-layer equation did not settle within the iteration limit."""

    def __init__(self, cell_name: str, iterations: int, last_delta: float):
        super().__init__(
            f"Cell '{cell_name}' did not converge after {iterations} iterations "
            f"(last delta {last_delta!r})"
        )
        self.cell_name = cell_name
        self.iterations = iterations
        self.last_delta = last_delta


# ---------------------------------------------------------------------------
# Numeric helpers
# ---------------------------------------------------------------------------

def round_value(op: UnaryOp, value: float) -> float:
    """Apply a rounding operator, keeping the result a float.

    Infinities and NaN pass through unchanged.
    """
    if op == UnaryOp.CEIL:
        rounder = math.ceil
    elif op == UnaryOp.FLOOR:
        rounder = math.floor
    else:
        raise StructureError(f"Unsupported unary op: {op}")
    if not math.isfinite(value):
        return value
    return float(rounder(value))


def converged(new: float, old: float, tolerance: float) -> bool:
    """True when successive layers differ by no more than *tolerance*.

    NaN never converges.
    """
    return abs(new - old) <= tolerance
