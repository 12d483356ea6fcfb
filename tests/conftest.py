"""Shared test helpers for the fixpoint test suite."""

from fixpoint.evaluate import EvaluationCache, Evaluator
from fixpoint.framework import Workspace, var


def run(expr, ws, parameter=None, config=None):
    """Evaluate a bare expression node against a workspace's store."""
    evaluator = Evaluator(ws.store, config)
    return evaluator.evaluate(expr, EvaluationCache(parameter=parameter))


def make_fibonacci(ws=None, name="fib"):
    """Cell with clauses (0 -> 1), (1 -> 1), (n -> fib(n-1) + fib(n-2))."""
    if ws is None:
        ws = Workspace()
    fib = ws.cell(0, name=name)
    n = var()
    fib.clause(0, 1)
    fib.clause(1, 1)
    fib.clause(n, fib(n - 1) + fib(n - 2))
    return fib


def make_factorial(ws=None, name="fact"):
    """Cell with clauses (0 -> 1), (1 -> 1), (n -> fact(n-1) * n)."""
    if ws is None:
        ws = Workspace()
    fact = ws.cell(0, name=name)
    n = var()
    fact.clause(0, 1)
    fact.clause(1, 1)
    fact.clause(n, fact(n - 1) * n)
    return fact
