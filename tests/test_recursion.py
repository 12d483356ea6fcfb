"""Tests for parametrized cells: clause dispatch and recursive calls."""

import pytest

from conftest import make_factorial, make_fibonacci

from fixpoint.evaluate import NoMatchingClauseError, call, evaluate
from fixpoint.evaluate import _executor
from fixpoint.framework import (
    EvaluationConfig,
    Workspace,
    define_clause,
    floor,
    param,
    var,
)


# ---------------------------------------------------------------------------
# Classic recurrences
# ---------------------------------------------------------------------------

class TestRecurrences:
    def test_fibonacci(self):
        fib = make_fibonacci()
        assert call(fib, 9) == 55.0

    @pytest.mark.parametrize("n, expected", [(0, 1), (1, 1), (2, 2), (5, 8), (10, 89)])
    def test_fibonacci_values(self, n, expected):
        assert make_fibonacci().call(n) == expected

    def test_factorial(self):
        fact = make_factorial()
        assert call(fact, 5) == 120.0

    def test_factorial_base_cases(self):
        fact = make_factorial()
        assert fact.call(0) == 1.0
        assert fact.call(1) == 1.0

    def test_call_node_inside_expression(self):
        ws = Workspace()
        fact = make_factorial(ws)
        x = ws.cell(2.0)
        assert evaluate(fact(3) * x, store=ws.store) == 12.0

    def test_argument_evaluated_in_caller_cache(self):
        ws = Workspace()
        fact = make_factorial(ws)
        k = ws.cell(4.0, name="k")
        assert evaluate(fact(k + 1), store=ws.store) == 120.0

    def test_clause_equation_dispatches_through_all_clauses(self):
        ws = Workspace()
        fib = make_fibonacci(ws)
        first_clause = fib.clause(0, 1)
        assert first_clause(9) == 55.0

    def test_halving_recurrence_with_floor(self):
        ws = Workspace()
        steps = ws.cell(0.0, name="steps")
        n = var()
        steps.clause(1, 0)
        steps.clause(n, steps(floor(n / 2)) + 1)
        assert steps.call(16) == 4.0
        assert steps.call(17) == 4.0

    def test_mutual_recursion(self):
        ws = Workspace()
        even = ws.cell(0.0, name="even")
        odd = ws.cell(0.0, name="odd")
        n = var()
        even.clause(0, 1)
        even.clause(n, odd(n - 1))
        odd.clause(0, 0)
        odd.clause(n, even(n - 1))
        assert even.call(6) == 1.0
        assert odd.call(6) == 0.0

    def test_clause_body_reads_cell_state(self):
        ws = Workspace()
        scale = ws.cell(3.0, name="scale")
        f = ws.cell(0.0, name="f")
        f.clause(var(), var() * scale)
        assert f.call(2) == 6.0
        scale.value = 5.0
        assert f.call(2) == 10.0


# ---------------------------------------------------------------------------
# Clause order
# ---------------------------------------------------------------------------

class TestClauseOrder:
    def test_swapping_constant_clauses_keeps_results(self):
        ws = Workspace()
        fib = ws.cell(0.0)
        n = var()
        fib.clause(1, 1)
        fib.clause(0, 1)
        fib.clause(n, fib(n - 1) + fib(n - 2))
        assert fib.call(9) == 55.0
        assert fib.call(0) == 1.0
        assert fib.call(1) == 1.0

    def test_variable_clause_shadows_later_constants(self):
        ws = Workspace()
        f = ws.cell(0.0, name="f")
        define_clause(f, var(), var() * 10)
        define_clause(f, param(0), 1)
        assert f.call(0) == 0.0
        assert f.call(3) == 30.0

    def test_constant_before_variable_wins(self):
        ws = Workspace()
        f = ws.cell(0.0, name="f")
        define_clause(f, param(0), 1)
        define_clause(f, var(), var() * 10)
        assert f.call(0) == 1.0


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------

class TestCallFailures:
    def test_no_matching_clause(self):
        ws = Workspace()
        g = ws.cell(0.0, name="g")
        g.clause(0, 1)
        g.clause(1, 1)
        with pytest.raises(NoMatchingClauseError, match="cell 'g'"):
            call(g, 5)

    def test_no_match_deep_in_recursion_aborts_call(self):
        ws = Workspace()
        g = ws.cell(0.0, name="g")
        g.clause(2, g(1) + 1)
        g.clause(1, g(0))
        with pytest.raises(NoMatchingClauseError) as exc:
            g.call(2)
        assert exc.value.argument == 0.0

    def test_cell_without_clauses(self):
        ws = Workspace()
        f = ws.cell(0.0)
        with pytest.raises(NoMatchingClauseError):
            f.call(0)

    def test_moderately_deep_recursion(self):
        ws = Workspace()
        total = ws.cell(0.0, name="total")
        n = var()
        total.clause(0, 0)
        total.clause(n, total(n - 1) + n)
        assert total.call(100) == 5050.0

    def test_recursion_deeper_than_interpreter_limit(self):
        ws = Workspace()
        total = ws.cell(0.0, name="total")
        n = var()
        total.clause(0, 0)
        total.clause(n, total(n - 1) + n)
        with pytest.raises(RecursionError):
            total.call(5000)

    def test_call_rejects_non_cell(self):
        with pytest.raises(TypeError, match="call\\(\\) expects a cell handle"):
            call(3.0, 1)


# ---------------------------------------------------------------------------
# Memoization
# ---------------------------------------------------------------------------

def _count_matches(monkeypatch):
    calls = []
    original = _executor.match_clause

    def counting(clauses, argument, cell_name="<anonymous>"):
        calls.append(argument)
        return original(clauses, argument, cell_name)

    monkeypatch.setattr(_executor, "match_clause", counting)
    return calls


class TestMemoization:
    def test_calls_are_not_memoized_by_default(self, monkeypatch):
        calls = _count_matches(monkeypatch)
        assert make_fibonacci().call(10) == 89.0
        assert len(calls) == 177

    def test_opt_in_memoization_same_result(self, monkeypatch):
        calls = _count_matches(monkeypatch)
        fib = make_fibonacci()
        assert fib.call(10, config=EvaluationConfig(memoize_calls=True)) == 89.0
        assert sorted(set(calls)) == [float(i) for i in range(11)]
        assert len(calls) == 11

    def test_memo_does_not_outlive_invocation(self):
        ws = Workspace(EvaluationConfig(memoize_calls=True))
        scale = ws.cell(1.0)
        f = ws.cell(0.0)
        f.clause(var(), var() * scale)
        assert f.call(2) == 2.0
        scale.value = 3.0
        assert f.call(2) == 6.0
