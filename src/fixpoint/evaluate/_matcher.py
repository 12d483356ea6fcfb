"""Clause selection for parametrized cells."""

from __future__ import annotations

from collections.abc import Iterable

from fixpoint.model.expressions import ClauseExpr, ParameterExpr, PatternKind

from ._values import NoMatchingClauseError, StructureError


def pattern_matches(pattern: ParameterExpr, argument: float) -> bool:
    if pattern.pattern == PatternKind.VARIABLE:
        return True
    return pattern.value == argument


def match_clause(
    clauses: Iterable[ClauseExpr],
    argument: float,
    cell_name: str = "<anonymous>",
) -> ClauseExpr:
    """Return the first clause whose pattern accepts *argument*.

    Clauses are scanned in registration order, so a variable pattern
    registered before a constant one shadows it.
    """
    for clause in clauses:
        pattern = clause.pattern
        if not isinstance(pattern, ParameterExpr):
            raise StructureError(
                f"Clause of cell '{cell_name}' has a {pattern.kind!r} pattern; "
                f"expected a parameter"
            )
        if pattern_matches(pattern, argument):
            return clause
    raise NoMatchingClauseError(cell_name, argument)
