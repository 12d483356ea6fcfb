"""Per-invocation memo of cell values and the bound call parameter."""

from __future__ import annotations

from fixpoint.model.expressions import CellKey

from ._values import UnboundParameterError


class EvaluationCache:
    """Memo table threaded through one evaluation.

    A cache is created at the start of every top-level invocation and of
    every parametrized call, and is never shared between them.

    Parameters
    ----------
    parameter : float, optional
        Argument bound for the duration of the cache; read by variable
        parameter leaves.
    """

    def __init__(self, parameter: float | None = None) -> None:
        self._cells: dict[CellKey, float] = {}
        self._parameter = parameter

    def contains(self, key: CellKey) -> bool:
        return key in self._cells

    def get(self, key: CellKey) -> float:
        return self._cells[key]

    def remember(self, key: CellKey, value: float) -> None:
        self._cells[key] = value

    @property
    def has_parameter(self) -> bool:
        return self._parameter is not None

    @property
    def parameter(self) -> float:
        if self._parameter is None:
            raise UnboundParameterError(
                "Variable parameter evaluated outside of a clause call"
            )
        return self._parameter

    def __len__(self) -> int:
        return len(self._cells)
