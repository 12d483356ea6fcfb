"""Fixpoint cells and the arena that owns them.

Cells are named, mutable numeric storage locations.  They never appear
inside an expression tree directly: ``CellRef`` nodes carry a ``CellKey``
and the evaluator resolves it against the owning ``CellStore``.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator

from pydantic import BaseModel

from .expressions import CellKey, ClauseExpr

logger = logging.getLogger(__name__)


class CellState(BaseModel):
    """Storage for a single cell.

    *clauses* keeps registration order; the matcher relies on it.
    """

    name: str
    value: float
    clauses: list[ClauseExpr] = []


class CellStore:
    """Arena of cells belonging to one workspace.

    Parameters
    ----------
    store_id : str, optional
        Identity embedded in every key the store hands out.  Defaults to
        a random UUID so keys from different stores never collide.
    """

    def __init__(self, store_id: str | None = None) -> None:
        self.store_id = store_id or uuid.uuid4().hex
        self._cells: list[CellState] = []

    # -----------------------------------------------------------------------
    # Allocation / lookup
    # -----------------------------------------------------------------------

    def allocate(self, name: str, value: float) -> CellKey:
        """Create a new cell and return its key."""
        key = CellKey(workspace=self.store_id, index=len(self._cells))
        self._cells.append(CellState(name=name, value=value))
        logger.debug("allocated cell %r = %r at %s", name, value, key.index)
        return key

    def __getitem__(self, key: CellKey) -> CellState:
        if key not in self:
            raise KeyError(f"Cell {key!r} does not belong to store {self.store_id}")
        return self._cells[key.index]

    def __contains__(self, key: object) -> bool:
        return (
            isinstance(key, CellKey)
            and key.workspace == self.store_id
            and key.index < len(self._cells)
        )

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self) -> Iterator[CellKey]:
        for index in range(len(self._cells)):
            yield CellKey(workspace=self.store_id, index=index)

    # -----------------------------------------------------------------------
    # Value / clause access
    # -----------------------------------------------------------------------

    def read(self, key: CellKey) -> float:
        return self[key].value

    def write(self, key: CellKey, value: float) -> None:
        self[key].value = float(value)

    def add_clause(self, key: CellKey, clause: ClauseExpr) -> None:
        """Append *clause* to the cell's definition (registration order)."""
        cell = self[key]
        cell.clauses.append(clause)
        logger.debug("cell %r: registered clause #%d", cell.name, len(cell.clauses))

    def clauses(self, key: CellKey) -> list[ClauseExpr]:
        return list(self[key].clauses)
