"""Structural protocols for framework objects.

These ``@runtime_checkable`` protocols let the model and evaluation
layers recognise cell handles and equations with ``isinstance`` without
importing the framework classes themselves.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from fixpoint.model.expressions import CellKey


@runtime_checkable
class CellHandle(Protocol):
    """A user-facing handle on a workspace cell."""

    key: CellKey
    workspace: object

    def ref(self) -> object: ...


@runtime_checkable
class EquationLike(Protocol):
    """An expression bound to the workspace it should be evaluated in."""

    expression: object
    workspace: object
