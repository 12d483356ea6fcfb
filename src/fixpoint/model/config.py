"""Evaluation settings."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class EvaluationConfig(BaseModel):
    """Knobs for a single evaluation.

    The defaults reproduce the unguarded behaviour: a fixed 0.01
    tolerance, no iteration limit and no memoization of calls.
    """

    model_config = ConfigDict(frozen=True)

    tolerance: float = Field(default=0.01, gt=0)
    max_iterations: int | None = Field(default=None, ge=1)
    memoize_calls: bool = False


DEFAULT_CONFIG = EvaluationConfig()
