"""Typed outcome of a solve call."""

import math
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class SolveStatus(str, Enum):
    """Terminal status of one solve call."""
    OPTIMAL = 'optimal'
    INFEASIBLE = 'infeasible'
    UNBOUNDED = 'unbounded'
    ITERATION_LIMIT_EXCEEDED = 'iteration_limit_exceeded'


@dataclass(frozen=True)
class SolveResult:
    """Result of solving a LinearProgram.

    Attributes:
        status: Terminal solver status
        values: Variable name -> value (empty unless status is OPTIMAL)
        objective_value: c^T x recomputed from the original objective (NaN unless OPTIMAL)
        iterations: Number of pivots and bound flips performed across both phases
    """
    status: SolveStatus
    values: Mapping[str, float] = field(default_factory=dict)
    objective_value: float = math.nan
    iterations: int = 0

    def __post_init__(self):
        object.__setattr__(self, 'values', MappingProxyType(dict(self.values)))

    @property
    def is_optimal(self) -> bool:
        return self.status is SolveStatus.OPTIMAL

    @classmethod
    def failed(cls, status: SolveStatus, iterations: int = 0) -> 'SolveResult':
        """Result for a non-optimal outcome: no values, NaN objective."""
        return cls(status=status, values={}, objective_value=math.nan, iterations=iterations)
