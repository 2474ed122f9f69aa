"""Simplex solver configuration.

Centralizes numerical tolerances, the pivoting rule and the
iteration safety valve.
"""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class SolverConfig:
    """Configuration for the two-phase simplex solver.
    
    Attributes:
        tolerance: Zero tolerance for pivots and reduced costs, relative to
            the largest coefficient magnitude
        feasibility_tolerance: Largest Phase-1 infeasibility (relative to the
            rhs magnitude) still accepted as feasible
        iteration_factor: Iteration limit is iteration_factor * (variables + constraints)
        pivot_rule: 'dantzig' switches to Bland's rule when cycling risk is
            detected; 'bland' uses Bland's rule from the first pivot
        verbose: Log per-phase progress at INFO level
    """
    tolerance: float = 1e-9
    feasibility_tolerance: float = 1e-9
    iteration_factor: int = 20
    pivot_rule: Literal['dantzig', 'bland'] = 'dantzig'
    verbose: bool = False
    
    def __post_init__(self):
        """Validate solver configuration parameters."""
        if not self.tolerance > 0:
            raise ValueError("tolerance must be positive")
        if not self.feasibility_tolerance > 0:
            raise ValueError("feasibility_tolerance must be positive")
        if self.iteration_factor <= 0:
            raise ValueError("iteration_factor must be positive")
        if self.pivot_rule not in ('dantzig', 'bland'):
            raise ValueError("pivot_rule must be 'dantzig' or 'bland'")
    
    def iteration_limit(self, num_variables: int, num_constraints: int) -> int:
        """Pivot budget for a problem of the given size."""
        return self.iteration_factor * max(1, num_variables + num_constraints)


def get_default_solver_config() -> SolverConfig:
    """Returns the default solver configuration.
    
    Returns:
        SolverConfig with 1e-9 tolerances and Dantzig pricing
    """
    return SolverConfig(
        tolerance=1e-9,
        feasibility_tolerance=1e-9,
        iteration_factor=20,
        pivot_rule='dantzig',
        verbose=False
    )
