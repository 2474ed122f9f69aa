"""Reference solver for the portfolio linear program.

This module solves the LinearProgram defined in finance/linear_program.py
using SciPy's HiGHS backend. It does NOT redefine the model, only solves it.

Serves as:
1. Ground truth for validation of the simplex solver
2. Baseline for performance comparison
"""

import math
from typing import Optional

import numpy as np
from scipy.optimize import OptimizeResult, linprog

from data.validator import DataValidator
from finance.linear_program import LinearProgram, Relation, Sense
from solver.result import SolveResult, SolveStatus

# scipy.optimize.linprog status codes
_STATUS = {
    0: SolveStatus.OPTIMAL,
    1: SolveStatus.ITERATION_LIMIT_EXCEEDED,
    2: SolveStatus.INFEASIBLE,
    3: SolveStatus.UNBOUNDED,
}


class ClassicalSolver:
    """Solves a LinearProgram with scipy.optimize.linprog."""

    def __init__(self, lp: LinearProgram):
        """Initialize solver with a linear program.

        Args:
            lp: LinearProgram defining the problem
        """
        self.lp = lp

    def solve(self, method: str = 'highs', verbose: bool = False) -> SolveResult:
        """Solve the linear program.

        Args:
            method: linprog method ('highs', 'highs-ds', 'highs-ipm')
            verbose: Whether to print solver progress

        Returns:
            SolveResult with the same conventions as solver.simplex.solve
        """
        DataValidator.validate_linear_program(self.lp)
        c, A, relations, b = self.lp.as_arrays()
        if self.lp.sense is Sense.MAXIMIZE:
            c = -c

        upper_rows = [i for i, rel in enumerate(relations) if rel is Relation.LE]
        lower_rows = [i for i, rel in enumerate(relations) if rel is Relation.GE]
        equal_rows = [i for i, rel in enumerate(relations) if rel is Relation.EQ]

        A_ub = np.vstack([A[upper_rows], -A[lower_rows]])
        b_ub = np.concatenate([b[upper_rows], -b[lower_rows]])

        bounds = [
            (None if math.isinf(var.lower) else var.lower,
             None if math.isinf(var.upper) else var.upper)
            for var in self.lp.variables
        ]

        result: OptimizeResult = linprog(
            c=c,
            A_ub=A_ub if len(b_ub) else None,
            b_ub=b_ub if len(b_ub) else None,
            A_eq=A[equal_rows] if equal_rows else None,
            b_eq=b[equal_rows] if equal_rows else None,
            bounds=bounds,
            method=method,
            options={'disp': verbose}
        )

        status = _STATUS.get(result.status)
        if status is not SolveStatus.OPTIMAL:
            return SolveResult.failed(
                status or SolveStatus.ITERATION_LIMIT_EXCEEDED,
                iterations=self._iterations(result)
            )

        x = np.asarray(result.x, dtype=float)
        return SolveResult(
            status=SolveStatus.OPTIMAL,
            values={name: float(v) for name, v in zip(self.lp.variable_names, x)},
            objective_value=float(self.lp.objective @ x),
            iterations=self._iterations(result)
        )

    @staticmethod
    def _iterations(result: OptimizeResult) -> int:
        return int(getattr(result, 'nit', 0) or 0)


def solve_reference(lp: LinearProgram, method: Optional[str] = None) -> SolveResult:
    """Solve lp with the SciPy reference solver."""
    return ClassicalSolver(lp).solve(method=method or 'highs')
