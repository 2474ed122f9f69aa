"""Two-phase bounded-variable primal simplex.

Solves the LinearProgram produced by finance/model_builder.py (or any
other small dense LP) on a dense numpy tableau.

Algorithm:
    Phase 1: maximize -Σ artificials from the slack/artificial basis.
             A positive optimum means the program is infeasible.
    Phase 2: maximize the real objective from the Phase-1 basis, with
             artificial columns barred from entering.

Pricing uses Dantzig's rule (largest improving reduced cost). As soon as
a phase sees a tie in the minimum ratio test or a zero-length step, it
switches to Bland's rule (smallest index enters, smallest basic index
leaves among ties) for the rest of the phase, which guarantees
termination under degeneracy.

Non-basic columns sit at their lower bound (0) or, when finite, at their
upper bound; the ratio test includes the entering column's own bound
flip and the upper bounds of basic columns.
"""

import logging
from typing import Optional, Tuple

import numpy as np

from config.solver_config import SolverConfig, get_default_solver_config
from data.validator import DataValidator
from finance.linear_program import LinearProgram
from solver.result import SolveResult, SolveStatus
from solver.standard_form import StandardForm, standardize

logger = logging.getLogger(__name__)


class _Tableau:
    """Working state: B^{-1}A, basic values and non-basic bound positions."""

    def __init__(self, form: StandardForm, zero_tolerance: float):
        self.T = form.A.copy()
        self.x_basic = form.b.copy()
        self.basis = list(form.basis)
        self.upper = form.upper
        self.zero_tolerance = zero_tolerance
        self.is_basic = np.zeros(form.num_columns, dtype=bool)
        self.is_basic[self.basis] = True
        self.at_upper = np.zeros(form.num_columns, dtype=bool)
        self.eligible = np.ones(form.num_columns, dtype=bool)

    @property
    def num_rows(self) -> int:
        return self.T.shape[0]

    def reduced_costs(self, cost: np.ndarray) -> np.ndarray:
        """d_j = c_j - c_B^T B^{-1} a_j, recomputed from the tableau."""
        d = cost - cost[self.basis] @ self.T if self.num_rows else cost.copy()
        d[self.is_basic] = 0.0
        return d

    def column_values(self) -> np.ndarray:
        """Current value of every standard-form column."""
        y = np.where(self.at_upper, self.upper, 0.0)
        y[self.basis] = self.x_basic
        return y

    def pivot(self, row: int, col: int) -> None:
        pivot_row = self.T[row] / self.T[row, col]
        factors = self.T[:, col].copy()
        factors[row] = 0.0
        self.T -= np.outer(factors, pivot_row)
        self.T[row] = pivot_row
        self.T[:, col] = 0.0
        self.T[row, col] = 1.0
        self.T[np.abs(self.T) < self.zero_tolerance] = 0.0

    def replace_basic(self, row: int, col: int, value: float, leaving_at_upper: bool) -> None:
        """Pivot col into the basis at row; the leaving column rests at a bound."""
        leaving = self.basis[row]
        self.pivot(row, col)
        self.basis[row] = col
        self.x_basic[row] = value
        self.is_basic[leaving] = False
        self.is_basic[col] = True
        self.at_upper[leaving] = leaving_at_upper
        self.at_upper[col] = False

    def move(self, col: int, direction: float, step: float,
             row: Optional[int], leaving_at_upper: bool) -> None:
        """Move non-basic col by step in direction, then pivot or flip its bound."""
        self.x_basic -= direction * step * self.T[:, col]
        if row is None:
            self.at_upper[col] = not self.at_upper[col]
        else:
            start = self.upper[col] if self.at_upper[col] else 0.0
            self.replace_basic(row, col, start + direction * step, leaving_at_upper)
        self.x_basic[np.abs(self.x_basic) < self.zero_tolerance] = 0.0

    def drop_row(self, row: int) -> None:
        self.is_basic[self.basis[row]] = False
        self.T = np.delete(self.T, row, axis=0)
        self.x_basic = np.delete(self.x_basic, row)
        del self.basis[row]


class SimplexSolver:
    """Solves a LinearProgram with the two-phase bounded-variable simplex."""

    def __init__(self, lp: LinearProgram, config: Optional[SolverConfig] = None):
        """Initialize solver with a linear program.

        Args:
            lp: LinearProgram to solve
            config: SolverConfig (defaults to get_default_solver_config())
        """
        self.lp = lp
        self.config = config or get_default_solver_config()
        self.iterations = 0

    def solve(self) -> SolveResult:
        """Solve the program.

        Returns:
            SolveResult; infeasibility, unboundedness and the iteration
            limit are reported through status

        Raises:
            InvalidInputError: If the program is malformed
        """
        DataValidator.validate_linear_program(self.lp)
        form = standardize(self.lp)
        self.iterations = 0
        self.tolerance = self.config.tolerance * form.scale
        self.iteration_limit = self.config.iteration_limit(
            self.lp.num_variables, self.lp.num_constraints
        )
        tableau = _Tableau(form, zero_tolerance=self.tolerance * 1e-3)

        if form.artificial.any():
            status = self._run_phase(tableau, -form.artificial.astype(float), 'phase 1')
            if status is not SolveStatus.OPTIMAL:
                return self._finish(SolveResult.failed(status, self.iterations))

            infeasibility = float(tableau.column_values()[form.artificial].sum())
            if infeasibility > self.config.feasibility_tolerance * form.rhs_scale:
                logger.debug("Phase 1 infeasibility %.3e", infeasibility)
                return self._finish(SolveResult.failed(SolveStatus.INFEASIBLE, self.iterations))

            self._drive_out_artificials(tableau, form.artificial)
            tableau.eligible &= ~form.artificial

        status = self._run_phase(tableau, form.c, 'phase 2')
        if status is not SolveStatus.OPTIMAL:
            return self._finish(SolveResult.failed(status, self.iterations))
        return self._finish(self._extract(tableau, form))

    def _finish(self, result: SolveResult) -> SolveResult:
        log = logger.info if self.config.verbose else logger.debug
        log("Solved '%s': status=%s iterations=%d objective=%s",
            self.lp.name, result.status.value, result.iterations, result.objective_value)
        return result

    def _run_phase(self, tableau: _Tableau, cost: np.ndarray, phase: str) -> SolveStatus:
        """Pivot until no improving column remains."""
        use_bland = self.config.pivot_rule == 'bland'
        while True:
            d = tableau.reduced_costs(cost)
            improving = tableau.eligible & ~tableau.is_basic & (
                (~tableau.at_upper & (d > self.tolerance))
                | (tableau.at_upper & (d < -self.tolerance))
            )
            candidates = np.flatnonzero(improving)
            if candidates.size == 0:
                return SolveStatus.OPTIMAL
            if self.iterations >= self.iteration_limit:
                logger.warning("%s: iteration limit %d reached", phase, self.iteration_limit)
                return SolveStatus.ITERATION_LIMIT_EXCEEDED

            if use_bland:
                entering = int(candidates[0])
            else:
                entering = int(candidates[np.argmax(np.abs(d[candidates]))])
            direction = -1.0 if tableau.at_upper[entering] else 1.0

            step = self._ratio_test(tableau, entering, direction)
            if step is None:
                return SolveStatus.UNBOUNDED
            length, row, leaving_at_upper, tie = step
            if not use_bland and (tie or length <= self.tolerance):
                logger.debug("%s: degenerate step at iteration %d, switching to Bland's rule",
                             phase, self.iterations)
                use_bland = True

            tableau.move(entering, direction, length, row, leaving_at_upper)
            self.iterations += 1
            logger.debug("%s: iteration %d entering=%d leaving_row=%s step=%.3e",
                         phase, self.iterations, entering, row, length)

    def _ratio_test(self, tableau: _Tableau, col: int,
                    direction: float) -> Optional[Tuple[float, Optional[int], bool, bool]]:
        """Longest step the entering column can take.

        Returns:
            None if no row or bound limits the step (unbounded), otherwise
            (step, leaving row or None for a bound flip, leaving column
            rests at its upper bound, minimum ratio was tied)
        """
        flip = tableau.upper[col]
        if tableau.num_rows == 0:
            return (flip, None, False, False) if np.isfinite(flip) else None

        rate = -direction * tableau.T[:, col]
        limits = np.full(tableau.num_rows, np.inf)
        basic_upper = tableau.upper[tableau.basis]

        falling = rate < -self.tolerance
        limits[falling] = tableau.x_basic[falling] / -rate[falling]
        rising = (rate > self.tolerance) & np.isfinite(basic_upper)
        limits[rising] = (basic_upper[rising] - tableau.x_basic[rising]) / rate[rising]
        limits = np.maximum(limits, 0.0)

        best = float(limits.min())
        if flip <= best:
            return (flip, None, False, False) if np.isfinite(flip) else None

        ties = np.flatnonzero(limits <= best + self.tolerance * max(1.0, best))
        if ties.size > 1:
            basis = np.array(tableau.basis)
            row = int(ties[np.argmin(basis[ties])])
        else:
            row = int(ties[0])
        return best, row, bool(rising[row]), ties.size > 1

    def _drive_out_artificials(self, tableau: _Tableau, artificial: np.ndarray) -> None:
        """Pivot zero-valued basic artificials out; drop rows that are redundant."""
        for row in reversed(range(tableau.num_rows)):
            if not artificial[tableau.basis[row]]:
                continue
            candidates = np.flatnonzero(
                ~artificial & ~tableau.is_basic & (np.abs(tableau.T[row]) > self.tolerance)
            )
            if candidates.size == 0:
                logger.debug("Dropping redundant row %d", row)
                tableau.drop_row(row)
                continue
            col = int(candidates[0])
            value = tableau.upper[col] if tableau.at_upper[col] else 0.0
            tableau.replace_basic(row, col, value, leaving_at_upper=False)

    def _extract(self, tableau: _Tableau, form: StandardForm) -> SolveResult:
        """Read the vertex off the basis and recompute the objective."""
        y = np.clip(tableau.column_values(), 0.0, form.upper)
        x = form.recover_values(y)
        lower, upper = self.lp.bounds()
        x = np.clip(x, lower, upper) + 0.0
        values = {name: float(value) for name, value in zip(self.lp.variable_names, x)}
        return SolveResult(
            status=SolveStatus.OPTIMAL,
            values=values,
            objective_value=float(self.lp.objective @ x),
            iterations=self.iterations
        )


def solve(lp: LinearProgram, config: Optional[SolverConfig] = None) -> SolveResult:
    """Solve lp and return a typed outcome.

    Args:
        lp: LinearProgram to solve
        config: Optional SolverConfig

    Returns:
        SolveResult with status, values and objective value
    """
    return SimplexSolver(lp, config).solve()
