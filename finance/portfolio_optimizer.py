"""Portfolio optimizer facade for the presentation layer.

Wraps build + solve for a fixed asset universe and applies the display
policy: when a risk level has no optimal allocation, the previously
accepted weights are kept and a non-blocking notice is returned.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from config.portfolio_config import PortfolioConstraints
from config.solver_config import SolverConfig
from data.loader import Asset
from finance.model_builder import PortfolioModelBuilder
from solver.result import SolveResult, SolveStatus
from solver.simplex import solve

logger = logging.getLogger(__name__)

NOTICES = {
    SolveStatus.INFEASIBLE: "no feasible allocation at this risk level",
    SolveStatus.UNBOUNDED: "the allocation problem is unbounded",
    SolveStatus.ITERATION_LIMIT_EXCEEDED: "the solver did not converge",
}


@dataclass(frozen=True)
class OptimizationOutcome:
    """What the presentation layer shows after one re-optimization.

    Attributes:
        status: Solver status
        weights: Asset name -> weight to display
        accepted: True when weights come from this solve
        notice: Message for the user when the solve was not accepted
        result: Raw SolveResult
    """
    status: SolveStatus
    weights: Dict[str, float]
    accepted: bool
    notice: Optional[str] = None
    result: Optional[SolveResult] = field(default=None, repr=False)


class PortfolioOptimizer:
    """Re-optimizes a fixed asset universe for changing risk ceilings."""

    def __init__(self, assets: Sequence[Asset], solver_config: Optional[SolverConfig] = None):
        """Initialize optimizer.

        Args:
            assets: Asset universe (validated once)
            solver_config: Optional SolverConfig passed to every solve
        """
        self.builder = PortfolioModelBuilder(assets)
        self.assets = self.builder.assets
        self.solver_config = solver_config

    def equal_weights(self) -> Dict[str, float]:
        """Equal allocation, the initial display weights."""
        weight = 1.0 / len(self.assets)
        return {asset.name: weight for asset in self.assets}

    def target_volatility_range(self) -> Tuple[float, float]:
        """Range a risk control should offer: [0, highest asset volatility]."""
        return 0.0, float(np.max(self.builder.volatilities))

    def weights_vector(self, weights: Mapping[str, float]) -> np.ndarray:
        """Order a name -> weight mapping by asset (missing names are 0)."""
        return np.array([weights.get(asset.name, 0.0) for asset in self.assets], dtype=float)

    def optimize(self, target_volatility: float,
                 previous_weights: Optional[Mapping[str, float]] = None) -> OptimizationOutcome:
        """Solve for one risk ceiling.

        Args:
            target_volatility: Ceiling on weighted volatility
            previous_weights: Last accepted weights (equal weights if None)

        Returns:
            OptimizationOutcome; on a non-optimal status the previous weights
            are carried forward with a notice

        Raises:
            InvalidInputError: If target_volatility is negative or non-finite
        """
        constraints = PortfolioConstraints(target_volatility=target_volatility)
        lp = self.builder.build(constraints)
        result = solve(lp, self.solver_config)

        if result.is_optimal:
            weights = {
                asset.name: result.values[var.name]
                for asset, var in zip(self.assets, lp.variables)
            }
            return OptimizationOutcome(
                status=result.status,
                weights=weights,
                accepted=True,
                result=result
            )

        fallback = dict(previous_weights) if previous_weights is not None else self.equal_weights()
        logger.info("Target volatility %.4f: %s, keeping previous weights",
                    target_volatility, result.status.value)
        return OptimizationOutcome(
            status=result.status,
            weights=fallback,
            accepted=False,
            notice=NOTICES[result.status],
            result=result
        )

    def solve_risk_frontier(self, target_volatilities: Iterable[float]) -> List[OptimizationOutcome]:
        """Optimize for each risk ceiling in order.

        Each outcome carries forward the last accepted weights, as a risk
        control moved through the values would.

        Args:
            target_volatilities: Risk ceilings to try

        Returns:
            One OptimizationOutcome per target volatility
        """
        outcomes = []
        weights = None
        for target in target_volatilities:
            outcome = self.optimize(target, previous_weights=weights)
            if outcome.accepted:
                weights = outcome.weights
            outcomes.append(outcome)
        return outcomes
