"""Portfolio performance metrics.

Computes the metrics of the linear portfolio model for display and
comparison:
- Expected return
- Weighted volatility (the linear risk proxy Σ w_i σ_i)
- Return per unit of volatility
"""

from typing import Dict, Sequence

import numpy as np

from data.loader import Asset


class PortfolioMetrics:
    """Computes portfolio metrics for the linear risk model."""

    @staticmethod
    def expected_return(returns: np.ndarray, weights: np.ndarray) -> float:
        """Compute portfolio expected return.

        E[R] = μ^T w

        Args:
            returns: Expected returns for each asset
            weights: Portfolio weights

        Returns:
            Expected portfolio return
        """
        return float(returns @ weights)

    @staticmethod
    def weighted_volatility(volatilities: np.ndarray, weights: np.ndarray) -> float:
        """Compute the weighted volatility used as the risk ceiling.

        σ_w = σ^T w

        Args:
            volatilities: Volatility for each asset
            weights: Portfolio weights

        Returns:
            Weighted portfolio volatility
        """
        return float(volatilities @ weights)

    @staticmethod
    def return_to_risk(expected_return: float, volatility: float) -> float:
        """Return per unit of weighted volatility (inf for riskless positive return)."""
        if volatility == 0:
            return np.inf if expected_return > 0 else 0.0
        return expected_return / volatility

    @staticmethod
    def compute_all_metrics(weights: np.ndarray, assets: Sequence[Asset]) -> Dict[str, float]:
        """Compute all metrics for a weight vector over assets.

        Args:
            weights: Portfolio weights in asset order
            assets: Assets the weights refer to

        Returns:
            Dictionary with all computed metrics
        """
        returns = np.array([a.expected_return for a in assets], dtype=float)
        volatilities = np.array([a.volatility for a in assets], dtype=float)
        portfolio_return = PortfolioMetrics.expected_return(returns, weights)
        portfolio_vol = PortfolioMetrics.weighted_volatility(volatilities, weights)

        return {
            'expected_return': portfolio_return,
            'weighted_volatility': portfolio_vol,
            'return_to_risk': PortfolioMetrics.return_to_risk(portfolio_return, portfolio_vol),
            'total_weight': float(np.sum(weights))
        }

    @staticmethod
    def compare_solutions(weights1: np.ndarray,
                          weights2: np.ndarray,
                          assets: Sequence[Asset],
                          labels: tuple = ('Solution 1', 'Solution 2')) -> Dict[str, Dict[str, float]]:
        """Compare metrics between two portfolio solutions.

        Args:
            weights1: First portfolio weights
            weights2: Second portfolio weights
            assets: Assets the weights refer to
            labels: Names for the two solutions

        Returns:
            Dictionary with metrics for both solutions and differences
        """
        metrics1 = PortfolioMetrics.compute_all_metrics(weights1, assets)
        metrics2 = PortfolioMetrics.compute_all_metrics(weights2, assets)

        differences = {
            key: metrics2[key] - metrics1[key]
            for key in metrics1.keys()
        }

        differences['weight_l1_distance'] = float(np.sum(np.abs(weights2 - weights1)))
        differences['weight_max_diff'] = float(np.max(np.abs(weights2 - weights1)))

        return {
            labels[0]: metrics1,
            labels[1]: metrics2,
            'differences': differences
        }
