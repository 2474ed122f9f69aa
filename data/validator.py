"""Portfolio data validation utilities.

Enforces data integrity: checks dimensions, rejects non-finite values and
duplicate names. Fails fast with clear error messages.
"""

import math
from typing import Sequence

import numpy as np

from data.loader import Asset
from finance.errors import DuplicateVariableError, InvalidInputError
from finance.linear_program import LinearProgram


class DataValidator:
    """Validates portfolio data and linear programs before optimization."""

    @staticmethod
    def validate_assets(assets: Sequence[Asset]) -> None:
        """Validate the asset universe.

        Args:
            assets: Assets to optimize over

        Raises:
            InvalidInputError: If assets is empty or any return/volatility is
                non-finite or any volatility is negative
        """
        if len(assets) == 0:
            raise InvalidInputError("assets must be non-empty")

        for asset in assets:
            if not math.isfinite(asset.expected_return):
                raise InvalidInputError(f"asset '{asset.name}' has non-finite expected_return")
            if not math.isfinite(asset.volatility):
                raise InvalidInputError(f"asset '{asset.name}' has non-finite volatility")
            if asset.volatility < 0:
                raise InvalidInputError(
                    f"asset '{asset.name}' has negative volatility {asset.volatility}"
                )

    @staticmethod
    def validate_linear_program(lp: LinearProgram) -> None:
        """Validate the structure of a linear program.

        Args:
            lp: Program to check

        Raises:
            DuplicateVariableError: If two variables share a name
            InvalidInputError: If vector lengths disagree, coefficients are
                NaN/inf, or bounds are malformed
        """
        n = lp.num_variables
        if n == 0:
            raise InvalidInputError("linear program has no variables")

        seen = set()
        for var in lp.variables:
            if var.name in seen:
                raise DuplicateVariableError(var.name)
            seen.add(var.name)
            if math.isnan(var.lower) or math.isnan(var.upper):
                raise InvalidInputError(f"variable '{var.name}' has NaN bound")
            if var.lower > var.upper:
                raise InvalidInputError(
                    f"variable '{var.name}' has lower bound {var.lower} > upper bound {var.upper}"
                )
            if var.lower == math.inf or var.upper == -math.inf:
                raise InvalidInputError(f"variable '{var.name}' has an empty bound interval")

        if lp.objective.ndim != 1:
            raise InvalidInputError(f"objective must be 1D, got shape {lp.objective.shape}")
        if len(lp.objective) != n:
            raise InvalidInputError(f"objective length {len(lp.objective)} != variables {n}")
        if not np.all(np.isfinite(lp.objective)):
            raise InvalidInputError("objective contains NaN or infinite values")

        for row in lp.constraints:
            if row.coefficients.ndim != 1:
                raise InvalidInputError(
                    f"constraint '{row.name}' coefficients must be 1D, "
                    f"got shape {row.coefficients.shape}"
                )
            if len(row.coefficients) != n:
                raise InvalidInputError(
                    f"constraint '{row.name}' length {len(row.coefficients)} != variables {n}"
                )
            if not np.all(np.isfinite(row.coefficients)):
                raise InvalidInputError(f"constraint '{row.name}' contains NaN or infinite values")
            if not math.isfinite(row.rhs):
                raise InvalidInputError(f"constraint '{row.name}' has non-finite rhs")

    @staticmethod
    def validate_weights(weights: np.ndarray,
                         volatilities: np.ndarray,
                         target_volatility: float,
                         budget: float = 1.0,
                         tolerance: float = 1e-6) -> None:
        """Validate portfolio weights against the portfolio LP constraints.

        Args:
            weights: Portfolio weights
            volatilities: Asset volatilities
            target_volatility: Risk ceiling
            budget: Expected budget constraint sum
            tolerance: Numerical tolerance for constraint checks

        Raises:
            ValueError: If weights validation fails
        """
        if weights.ndim != 1:
            raise ValueError(f"weights must be 1D, got shape {weights.shape}")

        if len(weights) != len(volatilities):
            raise ValueError(f"weights length {len(weights)} != assets {len(volatilities)}")

        if not np.all(np.isfinite(weights)):
            raise ValueError("weights contains NaN or infinite values")

        weight_sum = np.sum(weights)
        if abs(weight_sum - budget) > tolerance:
            raise ValueError(
                f"weights sum {weight_sum:.6f} != budget {budget:.6f} "
                f"(tolerance {tolerance})"
            )

        if np.any(weights < -tolerance):
            raise ValueError("Some weights are negative (short positions)")

        weighted_volatility = float(volatilities @ weights)
        if weighted_volatility > target_volatility + tolerance:
            raise ValueError(
                f"weighted volatility {weighted_volatility:.6f} exceeds "
                f"target {target_volatility:.6f}"
            )
