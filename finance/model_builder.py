"""Translates an asset universe and a risk ceiling into a LinearProgram.

Builds the model but does NOT solve it. The simplex solver (or the
benchmark solver) consumes the program.
"""

import logging
from typing import Sequence

import numpy as np

from config.portfolio_config import PortfolioConstraints
from data.loader import Asset
from data.validator import DataValidator
from finance.errors import DuplicateVariableError
from finance.linear_program import Constraint, LinearProgram, Relation, Sense, Variable

logger = logging.getLogger(__name__)

BUDGET_ROW = 'budget'
RISK_ROW = 'max_volatility'


def variable_name(asset: Asset) -> str:
    """Decision variable name for an asset."""
    return f"w_{asset.name}"


class PortfolioModelBuilder:
    """Builds the maximize-return LP for a fixed, validated asset universe."""

    def __init__(self, assets: Sequence[Asset]):
        """Validate assets and precompute the parts that do not depend on risk.

        Args:
            assets: Non-empty sequence of Asset

        Raises:
            InvalidInputError: If assets is empty or has non-finite/negative data
            DuplicateVariableError: If two assets map to the same variable name
        """
        DataValidator.validate_assets(assets)
        self.assets = tuple(assets)

        names = []
        seen = set()
        for asset in self.assets:
            name = variable_name(asset)
            if name in seen:
                raise DuplicateVariableError(name)
            seen.add(name)
            names.append(name)

        self.variables = tuple(Variable(name) for name in names)
        self.expected_returns = np.array([a.expected_return for a in self.assets], dtype=float)
        self.volatilities = np.array([a.volatility for a in self.assets], dtype=float)

    def build(self, constraints: PortfolioConstraints) -> LinearProgram:
        """Build the LP for one risk ceiling.

        Objective: maximize μ^T w
        Rows (fixed order):
            budget:          Σ w_i = 1
            max_volatility:  σ^T w <= target_volatility

        Args:
            constraints: PortfolioConstraints with the target volatility

        Returns:
            LinearProgram with one variable per asset, bounds [0, +inf)
        """
        budget = Constraint(
            name=BUDGET_ROW,
            coefficients=np.ones(len(self.assets)),
            relation=Relation.EQ,
            rhs=1.0
        )
        risk = Constraint(
            name=RISK_ROW,
            coefficients=self.volatilities,
            relation=Relation.LE,
            rhs=constraints.target_volatility
        )
        lp = LinearProgram(
            variables=self.variables,
            objective=self.expected_returns,
            constraints=(budget, risk),
            sense=Sense.MAXIMIZE,
            name='maximize_return'
        )
        logger.debug("Built LP with %d variables, target volatility %.4f",
                     lp.num_variables, constraints.target_volatility)
        return lp


def build(assets: Sequence[Asset], constraints: PortfolioConstraints) -> LinearProgram:
    """Build the portfolio LP for assets under constraints.

    Args:
        assets: Non-empty sequence of Asset
        constraints: PortfolioConstraints with the target volatility

    Returns:
        LinearProgram (budget row first, risk row second)
    """
    return PortfolioModelBuilder(assets).build(constraints)
