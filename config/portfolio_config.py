"""Portfolio optimization configuration.

Defines the risk ceiling for a single re-optimization call.
Serves as the single source of truth for problem parameters.
"""

import math
from dataclasses import dataclass

from finance.errors import InvalidInputError


@dataclass(frozen=True)
class PortfolioConstraints:
    """Constraints for one portfolio optimization call.
    
    Attributes:
        target_volatility: Ceiling on the weighted volatility Σ w_i σ_i
    """
    target_volatility: float
    
    def __post_init__(self):
        """Validate constraint parameters."""
        if not math.isfinite(self.target_volatility):
            raise InvalidInputError("target_volatility must be finite")
        if self.target_volatility < 0:
            raise InvalidInputError("target_volatility must be non-negative")


def get_toy_problem_config() -> PortfolioConstraints:
    """Returns the default risk ceiling used by the example universe.
    
    Returns:
        PortfolioConstraints with a 20% volatility ceiling
    """
    return PortfolioConstraints(target_volatility=0.2)
