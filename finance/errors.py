"""Structural errors raised while building or validating a linear program.

Solver outcomes (infeasible, unbounded, iteration limit) are NOT errors;
they are reported through SolveResult.status.
"""


class PortfolioModelError(ValueError):
    """Base class for malformed-model errors (programmer errors)."""


class InvalidInputError(PortfolioModelError):
    """Raised when assets, constraints or a linear program are malformed."""


class DuplicateVariableError(InvalidInputError):
    """Raised when two decision variables end up with the same name."""

    def __init__(self, name: str):
        super().__init__(f"duplicate variable name '{name}'")
        self.name = name
