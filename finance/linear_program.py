"""Linear program model definition.

This is the SINGLE SOURCE OF TRUTH for the normalized LP description.
Defines variables, objective and constraints. Does NOT solve the problem.

Mathematical Formulation:
    Objective: maximize (or minimize)  c^T x
    Subject to:
        - Rows: a_k^T x  {=, <=, >=}  b_k
        - Bounds: l_j <= x_j <= u_j

For the portfolio problem:
    c = expected returns
    budget:          Σ w_i = 1
    max_volatility:  Σ σ_i w_i <= target volatility
    bounds:          0 <= w_i < +inf
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence, Tuple

import numpy as np

from finance.errors import InvalidInputError


class Sense(str, Enum):
    """Optimization direction."""
    MAXIMIZE = 'maximize'
    MINIMIZE = 'minimize'


class Relation(str, Enum):
    """Constraint relation between a_k^T x and b_k."""
    EQ = '='
    LE = '<='
    GE = '>='


def _frozen_vector(values) -> np.ndarray:
    vector = np.array(values, dtype=float)
    vector.setflags(write=False)
    return vector


@dataclass(frozen=True)
class Variable:
    """A named decision variable with bounds [lower, upper].

    Attributes:
        name: Unique variable name
        lower: Lower bound (may be -inf)
        upper: Upper bound (may be +inf)
    """
    name: str
    lower: float = 0.0
    upper: float = math.inf


@dataclass(frozen=True)
class Constraint:
    """A single linear row a^T x (relation) rhs.

    Attributes:
        name: Row name (for diagnostics only)
        coefficients: One coefficient per variable
        relation: Relation between a^T x and rhs
        rhs: Right-hand side
    """
    name: str
    coefficients: np.ndarray
    relation: Relation
    rhs: float

    def __post_init__(self):
        object.__setattr__(self, 'coefficients', _frozen_vector(self.coefficients))
        try:
            object.__setattr__(self, 'relation', Relation(self.relation))
        except ValueError as e:
            raise InvalidInputError(
                f"constraint '{self.name}' has unknown relation {self.relation!r}"
            ) from e
        object.__setattr__(self, 'rhs', float(self.rhs))

    def residual(self, x: np.ndarray) -> float:
        """Return a^T x - rhs."""
        return float(self.coefficients @ x) - self.rhs

    def is_satisfied(self, x: np.ndarray, tolerance: float = 1e-9) -> bool:
        """Check the row against x within tolerance."""
        residual = self.residual(x)
        if self.relation is Relation.EQ:
            return abs(residual) <= tolerance
        if self.relation is Relation.LE:
            return residual <= tolerance
        return residual >= -tolerance


@dataclass(frozen=True)
class LinearProgram:
    """Complete linear program description.

    Shapes are checked by DataValidator.validate_linear_program, not here,
    so that malformed programs can still be constructed and rejected by
    the solver.
    """
    variables: Tuple[Variable, ...]
    objective: np.ndarray
    constraints: Tuple[Constraint, ...] = ()
    sense: Sense = Sense.MAXIMIZE
    name: str = field(default='lp', compare=False)

    def __post_init__(self):
        object.__setattr__(self, 'variables', tuple(self.variables))
        object.__setattr__(self, 'objective', _frozen_vector(self.objective))
        object.__setattr__(self, 'constraints', tuple(self.constraints))
        try:
            object.__setattr__(self, 'sense', Sense(self.sense))
        except ValueError as e:
            raise InvalidInputError(f"unknown optimization sense {self.sense!r}") from e

    @property
    def num_variables(self) -> int:
        return len(self.variables)

    @property
    def num_constraints(self) -> int:
        return len(self.constraints)

    @property
    def variable_names(self) -> Tuple[str, ...]:
        return tuple(var.name for var in self.variables)

    def as_arrays(self) -> Tuple[np.ndarray, np.ndarray, Tuple[Relation, ...], np.ndarray]:
        """Dense view of the program.

        Returns:
            Tuple of (c, A, relations, b) with A of shape (constraints, variables)
        """
        n = self.num_variables
        if self.constraints:
            A = np.vstack([row.coefficients for row in self.constraints]).astype(float)
        else:
            A = np.zeros((0, n))
        b = np.array([row.rhs for row in self.constraints], dtype=float)
        relations = tuple(row.relation for row in self.constraints)
        return np.array(self.objective, dtype=float), A, relations, b

    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return (lower, upper) bound vectors."""
        lower = np.array([var.lower for var in self.variables], dtype=float)
        upper = np.array([var.upper for var in self.variables], dtype=float)
        return lower, upper

    def vector_from_values(self, values) -> np.ndarray:
        """Order a name -> value mapping into a vector (missing names are 0)."""
        return np.array([values.get(name, 0.0) for name in self.variable_names], dtype=float)

    def evaluate(self, x: Sequence[float]) -> float:
        """Objective value c^T x."""
        return float(self.objective @ np.asarray(x, dtype=float))

    def is_feasible(self, x: Sequence[float], tolerance: float = 1e-9) -> bool:
        """Check every row and bound against x.

        Args:
            x: Variable values in variable order
            tolerance: Numerical tolerance

        Returns:
            True if all constraints and bounds are satisfied
        """
        x = np.asarray(x, dtype=float)
        lower, upper = self.bounds()
        if np.any(x < lower - tolerance) or np.any(x > upper + tolerance):
            return False
        return all(row.is_satisfied(x, tolerance) for row in self.constraints)
