"""Conversion of a LinearProgram to bounded standard form.

Standard form used by the simplex tableau:
    maximize    c^T y
    subject to  A y = b,  b >= 0
                0 <= y <= u      (u may be +inf)

Original variables are rewritten so every column has a zero lower bound:
    - finite lower bound l:          x = l + y,   u_y = u - l
    - only a finite upper bound u:   x = u - y,   u_y = +inf
    - free:                          x = y+ - y-
Finite upper bounds stay on the column (handled by bound flipping),
never as extra rows.
"""

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from finance.linear_program import LinearProgram, Relation, Sense

SHIFT = 'shift'
MIRROR = 'mirror'
SPLIT = 'split'

_FLIPPED = {Relation.LE: Relation.GE, Relation.GE: Relation.LE, Relation.EQ: Relation.EQ}


@dataclass
class StandardForm:
    """Bounded standard form plus the bookkeeping to map a solution back.

    Attributes:
        A: Equality rows, shape (m, N)
        b: Non-negative right-hand side, shape (m,)
        c: Maximization costs per column (zero for slack/artificial columns)
        upper: Column upper bounds (lower bounds are all zero)
        basis: Initial basic column for each row (slack or artificial)
        artificial: Mask of artificial columns
        recover: Per original variable (kind, column, second column, offset)
        scale: Largest coefficient magnitude (at least 1)
    """
    A: np.ndarray
    b: np.ndarray
    c: np.ndarray
    upper: np.ndarray
    basis: List[int]
    artificial: np.ndarray
    recover: List[Tuple[str, int, int, float]]
    scale: float

    @property
    def num_rows(self) -> int:
        return self.A.shape[0]

    @property
    def num_columns(self) -> int:
        return self.A.shape[1]

    @property
    def rhs_scale(self) -> float:
        return max(1.0, float(np.max(self.b, initial=0.0)))

    def recover_values(self, y: np.ndarray) -> np.ndarray:
        """Map standard-form column values back to original variable values."""
        x = np.empty(len(self.recover))
        for j, (kind, col, other, offset) in enumerate(self.recover):
            if kind == SHIFT:
                x[j] = offset + y[col]
            elif kind == MIRROR:
                x[j] = offset - y[col]
            else:
                x[j] = y[col] - y[other]
        return x


def standardize(lp: LinearProgram) -> StandardForm:
    """Rewrite lp in bounded standard form with an initial slack/artificial basis.

    Rows with a negative rhs (or a '>=' row with zero rhs) are negated so
    that b >= 0 and as many rows as possible start from a slack.
    '<=' rows get a +1 slack, '>=' rows a -1 surplus; '=' and '>=' rows get
    an artificial column that seeds the basis.

    Args:
        lp: Validated linear program

    Returns:
        StandardForm ready for the two-phase simplex
    """
    c_orig, A_orig, relations, b = lp.as_arrays()
    if lp.sense is Sense.MINIMIZE:
        c_orig = -c_orig
    lower, upper = lp.bounds()
    m, n = A_orig.shape

    columns, costs, uppers, recover = [], [], [], []
    rhs = b.copy()
    for j in range(n):
        a = A_orig[:, j]
        if np.isfinite(lower[j]):
            rhs -= a * lower[j]
            recover.append((SHIFT, len(columns), -1, lower[j]))
            columns.append(a)
            costs.append(c_orig[j])
            uppers.append(upper[j] - lower[j])
        elif np.isfinite(upper[j]):
            rhs -= a * upper[j]
            recover.append((MIRROR, len(columns), -1, upper[j]))
            columns.append(-a)
            costs.append(-c_orig[j])
            uppers.append(np.inf)
        else:
            recover.append((SPLIT, len(columns), len(columns) + 1, 0.0))
            columns.extend([a, -a])
            costs.extend([c_orig[j], -c_orig[j]])
            uppers.extend([np.inf, np.inf])

    structural = np.column_stack(columns) if m else np.zeros((0, len(columns)))
    relations = list(relations)
    for i in range(m):
        if rhs[i] < 0 or (rhs[i] == 0 and relations[i] is Relation.GE):
            structural[i] = -structural[i]
            rhs[i] = -rhs[i]
            relations[i] = _FLIPPED[relations[i]]

    # (row, coefficient, is_artificial) for every auxiliary column
    auxiliary = []
    basis = []
    num_structural = structural.shape[1]
    for i, relation in enumerate(relations):
        if relation is Relation.LE:
            basis.append(num_structural + len(auxiliary))
            auxiliary.append((i, 1.0, False))
            continue
        if relation is Relation.GE:
            auxiliary.append((i, -1.0, False))
        basis.append(num_structural + len(auxiliary))
        auxiliary.append((i, 1.0, True))

    extra = np.zeros((m, len(auxiliary)))
    for k, (row, coefficient, _) in enumerate(auxiliary):
        extra[row, k] = coefficient

    A = np.hstack([structural, extra])
    c = np.concatenate([np.array(costs, dtype=float), np.zeros(len(auxiliary))])
    upper_all = np.concatenate([np.array(uppers, dtype=float), np.full(len(auxiliary), np.inf)])
    artificial = np.concatenate([
        np.zeros(num_structural, dtype=bool),
        np.array([flag for _, _, flag in auxiliary], dtype=bool)
    ])

    scale = max(
        1.0,
        float(np.max(np.abs(A), initial=0.0)),
        float(np.max(np.abs(rhs), initial=0.0)),
        float(np.max(np.abs(c), initial=0.0))
    )
    return StandardForm(
        A=A,
        b=rhs,
        c=c,
        upper=upper_all,
        basis=basis,
        artificial=artificial,
        recover=recover,
        scale=scale
    )
