"""Tests for the two-phase bounded-variable simplex.

Validates:
1. Concrete portfolio scenarios (optimal, infeasible, zero-volatility corner)
2. Unbounded detection, with and without rows
3. Iteration limit safety valve
4. Degeneracy handling (Beale's cycling example, tied ratio tests)
5. General LP features: '>=' rows, minimize, variable bounds, free variables,
   redundant equality rows
6. Malformed input raises InvalidInputError
"""

import math

import numpy as np
import pytest

from config.portfolio_config import PortfolioConstraints
from config.solver_config import SolverConfig
from data.loader import Asset
from finance.errors import InvalidInputError
from finance.linear_program import Constraint, LinearProgram, Relation, Sense, Variable
from finance.model_builder import build
from solver.result import SolveResult, SolveStatus
from solver.simplex import SimplexSolver, solve


def asset(name, expected_return, volatility, id=0):
    return Asset(id=id, name=name, price=1.0, expected_return=expected_return, volatility=volatility)


A = asset('A', 0.10, 0.10, id=1)
B = asset('B', 0.20, 0.30, id=2)


def klee_minty(n):
    """Chvátal's Klee-Minty cube: Dantzig's rule visits all 2^n vertices."""
    variables = tuple(Variable(f'x{j}') for j in range(n))
    objective = [10.0 ** (n - 1 - j) for j in range(n)]
    rows = []
    for i in range(n):
        coefficients = [2 * 10.0 ** (i - j) if j < i else 0.0 for j in range(n)]
        coefficients[i] = 1.0
        rows.append(Constraint(f'c{i}', coefficients, Relation.LE, 100.0 ** i))
    return LinearProgram(variables, objective, tuple(rows))


def test_two_asset_optimal():
    result = solve(build([A, B], PortfolioConstraints(target_volatility=0.20)))

    assert result.status is SolveStatus.OPTIMAL
    assert result.is_optimal
    assert result.values['w_A'] == pytest.approx(0.5, abs=1e-9)
    assert result.values['w_B'] == pytest.approx(0.5, abs=1e-9)
    assert result.objective_value == pytest.approx(0.15, abs=1e-12)
    assert result.iterations > 0


def test_two_asset_infeasible():
    result = solve(build([A, B], PortfolioConstraints(target_volatility=0.05)))

    assert result.status is SolveStatus.INFEASIBLE
    assert not result.is_optimal
    assert dict(result.values) == {}
    assert math.isnan(result.objective_value)


def test_zero_volatility_asset_is_bounded_corner():
    riskless = asset('CASH', 0.03, 0.0)
    result = solve(build([riskless], PortfolioConstraints(target_volatility=0.0)))

    assert result.status is SolveStatus.OPTIMAL
    assert result.values['w_CASH'] == pytest.approx(1.0)
    assert result.objective_value == pytest.approx(0.03)


def test_zero_volatility_asset_wins_when_best():
    riskless = asset('CASH', 0.30, 0.0)
    result = solve(build([A, B, riskless], PortfolioConstraints(target_volatility=0.05)))

    assert result.status is SolveStatus.OPTIMAL
    assert result.values['w_CASH'] == pytest.approx(1.0)
    assert result.values['w_A'] == pytest.approx(0.0)
    assert result.values['w_B'] == pytest.approx(0.0)


def test_loose_risk_ceiling_picks_best_return():
    result = solve(build([A, B], PortfolioConstraints(target_volatility=1.0)))

    assert result.status is SolveStatus.OPTIMAL
    assert result.values['w_B'] == pytest.approx(1.0)
    assert result.objective_value == pytest.approx(0.20)


def test_unbounded_without_rows():
    lp = LinearProgram(variables=(Variable('x'),), objective=[1.0])
    assert solve(lp).status is SolveStatus.UNBOUNDED


def test_unbounded_with_rows():
    lp = LinearProgram(
        variables=(Variable('x'), Variable('y')),
        objective=[1.0, 0.0],
        constraints=(Constraint('c', [1.0, -1.0], Relation.LE, 1.0),)
    )
    result = solve(lp)
    assert result.status is SolveStatus.UNBOUNDED
    assert dict(result.values) == {}


def test_klee_minty_solves_with_default_limit():
    result = solve(klee_minty(4))

    assert result.status is SolveStatus.OPTIMAL
    assert result.objective_value == pytest.approx(100.0 ** 3)
    assert result.values['x3'] == pytest.approx(100.0 ** 3)


def test_iteration_limit_exceeded():
    result = solve(klee_minty(4), SolverConfig(iteration_factor=1))

    assert result.status is SolveStatus.ITERATION_LIMIT_EXCEEDED
    assert result.iterations == 8
    assert dict(result.values) == {}


def test_beale_cycling_example_terminates():
    lp = LinearProgram(
        variables=tuple(Variable(name) for name in ('x4', 'x5', 'x6', 'x7')),
        objective=[-0.75, 20.0, -0.5, 6.0],
        constraints=(
            Constraint('r1', [0.25, -8.0, -1.0, 9.0], Relation.LE, 0.0),
            Constraint('r2', [0.5, -12.0, -0.5, 3.0], Relation.LE, 0.0),
            Constraint('r3', [0.0, 0.0, 1.0, 0.0], Relation.LE, 1.0),
        ),
        sense=Sense.MINIMIZE
    )
    for rule in ('dantzig', 'bland'):
        result = solve(lp, SolverConfig(pivot_rule=rule))
        assert result.status is SolveStatus.OPTIMAL
        assert result.objective_value == pytest.approx(-1.25)
        assert result.values['x6'] == pytest.approx(1.0)


def test_many_identical_assets_degenerate():
    assets = [asset(f'S{i}', 0.10, 0.20) for i in range(8)]
    result = solve(build(assets, PortfolioConstraints(target_volatility=0.20)))

    assert result.status is SolveStatus.OPTIMAL
    assert result.objective_value == pytest.approx(0.10)
    assert sum(result.values.values()) == pytest.approx(1.0)


def test_greater_equal_row_and_minimize():
    lp = LinearProgram(
        variables=(Variable('x'), Variable('y')),
        objective=[2.0, 3.0],
        constraints=(Constraint('demand', [1.0, 1.0], Relation.GE, 2.0),),
        sense=Sense.MINIMIZE
    )
    result = solve(lp)

    assert result.status is SolveStatus.OPTIMAL
    assert result.values == {'x': pytest.approx(2.0), 'y': pytest.approx(0.0)}
    assert result.objective_value == pytest.approx(4.0)


def test_negative_rhs_row_is_normalized():
    lp = LinearProgram(
        variables=(Variable('x'),),
        objective=[-1.0],
        constraints=(Constraint('floor', [-1.0], Relation.LE, -3.0),)
    )
    result = solve(lp)

    assert result.status is SolveStatus.OPTIMAL
    assert result.values['x'] == pytest.approx(3.0)


def test_upper_bounds_use_bound_flips():
    lp = LinearProgram(
        variables=(Variable('x', 0.0, 2.0), Variable('y', 0.0, 3.0)),
        objective=[1.0, 1.0]
    )
    result = solve(lp)

    assert result.status is SolveStatus.OPTIMAL
    assert result.values == {'x': 2.0, 'y': 3.0}
    assert result.iterations == 2


def test_upper_bound_with_row():
    lp = LinearProgram(
        variables=(Variable('x', 0.0, 2.0), Variable('y', 0.0, 3.0)),
        objective=[2.0, 1.0],
        constraints=(Constraint('cap', [1.0, 1.0], Relation.LE, 4.0),)
    )
    result = solve(lp)

    assert result.status is SolveStatus.OPTIMAL
    assert result.values['x'] == pytest.approx(2.0)
    assert result.values['y'] == pytest.approx(2.0)
    assert result.objective_value == pytest.approx(6.0)


def test_shifted_lower_bound():
    lp = LinearProgram(
        variables=(Variable('x', 1.5),),
        objective=[1.0],
        constraints=(Constraint('cap', [1.0], Relation.LE, 10.0),),
        sense=Sense.MINIMIZE
    )
    result = solve(lp)
    assert result.values['x'] == pytest.approx(1.5)


def test_upper_bounded_only_variable():
    lp = LinearProgram(
        variables=(Variable('x', -math.inf, 5.0),),
        objective=[1.0],
        constraints=(Constraint('cap', [1.0], Relation.LE, 10.0),)
    )
    result = solve(lp)

    assert result.status is SolveStatus.OPTIMAL
    assert result.values['x'] == pytest.approx(5.0)


def test_free_variable():
    lp = LinearProgram(
        variables=(Variable('x', -math.inf, math.inf),),
        objective=[1.0],
        constraints=(Constraint('floor', [1.0], Relation.GE, -3.0),),
        sense=Sense.MINIMIZE
    )
    result = solve(lp)

    assert result.status is SolveStatus.OPTIMAL
    assert result.values['x'] == pytest.approx(-3.0)
    assert result.objective_value == pytest.approx(-3.0)


def test_redundant_equality_rows():
    lp = LinearProgram(
        variables=(Variable('x'), Variable('y')),
        objective=[1.0, 0.0],
        constraints=(
            Constraint('sum1', [1.0, 1.0], Relation.EQ, 1.0),
            Constraint('sum2', [1.0, 1.0], Relation.EQ, 1.0),
        )
    )
    result = solve(lp)

    assert result.status is SolveStatus.OPTIMAL
    assert result.values['x'] == pytest.approx(1.0)
    assert result.values['y'] == pytest.approx(0.0)


def test_contradictory_rows_are_infeasible():
    lp = LinearProgram(
        variables=(Variable('x'),),
        objective=[1.0],
        constraints=(
            Constraint('low', [1.0], Relation.LE, 1.0),
            Constraint('high', [1.0], Relation.GE, 2.0),
        )
    )
    assert solve(lp).status is SolveStatus.INFEASIBLE


def test_fixed_variable():
    lp = LinearProgram(
        variables=(Variable('x', 0.25, 0.25), Variable('y')),
        objective=[1.0, 1.0],
        constraints=(Constraint('budget', [1.0, 1.0], Relation.EQ, 1.0),)
    )
    result = solve(lp)

    assert result.status is SolveStatus.OPTIMAL
    assert result.values['x'] == pytest.approx(0.25)
    assert result.values['y'] == pytest.approx(0.75)


def test_solver_rejects_malformed_program():
    lp = LinearProgram(
        variables=(Variable('x'), Variable('y')),
        objective=[1.0, math.nan],
        constraints=(Constraint('c', [1.0, 1.0], Relation.LE, 1.0),)
    )
    with pytest.raises(InvalidInputError):
        solve(lp)

    mismatched = LinearProgram(
        variables=(Variable('x'), Variable('y')),
        objective=[1.0, 1.0],
        constraints=(Constraint('c', [1.0], Relation.LE, 1.0),)
    )
    with pytest.raises(InvalidInputError):
        SimplexSolver(mismatched).solve()


def test_result_is_immutable():
    result = solve(build([A, B], PortfolioConstraints(target_volatility=0.20)))
    with pytest.raises(TypeError):
        result.values['w_A'] = 1.0
    with pytest.raises(AttributeError):
        result.status = SolveStatus.INFEASIBLE


def test_failed_result_factory():
    result = SolveResult.failed(SolveStatus.UNBOUNDED, iterations=3)
    assert result.status is SolveStatus.UNBOUNDED
    assert result.iterations == 3
    assert math.isnan(result.objective_value)


def test_solver_is_idempotent():
    lp = build([A, B, asset('C', 0.15, 0.2)], PortfolioConstraints(target_volatility=0.18))
    first = solve(lp)
    second = solve(lp)

    assert first.status is second.status
    assert dict(first.values) == dict(second.values)
    assert np.array_equal(
        np.array(list(first.values.values())),
        np.array(list(second.values.values()))
    )
