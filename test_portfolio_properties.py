"""Property tests for the portfolio optimizer.

Validates:
1. Feasibility of every optimal allocation
2. Optimal return >= equal-weight return when equal weight is feasible
3. Monotonicity of the optimum in the risk ceiling
4. Infeasibility below the lowest asset volatility
5. Display fallback to previous weights on non-optimal status
6. Metrics of optimized vs equal-weight allocations
"""

import numpy as np
import pytest

from config.portfolio_config import PortfolioConstraints
from data.loader import Asset, PortfolioDataLoader
from data.validator import DataValidator
from finance.model_builder import build
from finance.portfolio_optimizer import PortfolioOptimizer
from solver.result import SolveStatus
from solver.simplex import solve
from utils.metrics import PortfolioMetrics


def random_universe(seed, num_assets):
    rng = np.random.default_rng(seed)
    returns = rng.uniform(0.02, 0.25, size=num_assets)
    volatilities = rng.uniform(0.05, 0.40, size=num_assets)
    return [
        Asset(id=i, name=f'S{i}', price=100.0, expected_return=float(r), volatility=float(v))
        for i, (r, v) in enumerate(zip(returns, volatilities))
    ]


def arrays(assets):
    returns = np.array([a.expected_return for a in assets])
    volatilities = np.array([a.volatility for a in assets])
    return returns, volatilities


@pytest.mark.parametrize('seed', range(10))
def test_optimal_weights_are_feasible(seed):
    assets = random_universe(seed, num_assets=3 + seed % 5)
    returns, volatilities = arrays(assets)
    targets = np.linspace(volatilities.min(), volatilities.max(), 7)

    for target in targets:
        lp = build(assets, PortfolioConstraints(target_volatility=float(target)))
        result = solve(lp)
        assert result.status is SolveStatus.OPTIMAL

        weights = lp.vector_from_values(result.values)
        DataValidator.validate_weights(weights, volatilities, float(target), tolerance=1e-9)
        assert result.objective_value == pytest.approx(float(returns @ weights), abs=1e-12)


@pytest.mark.parametrize('seed', range(10))
def test_optimum_beats_feasible_equal_weight(seed):
    assets = random_universe(seed, num_assets=5)
    returns, volatilities = arrays(assets)
    equal = np.full(len(assets), 1.0 / len(assets))
    target = float(volatilities @ equal) + 0.01

    result = solve(build(assets, PortfolioConstraints(target_volatility=target)))

    assert result.status is SolveStatus.OPTIMAL
    assert result.objective_value >= float(returns @ equal) - 1e-12


@pytest.mark.parametrize('seed', range(5))
def test_objective_is_monotone_in_risk_ceiling(seed):
    assets = random_universe(seed, num_assets=6)
    _, volatilities = arrays(assets)
    targets = np.linspace(volatilities.min(), volatilities.max() + 0.05, 25)

    objectives = []
    for target in targets:
        result = solve(build(assets, PortfolioConstraints(target_volatility=float(target))))
        assert result.status is SolveStatus.OPTIMAL
        objectives.append(result.objective_value)

    assert all(later >= earlier - 1e-12 for earlier, later in zip(objectives, objectives[1:]))


@pytest.mark.parametrize('seed', range(5))
def test_infeasible_below_lowest_volatility(seed):
    assets = random_universe(seed, num_assets=4)
    _, volatilities = arrays(assets)
    lowest = float(volatilities.min())

    below = solve(build(assets, PortfolioConstraints(target_volatility=lowest * 0.99)))
    assert below.status is SolveStatus.INFEASIBLE

    at = solve(build(assets, PortfolioConstraints(target_volatility=lowest)))
    assert at.status is SolveStatus.OPTIMAL


def test_zero_ceiling_is_infeasible_without_riskless_asset():
    assets = PortfolioDataLoader.get_4asset_example()
    result = solve(build(assets, PortfolioConstraints(target_volatility=0.0)))
    assert result.status is SolveStatus.INFEASIBLE


@pytest.mark.parametrize('target, expected', [
    (0.18, {'MSFT': 1.0}),
    (0.20, {'AAPL': 1.0}),
    (0.25, {'AAPL': 0.375, 'AMZN': 0.625}),
    (0.28, {'AMZN': 1.0}),
])
def test_example_universe_allocations(target, expected):
    optimizer = PortfolioOptimizer(PortfolioDataLoader.get_4asset_example())
    outcome = optimizer.optimize(target)

    assert outcome.accepted
    assert outcome.notice is None
    for name, weight in outcome.weights.items():
        assert weight == pytest.approx(expected.get(name, 0.0), abs=1e-9)


def test_optimizer_keeps_previous_weights_when_infeasible():
    optimizer = PortfolioOptimizer(PortfolioDataLoader.get_4asset_example())
    accepted = optimizer.optimize(0.25)
    assert accepted.status is SolveStatus.OPTIMAL

    rejected = optimizer.optimize(0.10, previous_weights=accepted.weights)

    assert rejected.status is SolveStatus.INFEASIBLE
    assert not rejected.accepted
    assert rejected.weights == accepted.weights
    assert rejected.notice == "no feasible allocation at this risk level"
    assert dict(rejected.result.values) == {}


def test_optimizer_defaults_to_equal_weights():
    optimizer = PortfolioOptimizer(PortfolioDataLoader.get_4asset_example())
    outcome = optimizer.optimize(0.05)

    assert not outcome.accepted
    assert outcome.weights == {'AAPL': 0.25, 'GOOGL': 0.25, 'MSFT': 0.25, 'AMZN': 0.25}


def test_target_volatility_range():
    optimizer = PortfolioOptimizer(PortfolioDataLoader.get_4asset_example())
    assert optimizer.target_volatility_range() == (0.0, 0.28)


def test_risk_frontier_carries_last_accepted_weights():
    optimizer = PortfolioOptimizer(PortfolioDataLoader.get_4asset_example())
    outcomes = optimizer.solve_risk_frontier([0.28, 0.10, 0.20])

    assert [o.status for o in outcomes] == [
        SolveStatus.OPTIMAL, SolveStatus.INFEASIBLE, SolveStatus.OPTIMAL
    ]
    assert outcomes[1].weights == outcomes[0].weights
    assert outcomes[2].weights['AAPL'] == pytest.approx(1.0)


def test_metrics_optimized_vs_equal_weight():
    assets = PortfolioDataLoader.get_4asset_example()
    optimizer = PortfolioOptimizer(assets)
    equal = optimizer.weights_vector(optimizer.equal_weights())
    optimized = optimizer.weights_vector(optimizer.optimize(0.28).weights)

    comparison = PortfolioMetrics.compare_solutions(
        equal, optimized, assets, labels=('Equal-weight', 'Optimized')
    )

    assert comparison['Equal-weight']['expected_return'] == pytest.approx(0.1375)
    assert comparison['Equal-weight']['weighted_volatility'] == pytest.approx(0.2275)
    assert comparison['Optimized']['expected_return'] == pytest.approx(0.18)
    assert comparison['Optimized']['total_weight'] == pytest.approx(1.0)
    assert comparison['differences']['expected_return'] == pytest.approx(0.0425)
    assert comparison['differences']['weight_max_diff'] == pytest.approx(0.75)


def test_return_to_risk_for_riskless_portfolio():
    assert PortfolioMetrics.return_to_risk(0.03, 0.0) == np.inf
    assert PortfolioMetrics.return_to_risk(0.0, 0.0) == 0.0
    assert PortfolioMetrics.return_to_risk(0.12, 0.2) == pytest.approx(0.6)
