"""FastAPI endpoints for portfolio optimization API."""

import logging
import math
import traceback

from fastapi import APIRouter, HTTPException, status

from api.schemas import (
    OptimizationRequest,
    OptimizationResult,
    HealthResponse,
    ErrorResponse,
    PortfolioMetrics as PortfolioMetricsSchema
)
from benchmarks.classical_solver import ClassicalSolver
from config.portfolio_config import PortfolioConstraints
from data.loader import Asset, PortfolioDataLoader
from finance.errors import PortfolioModelError
from finance.model_builder import build
from finance.portfolio_optimizer import PortfolioOptimizer
from solver.simplex import solve
from utils.metrics import PortfolioMetrics

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

router = APIRouter()


@router.post(
    "/optimize",
    response_model=OptimizationResult,
    status_code=status.HTTP_200_OK,
    summary="Run portfolio optimization",
    description="Maximize expected return subject to the budget and a weighted-volatility ceiling",
    responses={
        200: {"description": "Optimization ran (check 'accepted' for infeasible risk levels)"},
        400: {"model": ErrorResponse, "description": "Invalid input data"},
        500: {"model": ErrorResponse, "description": "Internal server error"}
    }
)
async def optimize_portfolio(request: OptimizationRequest):
    """Run one re-optimization.

    Args:
        request: Assets, risk ceiling and the last accepted weights

    Returns:
        OptimizationResult with the weights to display and their metrics
    """
    try:
        assets = [
            Asset(
                id=item.id,
                name=item.name,
                price=item.price,
                expected_return=item.expected_return,
                volatility=item.volatility
            )
            for item in request.assets
        ]

        try:
            optimizer = PortfolioOptimizer(assets)
            outcome = optimizer.optimize(
                request.target_volatility,
                previous_weights=request.previous_weights
            )
        except PortfolioModelError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={
                    "error": type(e).__name__,
                    "message": str(e)
                }
            )

        weights = optimizer.weights_vector(outcome.weights)
        metrics = PortfolioMetrics.compute_all_metrics(weights, assets)

        objective = outcome.result.objective_value
        return OptimizationResult(
            status=outcome.status.value,
            accepted=outcome.accepted,
            notice=outcome.notice,
            weights=outcome.weights,
            objective_value=None if math.isnan(objective) else objective,
            metrics=PortfolioMetricsSchema(**metrics),
            iterations=outcome.result.iterations,
            target_volatility_range=list(optimizer.target_volatility_range())
        )

    except HTTPException:
        raise
    except Exception as e:
        error_details = traceback.format_exc()
        logger.error("Error in optimization: %s", error_details)

        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": type(e).__name__,
                "message": str(e),
                "details": {"traceback": error_details.split('\n')[-5:]}
            }
        )


@router.get(
    "/example",
    summary="Example asset universe",
    description="The four-stock universe used by the demo page"
)
async def example_assets():
    """Return the example assets and default risk ceiling."""
    assets = PortfolioDataLoader.get_4asset_example()
    return {
        "assets": [
            {
                "id": a.id,
                "name": a.name,
                "price": a.price,
                "expected_return": a.expected_return,
                "volatility": a.volatility
            }
            for a in assets
        ],
        "target_volatility": 0.2
    }


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Check that the model builder and both solvers are operational"
)
async def health_check():
    """Check system health.

    Returns:
        HealthResponse with system status
    """
    components = {}
    test_assets = [
        Asset(id=1, name='A', price=1.0, expected_return=0.10, volatility=0.10),
        Asset(id=2, name='B', price=1.0, expected_return=0.20, volatility=0.30),
    ]

    try:
        test_lp = build(test_assets, PortfolioConstraints(target_volatility=0.2))
        components['model_builder'] = 'ok'
    except Exception as e:
        return HealthResponse(
            status='unhealthy',
            version=API_VERSION,
            components={'model_builder': f'error: {str(e)}'}
        )

    try:
        result = solve(test_lp)
        components['simplex_solver'] = 'ok' if result.is_optimal else 'degraded'
    except Exception as e:
        components['simplex_solver'] = f'error: {str(e)}'

    try:
        reference = ClassicalSolver(test_lp).solve()
        components['reference_solver'] = 'ok' if reference.is_optimal else 'degraded'
    except Exception as e:
        components['reference_solver'] = f'error: {str(e)}'

    all_ok = all(state == 'ok' for state in components.values())
    return HealthResponse(
        status='healthy' if all_ok else 'degraded',
        version=API_VERSION,
        components=components
    )


@router.get(
    "/",
    summary="API Root",
    description="Get API information"
)
async def root():
    """API root endpoint."""
    return {
        "name": "Portfolio LP Optimization API",
        "version": API_VERSION,
        "description": "Return-maximizing allocation under a volatility ceiling (two-phase simplex)",
        "endpoints": {
            "POST /api/optimize": "Run portfolio optimization",
            "GET /api/example": "Example asset universe",
            "GET /api/health": "Health check",
            "GET /api/docs": "OpenAPI documentation",
            "GET /api/redoc": "ReDoc documentation"
        },
        "documentation": "/api/docs"
    }
