"""Pydantic schemas for API request/response validation."""

from typing import Dict, List, Optional, Any

from pydantic import BaseModel, ConfigDict, Field


class AssetSchema(BaseModel):
    """A single asset as supplied by the client."""
    id: int = Field(description="Asset identifier", examples=[1])
    name: str = Field(min_length=1, description="Ticker or display name", examples=["AAPL"])
    price: float = Field(default=0.0, description="Last price (display only)", examples=[150.25])
    expected_return: float = Field(description="Expected return coefficient", examples=[0.12])
    volatility: float = Field(ge=0.0, description="Volatility coefficient", examples=[0.2])


class OptimizationRequest(BaseModel):
    """Request schema for portfolio optimization."""

    assets: List[AssetSchema] = Field(
        ...,
        min_length=1,
        description="Asset universe to allocate over"
    )

    target_volatility: float = Field(
        ...,
        ge=0.0,
        description="Ceiling on weighted volatility Σ w_i σ_i",
        examples=[0.2]
    )

    previous_weights: Optional[Dict[str, float]] = Field(
        default=None,
        description="Last accepted weights by asset name, shown again if no allocation is feasible"
    )

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "assets": [
                {"id": 1, "name": "AAPL", "price": 150.25, "expected_return": 0.12, "volatility": 0.2},
                {"id": 2, "name": "GOOGL", "price": 2750.80, "expected_return": 0.15, "volatility": 0.25},
                {"id": 3, "name": "MSFT", "price": 305.50, "expected_return": 0.10, "volatility": 0.18},
                {"id": 4, "name": "AMZN", "price": 3380.20, "expected_return": 0.18, "volatility": 0.28}
            ],
            "target_volatility": 0.2
        }
    })


class PortfolioMetrics(BaseModel):
    """Portfolio metrics for the displayed weights."""
    expected_return: float = Field(description="Expected portfolio return")
    weighted_volatility: float = Field(description="Weighted volatility Σ w_i σ_i")
    return_to_risk: float = Field(description="Expected return per unit of weighted volatility")
    total_weight: float = Field(description="Sum of weights")


class OptimizationResult(BaseModel):
    """Response schema for optimization results."""

    status: str = Field(description="Solver status")
    accepted: bool = Field(description="Whether weights come from this solve")
    notice: Optional[str] = Field(default=None, description="Non-blocking message when not accepted")
    weights: Dict[str, float] = Field(description="Weights to display, by asset name")
    objective_value: Optional[float] = Field(
        default=None,
        description="Optimal expected return (null unless status is optimal)"
    )
    metrics: PortfolioMetrics = Field(description="Metrics of the displayed weights")
    iterations: int = Field(description="Simplex pivots and bound flips")
    target_volatility_range: List[float] = Field(description="[min, max] useful risk ceiling")

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "status": "optimal",
            "accepted": True,
            "notice": None,
            "weights": {"AAPL": 1.0, "GOOGL": 0.0, "MSFT": 0.0, "AMZN": 0.0},
            "objective_value": 0.12,
            "metrics": {
                "expected_return": 0.12,
                "weighted_volatility": 0.2,
                "return_to_risk": 0.6,
                "total_weight": 1.0
            },
            "iterations": 3,
            "target_volatility_range": [0.0, 0.28]
        }
    })


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(description="Service status")
    version: str = Field(description="API version")
    components: Dict[str, str] = Field(description="Status of each component")


class ErrorResponse(BaseModel):
    """Error response schema."""
    error: str = Field(description="Error type")
    message: str = Field(description="Error message")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Additional error details")
