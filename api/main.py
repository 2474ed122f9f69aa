"""FastAPI application for portfolio LP optimization."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.endpoints import router, API_VERSION

# Create FastAPI app
app = FastAPI(
    title="Portfolio LP Optimization API",
    description="""
    Re-optimizes portfolio weights whenever the risk ceiling changes.

    ## Model

    * **Objective**: maximize Σ w_i μ_i (expected return)
    * **Budget**: Σ w_i = 1
    * **Risk ceiling**: Σ w_i σ_i ≤ target volatility
    * **No short-selling**: w_i ≥ 0

    ## Workflow

    1. **Input**: Assets (return, volatility) and a target volatility
    2. **Model Builder**: Normalized linear program (objective, rows, bounds)
    3. **Simplex Solver**: Two-phase bounded-variable simplex
    4. **Output**: Weights, or the previous weights plus a notice when the
       risk level admits no allocation

    ## Example Usage

    ```python
    import requests

    data = {
        "assets": [
            {"id": 1, "name": "A", "price": 10.0, "expected_return": 0.10, "volatility": 0.10},
            {"id": 2, "name": "B", "price": 20.0, "expected_return": 0.20, "volatility": 0.30}
        ],
        "target_volatility": 0.2
    }

    response = requests.post("http://localhost:8001/api/optimize", json=data)
    result = response.json()
    print(f"Weights: {result['weights']}")
    ```
    """,
    version=API_VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(router, prefix="/api", tags=["optimization"])


@app.on_event("startup")
async def startup_event():
    """Initialize on startup."""
    print("Starting Portfolio LP Optimization API...")
    print("Solver: two-phase bounded-variable simplex")
    print("Documentation: http://localhost:8001/api/docs")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    print("Shutting down API...")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001, log_level="info")
