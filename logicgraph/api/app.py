"""
FastAPI Application - REST API for normalization and region extraction.

Endpoints:
    GET    /api/v1/health      Health check
    POST   /api/v1/normalize   Normalize one logic expression to DNF clauses
    POST   /api/v1/extract     Build a region graph from a world definition

All requests and responses are JSON with explicit Pydantic schemas.
Pipeline errors are returned as ErrorResponse with status 400.
"""

import os

from .. import __version__

ALLOWED_ORIGINS = os.getenv("LOGICGRAPH_ALLOWED_ORIGINS", "*").split(",")


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional ExtractionService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError("FastAPI not installed. Install with: pip install fastapi uvicorn")

    from .service import ExtractionService
    from .schemas import (
        ErrorResponse,
        ExtractRequest,
        ExtractResponse,
        HealthResponse,
        NormalizeRequest,
        NormalizeResponse,
    )

    app = FastAPI(
        title="LogicGraph API",
        description="""
Region graph extraction from declarative game logic.

## Error Codes

| Code | Description |
|------|-------------|
| `INVALID_LOGIC` | Logic text could not be parsed |
| `UNKNOWN_SYMBOL` | Logic names an unknown term or macro |
| `CYCLIC_MACRO` | Macros reference each other in a cycle |
| `DUPLICATE_DEFINITION` | A term or logic object is defined twice |
| `UNDEFINED_LOGIC_OBJECT` | A location is anchored on a missing region |
| `REBASE_FAILED` | No region matches the start term |
| `INVALID_WORLD` | The world definition failed validation |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or ExtractionService()

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error: ErrorResponse,
        status_code: int = 400,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(status_code=status_code, content=error.model_dump(mode="json"))

    def is_error(response) -> bool:
        return isinstance(response, ErrorResponse)

    # =========================================================================
    # Pipeline Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/normalize",
        response_model=NormalizeResponse,
        responses={400: {"model": ErrorResponse}},
        tags=["Logic"],
        summary="Normalize logic text into DNF clauses",
    )
    async def normalize_logic(request: NormalizeRequest):
        """
        Normalize one logic expression.

        Terms and macros are supplied with the request. Unsatisfiable
        logic returns the single sentinel FALSE clause.
        """
        response = api_service.normalize(request)
        if is_error(response):
            return make_error_response(response)
        return response

    @app.post(
        "/api/v1/extract",
        response_model=ExtractResponse,
        responses={400: {"model": ErrorResponse}},
        tags=["Regions"],
        summary="Build a region graph from normalized logic objects",
    )
    async def extract_regions(request: ExtractRequest):
        """
        Build the region graph.

        Optionally rebases the region of `start_state_term` onto Menu and
        keeps the named empty regions from pruning.
        """
        response = api_service.extract(request)
        if is_error(response):
            return make_error_response(response)
        return response

    # =========================================================================
    # System Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="logicgraph",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "LogicGraph API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/api/v1/health",
        }

    return app


# For running directly: uvicorn logicgraph.api.app:app
app = create_app()
