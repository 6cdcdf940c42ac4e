"""
API Module - HTTP interface to the pipeline.

Exposes normalization and region extraction via REST:
1. Normalize a logic expression into DNF clauses
2. Build a region graph from a world definition

Requests are stateless. No persistence is involved.
"""

from .schemas import (
    # Requests
    NormalizeRequest,
    ExtractRequest,
    # Responses
    NormalizeResponse,
    ExtractResponse,
    ErrorResponse,
    HealthResponse,
    # Shared
    ClauseInfo,
    ErrorCode,
)
from .service import ExtractionService
from .app import create_app

__all__ = [
    # Requests
    "NormalizeRequest",
    "ExtractRequest",
    # Responses
    "NormalizeResponse",
    "ExtractResponse",
    "ErrorResponse",
    "HealthResponse",
    # Shared
    "ClauseInfo",
    "ErrorCode",
    # Service
    "ExtractionService",
    "create_app",
]
