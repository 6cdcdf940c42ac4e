"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between HTTP clients and the pipeline.
World documents are embedded as-is, so they keep their PascalCase keys.

Error Codes:
- INVALID_LOGIC: Logic text could not be parsed or negated
- UNKNOWN_SYMBOL: Logic names a symbol that is neither a term nor a macro
- CYCLIC_MACRO: Macros reference each other in a cycle
- DUPLICATE_DEFINITION: A term or logic object is defined twice
- UNDEFINED_LOGIC_OBJECT: A location is anchored on a region that does not exist
- REBASE_FAILED: No region matches the requested start term
- INVALID_WORLD: The world definition failed validation
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from ..graph.models import GraphWorldDefinition, StringWorldDefinition
from ..logic.terms import TermType
from ..logic.variables import ResolverStrategy


# =============================================================================
# Enums
# =============================================================================

class ErrorCode(str, Enum):
    """Structured error codes."""
    INVALID_LOGIC = "INVALID_LOGIC"
    UNKNOWN_SYMBOL = "UNKNOWN_SYMBOL"
    CYCLIC_MACRO = "CYCLIC_MACRO"
    DUPLICATE_DEFINITION = "DUPLICATE_DEFINITION"
    UNDEFINED_LOGIC_OBJECT = "UNDEFINED_LOGIC_OBJECT"
    REBASE_FAILED = "REBASE_FAILED"
    INVALID_WORLD = "INVALID_WORLD"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class ClauseInfo(BaseModel):
    """One normalized clause."""
    operands: list[str] = Field(default_factory=list, description="Operand tokens, in order")
    state_provider: Optional[str] = Field(None, description="State term the clause is anchored on")
    is_sentinel: bool = False


# =============================================================================
# Request Models
# =============================================================================

class NormalizeRequest(BaseModel):
    """Request to normalize one logic expression."""
    logic: str = Field(..., description="Logic text, e.g. 'Town + (Dash | Claw)'")
    terms: dict[TermType, list[str]] = Field(
        default_factory=dict, description="Term names by kind: Bool, Counter, State"
    )
    macros: dict[str, str] = Field(default_factory=dict)
    variable_resolver: ResolverStrategy = ResolverStrategy.DUMMY
    state_modifiers: list[str] = Field(
        default_factory=list, description="State calls accepted by the strict resolver"
    )


class ExtractRequest(BaseModel):
    """Request to build a region graph from normalized logic objects."""
    world: StringWorldDefinition
    start_state_term: Optional[str] = None
    keep: Optional[list[str]] = Field(None, description="Empty regions to keep")


# =============================================================================
# Response Models
# =============================================================================

class NormalizeResponse(BaseModel):
    """Normalized clauses of a logic expression."""
    clauses: list[ClauseInfo] = Field(default_factory=list)
    unreachable: bool = False


class ExtractResponse(BaseModel):
    """The finalized region graph and its summary."""
    region_count: int
    empty_region_count: int
    location_count: int
    pruned_regions: list[str] = Field(default_factory=list)
    world: GraphWorldDefinition
    dot: str = Field(..., description="Graphviz DOT rendering of the graph")


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
