"""
API Service - Business logic layer between the API and the pipeline.

The service:
1. Translates API requests to pipeline calls
2. Maps pipeline errors to structured error responses
3. Formats the built graph for clients

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field

from ..export.dot import to_dot
from ..extractor.driver import build_world
from ..graph.classifier import StateCallClassifier, StateModifierClassifier
from ..graph.validation import validate_world_definition
from ..logic.errors import (
    CyclicMacroError,
    DuplicateLogicObjectError,
    DuplicateTermError,
    ExpressionError,
    LogicGraphError,
    RebaseError,
    UndefinedLogicObjectError,
    UnresolvedReferenceError,
    WorldDefinitionError,
)
from ..logic.normalizer import DNFNormalizer
from ..logic.preprocessor import LogicPreprocessor
from ..logic.terms import TermRegistry
from ..logic.variables import create_resolver
from .schemas import (
    ClauseInfo,
    ErrorCode,
    ErrorResponse,
    ExtractRequest,
    ExtractResponse,
    NormalizeRequest,
    NormalizeResponse,
)

_ERROR_CODES = [
    (ExpressionError, ErrorCode.INVALID_LOGIC),
    (UnresolvedReferenceError, ErrorCode.UNKNOWN_SYMBOL),
    (CyclicMacroError, ErrorCode.CYCLIC_MACRO),
    (DuplicateTermError, ErrorCode.DUPLICATE_DEFINITION),
    (DuplicateLogicObjectError, ErrorCode.DUPLICATE_DEFINITION),
    (UndefinedLogicObjectError, ErrorCode.UNDEFINED_LOGIC_OBJECT),
    (RebaseError, ErrorCode.REBASE_FAILED),
    (WorldDefinitionError, ErrorCode.INVALID_WORLD),
]


@dataclass
class ExtractionService:
    """
    Main API service.

    Usage:
        service = ExtractionService()

        # Normalize one expression
        response = service.normalize(NormalizeRequest(logic="A + (B | C)"))

        # Build a region graph
        response = service.extract(ExtractRequest(world=world))
    """
    classifier: StateModifierClassifier = field(default_factory=StateCallClassifier)

    def normalize(self, request: NormalizeRequest) -> NormalizeResponse | ErrorResponse:
        """Normalize one logic expression into DNF clauses."""
        try:
            terms = TermRegistry.from_mapping(request.terms)
            preprocessor = LogicPreprocessor(
                terms=terms,
                variable_resolver=create_resolver(request.variable_resolver, request.state_modifiers),
            )
            preprocessor.set_macros(request.macros)
            expression = preprocessor.compile_text("<request>", request.logic)
            clauses = DNFNormalizer(terms=terms).normalize("<request>", expression)
        except LogicGraphError as e:
            return self._error(e)

        infos = [
            ClauseInfo(
                operands=clause.tokens(),
                state_provider=clause.state_provider,
                is_sentinel=clause.is_sentinel,
            )
            for clause in clauses
        ]
        return NormalizeResponse(
            clauses=infos,
            unreachable=len(clauses) == 1 and clauses[0].is_sentinel,
        )

    def extract(self, request: ExtractRequest) -> ExtractResponse | ErrorResponse:
        """Validate a world definition and build its region graph."""
        try:
            objects = request.world.to_definitions()
            validate_world_definition(objects).raise_for_errors()
            world, builder = build_world(
                objects,
                start_state_term=request.start_state_term,
                keep=set(request.keep) if request.keep is not None else None,
                classifier=self.classifier,
            )
        except LogicGraphError as e:
            return self._error(e)

        return ExtractResponse(
            region_count=len(world.regions),
            empty_region_count=world.empty_region_count,
            location_count=len(world.locations),
            pruned_regions=list(builder.pruned_regions),
            world=world,
            dot=to_dot(builder.build_visualization()),
        )

    def _error(self, error: LogicGraphError) -> ErrorResponse:
        code = ErrorCode.INTERNAL_ERROR
        for error_type, error_code in _ERROR_CODES:
            if isinstance(error, error_type):
                code = error_code
                break
        details = None
        if isinstance(error, WorldDefinitionError) and error.errors:
            details = {"errors": error.errors}
        return ErrorResponse(error=str(error), error_code=code, details=details)
