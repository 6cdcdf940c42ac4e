"""
Logic - Terms, expressions, preprocessing and DNF normalization.

The logic layer:
1. Registers terms (items, counters, states)
2. Expands macros and compiles raw logic text
3. Normalizes expressions into ordered DNF clause lists
"""

from .errors import (
    LogicGraphError,
    DuplicateTermError,
    DuplicateLogicObjectError,
    CyclicMacroError,
    UnresolvedReferenceError,
    UndefinedLogicObjectError,
    ExpressionError,
    PhaseOrderError,
    RebaseError,
    WorldDefinitionError,
    ExtractionCancelled,
)
from .terms import Term, TermType, TermRegistry
from .expression import (
    Constant,
    Literal,
    Comparison,
    StateCall,
    Operand,
    Expression,
    TRUE,
    FALSE,
    parse_expression,
    parse_operand,
    to_text,
)
from .variables import (
    ResolverStrategy,
    VariableResolver,
    DummyVariableResolver,
    StrictVariableResolver,
    create_resolver,
)
from .preprocessor import LogicPreprocessor, RawLogicDef, RawWaypointDef
from .normalizer import (
    DNFNormalizer,
    LogicHandling,
    LogicObjectDefinition,
    StatefulClause,
    SENTINEL_FALSE_CLAUSE,
    canonical_hash,
    clauses_to_expression,
    normalize,
)

__all__ = [
    "LogicGraphError",
    "DuplicateTermError",
    "DuplicateLogicObjectError",
    "CyclicMacroError",
    "UnresolvedReferenceError",
    "UndefinedLogicObjectError",
    "ExpressionError",
    "PhaseOrderError",
    "RebaseError",
    "WorldDefinitionError",
    "ExtractionCancelled",
    "Term",
    "TermType",
    "TermRegistry",
    "Constant",
    "Literal",
    "Comparison",
    "StateCall",
    "Operand",
    "Expression",
    "TRUE",
    "FALSE",
    "parse_expression",
    "parse_operand",
    "to_text",
    "ResolverStrategy",
    "VariableResolver",
    "DummyVariableResolver",
    "StrictVariableResolver",
    "create_resolver",
    "LogicPreprocessor",
    "RawLogicDef",
    "RawWaypointDef",
    "DNFNormalizer",
    "LogicHandling",
    "LogicObjectDefinition",
    "StatefulClause",
    "SENTINEL_FALSE_CLAUSE",
    "canonical_hash",
    "clauses_to_expression",
    "normalize",
]
