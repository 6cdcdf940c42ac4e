"""Region graph - documents, builder, classifiers and validation."""

from .classifier import StateModifierClassifier, StateCallClassifier, NullClassifier
from .models import (
    ClauseModel,
    LogicObjectModel,
    StringWorldDefinition,
    RegionModel,
    TransitionModel,
    LocationModel,
    GraphWorldDefinition,
)
from .builder import (
    RegionGraphBuilder,
    BuildPhase,
    GraphView,
    Region,
    Transition,
    Location,
    MENU,
    phase_rank,
)
from .validation import validate_world_definition, ValidationResult

__all__ = [
    "StateModifierClassifier",
    "StateCallClassifier",
    "NullClassifier",
    "ClauseModel",
    "LogicObjectModel",
    "StringWorldDefinition",
    "RegionModel",
    "TransitionModel",
    "LocationModel",
    "GraphWorldDefinition",
    "RegionGraphBuilder",
    "BuildPhase",
    "GraphView",
    "Region",
    "Transition",
    "Location",
    "MENU",
    "phase_rank",
    "validate_world_definition",
    "ValidationResult",
]
