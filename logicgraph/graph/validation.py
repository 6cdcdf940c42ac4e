"""
World Validation - Checks a world definition before building.

Validates that:
1. Logic object names are present and unique
2. Every state provider names a Default or Transition object
3. Clause hygiene holds (no TRUE, FALSE only in the sentinel)

Unreachable objects and worlds without regions only produce warnings.
"""

from __future__ import annotations
from dataclasses import dataclass

from ..logic.errors import WorldDefinitionError
from ..logic.normalizer import LogicHandling, LogicObjectDefinition


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str]
    warnings: list[str]

    def raise_for_errors(self):
        if not self.valid:
            raise WorldDefinitionError(
                f"World definition validation failed with {len(self.errors)} error(s)",
                errors=self.errors,
            )


def validate_world_definition(objects: list[LogicObjectDefinition]) -> ValidationResult:
    """
    Validate a list of normalized logic objects.

    Returns ValidationResult with errors and warnings.
    """
    errors: list[str] = []
    warnings: list[str] = []

    names: set[str] = set()
    for obj in objects:
        if not obj.name:
            errors.append("Logic object has empty name")
        elif obj.name in names:
            errors.append(f"Duplicate logic object '{obj.name}'")
        names.add(obj.name)

    region_names = {
        obj.name for obj in objects
        if obj.handling in (LogicHandling.DEFAULT, LogicHandling.TRANSITION)
    }

    for obj in objects:
        errors.extend(_validate_clauses(obj, region_names))
        if obj.is_unreachable:
            warnings.append(f"Logic object '{obj.name}' is unreachable")

    if not region_names:
        warnings.append("No waypoints or transitions defined - graph will have no regions")

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _validate_clauses(obj: LogicObjectDefinition, region_names: set[str]) -> list[str]:
    """Validate clause references and hygiene for one object."""
    errors = []

    if not obj.clauses:
        errors.append(f"Logic object '{obj.name}' has no clauses")

    for clause in obj.clauses:
        provider = clause.state_provider
        if provider is not None and provider not in region_names:
            errors.append(
                f"Logic object '{obj.name}' references undefined logic object '{provider}'"
            )
        tokens = clause.tokens()
        if "TRUE" in tokens:
            errors.append(f"Logic object '{obj.name}' has a clause containing TRUE")
        if "FALSE" in tokens and not clause.is_sentinel:
            errors.append(f"Logic object '{obj.name}' has a clause mixing FALSE with other operands")

    return errors
