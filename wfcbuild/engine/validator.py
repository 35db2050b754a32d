"""Deterministic adjacency validation for solved assignments."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple, Union

from ..core.constants import POSITIVE_DIRECTIONS, Coord, Dimensions
from ..core.exceptions import ValidationError
from ..utils.logger import get_logger
from .oracle import CompatibilityOracle


LOGGER = get_logger(__name__)


@dataclass
class ValidationResult:
    ok: bool
    messages: List[str]


class AssignmentValidator:
    """Checks that a mapping covers the grid and respects the oracle."""

    def __init__(self, oracle: CompatibilityOracle) -> None:
        self.oracle = oracle

    def validate(
        self,
        assignment: Mapping[Coord, int],
        dimensions: Union[Dimensions, Tuple[int, int, int]],
        allowed: Optional[Dict[Coord, frozenset]] = None,
    ) -> ValidationResult:
        dims = Dimensions.of(dimensions)
        try:
            self._check_total(assignment, dims)
            self._check_module_ids(assignment)
            self._check_adjacency(assignment, dims)
            if allowed:
                self._check_allowed(assignment, allowed)
        except ValidationError as exc:
            LOGGER.error("Validation failed: %s", exc)
            return ValidationResult(ok=False, messages=[str(exc)])
        return ValidationResult(ok=True, messages=[])

    @staticmethod
    def _check_total(assignment: Mapping[Coord, int], dims: Dimensions) -> None:
        if len(assignment) != dims.volume:
            raise ValidationError(
                f"Assignment covers {len(assignment)} of {dims.volume} cells"
            )
        for coord in assignment:
            if not dims.contains(coord):
                raise ValidationError(f"Coordinate {coord} lies outside the grid")

    def _check_module_ids(self, assignment: Mapping[Coord, int]) -> None:
        for coord, module_id in assignment.items():
            if not 0 <= module_id < self.oracle.size:
                raise ValidationError(f"Unknown module {module_id} at {coord}")

    def _check_adjacency(self, assignment: Mapping[Coord, int], dims: Dimensions) -> None:
        for coord, module_id in assignment.items():
            for direction in POSITIVE_DIRECTIONS:
                dx, dy, dz = direction.offset
                other = (coord[0] + dx, coord[1] + dy, coord[2] + dz)
                if not dims.contains(other):
                    continue
                if not self.oracle.compatible(module_id, assignment[other], direction):
                    raise ValidationError(
                        f"Modules {module_id} at {coord} and {assignment[other]} at {other} "
                        f"are incompatible ({direction.short})"
                    )

    @staticmethod
    def _check_allowed(assignment: Mapping[Coord, int], allowed: Dict[Coord, frozenset]) -> None:
        for coord, subset in allowed.items():
            if assignment.get(coord) not in subset:
                raise ValidationError(
                    f"Module {assignment.get(coord)} at {coord} violates a structural constraint"
                )


def validate_assignment(
    assignment: Mapping[Coord, int],
    dimensions: Union[Dimensions, Tuple[int, int, int]],
    oracle: CompatibilityOracle,
) -> ValidationResult:
    return AssignmentValidator(oracle).validate(assignment, dimensions)
