"""Grid representation and structural constraint helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple, Union

from ..core.constants import Coord, Dimensions, Direction
from ..core.exceptions import ConstructionError
from ..core.models import Cell
from ..data.catalog import ModuleCatalog
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)

CoordPredicate = Callable[[Coord], bool]

_AXES = {"x": 0, "y": 1, "z": 2}


@dataclass(frozen=True)
class GridConstraint:
    """Restrict every cell matching ``predicate`` to ``allowed`` modules."""

    predicate: CoordPredicate
    allowed: FrozenSet[int]
    label: str = "constraint"


def layer_constraint(
    axis: str,
    index: int,
    allowed: Iterable[int],
    label: Optional[str] = None,
) -> GridConstraint:
    """Constrain the plane ``axis == index`` (``axis`` is ``x``, ``y`` or ``z``)."""

    position = _AXES[axis.lower()]
    return GridConstraint(
        predicate=lambda coord: coord[position] == index,
        allowed=frozenset(allowed),
        label=label or f"{axis.lower()}={index}",
    )


def cell_constraint(coord: Coord, allowed: Iterable[int], label: Optional[str] = None) -> GridConstraint:
    target = tuple(coord)
    return GridConstraint(
        predicate=lambda candidate: candidate == target,
        allowed=frozenset(allowed),
        label=label or f"cell {target}",
    )


class Grid:
    """Dense 3D array of cells, each holding a candidate-module domain."""

    def __init__(self, dimensions: Union[Dimensions, Tuple[int, int, int]], catalog: ModuleCatalog) -> None:
        self.dimensions = Dimensions.of(dimensions)
        self.catalog = catalog
        full = catalog.all_ids()
        self.cells: List[List[List[Cell]]] = [
            [
                [Cell(coord=(x, y, z), domain=set(full)) for z in range(self.dimensions.depth)]
                for y in range(self.dimensions.height)
            ]
            for x in range(self.dimensions.width)
        ]

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------
    def cell(self, coord: Coord) -> Cell:
        x, y, z = coord
        return self.cells[x][y][z]

    def coords(self) -> Iterator[Coord]:
        for x in range(self.dimensions.width):
            for y in range(self.dimensions.height):
                for z in range(self.dimensions.depth):
                    yield (x, y, z)

    def iter_cells(self) -> Iterator[Cell]:
        for coord in self.coords():
            yield self.cell(coord)

    def neighbor(self, coord: Coord, direction: Direction) -> Optional[Coord]:
        dx, dy, dz = Direction(direction).offset
        candidate = (coord[0] + dx, coord[1] + dy, coord[2] + dz)
        if not self.dimensions.contains(candidate):
            return None
        return candidate

    def neighbors(self, coord: Coord) -> Iterator[Tuple[Direction, Coord]]:
        for direction in Direction:
            candidate = self.neighbor(coord, direction)
            if candidate is not None:
                yield direction, candidate

    # ------------------------------------------------------------------
    # Constraints
    # ------------------------------------------------------------------
    def apply_constraint(self, predicate: CoordPredicate, allowed: Iterable[int]) -> List[Coord]:
        """Intersect matching domains with ``allowed``; return the coords that shrank."""

        subset = frozenset(allowed)
        changed: List[Coord] = []
        for cell in self.iter_cells():
            if not predicate(cell.coord):
                continue
            narrowed = cell.domain & subset
            if not narrowed:
                raise ConstructionError(
                    f"Constraint leaves cell {cell.coord} without candidate modules"
                )
            if len(narrowed) < len(cell.domain):
                cell.domain = narrowed
                changed.append(cell.coord)
        LOGGER.debug("Constraint narrowed %d cells", len(changed))
        return changed

    # ------------------------------------------------------------------
    # State queries
    # ------------------------------------------------------------------
    def is_complete(self) -> bool:
        return all(cell.is_collapsed for cell in self.iter_cells())

    def assignment(self) -> Dict[Coord, int]:
        result: Dict[Coord, int] = {}
        for cell in self.iter_cells():
            module_id = cell.module_id
            if module_id is not None:
                result[cell.coord] = module_id
        return result

    def domains(self) -> Dict[Coord, FrozenSet[int]]:
        return {cell.coord: frozenset(cell.domain) for cell in self.iter_cells()}

    def to_jsonable(self) -> List[dict]:
        return [
            {
                "coord": list(cell.coord),
                "status": cell.status.value,
                "domain": sorted(cell.domain),
            }
            for cell in self.iter_cells()
        ]
