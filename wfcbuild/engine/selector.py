"""Minimum-entropy cell selection and weighted collapse."""

from __future__ import annotations

import random
from typing import List, Optional

from ..core.constants import CellStatus, Coord
from ..core.exceptions import InvariantError
from ..core.models import BacktrackRecord
from ..data.catalog import ModuleCatalog
from ..utils.logger import get_logger
from .grid import Grid


LOGGER = get_logger(__name__)


def select_next(grid: Grid, rng: random.Random) -> Optional[Coord]:
    """Return an open cell with the smallest domain, or None when none is left.

    Ties are broken uniformly at random among cells in scan order.
    """

    best: Optional[int] = None
    candidates: List[Coord] = []
    for cell in grid.iter_cells():
        if not cell.is_open:
            continue
        size = cell.entropy
        if size == 0:
            raise InvariantError(f"Open cell {cell.coord} has an empty domain")
        if best is None or size < best:
            best = size
            candidates = [cell.coord]
        elif size == best:
            candidates.append(cell.coord)

    if not candidates:
        return None
    return rng.choice(candidates)


def collapse(
    grid: Grid,
    coord: Coord,
    rng: random.Random,
    catalog: ModuleCatalog,
    stack: List[BacktrackRecord],
) -> int:
    """Fix ``coord`` to one weighted-random module and push its undo record.

    The domain is walked in ascending id order. Zero-weight modules are never
    drawn while any positive weight remains; a domain made only of
    zero-weight modules falls back to a uniform pick.
    """

    cell = grid.cell(coord)
    if not cell.is_open:
        raise InvariantError(f"Cannot collapse {coord}: cell is {cell.status.value}")
    ordered = sorted(cell.domain)
    if not ordered:
        raise InvariantError(f"Cannot collapse {coord}: empty domain")

    weights = [catalog.weight(module_id) for module_id in ordered]
    total = sum(weights)
    if total > 0:
        draw = rng.random() * total
        positive = [(module_id, weight) for module_id, weight in zip(ordered, weights) if weight > 0]
        # float rounding can leave the draw just past the final bucket
        chosen = positive[-1][0]
        cumulative = 0.0
        for module_id, weight in positive:
            cumulative += weight
            if draw < cumulative:
                chosen = module_id
                break
    else:
        chosen = rng.choice(ordered)

    stack.append(BacktrackRecord(coord=coord, snapshot=frozenset(cell.domain), choice=chosen))
    cell.domain = {chosen}
    cell.status = CellStatus.COLLAPSED
    LOGGER.debug(
        "Collapsed %s to %s (%d candidates, depth %d)",
        coord,
        catalog.name_of(chosen),
        len(ordered),
        len(stack),
    )
    return chosen
