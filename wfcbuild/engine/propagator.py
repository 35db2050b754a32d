"""Arc-consistency propagation across the grid."""

from __future__ import annotations

from collections import deque
from typing import Deque, Dict, FrozenSet, Iterable, Optional, Set

from ..core.constants import Coord, Direction
from ..utils.logger import get_logger
from .grid import Grid
from .oracle import CompatibilityOracle


LOGGER = get_logger(__name__)

Trail = Dict[Coord, FrozenSet[int]]


def propagate(
    grid: Grid,
    oracle: CompatibilityOracle,
    start: Coord,
    trail: Optional[Trail] = None,
) -> bool:
    """Shrink neighbouring domains breadth-first from ``start``.

    Returns False on contradiction, i.e. when some open neighbour would be
    left without a supported module. The emptying write is not applied;
    narrowings committed before it stay in place and are recorded in
    ``trail`` (first write per cell wins) so a backtrack can undo them.
    """

    return propagate_from(grid, oracle, [start], trail)


def propagate_from(
    grid: Grid,
    oracle: CompatibilityOracle,
    starts: Iterable[Coord],
    trail: Optional[Trail] = None,
) -> bool:
    queue: Deque[Coord] = deque()
    pending: Set[Coord] = set()
    for coord in starts:
        if coord not in pending:
            queue.append(coord)
            pending.add(coord)

    while queue:
        current = queue.popleft()
        pending.discard(current)
        domain = grid.cell(current).domain

        for direction in Direction:
            neighbor_coord = grid.neighbor(current, direction)
            if neighbor_coord is None:
                continue
            neighbor = grid.cell(neighbor_coord)
            if neighbor.is_collapsed:
                continue

            narrowed = neighbor.domain & oracle.supported(domain, direction)
            if len(narrowed) == len(neighbor.domain):
                continue
            if not narrowed:
                LOGGER.debug(
                    "Contradiction at %s: no module supported from %s (%s)",
                    neighbor_coord,
                    current,
                    direction.short,
                )
                return False

            if trail is not None and neighbor_coord not in trail:
                trail[neighbor_coord] = frozenset(neighbor.domain)
            neighbor.domain = narrowed
            # a cell already waiting in the queue will read its latest domain
            if neighbor_coord not in pending:
                queue.append(neighbor_coord)
                pending.add(neighbor_coord)

    return True
