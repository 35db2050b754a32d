"""Chronological backtracking over collapse decisions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ..core.constants import CellStatus, Coord
from ..core.models import BacktrackRecord
from ..utils.logger import get_logger
from .grid import Grid


LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class BacktrackOutcome:
    """Either resumed at ``coord`` or exhausted (``coord`` is None)."""

    coord: Optional[Coord] = None
    unwound: int = 0

    @property
    def resumed(self) -> bool:
        return self.coord is not None

    @property
    def exhausted(self) -> bool:
        return self.coord is None


def _undo(grid: Grid, record: BacktrackRecord) -> None:
    for coord, previous in record.trail.items():
        grid.cell(coord).domain = set(previous)
    cell = grid.cell(record.coord)
    cell.domain = set(record.snapshot)
    cell.status = CellStatus.OPEN


def backtrack(grid: Grid, stack: List[BacktrackRecord]) -> BacktrackOutcome:
    """Undo decisions until one still has an untried alternative.

    The resumed cell's domain becomes ``snapshot - {choice}``; that change is
    written to the trail of the record now on top so an older undo restores
    it too. The caller re-propagates from the returned coordinate.
    """

    unwound = 0
    while stack:
        record = stack.pop()
        unwound += 1
        _undo(grid, record)
        remaining = set(record.snapshot)
        remaining.discard(record.choice)
        if not remaining:
            LOGGER.debug("Decision at %s exhausted; unwinding further", record.coord)
            continue

        if stack:
            stack[-1].trail.setdefault(record.coord, record.snapshot)
        grid.cell(record.coord).domain = remaining
        LOGGER.debug(
            "Backtracked to %s excluding module %d (%d left, depth %d)",
            record.coord,
            record.choice,
            len(remaining),
            len(stack),
        )
        return BacktrackOutcome(coord=record.coord, unwound=unwound)

    LOGGER.warning("Backtracking exhausted after unwinding %d decisions", unwound)
    return BacktrackOutcome(coord=None, unwound=unwound)
