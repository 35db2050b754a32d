"""Solver facade: select, collapse, propagate and recover one step at a time."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..core.constants import Coord, Dimensions, StepResult
from ..core.exceptions import ConstructionError
from ..core.models import BacktrackRecord
from ..data.catalog import ModuleCatalog
from ..utils.logger import get_logger
from .backtracker import backtrack
from .grid import Grid, GridConstraint
from .oracle import CompatibilityOracle, CompatibilityOverride
from .propagator import propagate, propagate_from
from .selector import collapse, select_next


LOGGER = get_logger(__name__)


@dataclass
class SolverConfig:
    """Construction-time inputs for one solve."""

    width: int
    height: int
    depth: int
    seed: Optional[int] = None
    constraints: List[GridConstraint] = field(default_factory=list)
    overrides: List[CompatibilityOverride] = field(default_factory=list)

    def dimensions(self) -> Dimensions:
        return Dimensions(self.width, self.height, self.depth)


@dataclass
class SolverStats:
    steps: int = 0
    collapses: int = 0
    contradictions: int = 0
    backtracks: int = 0
    max_depth: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {
            "steps": self.steps,
            "collapses": self.collapses,
            "contradictions": self.contradictions,
            "backtracks": self.backtracks,
            "max_depth": self.max_depth,
        }


@dataclass
class SolveResult:
    """``solved`` with a total assignment, or unsolvable with an empty one."""

    solved: bool
    assignment: Dict[Coord, int] = field(default_factory=dict)
    stats: SolverStats = field(default_factory=SolverStats)
    seed: Optional[int] = None

    @property
    def unsolvable(self) -> bool:
        return not self.solved


class WFCSolver:
    """Wave-function-collapse search over a 3D grid of module domains.

    The catalog, oracle and random source are owned by the solver for its
    whole lifetime. ``step`` performs one decision; ``run_to_completion``
    repeats it. Both consume randomness in the same order, so stepping and
    running give identical results for the same seed.
    """

    def __init__(
        self,
        config: SolverConfig,
        catalog: ModuleCatalog,
        oracle: Optional[CompatibilityOracle] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config
        self.dimensions = config.dimensions()
        self.catalog = catalog
        catalog.freeze()
        if len(catalog) == 0:
            raise ConstructionError("Catalog has no modules")

        base = oracle.copy() if oracle is not None else CompatibilityOracle.from_catalog(catalog)
        if base.size != len(catalog):
            raise ConstructionError(
                f"Oracle covers {base.size} modules but the catalog has {len(catalog)}"
            )
        base.apply(config.overrides)
        base.check_symmetry()
        self.oracle = base

        self.rng = rng or random.Random(config.seed)
        self._rng_state = self.rng.getstate()

        self.grid: Grid
        self.stack: List[BacktrackRecord] = []
        self.stats = SolverStats()
        self._outcome: Optional[StepResult] = None
        self._initialize()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def _initialize(self) -> None:
        self.grid = Grid(self.dimensions, self.catalog)
        self.stack = []
        self.stats = SolverStats()
        self._outcome = None

        changed: List[Coord] = []
        for constraint in self.config.constraints:
            shrunk = self.grid.apply_constraint(constraint.predicate, constraint.allowed)
            LOGGER.info("Applied %s to %d cells", constraint.label, len(shrunk))
            changed.extend(shrunk)
        if changed and not propagate_from(self.grid, self.oracle, changed):
            raise ConstructionError("Initial constraints are contradictory after propagation")
        LOGGER.info(
            "Solver ready: %dx%dx%d grid, %d modules, seed=%s",
            self.dimensions.width,
            self.dimensions.height,
            self.dimensions.depth,
            len(self.catalog),
            self.config.seed,
        )

    def reset(self) -> None:
        """Discard grid and history; replay from the original seed state."""

        self.rng.setstate(self._rng_state)
        self._initialize()

    # ------------------------------------------------------------------
    # Driver interface
    # ------------------------------------------------------------------
    def step(self) -> StepResult:
        if self._outcome is not None:
            return self._outcome
        self.stats.steps += 1

        coord = select_next(self.grid, self.rng)
        if coord is None:
            LOGGER.info("All %d cells collapsed", self.dimensions.volume)
            self._outcome = StepResult.COMPLETED
            return self._outcome

        collapse(self.grid, coord, self.rng, self.catalog, self.stack)
        self.stats.collapses += 1
        self.stats.max_depth = max(self.stats.max_depth, len(self.stack))
        if propagate(self.grid, self.oracle, coord, self.stack[-1].trail):
            return StepResult.PROGRESSED

        LOGGER.warning("Contradiction after collapsing %s; backtracking", coord)
        if self._recover():
            return StepResult.CONTRADICTION_HANDLED
        self._outcome = StepResult.FAILED
        return self._outcome

    def run_to_completion(self) -> SolveResult:
        result = self.step()
        while not result.terminal:
            result = self.step()
        if result == StepResult.COMPLETED:
            LOGGER.info(
                "Solved after %d steps (%d contradictions, %d backtracks)",
                self.stats.steps,
                self.stats.contradictions,
                self.stats.backtracks,
            )
            return SolveResult(
                solved=True,
                assignment=self.current_assignment(),
                stats=self.stats,
                seed=self.config.seed,
            )
        LOGGER.warning("Instance unsolvable after %d steps", self.stats.steps)
        return SolveResult(solved=False, stats=self.stats, seed=self.config.seed)

    def current_assignment(self) -> Dict[Coord, int]:
        return self.grid.assignment()

    @property
    def finished(self) -> bool:
        return self._outcome is not None

    @property
    def depth(self) -> int:
        return len(self.stack)

    # ------------------------------------------------------------------
    # Recovery
    # ------------------------------------------------------------------
    def _recover(self) -> bool:
        while True:
            self.stats.contradictions += 1
            outcome = backtrack(self.grid, self.stack)
            self.stats.backtracks += outcome.unwound
            if outcome.exhausted:
                return False
            LOGGER.debug("Resuming at %s after unwinding %d decisions", outcome.coord, outcome.unwound)
            trail = self.stack[-1].trail if self.stack else None
            if propagate(self.grid, self.oracle, outcome.coord, trail):
                return True
