"""Exact satisfiability check using OR-Tools CP-SAT.

Encodes the same instance the WFC search solves, one integer variable per
cell with allowed-pair tables on every adjacency, so an ``Unsolvable``
outcome can be confirmed independently of the search order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union

from ortools.sat.python import cp_model

from ..core.constants import POSITIVE_DIRECTIONS, Coord, Dimensions
from ..utils.logger import get_logger
from .grid import GridConstraint
from .oracle import CompatibilityOracle


LOGGER = get_logger(__name__)


@dataclass
class FeasibilityReport:
    status: str
    assignment: Dict[Coord, int] = field(default_factory=dict)

    @property
    def feasible(self) -> bool:
        return self.status in ("OPTIMAL", "FEASIBLE")

    @property
    def infeasible(self) -> bool:
        return self.status == "INFEASIBLE"


def check_feasibility(
    dimensions: Union[Dimensions, Tuple[int, int, int]],
    oracle: CompatibilityOracle,
    constraints: Sequence[GridConstraint] = (),
    timeout: float = 30.0,
    num_workers: int = 4,
) -> FeasibilityReport:
    """Decide whether any total assignment satisfies ``oracle`` and ``constraints``."""

    dims = Dimensions.of(dimensions)
    size = oracle.size
    if size == 0:
        return FeasibilityReport(status="INFEASIBLE")

    model = cp_model.CpModel()

    # ------------------------------------------------------------------
    # Step 1: one variable per cell
    # ------------------------------------------------------------------
    cell_vars: Dict[Coord, cp_model.IntVar] = {}
    for x in range(dims.width):
        for y in range(dims.height):
            for z in range(dims.depth):
                cell_vars[(x, y, z)] = model.new_int_var(0, size - 1, f"M_{x}_{y}_{z}")

    # ------------------------------------------------------------------
    # Step 2: structural constraints as unary tables
    # ------------------------------------------------------------------
    for constraint in constraints:
        allowed = sorted(constraint.allowed)
        for coord, var in cell_vars.items():
            if not constraint.predicate(coord):
                continue
            if not allowed:
                LOGGER.debug("Constraint %s allows nothing at %s", constraint.label, coord)
                return FeasibilityReport(status="INFEASIBLE")
            model.add_allowed_assignments([var], [[module_id] for module_id in allowed])

    # ------------------------------------------------------------------
    # Step 3: adjacency tables
    # ------------------------------------------------------------------
    pair_tables: Dict[int, List[Tuple[int, int]]] = {
        direction.value: oracle.allowed_pairs(direction) for direction in POSITIVE_DIRECTIONS
    }
    for coord, var in cell_vars.items():
        for direction in POSITIVE_DIRECTIONS:
            dx, dy, dz = direction.offset
            other = (coord[0] + dx, coord[1] + dy, coord[2] + dz)
            if other not in cell_vars:
                continue
            tuples = pair_tables[direction.value]
            if not tuples:
                return FeasibilityReport(status="INFEASIBLE")
            model.add_allowed_assignments([var, cell_vars[other]], [list(pair) for pair in tuples])

    # ------------------------------------------------------------------
    # Step 4: solve
    # ------------------------------------------------------------------
    solver = cp_model.CpSolver()
    solver.parameters.max_time_in_seconds = timeout
    solver.parameters.num_workers = num_workers

    LOGGER.info("CP-SAT: %d cells, %d modules, solving (timeout=%0.1fs)...", len(cell_vars), size, timeout)
    status = solver.solve(model)
    status_name = solver.status_name(status)

    if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
        LOGGER.info("CP-SAT: no assignment (status=%s)", status_name)
        return FeasibilityReport(status=status_name)

    assignment = {coord: int(solver.value(var)) for coord, var in cell_vars.items()}
    LOGGER.info("CP-SAT: assignment found in %.2fs", solver.wall_time)
    return FeasibilityReport(status=status_name, assignment=assignment)


def is_satisfiable(
    dimensions: Union[Dimensions, Tuple[int, int, int]],
    oracle: CompatibilityOracle,
    constraints: Sequence[GridConstraint] = (),
    timeout: float = 30.0,
) -> Optional[bool]:
    """True/False when CP-SAT decides the instance, None on timeout."""

    report = check_feasibility(dimensions, oracle, constraints, timeout=timeout)
    if report.feasible:
        return True
    if report.infeasible:
        return False
    return None
