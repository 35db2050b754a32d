"""Pretty-print helpers for solved grids."""

from __future__ import annotations

import sys
from collections import Counter
from typing import TYPE_CHECKING, Dict, Optional

from ..core.constants import Coord, Dimensions, ModuleKind

if TYPE_CHECKING:
    from ..data.catalog import ModuleCatalog
    from ..engine.solver import SolveResult


SYMBOLS = {
    ModuleKind.FLOOR: "_",
    ModuleKind.WALL: "#",
    ModuleKind.WINDOW: "o",
    ModuleKind.DOOR: "D",
    ModuleKind.ROOF: "^",
    ModuleKind.CORNER: "+",
    ModuleKind.COLUMN: "|",
    ModuleKind.STAIRS: "S",
    ModuleKind.DECORATION: "*",
    ModuleKind.SPECIAL: ".",
}


def cell_symbol(module_id: Optional[int], catalog: ModuleCatalog) -> str:
    if module_id is None:
        return "?"
    return SYMBOLS.get(catalog.get(module_id).kind, "?")


def format_layer(
    assignment: Dict[Coord, int],
    dimensions: Dimensions,
    catalog: ModuleCatalog,
    y: int,
) -> str:
    """Render one horizontal slice; rows are Z, columns are X."""

    width = dimensions.width
    lines = [f"y={y}", "    " + " ".join(f"{x:>2}" for x in range(width))]
    lines.append("    " + "-" * (3 * width - 1))
    for z in range(dimensions.depth):
        symbols = [cell_symbol(assignment.get((x, y, z)), catalog) for x in range(width)]
        lines.append(f"{z:>2} | " + " ".join(f"{symbol:>2}" for symbol in symbols))
    return "\n".join(lines)


def format_layers(assignment: Dict[Coord, int], dimensions: Dimensions, catalog: ModuleCatalog) -> str:
    """All layers from the top down."""

    return "\n\n".join(
        format_layer(assignment, dimensions, catalog, y)
        for y in reversed(range(dimensions.height))
    )


def print_solve_summary(
    result: SolveResult,
    dimensions: Dimensions,
    catalog: ModuleCatalog,
    *,
    stream=None,
) -> None:
    """Print layers plus search and usage stats for a finished solve."""

    stream = stream or sys.stdout
    stats = result.stats
    if result.solved:
        print(format_layers(result.assignment, dimensions, catalog), file=stream)
        print(file=stream)

    print("--- Search ---", file=stream)
    print(f"  Grid:           {dimensions.width} x {dimensions.height} x {dimensions.depth} ({dimensions.volume} cells)", file=stream)
    print(f"  Outcome:        {'solved' if result.solved else 'unsolvable'}", file=stream)
    print(f"  Steps:          {stats.steps}", file=stream)
    print(f"  Collapses:      {stats.collapses}", file=stream)
    print(f"  Contradictions: {stats.contradictions}", file=stream)
    print(f"  Backtracks:     {stats.backtracks}", file=stream)
    print(f"  Max depth:      {stats.max_depth}", file=stream)

    if result.solved:
        usage = Counter(catalog.get(module_id).kind.value for module_id in result.assignment.values())
        print(file=stream)
        print("--- Modules ---", file=stream)
        for kind, count in sorted(usage.items()):
            print(f"  {kind:<14}{count:>4} ({count / dimensions.volume * 100:5.1f}%)", file=stream)

    if result.seed is not None:
        print(file=stream)
        print(f"Seed: {result.seed}", file=stream)
