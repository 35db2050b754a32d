"""CLI entrypoint for the 3D wave-function-collapse building solver."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict

from wfcbuild.core.constants import StepResult
from wfcbuild.core.exceptions import WFCError
from wfcbuild.data.presets import PRESETS, load_preset
from wfcbuild.engine.feasibility import check_feasibility
from wfcbuild.engine.solve_store import DEFAULT_STORE_DIR, SolveStore
from wfcbuild.engine.solver import SolveResult, SolverConfig, WFCSolver
from wfcbuild.engine.validator import validate_assignment
from wfcbuild.utils.logger import configure_logging, get_logger
from wfcbuild.utils.pretty import format_layers, print_solve_summary


LOGGER = get_logger("wfcbuild.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Assemble a 3D building from modules with wave function collapse",
    )
    parser.add_argument("--width", type=int, required=True, help="Grid extent along X")
    parser.add_argument("--height", type=int, required=True, help="Grid extent along Y (vertical)")
    parser.add_argument("--depth", type=int, required=True, help="Grid extent along Z")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument(
        "--preset",
        type=str,
        choices=sorted(PRESETS),
        default="procedural_building",
        help="Built-in module catalog",
    )
    parser.add_argument(
        "--step",
        action="store_true",
        help="Drive the solver one step at a time and print every layer after each collapse",
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Cross-check the outcome with the CP-SAT feasibility model",
    )
    parser.add_argument(
        "--verify-timeout",
        type=float,
        default=30.0,
        help="Time limit in seconds for --verify",
    )
    parser.add_argument("--output", type=Path, help="Optional path to JSON output")
    parser.add_argument(
        "--store-dir",
        type=Path,
        default=DEFAULT_STORE_DIR,
        help="Directory for saved solve documents",
    )
    parser.add_argument("--no-store", action="store_true", help="Do not save the solve document")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    return parser


def run_stepwise(solver: WFCSolver) -> SolveResult:
    """Step until a terminal result, printing the partial grid as it grows."""

    result = solver.step()
    while not result.terminal:
        print(f"[step {solver.stats.steps}] {result.value} (depth {solver.depth})")
        print(format_layers(solver.current_assignment(), solver.dimensions, solver.catalog))
        print()
        result = solver.step()
    if result == StepResult.COMPLETED:
        return SolveResult(
            solved=True,
            assignment=solver.current_assignment(),
            stats=solver.stats,
            seed=solver.config.seed,
        )
    return SolveResult(solved=False, stats=solver.stats, seed=solver.config.seed)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    level = getattr(logging, args.log_level.upper(), logging.INFO)
    configure_logging(level)

    for name in ("width", "height", "depth"):
        if getattr(args, name) <= 0:
            parser.error(f"--{name} must be a positive integer")

    preset = load_preset(args.preset)
    oracle = preset.build_oracle()
    config = SolverConfig(width=args.width, height=args.height, depth=args.depth, seed=args.seed)
    store = None if args.no_store else SolveStore(args.store_dir)

    try:
        config.constraints = preset.constraints(config.dimensions())
        solver = WFCSolver(config, preset.catalog, oracle)
    except WFCError as exc:
        LOGGER.error("Cannot build solver: %s", exc)
        if store is not None:
            store.save_failure(config, str(exc), preset=preset.name)
        return 2

    result = run_stepwise(solver) if args.step else solver.run_to_completion()
    print_solve_summary(result, solver.dimensions, preset.catalog)

    payload: Dict[str, Any] = {
        "preset": preset.name,
        "solved": result.solved,
        "seed": result.seed,
        "dimensions": list(solver.dimensions.as_tuple()),
        "modules": [preset.catalog.name_of(module_id) for module_id in preset.catalog.all_ids()],
        "assignment": [
            {"coord": list(coord), "module": preset.catalog.name_of(module_id)}
            for coord, module_id in sorted(result.assignment.items())
        ],
        "stats": result.stats.as_dict(),
    }

    if result.solved:
        validation = validate_assignment(result.assignment, solver.dimensions, solver.oracle)
        payload["validation"] = validation.messages
        if store is not None:
            store.save_success(result, config, preset.catalog, preset=preset.name)
    elif store is not None:
        store.save_failure(config, "unsolvable", stats=result.stats, grid=solver.grid, preset=preset.name)

    if args.verify:
        report = check_feasibility(
            solver.dimensions, solver.oracle, config.constraints, timeout=args.verify_timeout
        )
        payload["verify"] = report.status
        if report.feasible != result.solved and (report.feasible or report.infeasible):
            LOGGER.error(
                "CP-SAT disagrees with the search: solver=%s, cp-sat=%s",
                "solved" if result.solved else "unsolvable",
                report.status,
            )

    output_text = json.dumps(payload, ensure_ascii=False, indent=2)
    if args.output:
        args.output.write_text(output_text, encoding="utf-8")
    else:
        print(output_text)
    return 0 if result.solved else 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
