import random
import unittest

from wfcbuild.core.constants import CellStatus
from wfcbuild.core.models import BacktrackRecord, Module
from wfcbuild.data.catalog import ModuleCatalog
from wfcbuild.engine.backtracker import backtrack
from wfcbuild.engine.grid import Grid
from wfcbuild.engine.selector import collapse


def _grid(width: int, modules: int) -> Grid:
    catalog = ModuleCatalog()
    for index in range(modules):
        catalog.register(Module(f"m{index}"))
    return Grid((width, 1, 1), catalog)


def _collapsed(grid: Grid, coord, module_id: int) -> None:
    cell = grid.cell(coord)
    cell.domain = {module_id}
    cell.status = CellStatus.COLLAPSED


class BacktrackTests(unittest.TestCase):
    def test_restores_snapshot_minus_choice(self) -> None:
        grid = _grid(2, 3)
        stack = []
        chosen = collapse(grid, (0, 0, 0), random.Random(2), grid.catalog, stack)

        outcome = backtrack(grid, stack)
        self.assertTrue(outcome.resumed)
        self.assertEqual(outcome.coord, (0, 0, 0))
        self.assertEqual(outcome.unwound, 1)
        cell = grid.cell((0, 0, 0))
        self.assertEqual(cell.domain, {0, 1, 2} - {chosen})
        self.assertEqual(cell.status, CellStatus.OPEN)
        self.assertEqual(stack, [])

    def test_single_option_decision_is_exhausted(self) -> None:
        grid = _grid(1, 3)
        grid.cell((0, 0, 0)).domain = {1}
        stack = []
        collapse(grid, (0, 0, 0), random.Random(0), grid.catalog, stack)

        outcome = backtrack(grid, stack)
        self.assertTrue(outcome.exhausted)
        self.assertIsNone(outcome.coord)
        self.assertEqual(outcome.unwound, 1)
        self.assertEqual(stack, [])

    def test_empty_stack_is_exhausted(self) -> None:
        outcome = backtrack(_grid(1, 1), [])
        self.assertTrue(outcome.exhausted)
        self.assertEqual(outcome.unwound, 0)

    def test_unwinds_past_exhausted_decisions(self) -> None:
        grid = _grid(2, 3)
        _collapsed(grid, (0, 0, 0), 0)
        _collapsed(grid, (1, 0, 0), 2)
        stack = [
            BacktrackRecord(coord=(0, 0, 0), snapshot=frozenset({0, 1}), choice=0),
            BacktrackRecord(coord=(1, 0, 0), snapshot=frozenset({2}), choice=2),
        ]

        outcome = backtrack(grid, stack)
        self.assertEqual(outcome.coord, (0, 0, 0))
        self.assertEqual(outcome.unwound, 2)
        self.assertEqual(grid.cell((0, 0, 0)).domain, {1})
        self.assertEqual(grid.cell((1, 0, 0)).domain, {2})
        self.assertEqual(grid.cell((1, 0, 0)).status, CellStatus.OPEN)
        self.assertEqual(stack, [])

    def test_trail_is_restored(self) -> None:
        grid = _grid(3, 3)
        _collapsed(grid, (0, 0, 0), 0)
        grid.cell((1, 0, 0)).domain = {2}
        stack = [
            BacktrackRecord(
                coord=(0, 0, 0),
                snapshot=frozenset({0, 1, 2}),
                choice=0,
                trail={(1, 0, 0): frozenset({0, 1, 2})},
            )
        ]

        backtrack(grid, stack)
        self.assertEqual(grid.cell((1, 0, 0)).domain, {0, 1, 2})
        self.assertEqual(grid.cell((0, 0, 0)).domain, {1, 2})
        self.assertEqual(grid.cell((2, 0, 0)).domain, {0, 1, 2})

    def test_exclusion_is_recorded_on_new_top(self) -> None:
        grid = _grid(2, 3)
        _collapsed(grid, (0, 0, 0), 0)
        _collapsed(grid, (1, 0, 0), 0)
        older = BacktrackRecord(coord=(0, 0, 0), snapshot=frozenset({0, 1, 2}), choice=0)
        newer = BacktrackRecord(coord=(1, 0, 0), snapshot=frozenset({0, 1}), choice=0)
        stack = [older, newer]

        outcome = backtrack(grid, stack)
        self.assertEqual(outcome.coord, (1, 0, 0))
        self.assertEqual(grid.cell((1, 0, 0)).domain, {1})
        self.assertEqual(stack, [older])
        self.assertEqual(older.trail[(1, 0, 0)], frozenset({0, 1}))

        # Undoing the older decision brings the cell back to its pre-exclusion domain.
        backtrack(grid, stack)
        self.assertEqual(grid.cell((1, 0, 0)).domain, {0, 1})
        self.assertEqual(grid.cell((0, 0, 0)).domain, {1, 2})


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
