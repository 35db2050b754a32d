import unittest

from wfcbuild.core.constants import CellStatus, Dimensions, Direction
from wfcbuild.core.exceptions import ConstructionError
from wfcbuild.core.models import Module
from wfcbuild.data.catalog import ModuleCatalog
from wfcbuild.engine.grid import Grid, cell_constraint, layer_constraint


def _catalog(size: int) -> ModuleCatalog:
    catalog = ModuleCatalog()
    for index in range(size):
        catalog.register(Module(f"m{index}"))
    return catalog


class DimensionsTests(unittest.TestCase):
    def test_rejects_non_positive_extents(self) -> None:
        for dims in ((0, 1, 1), (1, -2, 1), (1, 1, 0)):
            with self.assertRaises(ValueError):
                Dimensions(*dims)

    def test_volume_and_contains(self) -> None:
        dims = Dimensions(2, 3, 4)
        self.assertEqual(dims.volume, 24)
        self.assertTrue(dims.contains((1, 2, 3)))
        self.assertFalse(dims.contains((2, 0, 0)))
        self.assertFalse(dims.contains((0, -1, 0)))


class GridTests(unittest.TestCase):
    def test_cells_start_open_with_full_domain(self) -> None:
        grid = Grid((2, 2, 2), _catalog(3))
        cells = list(grid.iter_cells())
        self.assertEqual(len(cells), 8)
        for cell in cells:
            self.assertEqual(cell.domain, {0, 1, 2})
            self.assertEqual(cell.status, CellStatus.OPEN)
        self.assertEqual(grid.assignment(), {})
        self.assertFalse(grid.is_complete())

    def test_neighbor_respects_bounds(self) -> None:
        grid = Grid((2, 2, 2), _catalog(1))
        self.assertEqual(grid.neighbor((0, 0, 0), Direction.X_POS), (1, 0, 0))
        self.assertEqual(grid.neighbor((0, 0, 0), Direction.Y_POS), (0, 1, 0))
        self.assertIsNone(grid.neighbor((0, 0, 0), Direction.X_NEG))
        self.assertIsNone(grid.neighbor((1, 1, 1), Direction.Z_POS))
        self.assertEqual(len(list(grid.neighbors((0, 0, 0)))), 3)

    def test_neighbor_is_inverse_of_opposite(self) -> None:
        grid = Grid((3, 3, 3), _catalog(1))
        for direction in Direction:
            other = grid.neighbor((1, 1, 1), direction)
            assert other is not None
            self.assertEqual(grid.neighbor(other, direction.opposite()), (1, 1, 1))

    def test_apply_constraint_returns_shrunk_cells(self) -> None:
        grid = Grid((2, 2, 1), _catalog(3))
        constraint = layer_constraint("y", 0, {0, 1})
        changed = grid.apply_constraint(constraint.predicate, constraint.allowed)
        self.assertEqual(sorted(changed), [(0, 0, 0), (1, 0, 0)])
        self.assertEqual(grid.cell((0, 0, 0)).domain, {0, 1})
        self.assertEqual(grid.cell((0, 1, 0)).domain, {0, 1, 2})

        again = grid.apply_constraint(constraint.predicate, {0, 1, 2})
        self.assertEqual(again, [])

    def test_apply_constraint_empty_domain_is_construction_error(self) -> None:
        grid = Grid((2, 1, 1), _catalog(3))
        grid.apply_constraint(lambda coord: coord == (0, 0, 0), {0})
        with self.assertRaises(ConstructionError):
            grid.apply_constraint(lambda coord: coord == (0, 0, 0), {2})

    def test_cell_constraint_targets_one_coordinate(self) -> None:
        constraint = cell_constraint((1, 0, 2), [4])
        self.assertTrue(constraint.predicate((1, 0, 2)))
        self.assertFalse(constraint.predicate((1, 0, 1)))
        self.assertEqual(constraint.allowed, frozenset({4}))

    def test_assignment_lists_collapsed_cells_only(self) -> None:
        grid = Grid((2, 1, 1), _catalog(2))
        cell = grid.cell((1, 0, 0))
        cell.domain = {1}
        cell.status = CellStatus.COLLAPSED
        grid.cell((0, 0, 0)).domain = {0}
        self.assertEqual(grid.assignment(), {(1, 0, 0): 1})

    def test_to_jsonable(self) -> None:
        grid = Grid((1, 1, 1), _catalog(2))
        self.assertEqual(grid.to_jsonable(), [{"coord": [0, 0, 0], "status": "OPEN", "domain": [0, 1]}])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
