import unittest

from wfcbuild.core.constants import Direction, ModuleKind
from wfcbuild.core.exceptions import CatalogError
from wfcbuild.core.models import Module
from wfcbuild.data.catalog import ModuleCatalog, needs_rotation, rotate_y


class ModuleCatalogTests(unittest.TestCase):
    def test_ids_follow_registration_order(self) -> None:
        catalog = ModuleCatalog()
        first = catalog.register(Module("a"))
        second = catalog.register(Module("b"), weight=2.5)
        self.assertEqual((first, second), (0, 1))
        self.assertEqual(catalog.all_ids(), [0, 1])
        self.assertEqual(catalog.weight(0), 1.0)
        self.assertEqual(catalog.weight(1), 2.5)
        self.assertEqual(catalog.id_of("b"), 1)
        self.assertEqual(catalog.get(0).name, "a")

    def test_invalid_weights_are_rejected(self) -> None:
        catalog = ModuleCatalog()
        for weight in (-1.0, float("nan"), float("inf")):
            with self.assertRaises(CatalogError):
                catalog.register(Module(f"bad_{weight}"), weight=weight)
        self.assertEqual(len(catalog), 0)

    def test_zero_weight_is_allowed(self) -> None:
        catalog = ModuleCatalog()
        module_id = catalog.register(Module("air"), weight=0)
        self.assertEqual(catalog.weight(module_id), 0.0)

    def test_connector_count_is_checked(self) -> None:
        catalog = ModuleCatalog()
        with self.assertRaises(CatalogError):
            catalog.register(Module("short", connectors=("a", "b")))  # type: ignore[arg-type]

    def test_duplicate_names_are_rejected(self) -> None:
        catalog = ModuleCatalog()
        catalog.register(Module("wall"))
        with self.assertRaises(CatalogError):
            catalog.register(Module("wall"))

    def test_frozen_catalog_rejects_registration(self) -> None:
        catalog = ModuleCatalog()
        catalog.register(Module("wall"))
        catalog.freeze()
        self.assertTrue(catalog.frozen)
        with self.assertRaises(CatalogError):
            catalog.register(Module("roof"))

    def test_unknown_lookups_raise(self) -> None:
        catalog = ModuleCatalog()
        catalog.register(Module("wall"))
        with self.assertRaises(CatalogError):
            catalog.get(3)
        with self.assertRaises(CatalogError):
            catalog.id_of("roof")
        self.assertNotIn(3, catalog)
        self.assertIn(0, catalog)

    def test_ids_of_kind(self) -> None:
        catalog = ModuleCatalog()
        catalog.register(Module("wall", kind=ModuleKind.WALL))
        catalog.register(Module("roof", kind=ModuleKind.ROOF))
        catalog.register(Module("wall2", kind=ModuleKind.WALL))
        self.assertEqual(catalog.ids_of_kind(ModuleKind.WALL), [0, 2])
        self.assertEqual(catalog.ids_of_kind(ModuleKind.ROOF, ModuleKind.WALL), [0, 1, 2])


class RotationTests(unittest.TestCase):
    def test_from_faces_sets_labels(self) -> None:
        module = Module.from_faces("door", ModuleKind.DOOR, default="wall", z_pos="door", y_neg="floor")
        self.assertEqual(module.label(Direction.Z_POS), "door")
        self.assertEqual(module.label(Direction.Y_NEG), "floor")
        self.assertEqual(module.label(Direction.X_POS), "wall")

    def test_quarter_turn_moves_faces(self) -> None:
        module = Module.from_faces("window", default="wall", x_pos="glass")
        turned = rotate_y(module, 1)
        self.assertEqual(turned.name, "window_r90")
        self.assertEqual(turned.label(Direction.Z_NEG), "glass")
        self.assertEqual(turned.label(Direction.X_POS), "wall")
        self.assertEqual(turned.kind, module.kind)

    def test_vertical_faces_are_unchanged(self) -> None:
        module = Module.from_faces("stair", default="side", y_pos="up", y_neg="down", z_pos="step")
        for turns in range(4):
            turned = rotate_y(module, turns)
            self.assertEqual(turned.label(Direction.Y_POS), "up")
            self.assertEqual(turned.label(Direction.Y_NEG), "down")

    def test_full_turn_is_identity(self) -> None:
        module = Module.from_faces("window", default="wall", x_pos="glass", z_neg="frame")
        self.assertEqual(rotate_y(module, 4), module)
        self.assertEqual(rotate_y(rotate_y(module, 3), 1).connectors, module.connectors)

    def test_register_rotations_skips_duplicates(self) -> None:
        catalog = ModuleCatalog()
        one_face = catalog.register_rotations(Module.from_faces("window", default="wall", x_pos="glass"))
        self.assertEqual(len(one_face), 4)

        opposite_faces = catalog.register_rotations(
            Module.from_faces("hall", default="wall", x_pos="open", x_neg="open")
        )
        self.assertEqual(len(opposite_faces), 2)

        symmetric = catalog.register_rotations(Module.from_faces("block", default="wall"))
        self.assertEqual(len(symmetric), 1)
        self.assertEqual(len(catalog), 7)

    def test_needs_rotation(self) -> None:
        self.assertFalse(needs_rotation(Module.from_faces("block", default="wall", y_pos="top")))
        self.assertTrue(needs_rotation(Module.from_faces("window", default="wall", z_pos="glass")))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
