"""Built-in building catalogs with their label rules and layer constraints."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, List, Set, Tuple

from ..core.constants import Dimensions, Direction, ModuleKind
from ..core.exceptions import ConstructionError
from ..core.models import Module
from ..engine.grid import GridConstraint, layer_constraint
from ..engine.oracle import CompatibilityOracle
from .catalog import ModuleCatalog

LabelPair = Tuple[str, str]


def forbid_above(oracle: CompatibilityOracle, catalog: ModuleCatalog, *kinds: ModuleKind) -> List[int]:
    """Make modules of ``kinds`` incompatible with anything stacked on top."""

    module_ids = catalog.ids_of_kind(*kinds)
    for module_id in module_ids:
        oracle.forbid_direction(module_id, Direction.Y_POS)
    return module_ids


@dataclass
class Preset:
    """A ready-made catalog plus the rules that go with it.

    ``layers`` maps a rule name to a function returning the Y index it pins
    and the module ids allowed there.
    """

    name: str
    catalog: ModuleCatalog
    label_pairs: Set[LabelPair] = field(default_factory=set)
    pinned_kinds: Tuple[ModuleKind, ...] = ()
    layers: Dict[str, Tuple[Callable[[Dimensions], int], FrozenSet[int]]] = field(default_factory=dict)
    min_height: int = 1

    def build_oracle(self) -> CompatibilityOracle:
        oracle = CompatibilityOracle.from_catalog(self.catalog, self.label_pairs)
        if self.pinned_kinds:
            forbid_above(oracle, self.catalog, *self.pinned_kinds)
        return oracle

    def constraints(self, dimensions: Dimensions) -> List[GridConstraint]:
        if dimensions.height < self.min_height:
            raise ConstructionError(
                f"Preset '{self.name}' needs a height of at least {self.min_height}, got {dimensions.height}"
            )
        result = []
        for rule_name, (layer_of, allowed) in self.layers.items():
            result.append(layer_constraint("y", layer_of(dimensions), allowed, label=rule_name))
        return result


def procedural_building() -> Preset:
    """Facade-style building: floor slab at ground level, walls above.

    ``empty`` is an air placeholder with weight 0; it is only placed when
    nothing else fits. Roofs carry a ``stack`` socket on top but are pinned
    to the highest layer by forbidding any neighbour above them.
    """

    catalog = ModuleCatalog()
    catalog.register(Module.from_faces("empty", ModuleKind.SPECIAL, default="air"), weight=0.0)
    catalog.register(
        Module.from_faces("wall", ModuleKind.WALL, default="wall", y_pos="stack", y_neg="stack"),
        weight=0.7,
    )
    catalog.register_rotations(
        Module.from_faces("window", ModuleKind.WINDOW, default="wall", y_pos="stack", y_neg="stack", z_pos="air"),
        weight=0.4,
    )
    floor = catalog.register(
        Module.from_faces("floor", ModuleKind.FLOOR, default="floor", y_pos="stack", y_neg="ground"),
    )
    catalog.register(
        Module.from_faces("roof", ModuleKind.ROOF, default="roof", y_pos="stack", y_neg="stack"),
    )
    catalog.register_rotations(
        Module.from_faces(
            "corner",
            ModuleKind.CORNER,
            default="wall",
            y_pos="stack",
            y_neg="stack",
            x_neg="air",
            z_pos="air",
        ),
        weight=0.3,
    )
    catalog.register(
        Module.from_faces("detail", ModuleKind.DECORATION, default="wall", y_pos="stack", y_neg="stack"),
        weight=0.2,
    )
    catalog.freeze()

    return Preset(
        name="procedural_building",
        catalog=catalog,
        pinned_kinds=(ModuleKind.ROOF,),
        layers={"ground": (lambda dims: 0, frozenset({floor}))},
    )


def stacked_tower() -> Preset:
    """Bottom, middle and top pieces joined by directional sockets.

    Sockets only match through ``label_pairs``, so a middle piece is
    required between the bottom and top layers.
    """

    catalog = ModuleCatalog()
    bottom = [
        catalog.register(
            Module.from_faces(
                "bottom_middle", ModuleKind.FLOOR, default="bottom_side", y_pos="bottom_to_middle"
            )
        )
    ]
    bottom += catalog.register_rotations(
        Module.from_faces(
            "bottom_corner",
            ModuleKind.CORNER,
            default="bottom_side",
            y_pos="bottom_to_middle",
            y_neg="none",
            x_neg="none",
            z_neg="none",
        ),
        weight=0.5,
    )
    catalog.register(
        Module.from_faces(
            "middle_middle",
            ModuleKind.WALL,
            default="middle_side",
            y_pos="middle_to_top",
            y_neg="middle_to_bottom",
        )
    )
    catalog.register_rotations(
        Module.from_faces(
            "middle_corner",
            ModuleKind.CORNER,
            default="middle_side",
            y_pos="middle_to_top",
            y_neg="middle_to_bottom",
            x_neg="none",
            z_neg="none",
        ),
        weight=0.5,
    )
    top = [
        catalog.register(
            Module.from_faces("top_middle", ModuleKind.WALL, default="top_side", y_neg="top_to_middle")
        ),
        catalog.register(
            Module.from_faces("roof_middle", ModuleKind.ROOF, default="roof_side", y_neg="roof_to_middle"),
            weight=0.5,
        ),
    ]
    top += catalog.register_rotations(
        Module.from_faces(
            "top_corner",
            ModuleKind.CORNER,
            default="top_side",
            y_pos="none",
            y_neg="top_to_middle",
            x_neg="none",
            z_neg="none",
        ),
        weight=0.5,
    )
    catalog.freeze()

    return Preset(
        name="stacked_tower",
        catalog=catalog,
        label_pairs={
            ("bottom_to_middle", "middle_to_bottom"),
            ("middle_to_top", "middle_to_bottom"),
            ("middle_to_top", "top_to_middle"),
            ("middle_to_top", "roof_to_middle"),
        },
        layers={
            "bottom": (lambda dims: 0, frozenset(bottom)),
            "top": (lambda dims: dims.height - 1, frozenset(top)),
        },
        min_height=3,
    )


PRESETS: Dict[str, Callable[[], Preset]] = {
    "procedural_building": procedural_building,
    "stacked_tower": stacked_tower,
}


def load_preset(name: str) -> Preset:
    try:
        factory = PRESETS[name]
    except KeyError:
        raise KeyError(f"Unknown preset '{name}'; choose from {sorted(PRESETS)}") from None
    return factory()
