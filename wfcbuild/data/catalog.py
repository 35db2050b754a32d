"""Module catalog: registration, weights and rotated variants."""

from __future__ import annotations

import math
from typing import Callable, Dict, List, Optional

from ..core.constants import Direction, ModuleKind
from ..core.exceptions import CatalogError
from ..core.models import Module
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)

DEFAULT_WEIGHT = 1.0

# Source face for each target face after one quarter turn about Y.
_QUARTER_TURN = (
    Direction.Z_POS,  # X+ <- Z+
    Direction.Z_NEG,  # X- <- Z-
    Direction.Y_POS,
    Direction.Y_NEG,
    Direction.X_NEG,  # Z+ <- X-
    Direction.X_POS,  # Z- <- X+
)

_HORIZONTAL = (Direction.X_POS, Direction.X_NEG, Direction.Z_POS, Direction.Z_NEG)


def rotate_y(module: Module, quarter_turns: int = 1) -> Module:
    """Return ``module`` rotated by ``quarter_turns`` * 90 degrees about Y."""

    turns = quarter_turns % 4
    connectors = list(module.connectors)
    for _ in range(turns):
        connectors = [connectors[source.value] for source in _QUARTER_TURN]
    name = module.name if turns == 0 else f"{module.name}_r{turns * 90}"
    return Module(name=name, connectors=tuple(connectors), kind=module.kind)  # type: ignore[arg-type]


def needs_rotation(module: Module) -> bool:
    """True when the four horizontal faces do not all carry the same label."""

    return len({module.label(direction) for direction in _HORIZONTAL}) > 1


class ModuleCatalog:
    """Registry of module definitions keyed by stable integer ids.

    Ids are handed out in registration order. Once the catalog is frozen
    (which happens when an oracle or solver is built from it) no further
    modules may be registered.
    """

    def __init__(self) -> None:
        self._modules: List[Module] = []
        self._weights: List[float] = []
        self._by_name: Dict[str, int] = {}
        self._frozen = False

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def register(self, module: Module, weight: Optional[float] = None) -> int:
        if self._frozen:
            raise CatalogError("Catalog is frozen; register all modules before solving")
        if len(module.connectors) != 6:
            raise CatalogError(
                f"Module '{module.name}' needs 6 connector labels, got {len(module.connectors)}"
            )
        if module.name in self._by_name:
            raise CatalogError(f"Duplicate module name '{module.name}'")
        value = DEFAULT_WEIGHT if weight is None else float(weight)
        if math.isnan(value) or math.isinf(value) or value < 0:
            raise CatalogError(f"Module '{module.name}' has invalid weight {weight!r}")

        module_id = len(self._modules)
        self._modules.append(module)
        self._weights.append(value)
        self._by_name[module.name] = module_id
        LOGGER.debug("Registered module %s as id %d (weight %.3f)", module.name, module_id, value)
        return module_id

    def register_rotations(self, module: Module, weight: Optional[float] = None) -> List[int]:
        """Register ``module`` plus its distinct 90/180/270 degree rotations."""

        ids = [self.register(module, weight)]
        if not needs_rotation(module):
            return ids
        seen = {module.connectors}
        for turns in (1, 2, 3):
            variant = rotate_y(module, turns)
            if variant.connectors in seen:
                continue
            seen.add(variant.connectors)
            ids.append(self.register(variant, weight))
        return ids

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def get(self, module_id: int) -> Module:
        self._check(module_id)
        return self._modules[module_id]

    def weight(self, module_id: int) -> float:
        self._check(module_id)
        return self._weights[module_id]

    def all_ids(self) -> List[int]:
        return list(range(len(self._modules)))

    def id_of(self, name: str) -> int:
        try:
            return self._by_name[name]
        except KeyError:
            raise CatalogError(f"Unknown module name '{name}'") from None

    def name_of(self, module_id: int) -> str:
        return self.get(module_id).name

    def ids_where(self, predicate: Callable[[Module], bool]) -> List[int]:
        return [module_id for module_id, module in enumerate(self._modules) if predicate(module)]

    def ids_of_kind(self, *kinds: ModuleKind) -> List[int]:
        wanted = set(kinds)
        return self.ids_where(lambda module: module.kind in wanted)

    def __len__(self) -> int:
        return len(self._modules)

    def __contains__(self, module_id: object) -> bool:
        return isinstance(module_id, int) and 0 <= module_id < len(self._modules)

    def _check(self, module_id: int) -> None:
        if module_id not in self:
            raise CatalogError(f"Unknown module id {module_id!r}")
