"""Directional compatibility relation between catalog modules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional, Set, Tuple

import numpy as np

from ..core.constants import NONE_LABEL, OPPOSITE_ORDER, Direction
from ..core.exceptions import ConstructionError, InvariantError
from ..data.catalog import ModuleCatalog
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)

LabelPair = Tuple[str, str]


@dataclass(frozen=True)
class CompatibilityOverride:
    """Explicit decision for one ``(a, b, direction)`` triple."""

    module_a: int
    module_b: int
    direction: Direction
    allowed: bool


def close_label_pairs(pairs: Optional[Iterable[LabelPair]]) -> Set[LabelPair]:
    """Return the symmetric closure of ``pairs`` without the none label."""

    closed: Set[LabelPair] = set()
    for left, right in pairs or ():
        if NONE_LABEL in (left, right):
            continue
        closed.add((left, right))
        closed.add((right, left))
    return closed


class CompatibilityOracle:
    """Dense ``[a][b][direction] -> bool`` table.

    ``compatible(a, b, d)`` answers whether ``b`` may sit next to ``a`` in
    direction ``d`` of ``a``. Every write also sets the inverse triple
    ``(b, a, opposite(d))`` so the relation stays symmetric. Triples that no
    rule decides are incompatible.
    """

    def __init__(self, size: int) -> None:
        if size < 0:
            raise ValueError("Oracle size must be non-negative")
        self.size = size
        self._table = np.zeros((size, size, len(Direction)), dtype=bool)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def from_catalog(
        cls,
        catalog: ModuleCatalog,
        label_pairs: Optional[Iterable[LabelPair]] = None,
    ) -> "CompatibilityOracle":
        """Derive the relation from connector labels.

        Facing labels are compatible when they are equal or listed in
        ``label_pairs``; the none label never matches anything.
        """

        catalog.freeze()
        oracle = cls(len(catalog))
        pairs = close_label_pairs(label_pairs)
        modules = [catalog.get(module_id) for module_id in catalog.all_ids()]
        for direction in Direction:
            facing = direction.opposite()
            for a, module_a in enumerate(modules):
                label_a = module_a.label(direction)
                if label_a == NONE_LABEL:
                    continue
                for b, module_b in enumerate(modules):
                    label_b = module_b.label(facing)
                    if label_b == NONE_LABEL:
                        continue
                    if label_a == label_b or (label_a, label_b) in pairs:
                        oracle._table[a, b, direction.value] = True
        LOGGER.debug(
            "Derived compatibility table for %d modules (%d allowed triples)",
            oracle.size,
            int(oracle._table.sum()),
        )
        return oracle

    @classmethod
    def from_rules(
        cls,
        size: int,
        rules: Iterable[Tuple[int, int, Direction]],
    ) -> "CompatibilityOracle":
        """Build from an explicit list of allowed triples; all else is forbidden."""

        oracle = cls(size)
        for module_a, module_b, direction in rules:
            oracle.override(module_a, module_b, direction, True)
        return oracle

    def copy(self) -> "CompatibilityOracle":
        clone = CompatibilityOracle(self.size)
        clone._table = self._table.copy()
        return clone

    # ------------------------------------------------------------------
    # Overrides
    # ------------------------------------------------------------------
    def override(self, module_a: int, module_b: int, direction: Direction, allowed: bool) -> None:
        self._check_ids(module_a, module_b)
        direction = Direction(direction)
        self._table[module_a, module_b, direction.value] = allowed
        self._table[module_b, module_a, direction.opposite().value] = allowed

    def apply(self, overrides: Iterable[CompatibilityOverride]) -> None:
        for item in overrides:
            self.override(item.module_a, item.module_b, item.direction, item.allowed)

    def forbid_direction(self, module_id: int, direction: Direction) -> None:
        """Forbid every neighbour of ``module_id`` in ``direction``."""

        self._check_ids(module_id, module_id)
        direction = Direction(direction)
        self._table[module_id, :, direction.value] = False
        self._table[:, module_id, direction.opposite().value] = False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def compatible(self, module_a: int, module_b: int, direction: Direction) -> bool:
        self._check_ids(module_a, module_b)
        return bool(self._table[module_a, module_b, int(direction)])

    def supported(self, domain: Iterable[int], direction: Direction) -> FrozenSet[int]:
        """Modules supported in ``direction`` by at least one member of ``domain``."""

        ids = sorted(domain)
        if not ids:
            return frozenset()
        mask = self._table[ids, :, int(direction)].any(axis=0)
        return frozenset(np.flatnonzero(mask).tolist())

    def allowed_pairs(self, direction: Direction) -> List[Tuple[int, int]]:
        return [(int(a), int(b)) for a, b in np.argwhere(self._table[:, :, int(direction)])]

    def check_symmetry(self) -> None:
        mirrored = self._table.transpose(1, 0, 2)[:, :, list(OPPOSITE_ORDER)]
        if not np.array_equal(self._table, mirrored):
            a, b, d = (int(v) for v in np.argwhere(self._table != mirrored)[0])
            raise InvariantError(
                f"Compatibility table is asymmetric at ({a}, {b}, {Direction(d).short})"
            )

    def _check_ids(self, *module_ids: int) -> None:
        for module_id in module_ids:
            if not 0 <= module_id < self.size:
                raise ConstructionError(
                    f"Module id {module_id} outside oracle range 0..{self.size - 1}"
                )
