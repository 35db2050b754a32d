"""Data models supporting the module solver."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional, Set, Tuple

from .constants import NONE_LABEL, CellStatus, Coord, Direction, ModuleKind


@dataclass(frozen=True)
class Module:
    """A placeable piece with one connector label per direction.

    ``connectors`` is ordered X+, X-, Y+, Y-, Z+, Z- (see :class:`Direction`).
    """

    name: str
    connectors: Tuple[str, str, str, str, str, str] = (NONE_LABEL,) * 6
    kind: ModuleKind = ModuleKind.SPECIAL

    def label(self, direction: Direction) -> str:
        return self.connectors[int(direction)]

    @classmethod
    def from_faces(
        cls,
        name: str,
        kind: ModuleKind = ModuleKind.SPECIAL,
        default: str = NONE_LABEL,
        **faces: str,
    ) -> "Module":
        """Build a module from keyword faces ``x_pos``, ``y_neg`` ... ."""

        labels = [default] * 6
        for key, label in faces.items():
            labels[Direction[key.upper()].value] = label
        return cls(name=name, connectors=tuple(labels), kind=kind)  # type: ignore[arg-type]


@dataclass
class Cell:
    """A grid position with its remaining candidate modules."""

    coord: Coord
    domain: Set[int] = field(default_factory=set)
    status: CellStatus = CellStatus.OPEN

    @property
    def is_open(self) -> bool:
        return self.status == CellStatus.OPEN

    @property
    def is_collapsed(self) -> bool:
        return self.status == CellStatus.COLLAPSED

    @property
    def entropy(self) -> int:
        return len(self.domain)

    @property
    def module_id(self) -> Optional[int]:
        if self.is_collapsed and len(self.domain) == 1:
            return next(iter(self.domain))
        return None


@dataclass
class BacktrackRecord:
    """Undo information for one collapse decision.

    ``trail`` maps every open cell narrowed by propagation while this record
    was the newest decision to its domain before the first narrowing.
    """

    coord: Coord
    snapshot: FrozenSet[int]
    choice: int
    trail: Dict[Coord, FrozenSet[int]] = field(default_factory=dict)
