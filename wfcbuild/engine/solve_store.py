"""Persistent solve document store.

Every solve attempt (success or failure) is saved as a JSON document under
``local_db/collections/solves/``. Documents carry the configuration, the
module names, the assignment (or last grid state) and search stats.
"""

from __future__ import annotations

import json
import uuid
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Optional

from ..utils.logger import get_logger

if TYPE_CHECKING:
    from ..data.catalog import ModuleCatalog
    from .grid import Grid
    from .solver import SolveResult, SolverConfig, SolverStats


LOGGER = get_logger(__name__)

DEFAULT_STORE_DIR = Path("local_db/collections/solves")


class SolveStore:
    """Save solver results as structured JSON documents."""

    def __init__(self, store_dir: Path | str = DEFAULT_STORE_DIR) -> None:
        self.store_dir = Path(store_dir)
        self.store_dir.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def save_success(
        self,
        result: "SolveResult",
        config: "SolverConfig",
        catalog: "ModuleCatalog",
        preset: Optional[str] = None,
    ) -> str:
        """Persist a solved assignment and return its document ID."""
        doc_id = self._new_id()
        doc = {
            "id": doc_id,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "status": "success",
            "preset": preset,
            "config": self._serialize_config(config),
            "seed": result.seed,
            "modules": [catalog.name_of(module_id) for module_id in catalog.all_ids()],
            "assignment": self._serialize_assignment(result.assignment),
            "stats": {
                "search": result.stats.as_dict(),
                "modules": self._compute_usage(result.assignment, catalog),
            },
        }
        self._write(doc_id, doc)
        LOGGER.info("Solve saved: %s", doc_id)
        return doc_id

    def save_failure(
        self,
        config: "SolverConfig",
        error: str,
        stats: Optional["SolverStats"] = None,
        grid: Optional["Grid"] = None,
        preset: Optional[str] = None,
    ) -> str:
        """Persist a failed solve attempt and return its document ID."""
        doc_id = self._new_id()
        doc = {
            "id": doc_id,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "status": "failed",
            "error": error,
            "preset": preset,
            "config": self._serialize_config(config),
            "grid": grid.to_jsonable() if grid is not None else None,
            "stats": {"search": stats.as_dict()} if stats is not None else {},
        }
        self._write(doc_id, doc)
        LOGGER.info("Solve failure saved: %s", doc_id)
        return doc_id

    def load(self, doc_id: str) -> dict:
        path = self.store_dir / f"{doc_id}.json"
        return json.loads(path.read_text(encoding="utf-8"))

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _write(self, doc_id: str, doc: dict) -> None:
        path = self.store_dir / f"{doc_id}.json"
        path.write_text(json.dumps(doc, ensure_ascii=False, indent=2), encoding="utf-8")

    @staticmethod
    def _compute_usage(assignment: Dict, catalog: "ModuleCatalog") -> dict:
        """Per-kind and per-module placement counts."""
        by_module = Counter(catalog.name_of(module_id) for module_id in assignment.values())
        by_kind = Counter(catalog.get(module_id).kind.value for module_id in assignment.values())
        return {
            "cells": len(assignment),
            "distinct_modules": len(by_module),
            "by_kind": dict(sorted(by_kind.items())),
            "by_module": dict(sorted(by_module.items())),
        }

    @staticmethod
    def _serialize_assignment(assignment: Dict) -> list:
        return [
            {"coord": list(coord), "module": module_id}
            for coord, module_id in sorted(assignment.items())
        ]

    @staticmethod
    def _serialize_config(config: "SolverConfig") -> dict:
        return {
            "width": config.width,
            "height": config.height,
            "depth": config.depth,
            "seed": config.seed,
            "constraints": [constraint.label for constraint in config.constraints],
            "overrides": len(config.overrides),
        }

    @staticmethod
    def _new_id() -> str:
        ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
        short_uuid = uuid.uuid4().hex[:8]
        return f"{ts}_{short_uuid}"
