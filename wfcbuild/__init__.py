"""Wave-function-collapse solver for 3D modular buildings.

This package exposes the public API surface via:

- ``wfcbuild.engine.solver.WFCSolver``: step-wise select, collapse, propagate and backtrack.
- ``wfcbuild.data.catalog.ModuleCatalog``: registers modules, weights and rotations.
- ``wfcbuild.engine.oracle.CompatibilityOracle``: directional adjacency rules.
- ``wfcbuild.data.presets`` helpers: ready-made building catalogs.
"""

from .core.constants import Dimensions, Direction, ModuleKind, StepResult
from .core.models import Module
from .data.catalog import ModuleCatalog
from .engine.oracle import CompatibilityOracle, CompatibilityOverride
from .engine.solver import SolveResult, SolverConfig, WFCSolver

__all__ = [
    "CompatibilityOracle",
    "CompatibilityOverride",
    "Dimensions",
    "Direction",
    "Module",
    "ModuleCatalog",
    "ModuleKind",
    "SolveResult",
    "SolverConfig",
    "StepResult",
    "WFCSolver",
]

__version__ = "0.1.0"
