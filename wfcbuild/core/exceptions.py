"""Custom exception hierarchy for the module solver."""


class WFCError(Exception):
    """Base exception for solver failures."""


class CatalogError(WFCError):
    """Raised when a module registration or lookup is invalid."""


class ConstructionError(WFCError):
    """Raised when initial constraints leave a cell without candidates."""


class InvariantError(WFCError):
    """Raised when solver state breaks an invariant the search relies on."""


class ValidationError(WFCError):
    """Raised when a final assignment fails the adjacency checks."""
