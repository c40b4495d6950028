from __future__ import annotations


class PetriSimError(RuntimeError):
    """Base class for all petrisim errors."""


class ConfigurationError(PetriSimError, ValueError):
    """Raised when a net or simulation configuration is malformed."""


class InvariantViolationError(PetriSimError):
    """Raised when a mutation would leave the marking inconsistent.

    Only an implementation bug can trigger this; expected infeasibility is
    reported through ``FireResult`` instead.
    """
