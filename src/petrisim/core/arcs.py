"""
Arc specs: typed, weighted links between a transition and a place.

An arc never holds the Place object itself. ``place`` is an integer handle
into ``Net.places``, so transitions and places never reference each other
directly.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from petrisim.core.errors import ConfigurationError
from petrisim.core.tokens import TokenType


class ArcDirection(Enum):
    INPUT = "input"    # place -> transition (consumed)
    OUTPUT = "output"  # transition -> place (produced)


@dataclass(frozen=True)
class ArcSpec:
    """A (place, transition, token type, weight) constraint."""

    place: int  # Handle into Net.places
    transition: str  # Name of the owning transition
    token_type: TokenType
    weight: int  # Multiplicity, strictly positive
    direction: ArcDirection = ArcDirection.INPUT

    def __post_init__(self):
        if isinstance(self.weight, bool) or not isinstance(self.weight, int):
            raise ConfigurationError(
                f"Arc weight must be an integer, got {self.weight!r} "
                f"on transition {self.transition!r}"
            )
        if self.weight <= 0:
            raise ConfigurationError(
                f"Arc weight must be positive, got {self.weight} "
                f"on transition {self.transition!r}"
            )
        if self.place < 0:
            raise ConfigurationError(f"Invalid place handle {self.place}")

    @property
    def is_input(self) -> bool:
        return self.direction is ArcDirection.INPUT
