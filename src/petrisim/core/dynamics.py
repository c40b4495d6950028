"""
Dynamical state engine: the per-token finite-state machine.

Three states, one rule applied once per token per step:

    Dormant / Inactive + cancer present  ->  Active (age 0)
    Active (any signal)                  ->  age + 1, Dormant (age 0) at max_active_time
    Dormant / Inactive, no cancer        ->  unchanged

The cancer signal is a property of the place, computed once from its contents
BEFORE any of its tokens is updated in that step. Tokens only read their own
place and only mutate their own fields, so places are independent of each
other during a refresh.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING

from petrisim.core.errors import ConfigurationError
from petrisim.core.tokens import DynamicalState, Token

if TYPE_CHECKING:
    from petrisim.core.net import Net
    from petrisim.core.place import Place


@dataclass(frozen=True)
class DynamicalStateEngine:
    """Applies the Active/Inactive/Dormant update rule."""

    max_active_time: int  # Steps a token may stay Active before going Dormant

    def __post_init__(self):
        if isinstance(self.max_active_time, bool) or not isinstance(self.max_active_time, int):
            raise ConfigurationError(
                f"max_active_time must be an integer, got {self.max_active_time!r}"
            )
        if self.max_active_time <= 0:
            raise ConfigurationError(
                f"max_active_time must be positive, got {self.max_active_time}"
            )

    def update(self, token: Token, cancer_present: bool) -> Token:
        """Advance one token by one step (in place). Returns the same token."""
        if token.dynamical_state is DynamicalState.ACTIVE:
            token.age_in_active += 1
            if token.age_in_active >= self.max_active_time:
                token.dynamical_state = DynamicalState.DORMANT
                token.age_in_active = 0
        elif cancer_present:
            token.dynamical_state = DynamicalState.ACTIVE
            token.age_in_active = 0
        return token

    def refresh_place(self, place: "Place") -> bool:
        """
        Update every token in a place using the place's pre-step signal.

        Returns:
            The cancer-presence signal that was applied
        """
        cancer_present = place.has_cancer()
        for token in place:
            self.update(token, cancer_present)
        return cancer_present

    def refresh(self, net: "Net") -> dict[str, bool]:
        """Refresh every place of a net. Returns the signal used per place."""
        return {place.name: self.refresh_place(place) for place in net.places}
