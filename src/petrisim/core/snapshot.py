"""
Snapshot: immutable per-step aggregate of the marking.

Counts are keyed by every (TokenType, DynamicalState) pair, zeros included,
so snapshots from different steps always have the same shape.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping

from petrisim.core.tokens import DynamicalState, TokenType

if TYPE_CHECKING:
    from petrisim.core.net import Net

# Canonical key order for tabular exports
STATE_KEYS: tuple[tuple[TokenType, DynamicalState], ...] = tuple(
    (token_type, state) for token_type in TokenType for state in DynamicalState
)


@dataclass(frozen=True)
class Snapshot:
    """Aggregate (type, state) -> count for one step."""

    step: int
    time: float
    counts: Mapping[tuple[TokenType, DynamicalState], int]
    place_totals: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))
    fired: tuple[str, ...] = ()

    @classmethod
    def capture(
        cls,
        net: "Net",
        step: int,
        time: float,
        fired: tuple[str, ...] = (),
    ) -> Snapshot:
        """Aggregate the current marking of a net."""
        counts = dict.fromkeys(STATE_KEYS, 0)
        place_totals = {}
        for place in net.places:
            for token in place:
                counts[(token.type_tag, token.dynamical_state)] += 1
            place_totals[place.name] = len(place)
        return cls(
            step=step,
            time=time,
            counts=MappingProxyType(counts),
            place_totals=MappingProxyType(place_totals),
            fired=tuple(fired),
        )

    def __hash__(self) -> int:
        return hash((
            self.step,
            self.time,
            frozenset(self.counts.items()),
            frozenset(self.place_totals.items()),
            self.fired,
        ))

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def count(
        self,
        token_type: TokenType | None = None,
        state: DynamicalState | None = None,
    ) -> int:
        """Sum of counts matching the given type and/or state (None = any)."""
        return sum(
            n for (t, s), n in self.counts.items()
            if (token_type is None or t is token_type)
            and (state is None or s is state)
        )

    def as_dict(self) -> dict[str, int]:
        """Flat {"NormalA/Active": n, ...} mapping, in canonical key order."""
        return {
            f"{t.value}/{s.value}": self.counts[(t, s)]
            for t, s in STATE_KEYS
        }


def initial_snapshot(net: "Net", step_size: float = 1.0) -> Snapshot:
    """Snapshot of the net as it stands, tagged with its step counter."""
    return Snapshot.capture(net, step=net.step_index, time=net.step_index * step_size)
