"""
Transitions: feasibility and atomic firing.

``feasible`` is a pure predicate over the current marking. ``fire`` never
raises for an expected outcome: an infeasible or gated transition comes back
as a NOT_FIRED result and the marking is untouched.

Firing is all-or-nothing. Input tokens are picked by index, output tokens
are built and initialised, and only then does the net apply the whole
mutation in one validated call.
"""

from __future__ import annotations
import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from petrisim.core.arcs import ArcSpec
from petrisim.core.errors import ConfigurationError
from petrisim.core.tokens import Token, TokenType

if TYPE_CHECKING:
    from petrisim.core.dynamics import DynamicalStateEngine
    from petrisim.core.net import Net

LOGGER = logging.getLogger(__name__)

DEFAULT_GATING_THRESHOLD = 30


@dataclass(frozen=True)
class Transition:
    """Named bundle of input and output arcs."""

    name: str
    inputs: tuple[ArcSpec, ...] = ()
    outputs: tuple[ArcSpec, ...] = ()

    @property
    def consumed_count(self) -> int:
        """Total tokens taken by one firing."""
        return sum(arc.weight for arc in self.inputs)

    @property
    def produced_count(self) -> int:
        """Total tokens created by one firing."""
        return sum(arc.weight for arc in self.outputs)

    @property
    def delta(self) -> int:
        """Net change in total token count for one firing."""
        return self.produced_count - self.consumed_count

    @property
    def consumes_cancer(self) -> bool:
        return any(arc.token_type.is_cancer for arc in self.inputs)

    def requirements(self) -> dict[tuple[int, TokenType], int]:
        """Required count per (place handle, token type), summed over arcs."""
        needed: dict[tuple[int, TokenType], int] = defaultdict(int)
        for arc in self.inputs:
            needed[(arc.place, arc.token_type)] += arc.weight
        return dict(needed)


@dataclass(frozen=True)
class FiringGate:
    """
    Extra admission rule applied to feasible transitions.

    A transition passes when it consumes at least one Cancer-tagged token
    (if ``require_cancer``) and its total consumption is strictly greater
    than ``threshold``. A ``threshold`` of None drops the consumption bound.
    """

    threshold: int | None = DEFAULT_GATING_THRESHOLD
    require_cancer: bool = True

    def __post_init__(self):
        if self.threshold is None:
            return
        if isinstance(self.threshold, bool) or not isinstance(self.threshold, int):
            raise ConfigurationError(
                f"Gating threshold must be an integer, got {self.threshold!r}"
            )
        if self.threshold <= 0:
            raise ConfigurationError(
                f"Gating threshold must be positive, got {self.threshold}"
            )

    @classmethod
    def disabled(cls) -> FiringGate:
        """Gate that admits every feasible transition."""
        return cls(threshold=None, require_cancer=False)

    def admits(self, transition: Transition) -> bool:
        if self.require_cancer and not transition.consumes_cancer:
            return False
        if self.threshold is None:
            return True
        return transition.consumed_count > self.threshold


DEFAULT_GATE = FiringGate()


class FireStatus(Enum):
    FIRED = "fired"
    NOT_FIRED = "not_fired"


class NotFiredReason(Enum):
    INFEASIBLE = "infeasible"  # Not enough tokens on some input arc
    GATED = "gated"            # Feasible, rejected by the FiringGate


@dataclass(frozen=True)
class FireResult:
    """Outcome of one ``fire`` call."""

    status: FireStatus
    reason: NotFiredReason | None = None
    consumed: tuple[Token, ...] = ()
    produced: tuple[Token, ...] = ()

    @property
    def fired(self) -> bool:
        return self.status is FireStatus.FIRED

    @classmethod
    def not_fired(cls, reason: NotFiredReason) -> FireResult:
        return cls(status=FireStatus.NOT_FIRED, reason=reason)


def feasible(transition: Transition, net: "Net") -> bool:
    """True if every input arc can be satisfied from the current marking."""
    for (handle, token_type), required in transition.requirements().items():
        if net.places[handle].count(token_type) < required:
            return False
    return True


def fire(
    transition: Transition,
    net: "Net",
    engine: "DynamicalStateEngine",
    gate: FiringGate = DEFAULT_GATE,
) -> FireResult:
    """
    Fire a transition atomically.

    Args:
        transition: Transition to fire
        net: Net whose places are mutated
        engine: Assigns the initial dynamical state of produced tokens
        gate: Admission rule for feasible transitions; pass
            ``FiringGate.disabled()`` to fire ungated

    Returns:
        FireResult. NOT_FIRED results leave the marking unchanged.
    """
    if not feasible(transition, net):
        LOGGER.debug("Transition %s not fired: infeasible", transition.name)
        return FireResult.not_fired(NotFiredReason.INFEASIBLE)

    if not gate.admits(transition):
        LOGGER.debug(
            "Transition %s not fired: gated (consumes %d, threshold %s)",
            transition.name, transition.consumed_count, gate.threshold,
        )
        return FireResult.not_fired(NotFiredReason.GATED)

    removals = _select_inputs(transition, net)
    additions = _build_outputs(transition, net, engine)
    consumed = net.apply_firing(removals, additions)

    produced = tuple(token for _, token in additions)
    LOGGER.debug(
        "Transition %s fired: consumed %d, produced %d",
        transition.name, len(consumed), len(produced),
    )
    return FireResult(
        status=FireStatus.FIRED,
        consumed=tuple(consumed),
        produced=produced,
    )


def _select_inputs(transition: Transition, net: "Net") -> dict[int, list[int]]:
    """Pick concrete token indices for every input arc, without mutating."""
    claimed: dict[int, list[int]] = defaultdict(list)
    for arc in transition.inputs:
        place = net.places[arc.place]
        picked = place.indices_of(arc.token_type, limit=arc.weight, exclude=claimed[arc.place])
        claimed[arc.place].extend(picked)
    return dict(claimed)


def _build_outputs(
    transition: Transition,
    net: "Net",
    engine: "DynamicalStateEngine",
) -> list[tuple[int, Token]]:
    """Create fresh output tokens, initialised from each destination's pre-fire signal."""
    signals = {arc.place: net.places[arc.place].has_cancer() for arc in transition.outputs}
    additions = []
    for arc in transition.outputs:
        for _ in range(arc.weight):
            token = net.new_token(arc.token_type)
            engine.update(token, signals[arc.place])
            additions.append((arc.place, token))
    return additions
