"""
Net: owns places, transitions and the token id allocator.

Construction goes through ``build_net(config)``, which validates the whole
configuration up front. A malformed net fails there, never in the middle of a
simulation step.

Places live in an indexable list. Arc specs refer to them by index, and a
name index maps place names to those handles.
"""

from __future__ import annotations
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

import numpy as np

from petrisim.core.arcs import ArcDirection, ArcSpec
from petrisim.core.errors import ConfigurationError, InvariantViolationError
from petrisim.core.place import Place
from petrisim.core.population import generate_population
from petrisim.core.tokens import DynamicalState, Token, TokenIdAllocator, TokenType
from petrisim.core.transition import Transition

LOGGER = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════
# CONFIGURATION
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ArcConfig:
    """One (weight, place, token_type) triple."""

    weight: int
    place: str
    token_type: TokenType

    def __post_init__(self):
        object.__setattr__(self, "token_type", TokenType.parse(self.token_type))

    @classmethod
    def coerce(cls, value: Any) -> ArcConfig:
        """Accept an ArcConfig, a (weight, place, type) triple or a mapping."""
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            try:
                return cls(value["weight"], value["place"], value["token_type"])
            except KeyError as exc:
                raise ConfigurationError(
                    f"Arc mapping is missing key {exc}: {dict(value)!r}"
                ) from None
        try:
            weight, place, token_type = value
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"Arc must be a (weight, place, token_type) triple, got {value!r}"
            ) from None
        return cls(weight, place, token_type)


@dataclass(frozen=True)
class TransitionConfig:
    """Named transition with input and output arc triples."""

    name: str
    inputs: tuple[ArcConfig, ...] = ()
    outputs: tuple[ArcConfig, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "inputs", tuple(ArcConfig.coerce(a) for a in self.inputs))
        object.__setattr__(self, "outputs", tuple(ArcConfig.coerce(a) for a in self.outputs))


@dataclass(frozen=True)
class PopulationConfig:
    """Random bootstrap population."""

    size: int
    type_weights: Mapping[str, float] | None = None  # Uniform if None
    state_weights: Mapping[str, float] | None = None  # Uniform if None
    places: tuple[str, ...] | None = None  # Target places (all places if None)

    def __post_init__(self):
        if isinstance(self.size, bool) or not isinstance(self.size, int) or self.size < 0:
            raise ConfigurationError(
                f"Population size must be a non-negative integer, got {self.size!r}"
            )
        if self.places is not None:
            object.__setattr__(self, "places", tuple(self.places))


@dataclass
class NetConfig:
    """Configuration for a net."""

    places: Sequence[str]
    transitions: Sequence[TransitionConfig] = ()
    # Explicit bootstrap tokens: place name -> [(type, state), ...]
    initial_marking: Mapping[str, Sequence[tuple[Any, Any]]] = field(default_factory=dict)
    population: PopulationConfig | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> NetConfig:
        """
        Build a NetConfig from plain (JSON-like) data.

        Expected keys: "places", optional "transitions" (each with "name",
        "inputs", "outputs"), "initial_marking" and "population".
        """
        try:
            transitions = [
                TransitionConfig(
                    name=t["name"],
                    inputs=tuple(t.get("inputs", ())),
                    outputs=tuple(t.get("outputs", ())),
                )
                for t in data.get("transitions", ())
            ]
            population = data.get("population")
            if population is not None:
                population = PopulationConfig(**population)
            return cls(
                places=list(data["places"]),
                transitions=transitions,
                initial_marking=dict(data.get("initial_marking", {})),
                population=population,
            )
        except (KeyError, TypeError) as exc:
            raise ConfigurationError(f"Malformed net configuration: {exc}") from exc


# ═══════════════════════════════════════════════════════════════
# NET
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class NetCheckpoint:
    """Copy of all mutable net state, for rollback."""

    place_tokens: tuple[tuple[Token, ...], ...]
    next_id: int
    step_index: int


class Net:
    """
    The marking plus the fixed structure (places, transitions).

    The scheduler is the only mutator during a run.
    """

    def __init__(
        self,
        places: Sequence[Place],
        transitions: Sequence[Transition] = (),
        ids: TokenIdAllocator | None = None,
    ):
        self.places: list[Place] = list(places)
        self.transitions: list[Transition] = list(transitions)
        self.ids = ids if ids is not None else TokenIdAllocator()
        self.step_index = 0  # Completed steps

        self._place_index = {place.name: i for i, place in enumerate(self.places)}
        self._transition_index = {t.name: i for i, t in enumerate(self.transitions)}

    def place_handle(self, name: str) -> int:
        try:
            return self._place_index[name]
        except KeyError:
            raise KeyError(f"No place named {name!r}") from None

    def place(self, name: str) -> Place:
        return self.places[self.place_handle(name)]

    def transition(self, name: str) -> Transition:
        try:
            return self.transitions[self._transition_index[name]]
        except KeyError:
            raise KeyError(f"No transition named {name!r}") from None

    def total_tokens(self) -> int:
        return sum(len(place) for place in self.places)

    def marking(self) -> dict[str, Counter]:
        """Per-place counts by type tag."""
        return {place.name: place.counts() for place in self.places}

    def new_token(
        self,
        token_type: TokenType,
        state: DynamicalState = DynamicalState.INACTIVE,
    ) -> Token:
        """Create a token with a freshly allocated id (not yet placed)."""
        return Token(self.ids.allocate(), token_type, state)

    def apply_firing(
        self,
        removals: Mapping[int, Sequence[int]],
        additions: Sequence[tuple[int, Token]],
    ) -> list[Token]:
        """
        Apply one firing's mutation: remove by index, then insert.

        Everything is validated before the first change, so a failure leaves
        the marking untouched.

        Args:
            removals: place handle -> indices of tokens to consume
            additions: (place handle, token) pairs to insert

        Returns:
            Consumed tokens
        """
        for handle, indices in removals.items():
            if not 0 <= handle < len(self.places):
                raise InvariantViolationError(f"Unknown place handle {handle}")
            size = len(self.places[handle])
            if len(set(indices)) != len(indices) or any(not 0 <= i < size for i in indices):
                raise InvariantViolationError(
                    f"Invalid removal indices {sorted(indices)} for place "
                    f"{self.places[handle].name!r} holding {size} tokens"
                )

        seen_ids = set()
        for handle, token in additions:
            if not 0 <= handle < len(self.places):
                raise InvariantViolationError(f"Unknown place handle {handle}")
            if token.token_id in seen_ids or self.places[handle].contains(token.token_id):
                raise InvariantViolationError(
                    f"Duplicate token id {token.token_id} inserted into "
                    f"{self.places[handle].name!r}"
                )
            seen_ids.add(token.token_id)

        consumed = []
        for handle, indices in removals.items():
            consumed.extend(self.places[handle].remove_at(indices))
        for handle, token in additions:
            self.places[handle].add(token)
        return consumed

    def checkpoint(self) -> NetCheckpoint:
        return NetCheckpoint(
            place_tokens=tuple(
                tuple(token.copy() for token in place) for place in self.places
            ),
            next_id=self.ids.next_id,
            step_index=self.step_index,
        )

    def restore(self, checkpoint: NetCheckpoint) -> None:
        """Roll the marking back to a checkpoint."""
        for place, tokens in zip(self.places, checkpoint.place_tokens):
            place.replace_tokens(token.copy() for token in tokens)
        # Ids handed out after the checkpoint stay burned
        self.ids.next_id = max(self.ids.next_id, checkpoint.next_id)
        self.step_index = checkpoint.step_index

    def check_invariants(self) -> None:
        """Raise InvariantViolationError if the marking is inconsistent."""
        seen = set()
        for place in self.places:
            for token in place:
                if token.token_id in seen:
                    raise InvariantViolationError(
                        f"Token {token.token_id} appears more than once in the net"
                    )
                seen.add(token.token_id)
                if token.token_id >= self.ids.next_id:
                    raise InvariantViolationError(
                        f"Token {token.token_id} was not issued by this net"
                    )
                if token.age_in_active < 0:
                    raise InvariantViolationError(f"{token} has negative age")
                if not token.is_active and token.age_in_active != 0:
                    raise InvariantViolationError(f"{token} is not Active but has an age")


# ═══════════════════════════════════════════════════════════════
# CONSTRUCTION
# ═══════════════════════════════════════════════════════════════


def _validate(config: NetConfig) -> None:
    names = list(config.places)
    duplicates = sorted(name for name, n in Counter(names).items() if n > 1)
    if duplicates:
        raise ConfigurationError(f"Duplicate place names: {duplicates}")
    known = set(names)

    t_names = [t.name for t in config.transitions]
    duplicates = sorted(name for name, n in Counter(t_names).items() if n > 1)
    if duplicates:
        raise ConfigurationError(f"Duplicate transition names: {duplicates}")

    for t in config.transitions:
        for arc in (*t.inputs, *t.outputs):
            if arc.place not in known:
                raise ConfigurationError(
                    f"Transition {t.name!r} references unknown place {arc.place!r}"
                )

    for name in config.initial_marking:
        if name not in known:
            raise ConfigurationError(f"Initial marking references unknown place {name!r}")

    if config.population is not None and config.population.places is not None:
        if not config.population.places:
            raise ConfigurationError("Population target places must not be empty")
        for name in config.population.places:
            if name not in known:
                raise ConfigurationError(f"Population references unknown place {name!r}")


def _resolve_arcs(
    transition: TransitionConfig,
    arcs: Sequence[ArcConfig],
    direction: ArcDirection,
    handles: Mapping[str, int],
) -> tuple[ArcSpec, ...]:
    return tuple(
        ArcSpec(
            place=handles[arc.place],
            transition=transition.name,
            token_type=arc.token_type,
            weight=arc.weight,
            direction=direction,
        )
        for arc in arcs
    )


def build_net(config: NetConfig, rng: np.random.Generator | None = None) -> Net:
    """
    Construct a Net from configuration.

    Args:
        config: Places, transitions, explicit marking and optional population
        rng: Random source; required only when ``config.population`` is set

    Returns:
        A Net at step 0

    Raises:
        ConfigurationError: on any malformed configuration
    """
    _validate(config)

    places = [Place(name) for name in config.places]
    handles = {name: i for i, name in enumerate(config.places)}

    transitions = [
        Transition(
            name=t.name,
            inputs=_resolve_arcs(t, t.inputs, ArcDirection.INPUT, handles),
            outputs=_resolve_arcs(t, t.outputs, ArcDirection.OUTPUT, handles),
        )
        for t in config.transitions
    ]

    net = Net(places, transitions)

    for name, pairs in config.initial_marking.items():
        place = net.place(name)
        for pair in pairs:
            try:
                token_type, state = pair
            except (TypeError, ValueError):
                raise ConfigurationError(
                    f"Initial marking of {name!r} needs (token_type, state) pairs, got {pair!r}"
                ) from None
            place.add(net.new_token(TokenType.parse(token_type), DynamicalState.parse(state)))

    if config.population is not None:
        if rng is None:
            raise ConfigurationError("A random population requires an explicit rng")
        pop = config.population
        pairs = generate_population(rng, pop.size, pop.type_weights, pop.state_weights)
        targets = pop.places if pop.places is not None else tuple(config.places)
        if pairs and not targets:
            raise ConfigurationError("Population has no place to go to")
        populate(net, pairs, targets, rng)

    LOGGER.debug(
        "Built net with %d places, %d transitions, %d tokens",
        len(net.places), len(net.transitions), net.total_tokens(),
    )
    return net


def populate(
    net: Net,
    pairs: Sequence[tuple[TokenType, DynamicalState]],
    places: Sequence[str],
    rng: np.random.Generator,
) -> None:
    """Spread (type, state) pairs over ``places`` by uniform random draws."""
    if not pairs:
        return
    handles = [net.place_handle(name) for name in places]
    targets = rng.integers(len(handles), size=len(pairs))
    for (token_type, state), target in zip(pairs, targets):
        net.places[handles[target]].add(net.new_token(token_type, state))
