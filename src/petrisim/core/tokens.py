"""
Tokens: typed entities that live in places.

A token carries:
- an immutable type tag (which kind of cell it is)
- a mutable dynamical state (Active / Inactive / Dormant)
- an age counter of consecutive steps spent Active

Ids come from a TokenIdAllocator owned by the net. They are never reused,
even when the token that held one is consumed.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from petrisim.core.errors import ConfigurationError, InvariantViolationError


class _ParsableEnum(Enum):
    """Enum that accepts either its value ("CancerA") or its name ("CANCER_A")."""

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            pass
        try:
            return cls[str(value).upper()]
        except KeyError:
            raise ConfigurationError(
                f"Unknown {cls.__name__}: {value!r}"
            ) from None


class TokenType(_ParsableEnum):
    """Closed set of token kinds."""

    NORMAL_A = "NormalA"
    NORMAL_B = "NormalB"
    CANCER_A = "CancerA"
    CANCER_B = "CancerB"

    @property
    def is_cancer(self) -> bool:
        return self in CANCER_TYPES


CANCER_TYPES = frozenset({TokenType.CANCER_A, TokenType.CANCER_B})


class DynamicalState(_ParsableEnum):
    """Per-token finite state."""

    ACTIVE = "Active"
    INACTIVE = "Inactive"
    DORMANT = "Dormant"


class Token:
    """
    A single typed entity.

    ``token_id`` and ``type_tag`` are read-only. ``dynamical_state`` and
    ``age_in_active`` are mutated in place by the DynamicalStateEngine.
    """

    __slots__ = ("_token_id", "_type_tag", "dynamical_state", "age_in_active")

    def __init__(
        self,
        token_id: int,
        type_tag: TokenType,
        dynamical_state: DynamicalState = DynamicalState.INACTIVE,
        age_in_active: int = 0,
    ):
        if age_in_active < 0:
            raise InvariantViolationError(
                f"Token {token_id} created with negative age {age_in_active}"
            )
        self._token_id = token_id
        self._type_tag = TokenType.parse(type_tag)
        self.dynamical_state = DynamicalState.parse(dynamical_state)
        self.age_in_active = age_in_active

    @property
    def token_id(self) -> int:
        return self._token_id

    @property
    def type_tag(self) -> TokenType:
        return self._type_tag

    @property
    def is_cancer(self) -> bool:
        return self._type_tag.is_cancer

    @property
    def is_active(self) -> bool:
        return self.dynamical_state is DynamicalState.ACTIVE

    def copy(self) -> Token:
        """Independent copy with the same id (used for checkpoints)."""
        return Token(
            self._token_id,
            self._type_tag,
            self.dynamical_state,
            self.age_in_active,
        )

    def __repr__(self) -> str:
        return (
            f"Token(id={self._token_id}, type={self._type_tag.value}, "
            f"state={self.dynamical_state.value}, age={self.age_in_active})"
        )


@dataclass
class TokenIdAllocator:
    """Monotonic id source. One per net."""

    next_id: int = 0

    def allocate(self) -> int:
        token_id = self.next_id
        self.next_id += 1
        return token_id
