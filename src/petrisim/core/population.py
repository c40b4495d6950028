"""
Random initial population: (type tag, dynamical state) pairs for bootstrap tokens.
"""

from __future__ import annotations
from typing import Mapping

import numpy as np

from petrisim.core.errors import ConfigurationError
from petrisim.core.tokens import DynamicalState, TokenType


def _probabilities(weights: Mapping | None, enum_cls) -> tuple[list, np.ndarray]:
    members = list(enum_cls)
    if weights is None:
        return members, np.full(len(members), 1.0 / len(members))

    parsed = {enum_cls.parse(key): float(value) for key, value in weights.items()}
    p = np.array([parsed.get(member, 0.0) for member in members], dtype=np.float64)
    if np.any(p < 0) or p.sum() <= 0:
        raise ConfigurationError(
            f"{enum_cls.__name__} weights must be non-negative with a positive sum: {weights}"
        )
    return members, p / p.sum()


def generate_population(
    rng: np.random.Generator,
    size: int,
    type_weights: Mapping | None = None,
    state_weights: Mapping | None = None,
) -> list[tuple[TokenType, DynamicalState]]:
    """
    Draw ``size`` independent (type, state) pairs.

    Args:
        rng: Random source
        size: Number of pairs
        type_weights: Relative weight per token type (uniform if None)
        state_weights: Relative weight per dynamical state (uniform if None)

    Returns:
        List of (TokenType, DynamicalState) pairs
    """
    if isinstance(size, bool) or not isinstance(size, int) or size < 0:
        raise ConfigurationError(f"Population size must be a non-negative integer, got {size!r}")

    types, type_p = _probabilities(type_weights, TokenType)
    states, state_p = _probabilities(state_weights, DynamicalState)

    type_idx = rng.choice(len(types), size=size, p=type_p)
    state_idx = rng.choice(len(states), size=size, p=state_p)
    return [(types[t], states[s]) for t, s in zip(type_idx, state_idx)]
