"""
Rate estimators: firing weights for enabled transitions.

Each input arc contributes a density, either count / weight ("normalized")
or the raw count ("raw"). A policy folds the densities into one
non-negative weight. The scheduler sees only the RateEstimator protocol and
does not know which policy is active.

The probabilistic policy draws fresh on every call and keeps no state
between steps.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, Protocol

import numpy as np

from petrisim.core.errors import ConfigurationError

if TYPE_CHECKING:
    from petrisim.core.net import Net
    from petrisim.core.transition import Transition

DensityMode = Literal["normalized", "raw"]
RatePolicy = Literal["weighted_average", "maximum", "minimum", "probabilistic"]

DENSITY_MODES = ("normalized", "raw")

# Rate of a transition with no input arcs, under every policy
EMPTY_INPUT_RATE = 1.0


def arc_densities(
    transition: "Transition",
    net: "Net",
    density: DensityMode = "normalized",
) -> np.ndarray:
    """Density per input arc, in arc order."""
    counts = np.array(
        [net.places[arc.place].count(arc.token_type) for arc in transition.inputs],
        dtype=np.float64,
    )
    if density == "raw":
        return counts
    weights = np.array([arc.weight for arc in transition.inputs], dtype=np.float64)
    return counts / weights


class RateEstimator(Protocol):
    """Protocol for rate policies."""

    def weight(
        self,
        transition: "Transition",
        net: "Net",
        rng: np.random.Generator,
    ) -> float:
        """
        Compute the firing weight of an enabled transition.

        Args:
            transition: A transition already judged feasible
            net: Net holding the current marking
            rng: Random source (only the probabilistic policy draws from it)

        Returns:
            Non-negative weight
        """
        ...


@dataclass(frozen=True)
class WeightedAverageRate:
    """Σ(density × weight) / Σ weight over the input arcs."""

    density: DensityMode = "normalized"

    def weight(self, transition, net, rng) -> float:
        if not transition.inputs:
            return EMPTY_INPUT_RATE
        densities = arc_densities(transition, net, self.density)
        weights = np.array([arc.weight for arc in transition.inputs], dtype=np.float64)
        return float(np.dot(densities, weights) / weights.sum())


@dataclass(frozen=True)
class MaximumRate:
    """Largest arc density."""

    density: DensityMode = "normalized"

    def weight(self, transition, net, rng) -> float:
        if not transition.inputs:
            return EMPTY_INPUT_RATE
        return float(arc_densities(transition, net, self.density).max())


@dataclass(frozen=True)
class MinimumRate:
    """Smallest arc density (bottleneck)."""

    density: DensityMode = "normalized"

    def weight(self, transition, net, rng) -> float:
        if not transition.inputs:
            return EMPTY_INPUT_RATE
        return float(arc_densities(transition, net, self.density).min())


@dataclass(frozen=True)
class ProbabilisticRate:
    """
    Categorical draw over input arcs, probability ∝ density.

    The weight is the density of the drawn arc. Nothing is cached, so two
    calls on the same marking may return different weights.
    """

    density: DensityMode = "normalized"

    def weight(self, transition, net, rng) -> float:
        if not transition.inputs:
            return EMPTY_INPUT_RATE
        densities = arc_densities(transition, net, self.density)
        total = densities.sum()
        if total <= 0:
            return 0.0
        chosen = rng.choice(len(densities), p=densities / total)
        return float(densities[chosen])


RATE_POLICIES = {
    "weighted_average": WeightedAverageRate,
    "maximum": MaximumRate,
    "minimum": MinimumRate,
    "probabilistic": ProbabilisticRate,
}


def create_rate_estimator(
    policy: RatePolicy,
    density: DensityMode = "normalized",
) -> RateEstimator:
    """
    Factory for rate estimators.

    Args:
        policy: One of "weighted_average", "maximum", "minimum", "probabilistic"
        density: "normalized" (count / weight) or "raw" (count)
    """
    if policy not in RATE_POLICIES:
        raise ConfigurationError(
            f"Unknown rate policy {policy!r}; expected one of {sorted(RATE_POLICIES)}"
        )
    if density not in DENSITY_MODES:
        raise ConfigurationError(
            f"Unknown density mode {density!r}; expected one of {list(DENSITY_MODES)}"
        )
    return RATE_POLICIES[policy](density=density)
