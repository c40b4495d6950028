"""
Net Scheduler: advances a net one discrete step at a time.

Each step:
1. Refresh dynamical states place by place (signal computed per place first)
2. Enabled set = transitions feasible against the refreshed marking
3. Rate estimator weights for the enabled set
4. Weighted draw of up to ``max_firings_per_step`` candidates; fire them in
   decreasing-rate order, re-checking feasibility right before each fire
5. Snapshot of the (type, state) counts

Firing is strictly sequential. Two candidates competing for the same tokens
are resolved by the re-check: whichever fires second may find its inputs
gone and is skipped.

All randomness comes from the Generator handed in by the caller. The only
state carried between steps is the net itself (including its step counter).
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field, fields
from typing import Any, Iterator, Mapping

import numpy as np

from petrisim.core.dynamics import DynamicalStateEngine
from petrisim.core.errors import ConfigurationError, InvariantViolationError
from petrisim.core.net import Net
from petrisim.core.rates import (
    DENSITY_MODES,
    RATE_POLICIES,
    DensityMode,
    RateEstimator,
    RatePolicy,
    create_rate_estimator,
)
from petrisim.core.snapshot import Snapshot
from petrisim.core.transition import (
    DEFAULT_GATING_THRESHOLD,
    FiringGate,
    Transition,
    feasible,
    fire,
)

LOGGER = logging.getLogger(__name__)


def _positive_int(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")


@dataclass(frozen=True)
class SimulationConfig:
    """Configuration for the scheduler."""

    rate_policy: RatePolicy  # No default: the policy is always an explicit choice
    horizon: int = 100  # Steps produced by run()
    step_size: float = 1.0  # Simulated time per step (snapshot.time = step * step_size)
    max_active_time: int = 5  # Steps a token stays Active before going Dormant
    density: DensityMode = "normalized"  # Arc density: count / weight, or raw count
    gating_threshold: int | None = DEFAULT_GATING_THRESHOLD  # None disables the gate
    require_cancer_input: bool = True  # Gate also requires a Cancer-typed input arc
    max_firings_per_step: int = 1  # Candidates drawn per step

    def __post_init__(self):
        if self.rate_policy not in RATE_POLICIES:
            raise ConfigurationError(
                f"Unknown rate policy {self.rate_policy!r}; "
                f"expected one of {sorted(RATE_POLICIES)}"
            )
        if self.density not in DENSITY_MODES:
            raise ConfigurationError(f"Unknown density mode {self.density!r}")
        _positive_int("horizon", self.horizon)
        _positive_int("max_active_time", self.max_active_time)
        _positive_int("max_firings_per_step", self.max_firings_per_step)
        if self.gating_threshold is not None:
            _positive_int("gating_threshold", self.gating_threshold)
        if not isinstance(self.step_size, (int, float)) or self.step_size <= 0:
            raise ConfigurationError(f"step_size must be positive, got {self.step_size!r}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SimulationConfig:
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown simulation options: {unknown}")
        try:
            return cls(**data)
        except TypeError as exc:
            raise ConfigurationError(f"Malformed simulation configuration: {exc}") from exc

    def make_engine(self) -> DynamicalStateEngine:
        return DynamicalStateEngine(max_active_time=self.max_active_time)

    def make_estimator(self) -> RateEstimator:
        return create_rate_estimator(self.rate_policy, self.density)

    def make_gate(self) -> FiringGate:
        if self.gating_threshold is None:
            return FiringGate.disabled()
        return FiringGate(
            threshold=self.gating_threshold,
            require_cancer=self.require_cancer_input,
        )


@dataclass
class NetScheduler:
    """Drives a Net through discrete steps."""

    net: Net
    config: SimulationConfig
    rng: np.random.Generator

    _engine: DynamicalStateEngine = field(default=None, init=False)
    _estimator: RateEstimator = field(default=None, init=False)
    _gate: FiringGate = field(default=None, init=False)

    def __post_init__(self):
        self._engine = self.config.make_engine()
        self._estimator = self.config.make_estimator()
        self._gate = self.config.make_gate()

    @property
    def current_step(self) -> int:
        return self.net.step_index

    def step(self) -> Snapshot:
        """
        Advance the net by one step.

        If anything raises mid-step (an invariant violation, a failing rate
        policy, an interrupt), the net is rolled back to its state at the
        start of the step and the exception propagates.
        """
        checkpoint = self.net.checkpoint()
        try:
            fired = self._advance()
            self.net.check_invariants()
        except InvariantViolationError:
            LOGGER.error(
                "Invariant violation during step %d; restoring pre-step marking",
                self.net.step_index + 1,
            )
            self.net.restore(checkpoint)
            raise
        except BaseException:
            self.net.restore(checkpoint)
            raise

        self.net.step_index += 1
        return Snapshot.capture(
            self.net,
            step=self.net.step_index,
            time=self.net.step_index * self.config.step_size,
            fired=fired,
        )

    def run(self, n_steps: int) -> Iterator[Snapshot]:
        """Lazily produce ``n_steps`` snapshots."""
        _positive_int("horizon", n_steps)
        return self._iterate(n_steps)

    def _iterate(self, n_steps: int) -> Iterator[Snapshot]:
        LOGGER.info("Running %d steps from step %d", n_steps, self.net.step_index)
        for _ in range(n_steps):
            yield self.step()
        LOGGER.info("Run finished at step %d", self.net.step_index)

    def _advance(self) -> tuple[str, ...]:
        # 1. Dynamical states; every place is done before feasibility is looked at
        self._engine.refresh(self.net)

        # 2. Enabled set
        enabled = enabled_transitions(self.net)
        LOGGER.debug("Step %d: %d enabled transitions", self.net.step_index + 1, len(enabled))
        if not enabled:
            return ()

        # 3. Rates
        rates = np.array(
            [self._estimator.weight(t, self.net, self.rng) for t in enabled],
            dtype=np.float64,
        )

        # 4. Select and fire sequentially
        fired = []
        for i in self._select(rates):
            transition = enabled[i]
            if not feasible(transition, self.net):
                LOGGER.debug("Skipping %s: inputs depleted earlier this step", transition.name)
                continue
            result = fire(transition, self.net, self._engine, self._gate)
            if result.fired:
                fired.append(transition.name)
        return tuple(fired)

    def _select(self, rates: np.ndarray) -> list[int]:
        """Weighted draw without replacement, ordered by decreasing rate."""
        eligible = np.flatnonzero(rates > 0)
        if eligible.size == 0:
            return []
        k = min(self.config.max_firings_per_step, eligible.size)
        chosen = self.rng.choice(len(rates), size=k, replace=False, p=rates / rates.sum())
        return sorted((int(i) for i in chosen), key=lambda i: (-rates[i], i))


def step(net: Net, rng: np.random.Generator, config: SimulationConfig) -> Snapshot:
    """Advance ``net`` by one step."""
    return NetScheduler(net=net, config=config, rng=rng).step()


def run(
    net: Net,
    rng: np.random.Generator,
    config: SimulationConfig,
    horizon: int | None = None,
) -> Iterator[Snapshot]:
    """
    Lazy, finite sequence of snapshots.

    The generator can't be restarted. To replay a run, rebuild the net
    and reseed the generator.

    Args:
        net: Net to advance (mutated as the generator is consumed)
        rng: Random source
        config: Simulation configuration
        horizon: Number of steps (defaults to ``config.horizon``)
    """
    scheduler = NetScheduler(net=net, config=config, rng=rng)
    return scheduler.run(config.horizon if horizon is None else horizon)


def enabled_transitions(net: Net) -> list[Transition]:
    """Transitions feasible against the current marking."""
    return [t for t in net.transitions if feasible(t, net)]
