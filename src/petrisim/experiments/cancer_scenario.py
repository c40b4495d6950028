"""
Reference scenario: tumour site, lymph node and distant site.

Four cell kinds are spread at random over three places. Transitions model
local growth, invasion of the lymph node, metastasis to the distant site and
an immune response. Every transition except ``tissue_renewal`` consumes
more than 30 cells including at least one cancer cell, so those pass the
default firing gate. ``tissue_renewal`` never does and stays inert unless
the gate is disabled.
"""

from __future__ import annotations

import numpy as np

from petrisim.analysis.trajectory import TrajectoryRecorder
from petrisim.core.net import NetConfig, PopulationConfig, TransitionConfig, build_net
from petrisim.core.scheduler import NetScheduler, SimulationConfig
from petrisim.core.snapshot import initial_snapshot

PLACES = ("tumour", "lymph", "distant")

TRANSITIONS = (
    TransitionConfig(
        name="tumour_growth",
        inputs=((24, "tumour", "NormalA"), (8, "tumour", "CancerA")),
        outputs=((12, "tumour", "CancerA"), (12, "tumour", "NormalA")),
    ),
    TransitionConfig(
        name="lymph_invasion",
        inputs=((20, "tumour", "NormalB"), (12, "tumour", "CancerB")),
        outputs=((10, "lymph", "CancerB"), (14, "tumour", "NormalB")),
    ),
    TransitionConfig(
        name="lymph_expansion",
        inputs=((24, "lymph", "NormalB"), (8, "lymph", "CancerB")),
        outputs=((12, "lymph", "CancerB"), (10, "lymph", "NormalB")),
    ),
    TransitionConfig(
        name="metastasis",
        inputs=((16, "lymph", "CancerA"), (16, "distant", "NormalA")),
        outputs=((10, "distant", "CancerA"), (12, "distant", "NormalA")),
    ),
    TransitionConfig(
        name="immune_response",
        inputs=((30, "tumour", "NormalA"), (4, "tumour", "CancerA")),
        outputs=((32, "tumour", "NormalA"),),
    ),
    TransitionConfig(
        name="tissue_renewal",
        inputs=((12, "distant", "NormalA"), (12, "distant", "NormalB")),
        outputs=((26, "distant", "NormalA"),),
    ),
)

TYPE_WEIGHTS = {"NormalA": 0.35, "NormalB": 0.35, "CancerA": 0.15, "CancerB": 0.15}
STATE_WEIGHTS = {"Active": 0.2, "Inactive": 0.6, "Dormant": 0.2}


def reference_net_config(population_size: int = 400) -> NetConfig:
    """Net configuration with a random bootstrap population."""
    return NetConfig(
        places=list(PLACES),
        transitions=list(TRANSITIONS),
        population=PopulationConfig(
            size=population_size,
            type_weights=TYPE_WEIGHTS,
            state_weights=STATE_WEIGHTS,
        ),
    )


def reference_simulation_config(
    rate_policy: str,
    horizon: int = 100,
    **overrides,
) -> SimulationConfig:
    """Scheduler configuration for the reference scenario."""
    options = {"max_active_time": 5, "max_firings_per_step": 2}
    options.update(overrides)
    return SimulationConfig(rate_policy=rate_policy, horizon=horizon, **options)


def run_reference(
    rate_policy: str,
    seed: int = 42,
    horizon: int = 100,
    population_size: int = 400,
) -> TrajectoryRecorder:
    """
    Build and run the reference scenario.

    Returns:
        TrajectoryRecorder holding the initial snapshot followed by one
        snapshot per step
    """
    rng = np.random.default_rng(seed)
    net = build_net(reference_net_config(population_size), rng)
    config = reference_simulation_config(rate_policy=rate_policy, horizon=horizon)

    recorder = TrajectoryRecorder([initial_snapshot(net, config.step_size)])
    recorder.extend(NetScheduler(net=net, config=config, rng=rng).run(config.horizon))
    return recorder
