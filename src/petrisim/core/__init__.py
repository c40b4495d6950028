"""
Core engine primitives.

This layer knows nothing about plotting or trajectory storage. It only knows:
- Tokens with a type tag, a dynamical state and an age
- Places holding tokens
- Transitions with weighted, typed input/output arcs
- Whether a transition is feasible, and how to fire it atomically
- How to weight enabled transitions and pick which ones fire
- Aggregate snapshots of the marking

Entry points:
- build_net(config, rng): construct a Net from configuration
- step(net, rng, config): advance one step, return a Snapshot
- run(net, rng, config, horizon): lazy sequence of Snapshots
"""

from petrisim.core.errors import ConfigurationError, InvariantViolationError, PetriSimError
from petrisim.core.tokens import DynamicalState, Token, TokenIdAllocator, TokenType
from petrisim.core.place import Place
from petrisim.core.arcs import ArcDirection, ArcSpec
from petrisim.core.transition import (
    FireResult,
    FireStatus,
    FiringGate,
    NotFiredReason,
    Transition,
    feasible,
    fire,
)
from petrisim.core.dynamics import DynamicalStateEngine
from petrisim.core.rates import (
    MaximumRate,
    MinimumRate,
    ProbabilisticRate,
    RateEstimator,
    WeightedAverageRate,
    create_rate_estimator,
)
from petrisim.core.population import generate_population
from petrisim.core.net import (
    ArcConfig,
    Net,
    NetConfig,
    PopulationConfig,
    TransitionConfig,
    build_net,
)
from petrisim.core.snapshot import Snapshot, initial_snapshot
from petrisim.core.scheduler import NetScheduler, SimulationConfig, run, step

__all__ = [
    "PetriSimError",
    "ConfigurationError",
    "InvariantViolationError",
    "TokenType",
    "DynamicalState",
    "Token",
    "TokenIdAllocator",
    "Place",
    "ArcDirection",
    "ArcSpec",
    "Transition",
    "FiringGate",
    "FireResult",
    "FireStatus",
    "NotFiredReason",
    "feasible",
    "fire",
    "DynamicalStateEngine",
    "RateEstimator",
    "WeightedAverageRate",
    "MaximumRate",
    "MinimumRate",
    "ProbabilisticRate",
    "create_rate_estimator",
    "generate_population",
    "ArcConfig",
    "TransitionConfig",
    "PopulationConfig",
    "NetConfig",
    "Net",
    "build_net",
    "Snapshot",
    "initial_snapshot",
    "SimulationConfig",
    "NetScheduler",
    "step",
    "run",
]
