"""
Pytest configuration and shared fixtures.
"""

import pytest
import numpy as np


@pytest.fixture
def rng():
    """Reproducible random number generator."""
    return np.random.default_rng(seed=42)


@pytest.fixture
def small_scenario_config():
    """P1: 3 NormalA, P2: 1 CancerA, P3 empty; T1 takes all four and makes a CancerA in P3."""
    from petrisim.core import NetConfig, TransitionConfig
    return NetConfig(
        places=["P1", "P2", "P3"],
        transitions=[
            TransitionConfig(
                name="T1",
                inputs=((3, "P1", "NormalA"), (1, "P2", "CancerA")),
                outputs=((1, "P3", "CancerA"),),
            ),
        ],
        initial_marking={
            "P1": [("NormalA", "Inactive")] * 3,
            "P2": [("CancerA", "Inactive")],
        },
    )


@pytest.fixture
def large_scenario_config():
    """Same shape as the small scenario but consuming 32 tokens, so it passes the default gate."""
    from petrisim.core import NetConfig, TransitionConfig
    return NetConfig(
        places=["P1", "P2", "P3"],
        transitions=[
            TransitionConfig(
                name="T1",
                inputs=((30, "P1", "NormalA"), (2, "P2", "CancerA")),
                outputs=((1, "P3", "CancerA"), (2, "P1", "NormalB")),
            ),
        ],
        initial_marking={
            "P1": [("NormalA", "Inactive")] * 40,
            "P2": [("CancerA", "Inactive")] * 3,
        },
    )


@pytest.fixture
def engine():
    """Dynamical state engine with a short active window."""
    from petrisim.core import DynamicalStateEngine
    return DynamicalStateEngine(max_active_time=3)
