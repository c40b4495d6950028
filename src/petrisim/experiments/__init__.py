"""
Experiment harness: pre-built scenarios.

- Reference tumour / lymph / distant-site net
"""

from petrisim.experiments.cancer_scenario import (
    reference_net_config,
    reference_simulation_config,
    run_reference,
)

__all__ = [
    "reference_net_config",
    "reference_simulation_config",
    "run_reference",
]
