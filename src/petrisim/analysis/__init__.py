"""
Analysis layer: derived views over recorded snapshots.

IMPORTANT: This is NOT seen by the engine. One-way derivation only.

- TrajectoryRecorder: append-only snapshot log with numpy views
- count_matrix: steps x (type, state) count matrix
- type_totals / state_fractions: per-snapshot summaries
"""

from petrisim.analysis.trajectory import (
    TrajectoryRecorder,
    count_matrix,
    state_fractions,
    type_totals,
)

__all__ = [
    "TrajectoryRecorder",
    "count_matrix",
    "type_totals",
    "state_fractions",
]
