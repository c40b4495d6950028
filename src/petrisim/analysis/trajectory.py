"""
Trajectory recording: an append-only log of snapshots.

Snapshots are immutable, so the recorder simply keeps references. Tabular
views are built on demand as numpy arrays with rows = steps and
columns = (type, state) pairs in canonical order.
"""

from __future__ import annotations
from typing import Iterable, Iterator, Sequence

import numpy as np

from petrisim.core.snapshot import STATE_KEYS, Snapshot
from petrisim.core.tokens import DynamicalState, TokenType


class TrajectoryRecorder:
    """Append-only sequence of snapshots."""

    def __init__(self, snapshots: Iterable[Snapshot] = ()):
        self._snapshots: list[Snapshot] = []
        self.extend(snapshots)

    def append(self, snapshot: Snapshot) -> None:
        if self._snapshots and snapshot.step < self._snapshots[-1].step:
            raise ValueError(
                f"Snapshot step {snapshot.step} precedes last recorded step "
                f"{self._snapshots[-1].step}"
            )
        self._snapshots.append(snapshot)

    def extend(self, snapshots: Iterable[Snapshot]) -> None:
        for snapshot in snapshots:
            self.append(snapshot)

    def __len__(self) -> int:
        return len(self._snapshots)

    def __iter__(self) -> Iterator[Snapshot]:
        return iter(tuple(self._snapshots))

    def __getitem__(self, index: int) -> Snapshot:
        return self._snapshots[index]

    @property
    def snapshots(self) -> tuple[Snapshot, ...]:
        return tuple(self._snapshots)

    def steps(self) -> np.ndarray:
        return np.array([s.step for s in self._snapshots], dtype=np.int64)

    def times(self) -> np.ndarray:
        return np.array([s.time for s in self._snapshots], dtype=np.float64)

    def series(
        self,
        token_type: TokenType | None = None,
        state: DynamicalState | None = None,
    ) -> np.ndarray:
        """Count per step for a type and/or state (None = summed over)."""
        return np.array(
            [s.count(token_type, state) for s in self._snapshots],
            dtype=np.int64,
        )

    def totals(self) -> np.ndarray:
        """Total token count per step."""
        return np.array([s.total for s in self._snapshots], dtype=np.int64)

    def to_array(self) -> np.ndarray:
        """[n_steps, n_pairs] matrix, columns in STATE_KEYS order."""
        return count_matrix(self._snapshots)

    def fired_counts(self) -> dict[str, int]:
        """How often each transition fired over the recorded steps."""
        counts: dict[str, int] = {}
        for snapshot in self._snapshots:
            for name in snapshot.fired:
                counts[name] = counts.get(name, 0) + 1
        return counts


def count_matrix(snapshots: Sequence[Snapshot]) -> np.ndarray:
    """
    Stack snapshots into a count matrix.

    Returns:
        int64 array of shape [len(snapshots), len(STATE_KEYS)]
    """
    matrix = np.zeros((len(snapshots), len(STATE_KEYS)), dtype=np.int64)
    for row, snapshot in enumerate(snapshots):
        for col, key in enumerate(STATE_KEYS):
            matrix[row, col] = snapshot.counts.get(key, 0)
    return matrix


def type_totals(snapshot: Snapshot) -> dict[TokenType, int]:
    """Counts per token type, summed over states."""
    return {t: snapshot.count(token_type=t) for t in TokenType}


def state_fractions(snapshot: Snapshot) -> dict[DynamicalState, float]:
    """Fraction of all tokens in each dynamical state (zeros for an empty net)."""
    total = snapshot.total
    if total == 0:
        return {s: 0.0 for s in DynamicalState}
    return {s: snapshot.count(state=s) / total for s in DynamicalState}
