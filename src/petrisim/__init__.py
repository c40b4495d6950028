"""
petrisim: typed multi-token Petri net simulator

Simulates a population of typed cells (tokens) spread across named places.
Counts change through transitions gated by arc multiplicities. Each token's
state evolves through a local finite-state machine driven by the cancer
cells it shares a place with.

Core concepts:
- Feasibility: every input arc has enough tokens of its type
- Rates: enabled transitions are weighted from their input densities
- Firing: atomic, sequential, re-checked before each fire
- Snapshots: immutable (type, state) -> count aggregates per step

See SPEC_FULL.md and DESIGN.md for full details.
"""

__version__ = "0.1.0"
