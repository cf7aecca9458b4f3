"""
Crucible of Fate - shared fate-dice pool arbitration

A communal pool of fate dice split between the arbiter (the game master)
and the participants at the table. Dice migrate between the two pools as a
result of in-session actions. A single authoritative process commits every
change; every other process receives read-only broadcast snapshots.

Core rules:
- One writer: only the authoritative role mutates pool state
- The total number of dice equals the active participant count,
  unless override is enabled
- Every participant seeds exactly one die per ritual
- An action can be augmented at most once
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
