"""
SA:BIRTH - Maze Calibration Engine

The authoritative state machine for the single-player maze-calibration game.
The engine provides:
- One active calibration session per player
- Validation of submitted sense completions (score = points x time)
- Win / loss decision on exit (all six senses, total score under the cap)
- Stake escrow coordination with the external Hub
- An append-only leaderboard, read in ascending score order
"""

__version__ = "0.1.0"
