"""Unscrambler orchestration utilities.

Responsibilities:
  - Provide the unscrambler, its shape-keyed factory and result types.
  - Must not mutate live equipment slots; only part records via apply().
"""
