"""Core decision-tree evaluation utilities.

Responsibilities:
  - Provide the evaluator, result and observer types for deterministic policy walks.
  - Must not fetch metrics or persist decisions; consumes a prebuilt DecisionContext.
"""
