"""SearchBlocker models package.

Defines the shared data contracts used by the validator and the adapters:

  - verdict.py — Channel, ReasonKind, Action, Verdict
  - block.py   — per-channel rejection builders (redirect, HTTP 400, GraphQL error)
"""
