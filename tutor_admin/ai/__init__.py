"""
AI Module - the tool surface an admin agent works through.

Architecture Overview:
=====================

    agent tool call (name, arguments)
                │
                ▼
    ┌──────────────────────┐
    │      Dispatcher      │  lookup + validation (no side effects)
    └──────────┬───────────┘
               │
               ▼
    ┌──────────────────────┐
    │    ActionRegistry    │  name → descriptor + handler
    └──────────┬───────────┘
               │
               ▼
    ┌──────────────────────┐
    │     AdminActions     │  read → merge → write back whole
    └──────────┬───────────┘
               │
               ▼
    ┌──────────────────────┐
    │     StoreClient      │  documents + live tree
    └──────────────────────┘

Module Structure:
================
- actions/: catalog, handlers, registry and dispatcher
- monitoring/: structured action logging and per-operation metrics
"""
