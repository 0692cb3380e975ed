"""
Planwise - Sprint Capacity and Priority Scoring Engine

This package contains the backlog analytics core:
- engine: Pure analyzers (priority scoring, conflicts, capacity, velocity)
- api: FastAPI REST endpoints, one per analyzer operation
- platform: Cross-cutting concerns (configuration, logging)
"""

__version__ = "0.1.0"
