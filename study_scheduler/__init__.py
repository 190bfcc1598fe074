"""Study scheduler: place student tasks into free calendar time.

Modules:
- entities: tasks, constraints, preferences and schedule result types
- config: load and validate settings (YAML or JSON)
- services: free-time, constraint, scoring and decomposition primitives
- engine: greedy scheduler and the orchestrator that validates and persists runs
- validator: post-generation checks and summaries
- learning: preference updates from post-block feedback
- io: CSV import/export
- domain: SQLAlchemy persistence of scheduled blocks
- cli: command-line interface entrypoints
"""

__all__ = [
    "entities",
    "config",
    "services",
    "engine",
    "validator",
    "learning",
    "io",
    "domain",
    "cli",
]
