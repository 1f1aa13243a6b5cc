"""Weekly shift scheduling for a two-sided (FOH/BOH) restaurant roster.

Modules:
- config: slot definitions and scoring constants (YAML or JSON)
- errors: error kinds raised by the engine and the store
- domain: value types, SQLAlchemy models and repositories
- services: roster, time-off guard, attendance, stats and scoring factors
- engine: week grid, recommendations, publish lifecycle and week sessions
- io: CSV import/export
- cli: command-line interface entrypoints
"""

__all__ = [
    "config",
    "errors",
    "domain",
    "services",
    "engine",
    "io",
    "cli",
]
