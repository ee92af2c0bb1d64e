"""Technician utilization and workload analytics engine.

Modules:
- config: load and validate configuration (YAML or JSON)
- errors: ValidationError / DataAccessError / NotFoundError taxonomy
- domain: store models, typed facts and the fact reader
- services: aggregation, distribution statistics, balance scoring, trends
- reports: report builders and the summary composer
- io: CSV import of store data and CSV export of report rows
- cli: command-line interface entrypoints
"""

__all__ = [
    "config",
    "errors",
    "domain",
    "services",
    "reports",
    "io",
    "cli",
]
