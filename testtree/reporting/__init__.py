"""Report generation: JSON and YAML reports of the assembled test tree."""

from testtree.reporting.reporter import Reporter, aggregate_status

__all__ = [
    "Reporter",
    "aggregate_status",
]
