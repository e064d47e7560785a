"""Per-run results storage."""

from .results import ResultStore, TIMESTAMP_FORMAT

__all__ = ['ResultStore', 'TIMESTAMP_FORMAT']
