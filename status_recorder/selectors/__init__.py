"""Selectors for the status recorder (read side)."""

from status_recorder.selectors.history_selector import HistorySelector

__all__ = [
    "HistorySelector",
]
