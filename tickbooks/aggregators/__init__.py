"""Aggregators module for grouping and totalling open Tick entries."""

from tickbooks.aggregators.entry_aggregator import (
    group_hours_by_task,
    projects_with_open_entries,
    sort_entries_by_date,
    total_hours,
)

__all__ = [
    "group_hours_by_task",
    "projects_with_open_entries",
    "sort_entries_by_date",
    "total_hours",
]
