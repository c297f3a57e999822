"""Aggregation of open Tick entries.

This module prepares the data shown when picking a project to invoice and
when constructing the invoice itself:
- Unique projects with open entries
- Entries sorted by date
- Total hours and hours grouped by task
"""

from typing import Dict, Iterable, List, Sequence, Tuple

from tickbooks.models.entry import ProjectWithEntries, TaskHours, TimeEntry


def projects_with_open_entries(entries: Iterable[TimeEntry]) -> List[ProjectWithEntries]:
    """Group entries into unique projects.

    Projects are identified by (project name, project id, client name) and
    listed in the order they first appear.

    Args:
        entries: Open time entries

    Returns:
        One ProjectWithEntries per project with its entry count and hours

    Example:
        >>> projects = projects_with_open_entries([entry_a, entry_b])
        >>> projects[0].entry_count
        2
    """
    counts: Dict[Tuple[str, str, str], List[float]] = {}

    for entry in entries:
        key = (entry.project_name, entry.project_id, entry.client_name)
        totals = counts.setdefault(key, [0, 0.0])
        totals[0] += 1
        totals[1] += entry.hours

    return [
        ProjectWithEntries(
            project_name=project_name,
            project_id=project_id,
            client_name=client_name,
            entry_count=int(count),
            total_hours=hours,
        )
        for (project_name, project_id, client_name), (count, hours) in counts.items()
    ]


def sort_entries_by_date(entries: Iterable[TimeEntry]) -> List[TimeEntry]:
    """Sort entries by entry date, keeping Tick's order for equal dates."""
    return sorted(entries, key=lambda entry: entry.entry_date)


def total_hours(entries: Iterable[TimeEntry]) -> float:
    return sum(entry.hours for entry in entries)


def group_hours_by_task(entries: Sequence[TimeEntry]) -> List[TaskHours]:
    """Sum hours per task name, tasks in first-seen order."""
    hours: Dict[str, float] = {}
    for entry in entries:
        hours[entry.task_name] = hours.get(entry.task_name, 0.0) + entry.hours

    return [TaskHours(task_name=name, hours=value) for name, value in hours.items()]
