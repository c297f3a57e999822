"""Tick time entry models.

This module defines the TimeEntry model parsed from Tick's ``entries``
responses, plus the small aggregates derived from lists of entries.
"""

from typing import TYPE_CHECKING, List, Optional

from pydantic import Field

from tickbooks.models.base import FrozenDataModel

if TYPE_CHECKING:
    from tickbooks.services.xml_codec import XmlNode

NO_TASK_SELECTED = "No Task Selected"


class TimeEntry(FrozenDataModel):
    """Represents a single billable Tick time entry.

    Attributes:
        entry_id: Tick entry id
        entry_date: Entry date as sent by Tick (``YYYY-MM-DD``)
        client_name: Tick client name
        project_name: Tick project name
        project_id: Tick project id (kept as text, Tick sends it verbatim)
        task_name: Tick task name
        task_id: Tick task id
        notes: Free text notes
        hours: Hours worked, never negative
        billed: Whether Tick reports the entry as billed

    Example:
        >>> entry = TimeEntry(
        ...     entry_id=101,
        ...     entry_date="2024-03-01",
        ...     client_name="Acme Inc",
        ...     project_name="Website",
        ...     project_id="55",
        ...     task_name="Design",
        ...     task_id=7,
        ...     hours=2.5,
        ... )
        >>> entry.hours
        2.5
    """

    entry_id: int = Field(..., description="Tick entry id")
    entry_date: str = Field("", description="Entry date")
    client_name: str = Field("", description="Tick client name")
    project_name: str = Field("", description="Tick project name")
    project_id: str = Field("", description="Tick project id")
    task_name: str = Field("", description="Tick task name")
    task_id: int = Field(0, description="Tick task id")
    notes: str = Field("", description="Entry notes")
    hours: float = Field(..., ge=0, description="Hours worked")
    billed: bool = Field(False, description="Billed flag in Tick")

    @classmethod
    def from_xml(cls, node: "XmlNode") -> "TimeEntry":
        """Create a time entry from an ``<entry>`` element."""
        return cls(
            entry_id=node.int_of("id"),
            entry_date=node.text_of("date"),
            client_name=node.text_of("client_name"),
            project_name=node.text_of("project_name"),
            project_id=node.text_of("project_id"),
            task_name=node.text_of("task_name"),
            task_id=node.int_of("task_id"),
            notes=node.text_of("notes"),
            hours=node.float_of("hours"),
            billed=node.text_of("billed").lower() == "true",
        )


class TaskHours(FrozenDataModel):
    """Hours grouped under one Tick task name."""

    task_name: str
    hours: float = Field(..., ge=0)


class ProjectWithEntries(FrozenDataModel):
    """A Tick project that still has open (unbilled) entries."""

    project_name: str
    project_id: str
    client_name: str
    entry_count: int = Field(0, ge=0)
    total_hours: float = Field(0.0, ge=0)


class InvoiceDraft(FrozenDataModel):
    """Open entries of one project, prepared for invoicing.

    Attributes:
        project_id: Tick project id the entries belong to
        entries: Open entries sorted by entry date
        total_hours: Sum of all entry hours
        task_hours: Hours grouped per task in first-seen order
        start_date: Requested range start, if any
        end_date: Requested range end, if any
    """

    project_id: str
    entries: List[TimeEntry] = Field(default_factory=list)
    total_hours: float = 0.0
    task_hours: List[TaskHours] = Field(default_factory=list)
    start_date: Optional[str] = None
    end_date: Optional[str] = None

    @property
    def entry_ids(self) -> List[int]:
        return [entry.entry_id for entry in self.entries]
