"""Unit tests for Tick entry models."""

import pytest
from pydantic import ValidationError

from tickbooks.models.entry import InvoiceDraft, TaskHours, TimeEntry
from tickbooks.services.xml_codec import decode

ENTRY_XML = """
<entry>
  <id type="integer">24</id>
  <task_id type="integer">14</task_id>
  <date type="date">2008-03-08</date>
  <hours type="float">1.00</hours>
  <notes>Had trouble with tribbles.</notes>
  <billed type="boolean">false</billed>
  <task_name>Remove converter assembly</task_name>
  <project_name>Realign dilithium crystals</project_name>
  <project_id>16</project_id>
  <client_name>Starfleet Command</client_name>
</entry>
"""


class TestTimeEntry:
    """Test TimeEntry parsing and validation."""

    def test_from_xml(self):
        entry = TimeEntry.from_xml(decode(ENTRY_XML))

        assert entry.entry_id == 24
        assert entry.task_id == 14
        assert entry.entry_date == "2008-03-08"
        assert entry.hours == 1.0
        assert entry.notes == "Had trouble with tribbles."
        assert entry.billed is False
        assert entry.task_name == "Remove converter assembly"
        assert entry.project_name == "Realign dilithium crystals"
        assert entry.project_id == "16"
        assert entry.client_name == "Starfleet Command"

    def test_billed_flag(self):
        entry = TimeEntry.from_xml(decode(ENTRY_XML.replace(">false<", ">true<")))

        assert entry.billed is True

    def test_negative_hours_rejected(self):
        with pytest.raises(ValidationError):
            TimeEntry(entry_id=1, hours=-1)

    def test_entries_are_immutable(self, sample_entries):
        with pytest.raises(ValidationError):
            sample_entries[0].hours = 10


class TestInvoiceDraft:
    """Test InvoiceDraft."""

    def test_entry_ids(self, sample_entries):
        draft = InvoiceDraft(
            project_id="55",
            entries=sample_entries,
            total_hours=5.0,
            task_hours=[TaskHours(task_name="Design", hours=5.0)],
        )

        assert draft.entry_ids == [101, 102]
        assert draft.start_date is None
