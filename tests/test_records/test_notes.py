"""
Tests for record notes and note notifications.
"""

import pytest
from sqlalchemy import func, select

from ats.core.errors import InvalidArgumentError, NotFoundError
from ats.database.models import OrganizationNote
from ats.services.notifications.service import NotificationDeliveryError


class TestAddNote:
    async def test_note_and_history(self, organizations, recruiter, mock_notifier):
        org = await organizations.create({"name": "Acme"}, recruiter)

        note = await organizations.add_note(
            org.id, "  Called the CEO  ", recruiter, action="Call", about_references=[{"id": 3}]
        )

        assert note.text == "Called the CEO"
        assert note.action == "Call"
        assert note.created_by == recruiter.id

        notes = await organizations.get_notes(org.id, recruiter.scope)
        assert len(notes) == 1
        assert notes[0]["created_by_name"] == "Rita Recruiter"
        assert notes[0]["about_references"] == [{"id": 3}]

        history = await organizations.get_history(org.id, None)
        assert history[0]["action"] == "ADD_NOTE"
        assert history[0]["details"]["note_id"] == note.id
        assert history[0]["details"]["text"] == "Called the CEO"

        mock_notifier.send_note_added.assert_not_awaited()

    async def test_notifies_recipients(self, organizations, recruiter, mock_notifier):
        org = await organizations.create({"name": "Acme"}, recruiter)

        await organizations.add_note(
            org.id, "Follow up Monday", recruiter, notify=["ops@acme.example"]
        )

        mock_notifier.send_note_added.assert_awaited_once()
        kwargs = mock_notifier.send_note_added.await_args.kwargs
        assert kwargs["recipients"] == ["ops@acme.example"]
        assert kwargs["entity_type"] == "organizations"
        assert kwargs["record_id"] == org.id
        assert kwargs["record_name"] == "Acme"
        assert kwargs["note_text"] == "Follow up Monday"
        assert kwargs["author_name"] == "Rita Recruiter"

    async def test_failed_notification_keeps_note(self, organizations, recruiter, mock_notifier):
        mock_notifier.send_note_added.side_effect = NotificationDeliveryError("SES down")
        org = await organizations.create({"name": "Acme"}, recruiter)

        note = await organizations.add_note(
            org.id, "Still saved", recruiter, notify=["ops@acme.example"]
        )

        assert note.id is not None
        notes = await organizations.get_notes(org.id, None)
        assert [n["text"] for n in notes] == ["Still saved"]

    @pytest.mark.parametrize("text", ["", "   "])
    async def test_empty_text(self, organizations, recruiter, text):
        org = await organizations.create({"name": "Acme"}, recruiter)

        with pytest.raises(InvalidArgumentError):
            await organizations.add_note(org.id, text, recruiter)

    async def test_invalid_recipient(self, organizations, recruiter):
        org = await organizations.create({"name": "Acme"}, recruiter)

        with pytest.raises(InvalidArgumentError):
            await organizations.add_note(org.id, "Hi", recruiter, notify=["not-an-email"])

    async def test_out_of_scope_record(self, organizations, recruiter, other_recruiter):
        org = await organizations.create({"name": "Acme"}, recruiter)

        with pytest.raises(NotFoundError):
            await organizations.add_note(org.id, "Hi", other_recruiter)
        with pytest.raises(NotFoundError):
            await organizations.get_notes(org.id, other_recruiter.scope)


class TestNoteOrdering:
    async def test_newest_first(self, organizations, recruiter):
        org = await organizations.create({"name": "Acme"}, recruiter)
        await organizations.add_note(org.id, "first", recruiter)
        await organizations.add_note(org.id, "second", recruiter)

        notes = await organizations.get_notes(org.id, None)

        assert [n["text"] for n in notes] == ["second", "first"]

    async def test_notes_are_removed_with_record(self, database, organizations, recruiter):
        org = await organizations.create({"name": "Acme"}, recruiter)
        await organizations.add_note(org.id, "gone soon", recruiter)

        await organizations.delete(org.id, recruiter)

        async with database.session() as session:
            count = await session.scalar(
                select(func.count()).select_from(OrganizationNote).where(
                    OrganizationNote.entity_id == org.id
                )
            )
        assert count == 0
