import httpx
import pytest
import pytest_asyncio

from studysync.client.api_client import ApiError, StudySyncClient, filter_papers, attendance_percentage
from tests.helpers import PDF_DATA_URL


@pytest_asyncio.fixture
async def api_client(api_app):
    transport = httpx.ASGITransport(app=api_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield StudySyncClient(http_client=http_client)


@pytest.mark.asyncio
class TestStudySyncClient:

    async def test_signup_stores_session(self, api_client: StudySyncClient):
        user = await api_client.signup("Ada Lovelace", "ada@example.com", "secret123")

        assert user.email == "ada@example.com"
        assert api_client.is_authenticated
        assert not api_client.is_admin

        api_client.logout()
        assert not api_client.is_authenticated
        assert api_client.user is None

    async def test_login_error_carries_server_message(self, api_client: StudySyncClient):
        await api_client.signup("Ada Lovelace", "ada@example.com", "secret123")
        api_client.logout()

        with pytest.raises(ApiError) as exc_info:
            await api_client.login("ada@example.com", "nope-nope")

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Wrong password"

    async def test_calls_without_session_are_unauthorized(self, api_client: StudySyncClient):
        with pytest.raises(ApiError) as exc_info:
            await api_client.list_notes()

        assert exc_info.value.status_code == 401

    async def test_note_mutations_return_fresh_list(self, api_client: StudySyncClient):
        await api_client.signup("Ada Lovelace", "ada@example.com", "secret123")

        notes = await api_client.add_note("Paging", subject="OS", attachments=[("slides.pdf", b"%PDF-1.4", "application/pdf")])
        assert [n.title for n in notes] == ["Paging"]
        assert notes[0].attachments[0].format == "pdf"

        notes = await api_client.update_note(str(notes[0].id), "Paging v2", status="Understood")
        assert notes[0].title == "Paging v2"
        assert len(notes[0].attachments) == 1

        assert await api_client.delete_note(str(notes[0].id)) == []

    async def test_paper_upload_requires_admin(self, api_client: StudySyncClient, fake_db):
        await api_client.signup("Ada Lovelace", "ada@example.com", "secret123")

        with pytest.raises(ApiError) as exc_info:
            await api_client.upload_paper("Operating Systems", 2023, 5, "EndSem", PDF_DATA_URL)
        assert exc_info.value.status_code == 403

        fake_db.make_admin("ada@example.com")
        await api_client.login("ada@example.com", "secret123")
        assert api_client.is_admin

        papers = await api_client.upload_paper("Operating Systems", 2023, 5, "EndSem", PDF_DATA_URL)
        assert len(filter_papers(papers, year="2023", subject="operating")) == 1
        assert filter_papers(papers, term="MidSem") == []

        assert await api_client.delete_paper(str(papers[0].id)) == []

    async def test_attendance_flow(self, api_client: StudySyncClient):
        await api_client.signup("Ada Lovelace", "ada@example.com", "secret123")

        subjects = await api_client.add_subject("Compilers")
        subject_id = str(subjects[0].id)

        await api_client.mark_attendance(subject_id, "Present")
        subjects = await api_client.mark_attendance(subject_id, "Absent")
        assert (subjects[0].attended_classes, subjects[0].total_classes) == (1, 2)
        assert subjects[0].percentage == attendance_percentage(1, 2) == 50

        subjects = await api_client.edit_subject(subject_id, "Compiler Design")
        assert subjects[0].subject == "Compiler Design"

        assert await api_client.delete_subject(subject_id) == []

    async def test_blank_subject_is_rejected_before_sending(self, api_client: StudySyncClient):
        await api_client.signup("Ada Lovelace", "ada@example.com", "secret123")

        with pytest.raises(ApiError) as exc_info:
            await api_client.add_subject("   ")

        assert exc_info.value.message == "Enter a subject"
