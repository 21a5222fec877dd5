import base64
import io
import pytest

from studysync.tools.file_storage import FileStorage, StorageError, infer_format

PDF_BYTES = b"%PDF-1.7\n1 0 obj\n"


@pytest.fixture
def storage(tmp_path) -> FileStorage:
    return FileStorage(upload_dir=str(tmp_path), public_base_url="http://localhost:8000/")


@pytest.mark.parametrize("filename, content_type, expected", [
    ("lecture.PDF", None, "pdf"),
    ("photo.jpeg", "image/jpeg", "jpeg"),
    ("README", "text/plain; charset=utf-8", "plain"),
    (None, None, "file"),
])
def test_infer_format(filename, content_type, expected):
    assert infer_format(filename, content_type) == expected


def test_save_attachment_writes_file_and_builds_url(storage, tmp_path):
    attachment = storage.save_attachment(io.BytesIO(b"hello"), "notes.txt", "text/plain")

    assert attachment.format == "txt"
    assert attachment.url.startswith("http://localhost:8000/uploads/notes/")
    relative = attachment.url.split("/uploads/", 1)[1]
    assert (tmp_path / relative).read_bytes() == b"hello"


def test_save_base64_pdf_accepts_data_url_and_bare_base64(storage, tmp_path):
    encoded = base64.b64encode(PDF_BYTES).decode()

    for payload in (f"data:application/pdf;base64,{encoded}", encoded):
        url = storage.save_base64_pdf(payload)
        assert url.endswith(".pdf")
        assert (tmp_path / url.split("/uploads/", 1)[1]).read_bytes() == PDF_BYTES


@pytest.mark.parametrize("payload, message", [
    ("", "Please select a file"),
    ("data:application/pdf;base64,@@not-base64@@", "File is not valid base64 data."),
    ("data:image/png;base64," + base64.b64encode(PDF_BYTES).decode(), "Only PDF files can be uploaded."),
    (base64.b64encode(b"plain text").decode(), "Only PDF files can be uploaded."),
])
def test_save_base64_pdf_rejects_bad_payloads(storage, payload, message):
    with pytest.raises(StorageError, match=message):
        storage.save_base64_pdf(payload)


def test_delete_removes_stored_file(storage, tmp_path):
    url = storage.save_base64_pdf(base64.b64encode(PDF_BYTES).decode())

    assert storage.delete(url) is True
    assert not any((tmp_path / "papers").iterdir())
    assert storage.delete(url) is False


def test_delete_refuses_foreign_or_escaping_urls(storage):
    assert storage.delete("https://example.com/evil.pdf") is False
    assert storage.delete("http://localhost:8000/uploads/../../etc/passwd") is False
