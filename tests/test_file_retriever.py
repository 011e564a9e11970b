import pytest
import requests

from docscan.services.processors.file_retriever import classify_mime_type, download_file
from docscan.utils.errors import DownloadError
from tests.fakes import FakeResponse

URL = "https://storage.example.com/students/u1/birthCertificate.pdf"


@pytest.mark.parametrize("header, expected", [
    ("application/pdf", "application/pdf"),
    ("image/JPEG; charset=binary", "image/jpeg"),
    (None, "application/octet-stream"),
    ("", "application/octet-stream"),
])
def test_classify_mime_type(header, expected):
    assert classify_mime_type(header) == expected


def test_download_returns_bytes_and_mime(http):
    http.add(URL, FakeResponse(content=b"%PDF-1.7", headers={"Content-Type": "application/pdf"}))
    downloaded = download_file(URL)
    assert downloaded.content == b"%PDF-1.7"
    assert downloaded.mime_type == "application/pdf"


def test_missing_content_type_defaults_to_octet_stream(http):
    http.add(URL, FakeResponse(content=b"\x89PNG"))
    assert download_file(URL).mime_type == "application/octet-stream"


def test_error_status_raises_download_error(http):
    http.add(URL, FakeResponse(status_code=403, reason="Forbidden"))
    with pytest.raises(DownloadError) as excinfo:
        download_file(URL)
    assert excinfo.value.status == 403
    assert "403 Forbidden" in excinfo.value.message


def test_network_failure_raises_download_error(http):
    http.add(URL, requests.ConnectionError("Name or service not known"))
    with pytest.raises(DownloadError, match="Name or service not known"):
        download_file(URL)
