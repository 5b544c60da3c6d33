# tests/test_ocr_client.py
import time

import pytest
import requests

from conftest import FakeResponse, FakeSession
from config import OcrConfig
from models.uploads import ImageFile
from services.ocr import OcrClient, interpret_ocr_response, transform_text
from services.ocr.ocr_client import NO_TEXT_PLACEHOLDER


def png(name="scan.png", content=b"\x89PNG data"):
    return ImageFile(filename=name, content=content, content_type="image/png")


# ───────────────────── Validation ───────────────────────────────────


def test_non_image_is_rejected_without_network(make_ocr_client):
    client, session = make_ocr_client()
    result = client.extract_text_from_image(
        ImageFile(filename="notes.pdf", content=b"%PDF", content_type="application/pdf")
    )
    assert result.success is False
    assert result.error == "Please upload a valid image file"
    assert session.calls == []


def test_oversized_image_is_rejected_without_network(make_ocr_client):
    client, session = make_ocr_client()
    result = client.extract_text_from_image(png(content=b"\0" * (10 * 1024 * 1024 + 1)))
    assert result.success is False
    assert result.error == "File size should be less than 10MB"
    assert session.calls == []


def test_image_exactly_at_limit_is_sent(make_ocr_client):
    client, session = make_ocr_client(FakeResponse(body={"status": "success", "markdown": "ok"}))
    assert client.extract_text_from_image(png(content=b"\0" * (10 * 1024 * 1024))).success
    assert len(session.calls) == 1


# ───────────────────── Request / response ───────────────────────────


def test_success_posts_multipart_and_transforms_markdown(make_ocr_client):
    client, session = make_ocr_client(
        FakeResponse(body={"status": "success", "markdown": "1. Scope\nText"})
    )
    result = client.extract_text_from_image(png())

    assert result.success
    assert result.text == transform_text("1. Scope\nText")
    call = session.calls[0]
    assert call["url"] == "https://ocr.test/ocr_image"
    assert call["headers"] == {"accept": "application/json"}
    assert call["files"]["file"] == ("scan.png", b"\x89PNG data", "image/png")
    assert call["timeout"] is None


def test_http_error_status(make_ocr_client):
    client, _ = make_ocr_client(FakeResponse(status_code=502, body={}))
    result = client.extract_text_from_image(png())
    assert result.success is False
    assert result.error == "HTTP error! status: 502"


def test_connection_error_is_reported(make_ocr_client):
    client, _ = make_ocr_client(requests.exceptions.ConnectionError("refused"))
    result = client.extract_text_from_image(png())
    assert result.success is False
    assert result.error == "Network error: Unable to connect to OCR service"


def test_other_request_errors_are_reported(make_ocr_client):
    client, _ = make_ocr_client(requests.exceptions.ReadTimeout("timed out"))
    result = client.extract_text_from_image(png())
    assert result.success is False
    assert result.error == "timed out"


def test_invalid_json_body(make_ocr_client):
    client, _ = make_ocr_client(FakeResponse(invalid_json=True))
    result = client.extract_text_from_image(png())
    assert result.success is False


@pytest.mark.parametrize(
    "body, success, text, error",
    [
        ({"status": "error", "error": "Unreadable image"}, False, None, "Unreadable image"),
        ({"status": "error"}, False, None, "OCR processing failed"),
        ({"error": "quota"}, False, None, "quota"),
        ({"error": {"code": 3, "detail": "bad page"}}, False, None, "OCR processing failed"),
        ({"status": "error", "error": ["quota"]}, False, None, "OCR processing failed"),
        ({"text": "from text"}, True, "from text", None),
        ({"extracted_text": "from extracted"}, True, "from extracted", None),
        ({"content": "from content"}, True, "from content", None),
        ({"status": "partial", "markdown": "raw md"}, True, "raw md", None),
        ({"filename": "scan.png", "result": "loose"}, True, "loose", None),
        ({"filename": "scan.png", "pages": 2}, True, NO_TEXT_PLACEHOLDER, None),
    ],
)
def test_response_shapes(body, success, text, error):
    result = interpret_ocr_response(body)
    assert result.success is success
    assert result.text == text
    assert result.error == error


# ───────────────────── Progress and batches ─────────────────────────


class SlowSession(FakeSession):
    def post(self, url, **kwargs):
        time.sleep(0.1)
        return super().post(url, **kwargs)


def test_progress_is_simulated_between_start_and_finish():
    session = SlowSession(FakeResponse(body={"text": "done"}))
    client = OcrClient(OcrConfig(progress_interval=0.01), session=session)
    seen = []

    result = client.process_image_file(png(), on_progress=seen.append)

    assert result.text == "done"
    assert seen[0] == 0
    assert seen[-1] == 100
    assert len(seen) > 2
    assert all(10 <= value <= 90 for value in seen[1:-1])


def test_without_callback_no_progress_thread(make_ocr_client):
    client, _ = make_ocr_client(FakeResponse(body={"text": "plain"}))
    assert client.process_image_file(png()).text == "plain"


def test_batch_is_sequential_and_skips_failures(make_ocr_client):
    client, session = make_ocr_client(
        FakeResponse(body={"text": "first page"}),
        FakeResponse(status_code=500, body={}),
        FakeResponse(body={"text": "third page"}),
    )
    images = [
        png("p1.png"),
        ImageFile("readme.txt", b"hi", "text/plain"),
        png("p2.png"),
        png("p3.png"),
    ]
    progress = []

    batch = client.process_images(images, on_progress=lambda i, v: progress.append((i, v)))

    assert [c["files"]["file"][0] for c in session.calls] == ["p1.png", "p2.png", "p3.png"]
    assert [r.filename for r in batch.results] == ["p1.png", "readme.txt", "p2.png", "p3.png"]
    assert [r.result.success for r in batch.results] == [True, False, False, True]
    assert batch.succeeded == 2
    assert batch.failed == 2
    assert batch.combined_text == "first page\n\n---\n\nthird page"
    assert (0, 100) in progress and (3, 100) in progress


def test_batch_survives_unexpected_exceptions(make_ocr_client):
    client, _ = make_ocr_client(RuntimeError("boom"), FakeResponse(body={"text": "ok"}))
    batch = client.process_images([png("a.png"), png("b.png")])
    assert batch.results[0].result.error == "Failed to process image"
    assert batch.combined_text == "ok"
    assert (batch.succeeded, batch.failed) == (1, 1)
