# tests/conftest.py
import json

import pytest

from config import OcrConfig
from models.circular import Annexure, AnnexureType, Chapter, CircularType, Clause
from services.circulars import CircularDataService
from services.ocr import OcrClient
from services.storage import InMemoryDocumentStore

STORAGE_KEY = "all_circulars_data"


class FakeResponse:
    """Stands in for requests.Response"""

    def __init__(self, status_code=200, body=None, invalid_json=False):
        self.status_code = status_code
        self._body = body
        self._invalid_json = invalid_json

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._invalid_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._body


class FakeSession:
    """Records posts and replays queued responses or exceptions"""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        outcome = self.responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def service(store):
    return CircularDataService(store, STORAGE_KEY)


@pytest.fixture
def stored_document(store):
    """Decoded document currently in the store"""

    def _read():
        raw = store.get_item(STORAGE_KEY)
        return json.loads(raw) if raw is not None else None

    return _read


@pytest.fixture
def make_ocr_client():
    def _make(*responses, **config_overrides):
        session = FakeSession(*responses)
        config = OcrConfig(api_url="https://ocr.test/ocr_image", progress_interval=0.01, **config_overrides)
        return OcrClient(config, session=session), session

    return _make


def clause(number, title="", content="", children=None):
    return Clause(
        clause_number=number,
        clause_title=title,
        clause_content=content,
        clauses=list(children or []),
    )


@pytest.fixture
def populated_service(service):
    """2023 master circular with one chapter, nested clauses and two annexures"""
    service.add_chapter(CircularType.Y2023, Chapter("1", "Introduction", "Scope of the circular"))
    service.add_clause_to_chapter(CircularType.Y2023, 0, clause("1.1", "Applicability"))
    service.add_clause_to_chapter(CircularType.Y2023, 0, clause("1.1.a", "Brokers"), ["1.1"])
    service.add_clause_to_chapter(CircularType.Y2023, 0, clause("1.2", "Definitions"))
    service.add_annexure(
        CircularType.Y2023,
        Annexure("Reporting format", "Columns A-F", AnnexureType.FORM),
    )
    service.add_annexure(
        CircularType.Y2023,
        Annexure("Illustrations", "", AnnexureType.NON_FORM),
    )
    return service
