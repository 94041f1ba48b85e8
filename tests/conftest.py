import json

import pytest
import requests


def _make_response(status_code=200, payload=None, text=None, reason="OK", url="https://example.test/v2/"):
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    response.url = url
    if text is None:
        text = json.dumps(payload) if payload is not None else ""
    response._content = text.encode("utf-8")
    response._content_consumed = True
    response.encoding = "utf-8"
    return response


@pytest.fixture
def make_response():
    """Factory for canned `requests.Response` objects."""
    return _make_response


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    monkeypatch.delenv("GRIND_HOST", raising=False)
