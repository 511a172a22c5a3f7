"""Tests for facts document loading helpers."""

import json
from unittest.mock import MagicMock

import pytest
import requests

from schemagen import utils
from schemagen.codegen.core.errors import LoadError
from schemagen.utils import is_url, load_facts, load_facts_from_file, load_facts_from_url


def fake_response(payload=None, status=200, content_type="application/json"):
    response = MagicMock()
    response.headers = {"content-type": content_type}
    response.json.return_value = payload
    if status >= 400:
        error = requests.exceptions.HTTPError(f"{status} error")
        error.response = MagicMock(status_code=status)
        response.raise_for_status.side_effect = error
    return response


class TestLoadFromFile:
    """Tests for load_facts_from_file."""

    def test_load(self, tmp_path, user_facts):
        path = tmp_path / "facts.json"
        path.write_text(json.dumps(user_facts))
        source, data = load_facts_from_file(path)
        assert source == str(path)
        assert data == user_facts

    def test_missing_file(self, tmp_path):
        with pytest.raises(LoadError, match="File not found"):
            load_facts_from_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "facts.json"
        path.write_text("{")
        with pytest.raises(LoadError, match="Invalid JSON"):
            load_facts_from_file(path)

    def test_document_must_be_an_object(self, tmp_path):
        path = tmp_path / "facts.json"
        path.write_text("[]")
        with pytest.raises(LoadError, match="JSON object"):
            load_facts_from_file(path)


class TestLoadFromUrl:
    """Tests for load_facts_from_url."""

    def test_load(self, monkeypatch, user_facts):
        get = MagicMock(return_value=fake_response(user_facts))
        monkeypatch.setattr(utils.requests, "get", get)

        source, data = load_facts_from_url("https://example.com/facts.json", timeout=5)

        assert source == "https://example.com/facts.json"
        assert data == user_facts
        get.assert_called_once_with("https://example.com/facts.json", timeout=5)

    def test_invalid_url(self):
        with pytest.raises(LoadError, match="Invalid URL"):
            load_facts_from_url("not-a-url")

    def test_http_error(self, monkeypatch):
        monkeypatch.setattr(
            utils.requests, "get", MagicMock(return_value=fake_response(status=404))
        )
        with pytest.raises(LoadError, match="HTTP error 404") as exc_info:
            load_facts_from_url("https://example.com/facts.json")
        assert exc_info.value.details["status"] == 404

    @pytest.mark.parametrize("error,message", [
        (requests.exceptions.Timeout(), "timeout"),
        (requests.exceptions.ConnectionError(), "Connection error"),
        (requests.exceptions.TooManyRedirects(), "Request error"),
    ])
    def test_request_errors(self, monkeypatch, error, message):
        monkeypatch.setattr(utils.requests, "get", MagicMock(side_effect=error))
        with pytest.raises(LoadError, match=message):
            load_facts_from_url("https://example.com/facts.json")

    def test_invalid_json_response(self, monkeypatch):
        response = fake_response()
        response.json.side_effect = ValueError("Expecting value")
        monkeypatch.setattr(utils.requests, "get", MagicMock(return_value=response))
        with pytest.raises(LoadError, match="Invalid JSON response"):
            load_facts_from_url("https://example.com/facts.json")


class TestLoadFacts:
    """Tests for load_facts."""

    def test_requires_a_source(self):
        with pytest.raises(LoadError, match="Either"):
            load_facts()

    def test_rejects_two_sources(self):
        with pytest.raises(LoadError, match="both"):
            load_facts(file_path="facts.json", url="https://example.com/facts.json")

    def test_file(self, tmp_path, user_facts):
        path = tmp_path / "facts.json"
        path.write_text(json.dumps(user_facts))
        assert load_facts(file_path=path)[1] == user_facts


@pytest.mark.parametrize("source,expected", [
    ("https://example.com/facts.json", True),
    ("http://localhost:8000/facts", True),
    ("facts.json", False),
    ("/tmp/facts.json", False),
])
def test_is_url(source, expected):
    assert is_url(source) is expected
