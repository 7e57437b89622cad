from datetime import date

import pytest
import requests

import api_client
from api_client import EphemerisFetchError, fetch_ephemeris, fetch_object_catalog


class FakeResponse:
    def __init__(self, status_code=200, payload=None, json_error=False):
        self.status_code = status_code
        self.payload = payload
        self.json_error = json_error

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        if self.json_error:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self.payload


@pytest.fixture
def fake_get(monkeypatch):
    calls = []
    responses = []

    def get(url, params=None, headers=None, timeout=None):
        calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        response = responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(api_client.requests, "get", get)
    return calls, responses


def test_fetch_ephemeris_returns_result_text(fake_get):
    calls, responses = fake_get
    responses.append(FakeResponse(payload={"result": "$$SOE\n$$EOE\n"}))

    text = fetch_ephemeris("399", date(2024, 1, 1), base_url="http://example.test/")

    assert text == "$$SOE\n$$EOE\n"
    assert calls[0]["url"] == "http://example.test/planet-data"
    assert calls[0]["params"] == {"command": "399", "date": "2024-01-01"}
    assert calls[0]["headers"]["User-Agent"]
    assert calls[0]["timeout"]


def test_fetch_ephemeris_accepts_string_date(fake_get):
    calls, responses = fake_get
    responses.append(FakeResponse(payload={"result": "x"}))
    fetch_ephemeris("499", "2025-03-04", base_url="http://example.test")
    assert calls[0]["params"]["date"] == "2025-03-04"


def test_non_ok_status_is_a_fetch_error(fake_get):
    _, responses = fake_get
    responses.append(FakeResponse(status_code=500))
    with pytest.raises(EphemerisFetchError, match="HTTP Error"):
        fetch_ephemeris("399", date(2024, 1, 1))


@pytest.mark.parametrize("payload", [{}, {"result": ""}, {"error": "bad command"}, ["not", "a", "dict"]])
def test_missing_result_is_a_fetch_error(fake_get, payload):
    _, responses = fake_get
    responses.append(FakeResponse(payload=payload))
    with pytest.raises(EphemerisFetchError, match="result"):
        fetch_ephemeris("399", date(2024, 1, 1))


def test_non_json_body_is_a_fetch_error(fake_get):
    _, responses = fake_get
    responses.append(FakeResponse(json_error=True))
    with pytest.raises(EphemerisFetchError, match="not JSON"):
        fetch_ephemeris("399", date(2024, 1, 1))


@pytest.mark.parametrize("error", [
    requests.exceptions.ConnectionError("refused"),
    requests.exceptions.Timeout("slow"),
])
def test_network_errors_are_fetch_errors(fake_get, error):
    _, responses = fake_get
    responses.append(error)
    with pytest.raises(EphemerisFetchError):
        fetch_ephemeris("399", date(2024, 1, 1))


def test_fetch_object_catalog(fake_get):
    calls, responses = fake_get
    rows = [["M31", None, 10.68, 2537000, None, 41.27, None, None, 3.2]]
    responses.append(FakeResponse(payload=rows))

    assert fetch_object_catalog(base_url="http://example.test") == rows
    assert calls[0]["url"] == "http://example.test/object-data"


def test_fetch_object_catalog_rejects_non_list(fake_get):
    _, responses = fake_get
    responses.append(FakeResponse(payload={"rows": []}))
    with pytest.raises(EphemerisFetchError):
        fetch_object_catalog(base_url="http://example.test")
