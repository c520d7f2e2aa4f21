from __future__ import annotations

import json

import httpx
import pytest

from lingoticket.ui.api import APIError, TicketAPIClient
from lingoticket.ui.utils import format_flow, history_rows, sort_history


def _client(handler) -> TicketAPIClient:
    return TicketAPIClient(base_url="http://api.test/", transport=httpx.MockTransport(handler))


def test_create_ticket_sends_camel_case_payload():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json={"id": "t-1", "status": "CREATED"})

    result = _client(handler).create_ticket(original_text="Hello", source_lang="en", target_lang="pt")

    assert result == {"id": "t-1", "status": "CREATED"}
    (request,) = seen
    assert request.method == "POST"
    assert str(request.url) == "http://api.test/tickets"
    assert json.loads(request.content) == {"originalText": "Hello", "sourceLang": "en", "targetLang": "pt"}


def test_list_tickets_passes_status_filter():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"id": "t-1"}])

    client = _client(handler)

    assert client.list_tickets("FAILED") == [{"id": "t-1"}]
    assert client.list_tickets() == [{"id": "t-1"}]
    assert seen[0].url.params["status"] == "FAILED"
    assert "status" not in seen[1].url.params


def test_error_body_is_raised_as_api_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(409, json={"code": "CONFLICT", "message": "Ticket with id t-1 is already translated"})

    with pytest.raises(APIError) as excinfo:
        _client(handler).translate_ticket("t-1")

    assert excinfo.value.status_code == 409
    assert excinfo.value.code == "CONFLICT"
    assert str(excinfo.value) == "[409] Ticket with id t-1 is already translated"


def test_non_json_error_body_falls_back_to_text():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="upstream down")

    with pytest.raises(APIError) as excinfo:
        _client(handler).deliver_ticket("t-1")

    assert str(excinfo.value) == "[502] upstream down"
    assert excinfo.value.code is None


def test_transport_error_is_wrapped():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(APIError, match="API request failed: refused"):
        _client(handler).ping()


def test_history_helpers_sort_and_format():
    records = [
        {"id": "a", "sourceLang": "en", "targetLang": "pt", "status": "CREATED", "createdAt": "2024-05-01T09:00:00Z"},
        {
            "id": "b",
            "sourceLang": "",
            "targetLang": "fr",
            "status": "TRANSLATED",
            "originalText": "Hi",
            "translatedText": "Salut",
            "createdAt": "2024-05-02T09:00:00Z",
        },
    ]

    assert [record["id"] for record in sort_history(records)] == ["b", "a"]
    assert format_flow(records[0]) == "en → pt"
    rows = history_rows(records)
    assert rows[0] == {
        "id": "b",
        "flow": "auto → fr",
        "status": "TRANSLATED",
        "original": "Hi",
        "translation": "Salut",
        "created": "2024-05-02T09:00:00Z",
    }
    assert rows[1]["translation"] == ""
