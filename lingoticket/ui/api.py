from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

import httpx


class APIError(RuntimeError):
    """Error raised for failed calls against the ticket API."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
        response: httpx.Response | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.response = response

    def __str__(self) -> str:
        prefix = f"[{self.status_code}] " if self.status_code is not None else ""
        return f"{prefix}{super().__str__()}"


def _extract_error(response: httpx.Response) -> tuple[str, str | None]:
    try:
        data = response.json()
    except ValueError:
        return response.text or f"Request failed ({response.status_code})", None

    if isinstance(data, Mapping):
        code = data.get("code") if isinstance(data.get("code"), str) else None
        message = data.get("message")
        if isinstance(message, str) and message:
            return message, code
        if code:
            return code, code
    return response.text or f"Request failed ({response.status_code})", None


@dataclass(slots=True)
class TicketAPIClient:
    """Small synchronous client for the ticket HTTP API."""

    base_url: str
    timeout: float = 30.0
    transport: httpx.BaseTransport | None = None

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = self._build_url(path)
        headers: dict[str, str] = {"Accept": "application/json"}
        headers.update(kwargs.pop("headers", {}))

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            raise APIError(f"API request failed: {exc}") from exc

        if response.status_code >= 400:
            message, code = _extract_error(response)
            raise APIError(message, status_code=response.status_code, code=code, response=response)

        if response.status_code == 204 or not response.content:
            return None

        content_type = response.headers.get("Content-Type", "")
        if "application/json" in content_type:
            return response.json()
        return response.text

    def _build_url(self, path: str) -> str:
        normalized = path if path.startswith("/") else f"/{path}"
        return f"{self.base_url.rstrip('/')}{normalized}"

    def ping(self) -> Mapping[str, Any]:
        return self._request("GET", "/ping")

    def create_ticket(self, *, original_text: str, source_lang: str, target_lang: str) -> Mapping[str, Any]:
        payload = {"originalText": original_text, "sourceLang": source_lang, "targetLang": target_lang}
        return self._request("POST", "/tickets", json=payload)

    def get_ticket(self, ticket_id: str) -> Mapping[str, Any]:
        return self._request("GET", f"/tickets/{ticket_id}")

    def get_ticket_status(self, ticket_id: str) -> Mapping[str, Any]:
        return self._request("GET", f"/tickets/{ticket_id}/status")

    def list_tickets(self, status: str | None = None) -> list[Mapping[str, Any]]:
        params = {"status": status} if status else None
        data = self._request("GET", "/tickets", params=params)
        return list(data or [])

    def translate_ticket(self, ticket_id: str) -> Mapping[str, Any]:
        return self._request("POST", f"/tickets/{ticket_id}/translate")

    def deliver_ticket(self, ticket_id: str) -> Mapping[str, Any]:
        return self._request("POST", f"/tickets/{ticket_id}/deliver")
