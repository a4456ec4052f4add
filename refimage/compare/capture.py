"""In-memory store of captured HTTP responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from ..errors import NoCapturedResponse


@dataclass(frozen=True)
class CapturedResponse:
    body: bytes
    status: int = 200
    headers: Mapping[str, str] = field(default_factory=dict)
    url: str | None = None

    @property
    def content_type(self) -> str | None:
        for key, value in self.headers.items():
            if key.lower() == "content-type":
                return value
        return None


class ResponseCapture:
    def __init__(self) -> None:
        self._responses: list[CapturedResponse] = []

    def record(
        self,
        body: bytes,
        *,
        status: int = 200,
        headers: Mapping[str, str] | None = None,
        url: str | None = None,
    ) -> CapturedResponse:
        response = CapturedResponse(body=bytes(body), status=status, headers=dict(headers or {}), url=url)
        self._responses.append(response)
        return response

    def last(self) -> CapturedResponse:
        if not self._responses:
            raise NoCapturedResponse("No HTTP responses have been captured yet.")
        return self._responses[-1]

    def clear(self) -> None:
        self._responses.clear()

    def __len__(self) -> int:
        return len(self._responses)
