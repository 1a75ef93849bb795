"""Diagnostic errors raised at integration boundaries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx


@dataclass(slots=True)
class DiagnosticError(RuntimeError):
    """Failure with a stable code.

    Nothing in the inspector surfaces these to the UI; boundary handlers log ``to_extra()`` and degrade to an empty
    or partial result.
    """

    code: str
    message: str
    detail: str | None = None
    url: str | None = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}" if not self.detail else f"{self.code}: {self.message} ({self.detail})"

    @classmethod
    def from_http_error(cls, code: str, message: str, exc: httpx.HTTPError) -> DiagnosticError:
        """Wrap an ``httpx`` error, keeping the status code or transport reason as detail."""

        url: str | None = None
        if isinstance(exc, httpx.HTTPStatusError):
            detail = f"HTTP {exc.response.status_code}"
            url = str(exc.request.url)
        else:
            detail = str(exc) or type(exc).__name__
            try:
                url = str(exc.request.url)
            except RuntimeError:
                url = None
        return cls(code, message, detail=detail, url=url)

    def to_extra(self) -> dict[str, Any]:
        """Return a dict suitable for log enrichment.

        ``message`` is a reserved ``LogRecord`` attribute, so the text travels as ``reason``.
        """

        data: dict[str, Any] = {"code": self.code, "reason": self.message}
        if self.detail:
            data["detail"] = self.detail
        if self.url:
            data["url"] = self.url
        return data


__all__ = ["DiagnosticError"]
