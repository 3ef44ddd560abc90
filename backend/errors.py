from __future__ import annotations

from typing import Any


class GatewayError(Exception):
    """Base error rendered as a JSON envelope by the app's exception handler.

    Record endpoints answer with ``{code, success, message, ...}``; upload and
    proxy endpoints leave ``code`` out, so each error remembers which shape it
    belongs to.
    """

    status_code = 500

    def __init__(self, message: str, *, with_code: bool = False, **extra: Any):
        super().__init__(message)
        self.message = message
        self.with_code = with_code
        self.extra = extra

    def body(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.with_code:
            payload["code"] = self.status_code
        payload["success"] = False
        payload["message"] = self.message
        payload.update(self.extra)
        return payload


class ValidationError(GatewayError):
    status_code = 400


class UpstreamError(GatewayError):
    status_code = 500


class PayloadTooLarge(GatewayError):
    status_code = 413


class UnsupportedMediaType(GatewayError):
    status_code = 415
