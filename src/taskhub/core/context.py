"""Request-scoped correlation identifiers."""

from __future__ import annotations

from contextvars import ContextVar, Token

REQUEST_ID_HEADER = "X-Request-ID"
_UNBOUND = "-"

_request_id: ContextVar[str] = ContextVar("taskhub_request_id", default=_UNBOUND)


def get_request_id() -> str:
    """Return the request identifier bound to the running context."""

    return _request_id.get()


def bind_request_id(request_id: str) -> Token[str]:
    return _request_id.set(request_id)


def reset_request_id(token: Token[str]) -> None:
    _request_id.reset(token)


__all__ = [
    "REQUEST_ID_HEADER",
    "bind_request_id",
    "get_request_id",
    "reset_request_id",
]
