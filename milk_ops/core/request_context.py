from __future__ import annotations

from contextvars import ContextVar


_REQUEST_ID_CTX: ContextVar[str | None] = ContextVar("request_id", default=None)
_OPERATOR_CTX: ContextVar[str | None] = ContextVar("operator", default=None)


def set_request_context(*, request_id: str | None = None, operator: str | None = None) -> None:
    if request_id is not None:
        _REQUEST_ID_CTX.set(request_id)
    if operator is not None:
        _OPERATOR_CTX.set(operator)


def get_request_id() -> str | None:
    return _REQUEST_ID_CTX.get()


def get_operator() -> str | None:
    return _OPERATOR_CTX.get()


def clear_request_context() -> None:
    _REQUEST_ID_CTX.set(None)
    _OPERATOR_CTX.set(None)
