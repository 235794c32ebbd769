"""Remote call invoker for the Beget HTTP API.

A call is a GET to ``{base_url}/{section}/{method}`` carrying the identity
fields and, when present, a JSON-encoded ``input_data`` payload. Responses use
a two-level envelope::

    {"status": "success", "answer": {"status": "success", "result": ...}}

Only when both levels report success is the call successful; a clean HTTP
exchange on its own proves nothing about the operation.

The whole exchange runs under :func:`asyncio.wait_for`, so an expired budget
cancels the in-flight request rather than waiting on per-phase socket
timeouts.
"""
from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import ClassVar, TypeAlias

import httpx

from . import __version__
from .credentials import EffectiveCredentials
from .errors import BegetError, ErrorKind, error_for_kind

AUTH_ERROR_CODE = "AUTH_ERROR"
DEFAULT_TIMEOUT_MS = 20000


@dataclass(frozen=True)
class CallRequest:
    """Immutable description of one remote operation."""

    section: str
    method: str
    input_data: Mapping[str, object] | None = None
    query: Mapping[str, object] | None = None
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    @property
    def address(self) -> str:
        """Return the routable ``section/method`` address."""
        return f"{self.section}/{self.method}"


@dataclass(frozen=True)
class CallSuccess:
    """Both envelope levels reported success."""

    result: object
    ok: ClassVar[bool] = True


@dataclass(frozen=True)
class CallFailure:
    """The call failed at the transport, protocol, or application level."""

    kind: ErrorKind
    message: str
    provider_code: str | None = None
    ok: ClassVar[bool] = False

    def to_error(self) -> BegetError:
        """Return the exception that represents this failure."""
        return error_for_kind(self.kind)(self.message, provider_code=self.provider_code)


CallOutcome: TypeAlias = CallSuccess | CallFailure


def build_params(credentials: EffectiveCredentials, request: CallRequest) -> dict[str, str]:
    """Return the query parameters for *request*."""
    params: dict[str, str] = {
        "login": credentials.login,
        "passwd": credentials.secret,
        "output_format": "json",
    }
    for key, value in (request.query or {}).items():
        if value is None:
            continue
        params[key] = _query_value(value)
    payload = compact_payload(request.input_data)
    if payload is not None:
        params["input_format"] = "json"
        params["input_data"] = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    return params


def compact_payload(input_data: Mapping[str, object] | None) -> dict[str, object] | None:
    """Drop top-level ``None`` fields; nested values are sent as given."""
    if input_data is None:
        return None
    return {key: value for key, value in input_data.items() if value is not None}


def _query_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_url(base_url: str, request: CallRequest) -> str:
    """Join the API base URL with the request address."""
    return f"{base_url.rstrip('/')}/{request.section}/{request.method}"


def invoke(
    credentials: EffectiveCredentials,
    request: CallRequest,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> CallOutcome:
    """Perform *request* synchronously and classify the outcome."""
    return asyncio.run(invoke_async(credentials, request, transport=transport))


async def invoke_async(
    credentials: EffectiveCredentials,
    request: CallRequest,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> CallOutcome:
    """Perform *request* within its timeout budget and classify the outcome."""
    timeout_s = request.timeout_ms / 1000
    url = build_url(credentials.base_url, request)
    params = build_params(credentials, request)
    headers = {"User-Agent": f"beget-cli/{__version__}", "Accept": "application/json"}

    async with httpx.AsyncClient(
        transport=transport,
        timeout=httpx.Timeout(timeout_s),
        headers=headers,
    ) as client:
        try:
            response = await asyncio.wait_for(client.get(url, params=params), timeout=timeout_s)
        except (TimeoutError, httpx.TimeoutException):
            return CallFailure(ErrorKind.NETWORK, f"Network timeout after {request.timeout_ms}ms")
        except httpx.InvalidURL as exc:
            return CallFailure(ErrorKind.NETWORK, f"Network error: invalid URL ({exc})")
        except httpx.RequestError as exc:
            detail = str(exc) or type(exc).__name__
            return CallFailure(ErrorKind.NETWORK, f"Network error: {detail}")

    return interpret_response(response)


def interpret_response(response: httpx.Response) -> CallOutcome:
    """Classify an HTTP response into a :data:`CallOutcome`."""
    if not response.is_success:
        reason = response.reason_phrase or ""
        return CallFailure(ErrorKind.NETWORK, f"HTTP {response.status_code} {reason}".rstrip())
    try:
        payload = response.json()
    except ValueError:
        return CallFailure(ErrorKind.API_PROTOCOL, "API returned non-JSON response")
    if not isinstance(payload, Mapping):
        return CallFailure(ErrorKind.API_PROTOCOL, "API returned non-JSON response")
    return interpret_envelope(payload)


def interpret_envelope(payload: Mapping[str, object]) -> CallOutcome:
    """Apply the two-level success check to a decoded response body."""
    if payload.get("status") != "success":
        code = _optional_str(payload.get("error_code"))
        text = _optional_str(payload.get("error_text")) or "unknown error"
        kind = ErrorKind.AUTH if code == AUTH_ERROR_CODE else ErrorKind.API_METHOD
        return CallFailure(kind, text, provider_code=code)

    answer = payload.get("answer")
    if not isinstance(answer, Mapping) or answer.get("status") != "success":
        text, code = _first_method_error(answer)
        return CallFailure(
            ErrorKind.API_METHOD,
            text or "unknown method error",
            provider_code=code,
        )
    return CallSuccess(result=answer.get("result"))


def _first_method_error(answer: object) -> tuple[str | None, str | None]:
    if not isinstance(answer, Mapping):
        return None, None
    errors = answer.get("errors")
    if not isinstance(errors, list) or not errors:
        return None, None
    first = errors[0]
    if isinstance(first, Mapping):
        return _optional_str(first.get("error_text")), _optional_str(first.get("error_code"))
    return _optional_str(first), None


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text or None


__all__ = [
    "AUTH_ERROR_CODE",
    "CallFailure",
    "CallOutcome",
    "CallRequest",
    "CallSuccess",
    "build_params",
    "build_url",
    "compact_payload",
    "interpret_envelope",
    "interpret_response",
    "invoke",
    "invoke_async",
]
