"""
HTTP helpers shared by every resource module.

json_fetch sends and reads JSON; form_fetch sends multipart/form-data and lets
the transport pick the boundary. Both raise on non-2xx with the backend's
`message`/`error` text when it sent one.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple
from urllib.parse import urlencode

import requests

import config
from schemas import ImageUpload

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base for client failures."""
    pass


class ApiUnavailableError(ApiError):
    """Connection refused, DNS failure or timeout."""
    pass


class ApiResponseError(ApiError):
    """Non-2xx response."""

    def __init__(self, message: str, status: int, data: Any = None):
        super().__init__(message)
        self.status = status
        self.data = data


class UnexpectedContentTypeError(ApiError):
    """A JSON endpoint answered with something else (usually an HTML error page)."""
    pass


# ------------- Query strings -------------

def _text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_query(filters: Optional[Mapping[str, Any]]) -> str:
    pairs: List[Tuple[str, str]] = []
    for key, value in (filters or {}).items():
        if value is None or (isinstance(value, str) and value == ""):
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((key, _text(v)) for v in value)
        else:
            pairs.append((key, _text(value)))
    if not pairs:
        return ""
    return "?" + urlencode(pairs)


# ------------- Multipart bodies -------------

class FormPayload:
    """Ordered multipart body. Text fields go out as parts without a filename."""

    def __init__(self) -> None:
        self._parts: List[Tuple[str, Tuple[Optional[str], Any, Optional[str]]]] = []

    def append(self, name: str, value: Any) -> "FormPayload":
        self._parts.append((name, (None, _text(value), None)))
        return self

    def append_file(self, name: str, upload: ImageUpload) -> "FormPayload":
        self._parts.append((name, (upload.filename, upload.content, upload.content_type)))
        return self

    def fields(self) -> Dict[str, str]:
        """Text fields by name; file parts map to their filename."""
        out: Dict[str, str] = {}
        for name, (filename, value, _) in self._parts:
            out[name] = filename if filename is not None else value
        return out

    def has_file(self, name: str) -> bool:
        return any(n == name and filename is not None for n, (filename, _, _) in self._parts)

    def to_files(self) -> List[Tuple[str, Tuple[Any, ...]]]:
        out = []
        for name, (filename, value, content_type) in self._parts:
            if content_type is None:
                out.append((name, (filename, value)))
            else:
                out.append((name, (filename, value, content_type)))
        return out

    def __contains__(self, name: str) -> bool:
        return any(n == name for n, _ in self._parts)

    def __len__(self) -> int:
        return len(self._parts)

    def __iter__(self) -> Iterator[str]:
        return iter(n for n, _ in self._parts)


# ------------- Transport -------------

def is_json(response: Any) -> bool:
    return "application/json" in (response.headers.get("content-type") or "")


def error_message(data: Any, status: int) -> str:
    if isinstance(data, dict):
        if data.get("message") is not None:
            return str(data["message"])
        if data.get("error") is not None:
            return str(data["error"])
    return f"Request failed ({status})"


def send(method: str, url: str, session: Any = None, timeout: Optional[float] = None, **kwargs: Any) -> Any:
    """Issue the request through `session` (anything with a requests-style `request()`)."""
    transport = session if session is not None else requests
    logger.debug("%s %s", method, url)
    try:
        return transport.request(method, url, timeout=timeout or config.REQUEST_TIMEOUT, **kwargs)
    except requests.exceptions.Timeout as e:
        logger.warning("%s %s timed out", method, url)
        raise ApiUnavailableError(f"Request to {url} timed out") from e
    except requests.exceptions.RequestException as e:
        logger.warning("%s %s failed: %s", method, url, e)
        raise ApiUnavailableError(f"Request to {url} failed: {e}") from e


def _decode(response: Any) -> Any:
    if not (is_json(response) and response.content):
        return None
    return response.json()


def _read(method: str, url: str, response: Any) -> Any:
    ok = 200 <= response.status_code < 300
    try:
        data = _decode(response)
    except ValueError:
        # labelled JSON, body is not (proxy error pages)
        logger.warning("%s %s -> %s: unreadable JSON body", method, url, response.status_code)
        if ok:
            raise UnexpectedContentTypeError(f"Expected JSON, got: {response.text[:120]}…")
        raise ApiResponseError(f"Request failed ({response.status_code})", response.status_code)
    if not ok:
        message = error_message(data, response.status_code)
        logger.warning("%s %s -> %s: %s", method, url, response.status_code, message)
        raise ApiResponseError(message, response.status_code, data)
    return data


def json_fetch(
    url: str,
    method: str = "GET",
    headers: Optional[Mapping[str, str]] = None,
    body: Any = None,
    session: Any = None,
    timeout: Optional[float] = None,
) -> Any:
    merged = {"Content-Type": "application/json"}
    merged.update(headers or {})
    response = send(method, url, session, timeout, headers=merged, json=body)
    return _read(method, url, response)


def form_fetch(
    url: str,
    method: str = "POST",
    headers: Optional[Mapping[str, str]] = None,
    body: Optional[FormPayload] = None,
    session: Any = None,
    timeout: Optional[float] = None,
) -> Any:
    # no Content-Type here: the transport writes the multipart boundary
    payload = body if body is not None else FormPayload()
    if not len(payload):
        raise ValueError("A multipart body needs at least one part")
    response = send(method, url, session, timeout, headers=dict(headers or {}), files=payload.to_files())
    return _read(method, url, response)


# ------------- Client -------------

class ApiClient:
    def __init__(self, base_url: Optional[str] = None, session: Any = None, timeout: Optional[float] = None):
        self.base_url = (base_url or config.API_URL).rstrip("/")
        self.session = session
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT

    def url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def json(self, path: str, method: str = "GET", body: Any = None, headers: Optional[Mapping[str, str]] = None) -> Any:
        return json_fetch(self.url(path), method=method, headers=headers, body=body, session=self.session, timeout=self.timeout)

    def form(self, path: str, body: FormPayload, method: str = "POST") -> Any:
        return form_fetch(self.url(path), method=method, body=body, session=self.session, timeout=self.timeout)

    def raw(self, path: str, method: str = "GET") -> Any:
        return send(method, self.url(path), self.session, self.timeout)


_default_client: Optional[ApiClient] = None


def default_client() -> ApiClient:
    global _default_client
    if _default_client is None:
        _default_client = ApiClient()
    return _default_client


def set_default_client(client: Optional[ApiClient]) -> None:
    global _default_client
    _default_client = client
