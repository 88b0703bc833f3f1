"""HTTP transport with bearer token injection."""

import logging
from dataclasses import dataclass

import requests

from oasync.errors import TransportError
from oasync.remote.auth import CredentialProvider

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60


@dataclass
class HttpResponse:
    status_code: int
    reason: str
    body: bytes

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class AuthenticatedHTTPClient:
    """Sends one request at a time through a shared ``requests.Session``."""

    def __init__(self, credentials: CredentialProvider, timeout: float = DEFAULT_TIMEOUT,
                 session: requests.Session | None = None):
        self.credentials = credentials
        self.timeout = timeout
        self.session = session or requests.Session()

    def request(self, method: str, url: str, *, params=None, json=None, data=None,
                files=None, headers=None) -> HttpResponse:
        all_headers = {"Authorization": f"Bearer {self.credentials.token()}"}
        if headers:
            all_headers.update(headers)
        log.debug("%s %s params=%s", method, url, params)
        try:
            resp = self.session.request(
                method,
                url,
                params=params,
                json=json,
                data=data,
                files=files,
                headers=all_headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}") from e
        log.debug("%s %s -> %s", method, url, resp.status_code)
        return HttpResponse(resp.status_code, resp.reason or "", resp.content or b"")
