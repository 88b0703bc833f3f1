"""Status classification of remote calls."""

import json
from dataclasses import dataclass
from enum import Enum

from oasync.errors import ConflictError, RemoteRejectionError
from oasync.remote.transport import HttpResponse

CONFLICT_STATUS = 409


class CallStatus(str, Enum):
    SUCCESS = "success"
    CONFLICT = "conflict"
    FAILED = "failed"


@dataclass
class CallResult:
    status: CallStatus
    status_code: int
    reason: str = ""
    body: str = ""

    @classmethod
    def from_response(cls, resp: HttpResponse) -> "CallResult":
        if resp.ok:
            status = CallStatus.SUCCESS
        elif resp.status_code == CONFLICT_STATUS:
            status = CallStatus.CONFLICT
        else:
            status = CallStatus.FAILED
        return cls(status, resp.status_code, resp.reason, resp.text)

    @property
    def status_text(self) -> str:
        return f"{self.status_code} {self.reason}".strip()


def rejection(resp: HttpResponse) -> RemoteRejectionError:
    cls = ConflictError if resp.status_code == CONFLICT_STATUS else RemoteRejectionError
    return cls(resp.status_code, resp.reason, resp.text)


def json_body(resp: HttpResponse) -> dict:
    """Decode a successful response, raising for any other status."""
    if not resp.ok:
        raise rejection(resp)
    if not resp.body:
        return {}
    try:
        data = json.loads(resp.body)
    except json.JSONDecodeError as e:
        raise RemoteRejectionError(resp.status_code, f"invalid JSON response ({e.msg})", resp.text) from e
    return data if isinstance(data, dict) else {}
