from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from flask import jsonify

from utils.errors import MarketError


@dataclass
class Envelope:
    """The `{success, message, ...}` body every mutating endpoint answers with.

    `data` keys are merged at the top level (`user`, `game`, `key`, ...) and
    `error` carries the failure kind when `success` is false.
    """

    success: bool
    message: str
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    def to_dict(self) -> dict:
        body = {"success": self.success, "message": self.message}
        if self.error is not None:
            body["error"] = self.error
        body.update(self.data)
        return body

    def to_response(self, status: int = 200):
        return jsonify(self.to_dict()), status


def ok(message: str, status: int = 200, **data):
    return Envelope(True, message, data).to_response(status)


def fail(exc: MarketError):
    data = {}
    retry_after = getattr(exc, "retry_after_seconds", None)
    if retry_after is not None:
        data["retry_after_seconds"] = retry_after
    return Envelope(False, exc.message, data, error=exc.kind).to_response(exc.status)
