"""JSON envelopes returned to the host."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Literal


@dataclass(slots=True)
class SuccessResponse:
    data:   list[str] = field(default_factory=list)
    status: Literal["success"] = "success"


@dataclass(slots=True)
class ErrorResponse:
    message: str
    status:  Literal["error"] = "error"


def to_json(response: SuccessResponse | ErrorResponse) -> str:
    """Compact single-line JSON, status first."""
    payload = asdict(response)
    ordered = {"status": payload.pop("status"), **payload}
    return json.dumps(ordered, separators=(",", ":"), ensure_ascii=False)


def success(data: list[str]) -> str:
    return to_json(SuccessResponse(data=list(data)))


def error(message: str) -> str:
    return to_json(ErrorResponse(message=message))
