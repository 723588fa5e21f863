"""Inbound message definitions for the protocol layer.

Every message from the server is one of two shapes:
- Response: carries the message-id of the request it answers
- Update: server-initiated notification, tagged with an update-type

A document carrying both keys is treated as a response. A document
carrying neither is malformed and is dropped by the reader.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from ..errors import MalformedMessageError
from .requests import MESSAGE_ID_KEY

UPDATE_TYPE_KEY = "update-type"
STATUS_KEY = "status"
ERROR_KEY = "error"

_RESPONSE_ENVELOPE_KEYS = frozenset({MESSAGE_ID_KEY, STATUS_KEY, ERROR_KEY})


class ResponseStatus(str, Enum):
    OK = "ok"
    ERROR = "error"


class Response(BaseModel):
    """A response to a single request.

    Example:
        {
            "message-id": "h3Kx9aPq0ZbLw2Ne",
            "status": "ok",
            "name": "Intermission",
            "sources": []
        }

    `fields` holds every key except the envelope keys (message-id, status,
    error).
    """

    message_id: str
    status: str = ResponseStatus.OK.value
    error: str | None = None
    fields: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return self.status == ResponseStatus.ERROR.value

    @classmethod
    def from_wire(cls, body: dict[str, Any]) -> Response:
        error = body.get(ERROR_KEY)
        return cls(
            message_id=str(body[MESSAGE_ID_KEY]),
            status=str(body.get(STATUS_KEY, ResponseStatus.OK.value)),
            error=None if error is None else str(error),
            fields={k: v for k, v in body.items() if k not in _RESPONSE_ENVELOPE_KEYS},
        )


class Update(BaseModel):
    """A server-initiated notification.

    Example:
        {
            "update-type": "SwitchScenes",
            "scene-name": "Intermission",
            "sources": [],
            "stream-timecode": "00:12:31.512"
        }

    `fields` holds the full message body.
    """

    update_type: str
    stream_timecode: str | None = None
    rec_timecode: str | None = None
    fields: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_wire(cls, body: dict[str, Any]) -> Update:
        return cls(
            update_type=str(body[UPDATE_TYPE_KEY]),
            stream_timecode=body.get("stream-timecode"),
            rec_timecode=body.get("rec-timecode"),
            fields=dict(body),
        )


def parse_message(raw: str | bytes) -> Response | Update:
    """Decode and classify one inbound message.

    Raises:
        MalformedMessageError: If the message is not a JSON object with
            either a message-id or an update-type.
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedMessageError(f"Binary frame is not UTF-8: {e}") from e

    try:
        body = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedMessageError(f"Invalid JSON: {e}") from e

    if not isinstance(body, dict):
        raise MalformedMessageError(f"Expected a JSON object, got {type(body).__name__}")

    # Responses take precedence when both keys are present
    if body.get(MESSAGE_ID_KEY) is not None:
        return Response.from_wire(body)
    if body.get(UPDATE_TYPE_KEY) is not None:
        return Update.from_wire(body)

    raise MalformedMessageError("Message has neither message-id nor update-type")
