"""Wire protocol for obs-websocket.

Defines the request/response/update documents exchanged over the socket.

Key concepts:
- Requests: Client -> Server, each with a unique message-id
- Responses: Server -> Client, correlated by message-id
- Updates: Server -> Client notifications, tagged by update-type
"""

from .messages import Response, ResponseStatus, Update, parse_message
from .requests import Request, RequestType, new_message_id
from .updates import EventKind, OutputState, decode_update

__all__ = [
    "Request",
    "RequestType",
    "new_message_id",
    "Response",
    "ResponseStatus",
    "Update",
    "parse_message",
    "EventKind",
    "OutputState",
    "decode_update",
]
