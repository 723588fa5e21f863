"""Authentication handshake.

obs-websocket proves knowledge of the shared password without sending it:

    secret   = base64(sha256(password + salt))
    response = base64(sha256(secret + challenge))

The server supplies challenge and salt via GetAuthRequired; the client
answers with Authenticate {"auth": response}.
"""

from __future__ import annotations

import base64
import hashlib
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import AuthenticationFailedError, RemoteError
from .protocol.requests import RequestType

logger = logging.getLogger(__name__)

# Signature of ObsWebSocketClient.call
CallFn = Callable[..., Awaitable[dict[str, Any]]]


class AuthInfo(BaseModel):
    """Result of GetAuthRequired."""

    model_config = ConfigDict(populate_by_name=True)

    auth_required: bool = Field(default=False, alias="authRequired")
    challenge: str | None = None
    salt: str | None = None


def hash_encode(text: str) -> str:
    """Base64-encoded SHA-256 digest of text."""
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")


def compute_auth_response(password: str, salt: str, challenge: str) -> str:
    """Compute the Authenticate response for a password, salt and challenge."""
    secret = hash_encode(password + salt)
    return hash_encode(secret + challenge)


async def authenticate(call: CallFn, password: str | None) -> bool:
    """Run the handshake over an established connection.

    Args:
        call: Request function (ObsWebSocketClient.call)
        password: Shared password, may be None if the server needs none

    Returns:
        True if authentication was performed, False if the server does not
        require it.

    Raises:
        AuthenticationFailedError: If the server rejects the response, or
            requires a password and none was given, or answers
            GetAuthRequired with an unusable reply.
    """
    try:
        info = AuthInfo.model_validate(await call(RequestType.GET_AUTH_REQUIRED))
    except ValidationError as e:
        raise AuthenticationFailedError(f"Malformed GetAuthRequired response: {e}") from e

    if not info.auth_required:
        logger.debug("Server does not require authentication")
        return False

    if password is None:
        raise AuthenticationFailedError("Server requires a password but none was given")

    response = compute_auth_response(password, info.salt or "", info.challenge or "")

    try:
        await call(RequestType.AUTHENTICATE, {"auth": response})
    except RemoteError as e:
        raise AuthenticationFailedError(f"Authentication rejected: {e.error}") from e

    logger.info("Authenticated")
    return True
