"""Request definitions for the protocol layer.

Requests are sent from the client and expect exactly one response.
Each request carries a unique message ID for correlation with its response.
"""

from __future__ import annotations

import json
import secrets
import string
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

MESSAGE_ID_ALPHABET = string.ascii_letters + string.digits
DEFAULT_MESSAGE_ID_LENGTH = 16

# Envelope keys owned by the protocol; request fields can never override them
REQUEST_TYPE_KEY = "request-type"
MESSAGE_ID_KEY = "message-id"


def new_message_id(length: int = DEFAULT_MESSAGE_ID_LENGTH) -> str:
    """Generate a random alphanumeric message ID.

    Uniqueness is not guaranteed; callers check candidates against the
    requests currently outstanding.
    """
    if length < 1:
        raise ValueError(f"Message ID length must be positive, got {length}")
    return "".join(secrets.choice(MESSAGE_ID_ALPHABET) for _ in range(length))


class RequestType(str, Enum):
    """Request types used by the client and its typed API."""

    # Handshake
    GET_AUTH_REQUIRED = "GetAuthRequired"
    AUTHENTICATE = "Authenticate"

    # General
    GET_VERSION = "GetVersion"
    GET_STATS = "GetStats"
    GET_VIDEO_INFO = "GetVideoInfo"
    SET_HEARTBEAT = "SetHeartbeat"
    GET_FILENAME_FORMATTING = "GetFilenameFormatting"
    SET_FILENAME_FORMATTING = "SetFilenameFormatting"

    # Scenes
    GET_CURRENT_SCENE = "GetCurrentScene"
    SET_CURRENT_SCENE = "SetCurrentScene"
    GET_SCENE_LIST = "GetSceneList"
    GET_SCENE_ITEM_PROPERTIES = "GetSceneItemProperties"
    SET_SCENE_ITEM_PROPERTIES = "SetSceneItemProperties"
    RESET_SCENE_ITEM = "ResetSceneItem"

    # Sources
    GET_SOURCES_LIST = "GetSourcesList"
    GET_VOLUME = "GetVolume"
    SET_VOLUME = "SetVolume"
    GET_MUTE = "GetMute"
    SET_MUTE = "SetMute"
    TOGGLE_MUTE = "ToggleMute"
    GET_SYNC_OFFSET = "GetSyncOffset"
    SET_SYNC_OFFSET = "SetSyncOffset"
    GET_SOURCE_SETTINGS = "GetSourceSettings"
    SET_SOURCE_SETTINGS = "SetSourceSettings"
    GET_SOURCE_FILTERS = "GetSourceFilters"
    ADD_FILTER_TO_SOURCE = "AddFilterToSource"
    REMOVE_FILTER_FROM_SOURCE = "RemoveFilterFromSource"

    # Outputs
    GET_STREAMING_STATUS = "GetStreamingStatus"
    START_STREAMING = "StartStreaming"
    STOP_STREAMING = "StopStreaming"
    START_STOP_STREAMING = "StartStopStreaming"
    START_RECORDING = "StartRecording"
    STOP_RECORDING = "StopRecording"
    START_STOP_RECORDING = "StartStopRecording"
    GET_RECORDING_FOLDER = "GetRecordingFolder"
    SET_RECORDING_FOLDER = "SetRecordingFolder"
    START_REPLAY_BUFFER = "StartReplayBuffer"
    STOP_REPLAY_BUFFER = "StopReplayBuffer"
    SAVE_REPLAY_BUFFER = "SaveReplayBuffer"
    GET_STREAM_SETTINGS = "GetStreamSettings"
    SEND_CAPTIONS = "SendCaptions"

    # Transitions
    GET_CURRENT_TRANSITION = "GetCurrentTransition"
    SET_CURRENT_TRANSITION = "SetCurrentTransition"
    GET_TRANSITION_LIST = "GetTransitionList"
    GET_TRANSITION_DURATION = "GetTransitionDuration"
    SET_TRANSITION_DURATION = "SetTransitionDuration"

    # Profiles and scene collections
    GET_CURRENT_PROFILE = "GetCurrentProfile"
    SET_CURRENT_PROFILE = "SetCurrentProfile"
    LIST_PROFILES = "ListProfiles"
    GET_CURRENT_SCENE_COLLECTION = "GetCurrentSceneCollection"
    SET_CURRENT_SCENE_COLLECTION = "SetCurrentSceneCollection"
    LIST_SCENE_COLLECTIONS = "ListSceneCollections"

    # Studio mode
    GET_STUDIO_MODE_STATUS = "GetStudioModeStatus"
    ENABLE_STUDIO_MODE = "EnableStudioMode"
    DISABLE_STUDIO_MODE = "DisableStudioMode"
    TOGGLE_STUDIO_MODE = "ToggleStudioMode"
    GET_PREVIEW_SCENE = "GetPreviewScene"
    SET_PREVIEW_SCENE = "SetPreviewScene"
    TRANSITION_TO_PROGRAM = "TransitionToProgram"


class Request(BaseModel):
    """A request from client to server.

    Example (wire form):
        {
            "request-type": "SetCurrentScene",
            "message-id": "h3Kx9aPq0ZbLw2Ne",
            "scene-name": "Intermission"
        }

    The server answers with a response carrying the same message-id.
    """

    request_type: str
    message_id: str = Field(default_factory=new_message_id)
    fields: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def create(
        cls,
        request_type: str | RequestType,
        fields: dict[str, Any] | None = None,
        message_id: str | None = None,
    ) -> Request:
        """Factory method for creating requests."""
        return cls(
            request_type=(
                request_type.value if isinstance(request_type, RequestType) else request_type
            ),
            message_id=message_id or new_message_id(),
            fields=dict(fields) if fields else {},
        )

    def to_wire(self) -> dict[str, Any]:
        """Build the wire document; the envelope keys always win over fields."""
        return {
            **self.fields,
            REQUEST_TYPE_KEY: self.request_type,
            MESSAGE_ID_KEY: self.message_id,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_wire())
