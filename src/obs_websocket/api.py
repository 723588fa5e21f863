"""Typed request API.

Each group wraps ObsWebSocketClient.call: it builds the request fields,
sends the request, and validates the response into a typed model.
Errors propagate from call() unchanged (RemoteError, TransportError,
RequestCancelledError).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .protocol.requests import RequestType
from .types import (
    FilterSettings,
    ObsStats,
    ObsVersion,
    OutputStatus,
    Scene,
    SceneItemProperties,
    SceneList,
    SourceInfo,
    SourceSettings,
    StreamSettings,
    TransitionList,
    TransitionSettings,
    VideoInfo,
    VolumeInfo,
)

if TYPE_CHECKING:
    from .client import ObsWebSocketClient


def _with_scene(fields: dict[str, Any], scene_name: str | None) -> dict[str, Any]:
    if scene_name:
        fields["scene-name"] = scene_name
    return fields


@dataclass
class GeneralAPI:
    """Server information and general settings."""

    _client: ObsWebSocketClient

    async def get_version(self) -> ObsVersion:
        return ObsVersion.model_validate(await self._client.call(RequestType.GET_VERSION))

    async def get_stats(self) -> ObsStats:
        result = await self._client.call(RequestType.GET_STATS)
        return ObsStats.model_validate(result.get("stats", {}))

    async def get_video_info(self) -> VideoInfo:
        return VideoInfo.model_validate(await self._client.call(RequestType.GET_VIDEO_INFO))

    async def set_heartbeat(self, enable: bool) -> None:
        """Enable or disable the Heartbeat update (sent every 2 seconds)."""
        await self._client.call(RequestType.SET_HEARTBEAT, {"enable": enable})

    async def get_filename_formatting(self) -> str:
        result = await self._client.call(RequestType.GET_FILENAME_FORMATTING)
        return result["filename-formatting"]

    async def set_filename_formatting(self, formatting: str) -> None:
        await self._client.call(
            RequestType.SET_FILENAME_FORMATTING, {"filename-formatting": formatting}
        )


@dataclass
class ScenesAPI:
    """Scene and scene item operations."""

    _client: ObsWebSocketClient

    async def get_current(self) -> Scene:
        """Get the current scene along with its items."""
        return Scene.model_validate(await self._client.call(RequestType.GET_CURRENT_SCENE))

    async def set_current(self, scene_name: str) -> None:
        await self._client.call(RequestType.SET_CURRENT_SCENE, {"scene-name": scene_name})

    async def list(self) -> SceneList:
        return SceneList.model_validate(await self._client.call(RequestType.GET_SCENE_LIST))

    async def get_item_properties(
        self, item_name: str, scene_name: str | None = None
    ) -> SceneItemProperties:
        """Get the properties of a scene item.

        Args:
            item_name: Name of the scene item
            scene_name: Scene the item belongs to (defaults to the current scene)
        """
        fields = _with_scene({"item": item_name}, scene_name)
        result = await self._client.call(RequestType.GET_SCENE_ITEM_PROPERTIES, fields)
        return SceneItemProperties.model_validate(result)

    async def set_item_render(
        self, item_name: str, visible: bool, scene_name: str | None = None
    ) -> None:
        """Show or hide a scene item."""
        fields = _with_scene({"item": item_name, "visible": visible}, scene_name)
        await self._client.call(RequestType.SET_SCENE_ITEM_PROPERTIES, fields)

    async def reset_item(self, item_name: str, scene_name: str | None = None) -> None:
        fields = _with_scene({"item": item_name}, scene_name)
        await self._client.call(RequestType.RESET_SCENE_ITEM, fields)


@dataclass
class SourcesAPI:
    """Source, audio and filter operations."""

    _client: ObsWebSocketClient

    async def list(self) -> list[SourceInfo]:
        result = await self._client.call(RequestType.GET_SOURCES_LIST)
        return [SourceInfo.model_validate(s) for s in result.get("sources", [])]

    async def get_volume(self, source_name: str) -> VolumeInfo:
        result = await self._client.call(RequestType.GET_VOLUME, {"source": source_name})
        return VolumeInfo.model_validate(result)

    async def set_volume(self, source_name: str, volume: float) -> None:
        """Set the volume of a source (0.0 to 1.0, multiplier)."""
        await self._client.call(RequestType.SET_VOLUME, {"source": source_name, "volume": volume})

    async def get_mute(self, source_name: str) -> bool:
        result = await self._client.call(RequestType.GET_MUTE, {"source": source_name})
        return bool(result["muted"])

    async def set_mute(self, source_name: str, mute: bool) -> None:
        await self._client.call(RequestType.SET_MUTE, {"source": source_name, "mute": mute})

    async def toggle_mute(self, source_name: str) -> None:
        await self._client.call(RequestType.TOGGLE_MUTE, {"source": source_name})

    async def get_sync_offset(self, source_name: str) -> int:
        """Audio sync offset in nanoseconds."""
        result = await self._client.call(RequestType.GET_SYNC_OFFSET, {"source": source_name})
        return int(result["offset"])

    async def set_sync_offset(self, source_name: str, offset: int) -> None:
        await self._client.call(
            RequestType.SET_SYNC_OFFSET, {"source": source_name, "offset": offset}
        )

    async def get_settings(self, source_name: str, source_type: str | None = None) -> SourceSettings:
        fields: dict[str, Any] = {"sourceName": source_name}
        if source_type:
            fields["sourceType"] = source_type
        result = await self._client.call(RequestType.GET_SOURCE_SETTINGS, fields)
        return SourceSettings.model_validate(result)

    async def set_settings(
        self, source_name: str, settings: dict[str, Any], source_type: str | None = None
    ) -> None:
        fields: dict[str, Any] = {"sourceName": source_name, "sourceSettings": settings}
        if source_type:
            fields["sourceType"] = source_type
        await self._client.call(RequestType.SET_SOURCE_SETTINGS, fields)

    async def get_filters(self, source_name: str) -> list[FilterSettings]:
        result = await self._client.call(
            RequestType.GET_SOURCE_FILTERS, {"sourceName": source_name}
        )
        return [FilterSettings.model_validate(f) for f in result.get("filters", [])]

    async def add_filter(
        self,
        source_name: str,
        filter_name: str,
        filter_type: str,
        settings: dict[str, Any] | None = None,
    ) -> None:
        await self._client.call(
            RequestType.ADD_FILTER_TO_SOURCE,
            {
                "sourceName": source_name,
                "filterName": filter_name,
                "filterType": filter_type,
                "filterSettings": settings or {},
            },
        )

    async def remove_filter(self, source_name: str, filter_name: str) -> None:
        await self._client.call(
            RequestType.REMOVE_FILTER_FROM_SOURCE,
            {"sourceName": source_name, "filterName": filter_name},
        )


@dataclass
class OutputsAPI:
    """Streaming, recording and replay buffer control."""

    _client: ObsWebSocketClient

    async def get_status(self) -> OutputStatus:
        return OutputStatus.model_validate(
            await self._client.call(RequestType.GET_STREAMING_STATUS)
        )

    async def start_streaming(self) -> None:
        await self._client.call(RequestType.START_STREAMING)

    async def stop_streaming(self) -> None:
        await self._client.call(RequestType.STOP_STREAMING)

    async def toggle_streaming(self) -> None:
        await self._client.call(RequestType.START_STOP_STREAMING)

    async def start_recording(self) -> None:
        await self._client.call(RequestType.START_RECORDING)

    async def stop_recording(self) -> None:
        await self._client.call(RequestType.STOP_RECORDING)

    async def toggle_recording(self) -> None:
        await self._client.call(RequestType.START_STOP_RECORDING)

    async def get_recording_folder(self) -> str:
        result = await self._client.call(RequestType.GET_RECORDING_FOLDER)
        return result["rec-folder"]

    async def set_recording_folder(self, folder: str) -> None:
        await self._client.call(RequestType.SET_RECORDING_FOLDER, {"rec-folder": folder})

    async def start_replay_buffer(self) -> None:
        await self._client.call(RequestType.START_REPLAY_BUFFER)

    async def stop_replay_buffer(self) -> None:
        await self._client.call(RequestType.STOP_REPLAY_BUFFER)

    async def save_replay_buffer(self) -> None:
        await self._client.call(RequestType.SAVE_REPLAY_BUFFER)

    async def get_stream_settings(self) -> StreamSettings:
        return StreamSettings.model_validate(
            await self._client.call(RequestType.GET_STREAM_SETTINGS)
        )

    async def send_captions(self, text: str) -> None:
        """Send embedded CEA-608 captions over the stream."""
        await self._client.call(RequestType.SEND_CAPTIONS, {"text": text})


@dataclass
class TransitionsAPI:
    """Transition operations."""

    _client: ObsWebSocketClient

    async def get_current(self) -> TransitionSettings:
        return TransitionSettings.model_validate(
            await self._client.call(RequestType.GET_CURRENT_TRANSITION)
        )

    async def set_current(self, transition_name: str) -> None:
        await self._client.call(
            RequestType.SET_CURRENT_TRANSITION, {"transition-name": transition_name}
        )

    async def list(self) -> TransitionList:
        return TransitionList.model_validate(
            await self._client.call(RequestType.GET_TRANSITION_LIST)
        )

    async def get_duration(self) -> int:
        result = await self._client.call(RequestType.GET_TRANSITION_DURATION)
        return int(result["transition-duration"])

    async def set_duration(self, duration_ms: int) -> None:
        await self._client.call(RequestType.SET_TRANSITION_DURATION, {"duration": duration_ms})


@dataclass
class ProfilesAPI:
    """Profile and scene collection operations."""

    _client: ObsWebSocketClient

    async def get_current(self) -> str:
        result = await self._client.call(RequestType.GET_CURRENT_PROFILE)
        return result["profile-name"]

    async def set_current(self, profile_name: str) -> None:
        await self._client.call(RequestType.SET_CURRENT_PROFILE, {"profile-name": profile_name})

    async def list(self) -> list[str]:
        result = await self._client.call(RequestType.LIST_PROFILES)
        return [p["profile-name"] for p in result.get("profiles", [])]

    async def get_current_collection(self) -> str:
        result = await self._client.call(RequestType.GET_CURRENT_SCENE_COLLECTION)
        return result["sc-name"]

    async def set_current_collection(self, collection_name: str) -> None:
        await self._client.call(
            RequestType.SET_CURRENT_SCENE_COLLECTION, {"sc-name": collection_name}
        )

    async def list_collections(self) -> list[str]:
        result = await self._client.call(RequestType.LIST_SCENE_COLLECTIONS)
        return [c["sc-name"] for c in result.get("scene-collections", [])]


@dataclass
class StudioModeAPI:
    """Studio mode, preview scene and program transitions."""

    _client: ObsWebSocketClient

    async def is_enabled(self) -> bool:
        result = await self._client.call(RequestType.GET_STUDIO_MODE_STATUS)
        return bool(result["studio-mode"])

    async def enable(self) -> None:
        await self._client.call(RequestType.ENABLE_STUDIO_MODE)

    async def disable(self) -> None:
        await self._client.call(RequestType.DISABLE_STUDIO_MODE)

    async def toggle(self) -> None:
        await self._client.call(RequestType.TOGGLE_STUDIO_MODE)

    async def get_preview_scene(self) -> Scene:
        return Scene.model_validate(await self._client.call(RequestType.GET_PREVIEW_SCENE))

    async def set_preview_scene(self, scene_name: str) -> None:
        await self._client.call(RequestType.SET_PREVIEW_SCENE, {"scene-name": scene_name})

    async def transition_to_program(
        self,
        transition_name: str | None = None,
        duration_ms: int | None = None,
    ) -> None:
        """Transition the preview scene to program.

        Args:
            transition_name: Transition to use (defaults to the current one)
            duration_ms: Transition duration (defaults to the current one)
        """
        with_transition: dict[str, Any] = {}
        if transition_name is not None:
            with_transition["name"] = transition_name
        if duration_ms is not None:
            with_transition["duration"] = duration_ms

        fields = {"with-transition": with_transition} if with_transition else None
        await self._client.call(RequestType.TRANSITION_TO_PROGRAM, fields)
