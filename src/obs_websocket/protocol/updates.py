"""Update taxonomy for server-initiated notifications.

Wire update-types are mapped onto subscribable event kinds. Several wire
types can share one kind: StreamStarting/StreamStarted/StreamStopping/
StreamStopped all surface as STREAMING_STATE_CHANGED with an OutputState.

Kinds are grouped by domain:
- lifecycle      - client connection state (not sent by the server)
- scene.*        - scene switching and scene items
- collection.*   - scene collections
- transition.*   - transitions
- profile.*      - profiles
- output.*       - streaming, recording, replay buffer
- studio.*       - studio mode and preview
- source.*       - source lifecycle, audio, filters
- server.*       - heartbeat and exit notices
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .messages import Update


class OutputState(str, Enum):
    """State of an output (stream, recording, replay buffer)."""

    STARTING = "starting"
    STARTED = "started"
    STOPPING = "stopping"
    STOPPED = "stopped"


class EventKind(str, Enum):
    """All subscribable event kinds."""

    # Client lifecycle
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"

    # Scenes
    SCENE_SWITCHED = "scene.switched"
    SCENE_LIST_CHANGED = "scene.list_changed"
    SOURCE_ORDER_CHANGED = "scene.source_order_changed"
    SCENE_ITEM_ADDED = "scene.item_added"
    SCENE_ITEM_REMOVED = "scene.item_removed"
    SCENE_ITEM_VISIBILITY_CHANGED = "scene.item_visibility_changed"
    SCENE_ITEM_SELECTED = "scene.item_selected"
    SCENE_ITEM_DESELECTED = "scene.item_deselected"
    SCENE_ITEM_TRANSFORM_CHANGED = "scene.item_transform_changed"

    # Scene collections
    SCENE_COLLECTION_CHANGED = "collection.changed"
    SCENE_COLLECTION_LIST_CHANGED = "collection.list_changed"

    # Transitions
    TRANSITION_SWITCHED = "transition.switched"
    TRANSITION_DURATION_CHANGED = "transition.duration_changed"
    TRANSITION_LIST_CHANGED = "transition.list_changed"
    TRANSITION_BEGIN = "transition.begin"

    # Profiles
    PROFILE_CHANGED = "profile.changed"
    PROFILE_LIST_CHANGED = "profile.list_changed"

    # Outputs
    STREAMING_STATE_CHANGED = "output.streaming_state_changed"
    RECORDING_STATE_CHANGED = "output.recording_state_changed"
    REPLAY_BUFFER_STATE_CHANGED = "output.replay_buffer_state_changed"
    STREAM_STATUS = "output.stream_status"

    # Studio mode
    PREVIEW_SCENE_CHANGED = "studio.preview_scene_changed"
    STUDIO_MODE_SWITCHED = "studio.mode_switched"

    # Sources
    SOURCE_CREATED = "source.created"
    SOURCE_DESTROYED = "source.destroyed"
    SOURCE_RENAMED = "source.renamed"
    SOURCE_MUTE_CHANGED = "source.mute_changed"
    SOURCE_VOLUME_CHANGED = "source.volume_changed"
    SOURCE_AUDIO_MIXERS_CHANGED = "source.audio_mixers_changed"
    SOURCE_SYNC_OFFSET_CHANGED = "source.sync_offset_changed"
    SOURCE_FILTER_ADDED = "source.filter_added"
    SOURCE_FILTER_REMOVED = "source.filter_removed"
    SOURCE_FILTERS_REORDERED = "source.filters_reordered"

    # Server
    HEARTBEAT = "server.heartbeat"
    EXITING = "server.exiting"


# =============================================================================
# Lifecycle payloads
# =============================================================================


class Connected(BaseModel):
    """Connection established and authenticated (or no auth required)."""

    url: str
    auth_required: bool = False


class Disconnected(BaseModel):
    """Connection torn down, by the client or the server."""

    reason: str


# =============================================================================
# Update payloads
# =============================================================================


class UpdatePayload(BaseModel):
    """Base for decoded update payloads; also used for kinds with no fields."""

    model_config = ConfigDict(populate_by_name=True)

    update_type: str = Field(alias="update-type")
    stream_timecode: str | None = Field(default=None, alias="stream-timecode")
    rec_timecode: str | None = Field(default=None, alias="rec-timecode")


class SceneSwitched(UpdatePayload):
    scene_name: str = Field(alias="scene-name")
    sources: list[dict[str, Any]] = Field(default_factory=list)


class SourceOrderChanged(UpdatePayload):
    scene_name: str = Field(alias="scene-name")
    scene_items: list[dict[str, Any]] = Field(default_factory=list, alias="scene-items")


class SceneItemChanged(UpdatePayload):
    """Scene item added, removed, selected, deselected or toggled."""

    scene_name: str = Field(alias="scene-name")
    item_name: str = Field(alias="item-name")
    item_id: int | str | None = Field(default=None, alias="item-id")
    item_visible: bool | None = Field(default=None, alias="item-visible")


class SceneItemTransformChanged(UpdatePayload):
    scene_name: str = Field(alias="scene-name")
    item_name: str = Field(alias="item-name")
    item_id: int | str | None = Field(default=None, alias="item-id")
    transform: dict[str, Any] = Field(default_factory=dict)


class TransitionSwitched(UpdatePayload):
    transition_name: str = Field(alias="transition-name")


class TransitionDurationChanged(UpdatePayload):
    new_duration: int = Field(alias="new-duration")
    old_duration: int | None = Field(default=None, alias="old-duration")


class TransitionBegin(UpdatePayload):
    name: str | None = None
    type: str | None = None
    duration: int | None = None
    from_scene: str | None = Field(default=None, alias="from-scene")
    to_scene: str | None = Field(default=None, alias="to-scene")


class OutputStateChanged(UpdatePayload):
    """Streaming, recording or replay buffer changed state."""

    state: OutputState


class StreamStatus(UpdatePayload):
    """Periodic streaming statistics (every 2 seconds while streaming)."""

    streaming: bool = False
    recording: bool = False
    replay_buffer_active: bool = Field(default=False, alias="replay-buffer-active")
    bytes_per_sec: int = Field(default=0, alias="bytes-per-sec")
    kbits_per_sec: int = Field(default=0, alias="kbits-per-sec")
    strain: float = 0.0
    total_stream_time: int = Field(default=0, alias="total-stream-time")
    num_total_frames: int = Field(default=0, alias="num-total-frames")
    num_dropped_frames: int = Field(default=0, alias="num-dropped-frames")
    fps: float = 0.0
    render_total_frames: int | None = Field(default=None, alias="render-total-frames")
    render_missed_frames: int | None = Field(default=None, alias="render-missed-frames")
    output_total_frames: int | None = Field(default=None, alias="output-total-frames")
    output_skipped_frames: int | None = Field(default=None, alias="output-skipped-frames")
    average_frame_time: float | None = Field(default=None, alias="average-frame-time")
    cpu_usage: float | None = Field(default=None, alias="cpu-usage")
    memory_usage: float | None = Field(default=None, alias="memory-usage")
    free_disk_space: float | None = Field(default=None, alias="free-disk-space")
    preview_only: bool = Field(default=False, alias="preview-only")


class PreviewSceneChanged(UpdatePayload):
    scene_name: str = Field(alias="scene-name")
    sources: list[dict[str, Any]] = Field(default_factory=list)


class StudioModeSwitched(UpdatePayload):
    new_state: bool = Field(alias="new-state")


class Heartbeat(UpdatePayload):
    """Heartbeat, sent every 2 seconds once enabled with SetHeartbeat."""

    pulse: bool = False
    current_profile: str | None = Field(default=None, alias="current-profile")
    current_scene: str | None = Field(default=None, alias="current-scene")
    streaming: bool = False
    total_stream_time: int | None = Field(default=None, alias="total-stream-time")
    total_stream_bytes: int | None = Field(default=None, alias="total-stream-bytes")
    total_stream_frames: int | None = Field(default=None, alias="total-stream-frames")
    recording: bool = False
    total_record_time: int | None = Field(default=None, alias="total-record-time")
    total_record_bytes: int | None = Field(default=None, alias="total-record-bytes")
    total_record_frames: int | None = Field(default=None, alias="total-record-frames")
    stats: dict[str, Any] | None = None


class SourceCreated(UpdatePayload):
    source_name: str = Field(alias="sourceName")
    source_type: str | None = Field(default=None, alias="sourceType")
    source_kind: str | None = Field(default=None, alias="sourceKind")
    source_settings: dict[str, Any] = Field(default_factory=dict, alias="sourceSettings")


class SourceDestroyed(UpdatePayload):
    source_name: str = Field(alias="sourceName")
    source_type: str | None = Field(default=None, alias="sourceType")
    source_kind: str | None = Field(default=None, alias="sourceKind")


class SourceRenamed(UpdatePayload):
    new_name: str = Field(alias="newName")
    previous_name: str = Field(alias="previousName")


class SourceMuteStateChanged(UpdatePayload):
    source_name: str = Field(alias="sourceName")
    muted: bool


class SourceVolumeChanged(UpdatePayload):
    source_name: str = Field(alias="sourceName")
    volume: float


class AudioMixerChannel(BaseModel):
    id: int
    enabled: bool


class SourceAudioMixersChanged(UpdatePayload):
    source_name: str = Field(alias="sourceName")
    mixers: list[AudioMixerChannel] = Field(default_factory=list)
    hex_mixers_value: str | None = Field(default=None, alias="hexMixersValue")


class SourceAudioSyncOffsetChanged(UpdatePayload):
    source_name: str = Field(alias="sourceName")
    sync_offset: int = Field(alias="syncOffset")


class SourceFilterAdded(UpdatePayload):
    source_name: str = Field(alias="sourceName")
    filter_name: str = Field(alias="filterName")
    filter_type: str | None = Field(default=None, alias="filterType")
    filter_settings: dict[str, Any] = Field(default_factory=dict, alias="filterSettings")


class SourceFilterRemoved(UpdatePayload):
    source_name: str = Field(alias="sourceName")
    filter_name: str = Field(alias="filterName")
    filter_type: str | None = Field(default=None, alias="filterType")


class FilterReorderItem(BaseModel):
    name: str
    type: str | None = None


class SourceFiltersReordered(UpdatePayload):
    source_name: str = Field(alias="sourceName")
    filters: list[FilterReorderItem] = Field(default_factory=list)


# =============================================================================
# Decoder table
# =============================================================================

UpdateDecoder = Callable[[Update], BaseModel]


def _model(model: type[UpdatePayload]) -> UpdateDecoder:
    def decode(update: Update) -> BaseModel:
        return model.model_validate(update.fields)

    return decode


def _output_state(state: OutputState) -> UpdateDecoder:
    def decode(update: Update) -> BaseModel:
        return OutputStateChanged.model_validate({**update.fields, "state": state})

    return decode


def _output_states(prefix: str, kind: EventKind) -> dict[str, tuple[EventKind, UpdateDecoder]]:
    return {
        f"{prefix}{suffix}": (kind, _output_state(state))
        for suffix, state in (
            ("Starting", OutputState.STARTING),
            ("Started", OutputState.STARTED),
            ("Stopping", OutputState.STOPPING),
            ("Stopped", OutputState.STOPPED),
        )
    }


UPDATE_DECODERS: dict[str, tuple[EventKind, UpdateDecoder]] = {
    # Scenes
    "SwitchScenes": (EventKind.SCENE_SWITCHED, _model(SceneSwitched)),
    "ScenesChanged": (EventKind.SCENE_LIST_CHANGED, _model(UpdatePayload)),
    "SourceOrderChanged": (EventKind.SOURCE_ORDER_CHANGED, _model(SourceOrderChanged)),
    "SceneItemAdded": (EventKind.SCENE_ITEM_ADDED, _model(SceneItemChanged)),
    "SceneItemRemoved": (EventKind.SCENE_ITEM_REMOVED, _model(SceneItemChanged)),
    "SceneItemVisibilityChanged": (
        EventKind.SCENE_ITEM_VISIBILITY_CHANGED,
        _model(SceneItemChanged),
    ),
    "SceneItemSelected": (EventKind.SCENE_ITEM_SELECTED, _model(SceneItemChanged)),
    "SceneItemDeselected": (EventKind.SCENE_ITEM_DESELECTED, _model(SceneItemChanged)),
    "SceneItemTransformChanged": (
        EventKind.SCENE_ITEM_TRANSFORM_CHANGED,
        _model(SceneItemTransformChanged),
    ),
    # Scene collections
    "SceneCollectionChanged": (EventKind.SCENE_COLLECTION_CHANGED, _model(UpdatePayload)),
    "SceneCollectionListChanged": (
        EventKind.SCENE_COLLECTION_LIST_CHANGED,
        _model(UpdatePayload),
    ),
    # Transitions
    "SwitchTransition": (EventKind.TRANSITION_SWITCHED, _model(TransitionSwitched)),
    "TransitionDurationChanged": (
        EventKind.TRANSITION_DURATION_CHANGED,
        _model(TransitionDurationChanged),
    ),
    "TransitionListChanged": (EventKind.TRANSITION_LIST_CHANGED, _model(UpdatePayload)),
    "TransitionBegin": (EventKind.TRANSITION_BEGIN, _model(TransitionBegin)),
    # Profiles
    "ProfileChanged": (EventKind.PROFILE_CHANGED, _model(UpdatePayload)),
    "ProfileListChanged": (EventKind.PROFILE_LIST_CHANGED, _model(UpdatePayload)),
    # Outputs
    **_output_states("Stream", EventKind.STREAMING_STATE_CHANGED),
    **_output_states("Recording", EventKind.RECORDING_STATE_CHANGED),
    **_output_states("Replay", EventKind.REPLAY_BUFFER_STATE_CHANGED),
    "StreamStatus": (EventKind.STREAM_STATUS, _model(StreamStatus)),
    # Studio mode
    "PreviewSceneChanged": (EventKind.PREVIEW_SCENE_CHANGED, _model(PreviewSceneChanged)),
    "StudioModeSwitched": (EventKind.STUDIO_MODE_SWITCHED, _model(StudioModeSwitched)),
    # Sources
    "SourceCreated": (EventKind.SOURCE_CREATED, _model(SourceCreated)),
    "SourceDestroyed": (EventKind.SOURCE_DESTROYED, _model(SourceDestroyed)),
    "SourceRenamed": (EventKind.SOURCE_RENAMED, _model(SourceRenamed)),
    "SourceMuteStateChanged": (EventKind.SOURCE_MUTE_CHANGED, _model(SourceMuteStateChanged)),
    "SourceVolumeChanged": (EventKind.SOURCE_VOLUME_CHANGED, _model(SourceVolumeChanged)),
    "SourceAudioMixersChanged": (
        EventKind.SOURCE_AUDIO_MIXERS_CHANGED,
        _model(SourceAudioMixersChanged),
    ),
    "SourceAudioSyncOffsetChanged": (
        EventKind.SOURCE_SYNC_OFFSET_CHANGED,
        _model(SourceAudioSyncOffsetChanged),
    ),
    "SourceFilterAdded": (EventKind.SOURCE_FILTER_ADDED, _model(SourceFilterAdded)),
    "SourceFilterRemoved": (EventKind.SOURCE_FILTER_REMOVED, _model(SourceFilterRemoved)),
    "SourceFiltersReordered": (
        EventKind.SOURCE_FILTERS_REORDERED,
        _model(SourceFiltersReordered),
    ),
    # Server
    "Heartbeat": (EventKind.HEARTBEAT, _model(Heartbeat)),
    "Exiting": (EventKind.EXITING, _model(UpdatePayload)),
}


def decode_update(update: Update) -> tuple[EventKind, BaseModel] | None:
    """Decode an update into its event kind and typed payload.

    Returns None for update-types this client does not know about.

    Raises:
        pydantic.ValidationError: If a known update is missing required fields.
    """
    entry = UPDATE_DECODERS.get(update.update_type)
    if entry is None:
        return None
    kind, decoder = entry
    return kind, decoder(update)
