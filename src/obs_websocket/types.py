"""Typed results for obs-websocket requests."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ObsModel(BaseModel):
    """Base for result models: accepts wire aliases and keeps unknown fields."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class ObsVersion(ObsModel):
    """Result of GetVersion."""

    version: float | None = None
    plugin_version: str = Field(alias="obs-websocket-version")
    obs_version: str = Field(alias="obs-studio-version")
    available_requests: str | None = Field(default=None, alias="available-requests")
    image_export_formats: str | None = Field(default=None, alias="supported-image-export-formats")

    def request_types(self) -> list[str]:
        """Request types supported by the server."""
        return self.available_requests.split(",") if self.available_requests else []


class VideoInfo(ObsModel):
    base_width: int = Field(alias="baseWidth")
    base_height: int = Field(alias="baseHeight")
    output_width: int = Field(alias="outputWidth")
    output_height: int = Field(alias="outputHeight")
    scale_type: str | None = Field(default=None, alias="scaleType")
    fps: float | None = None
    video_format: str | None = Field(default=None, alias="videoFormat")
    color_space: str | None = Field(default=None, alias="colorSpace")
    color_range: str | None = Field(default=None, alias="colorRange")


class ObsStats(ObsModel):
    """OBS performance stats (the "stats" object of GetStats)."""

    fps: float = 0.0
    render_total_frames: int = Field(default=0, alias="render-total-frames")
    render_missed_frames: int = Field(default=0, alias="render-missed-frames")
    output_total_frames: int = Field(default=0, alias="output-total-frames")
    output_skipped_frames: int = Field(default=0, alias="output-skipped-frames")
    average_frame_time: float = Field(default=0.0, alias="average-frame-time")
    cpu_usage: float = Field(default=0.0, alias="cpu-usage")
    memory_usage: float = Field(default=0.0, alias="memory-usage")
    free_disk_space: float = Field(default=0.0, alias="free-disk-space")


# =============================================================================
# Scenes
# =============================================================================


class SceneItem(ObsModel):
    """A source placed in a scene."""

    name: str
    type: str | None = None
    id: int | None = None
    render: bool = True
    volume: float | None = None
    muted: bool | None = None
    locked: bool | None = None
    x: float | None = None
    y: float | None = None
    cx: float | None = None
    cy: float | None = None
    source_cx: int | None = None
    source_cy: int | None = None


class Scene(ObsModel):
    name: str
    sources: list[SceneItem] = Field(default_factory=list)


class SceneList(ObsModel):
    current_scene: str = Field(alias="current-scene")
    scenes: list[Scene] = Field(default_factory=list)


class SceneItemProperties(ObsModel):
    """Result of GetSceneItemProperties; layout fields are kept as extras."""

    name: str
    item_id: int | None = Field(default=None, alias="itemId")
    visible: bool = True
    locked: bool = False
    rotation: float = 0.0
    position: dict[str, Any] = Field(default_factory=dict)
    scale: dict[str, Any] = Field(default_factory=dict)
    crop: dict[str, Any] = Field(default_factory=dict)
    bounds: dict[str, Any] = Field(default_factory=dict)
    width: float | None = None
    height: float | None = None


# =============================================================================
# Sources
# =============================================================================


class SourceInfo(ObsModel):
    name: str
    type_id: str | None = Field(default=None, alias="typeId")
    type: str | None = None


class VolumeInfo(ObsModel):
    name: str
    volume: float
    muted: bool = False


class FilterSettings(ObsModel):
    name: str
    type: str
    enabled: bool = True
    settings: dict[str, Any] = Field(default_factory=dict)


class SourceSettings(ObsModel):
    source_name: str = Field(alias="sourceName")
    source_type: str | None = Field(default=None, alias="sourceType")
    source_settings: dict[str, Any] = Field(default_factory=dict, alias="sourceSettings")


# =============================================================================
# Outputs
# =============================================================================


class OutputStatus(ObsModel):
    """Result of GetStreamingStatus."""

    streaming: bool = False
    recording: bool = False
    recording_paused: bool = Field(default=False, alias="recording-paused")
    replay_buffer_active: bool = Field(default=False, alias="replay-buffer-active")
    preview_only: bool = Field(default=False, alias="preview-only")
    stream_timecode: str | None = Field(default=None, alias="stream-timecode")
    rec_timecode: str | None = Field(default=None, alias="rec-timecode")


class StreamSettings(ObsModel):
    """Result of GetStreamSettings."""

    type: str
    settings: dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Transitions
# =============================================================================


class TransitionSettings(ObsModel):
    name: str
    duration: int | None = None


class TransitionList(ObsModel):
    current_transition: str = Field(alias="current-transition")
    transitions: list[TransitionSettings] = Field(default_factory=list)
