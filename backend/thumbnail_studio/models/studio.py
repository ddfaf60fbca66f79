"""Studio state, state-machine actions, model catalog and API payloads."""
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from thumbnail_studio.models.thumbnail import (
    CharacterImageSet,
    InputImage,
    Layout,
    Palette,
    ThumbnailConfig,
)


class Step(str, Enum):
    """Workflow stage."""

    draft = "draft"
    adaptation = "adaptation"


class StudioState(BaseModel):
    """Everything the studio knows about one session.

    Replaced wholesale on every update; see ``services.state.reduce``.
    """

    model_config = ConfigDict(frozen=True)

    step: Step = Step.draft
    config: ThumbnailConfig = Field(default_factory=ThumbnailConfig)
    generated_draft: bool = False
    generated_prompt: str = ""
    adaptation_prompt: str = ""
    generated_image: Optional[str] = None
    character_images: CharacterImageSet = Field(default_factory=dict)
    adaptation_image: Optional[str] = None
    generating: bool = False
    adapting: bool = False
    adaptation_done: bool = False
    api_error: Optional[str] = None
    adaptation_error: Optional[str] = None


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


class _Action(BaseModel):
    model_config = ConfigDict(frozen=True)


class UpdateConfig(_Action):
    type: Literal["update_config"] = "update_config"
    config: ThumbnailConfig


class PreviewPrompt(_Action):
    type: Literal["preview_prompt"] = "preview_prompt"
    prompt: str


class SkipToAdaptation(_Action):
    type: Literal["skip_to_adaptation"] = "skip_to_adaptation"
    prompt: str


class DraftStarted(_Action):
    type: Literal["draft_started"] = "draft_started"


class DraftFinished(_Action):
    type: Literal["draft_finished"] = "draft_finished"
    prompt: str
    image: Optional[str] = None


class DraftFailed(_Action):
    type: Literal["draft_failed"] = "draft_failed"
    prompt: str
    error: str


class UploadReference(_Action):
    type: Literal["upload_reference"] = "upload_reference"
    image: str


class ApproveDraft(_Action):
    type: Literal["approve_draft"] = "approve_draft"


class ResetToDraft(_Action):
    type: Literal["reset_to_draft"] = "reset_to_draft"


class AddCharacterImage(_Action):
    type: Literal["add_character_image"] = "add_character_image"
    slot: int = Field(..., ge=0)
    image: str


class RemoveCharacterImage(_Action):
    type: Literal["remove_character_image"] = "remove_character_image"
    slot: int = Field(..., ge=0)
    index: int = Field(..., ge=0)


class PreviewAdaptationPrompt(_Action):
    type: Literal["preview_adaptation_prompt"] = "preview_adaptation_prompt"
    prompt: str


class AdaptationStarted(_Action):
    type: Literal["adaptation_started"] = "adaptation_started"
    prompt: str


class AdaptationFinished(_Action):
    type: Literal["adaptation_finished"] = "adaptation_finished"
    image: Optional[str] = None


class AdaptationFailed(_Action):
    type: Literal["adaptation_failed"] = "adaptation_failed"
    error: str


Action = Union[
    UpdateConfig,
    PreviewPrompt,
    SkipToAdaptation,
    DraftStarted,
    DraftFinished,
    DraftFailed,
    UploadReference,
    ApproveDraft,
    ResetToDraft,
    AddCharacterImage,
    RemoveCharacterImage,
    PreviewAdaptationPrompt,
    AdaptationStarted,
    AdaptationFinished,
    AdaptationFailed,
]


# ---------------------------------------------------------------------------
# Model catalog
# ---------------------------------------------------------------------------


class ModelOption(BaseModel):
    """An image model offered in the studio."""

    value: str
    label: str
    price: str


MODEL_OPTIONS: list[ModelOption] = [
    ModelOption(value="imagen-3.0-generate-001", label="Imagen 3 (Standard)", price="~ $0.03 / img"),
    ModelOption(value="imagen-3.0-fast-generate-001", label="Imagen 3 (Fast)", price="~ $0.03 / img"),
    ModelOption(value="imagen-3.0-generate-002", label="Imagen 3.0 v2", price="~ $0.03 / img"),
    ModelOption(
        value="gemini-2.5-flash-image",
        label="Gemini 2.5 Flash Image",
        price="Low Latency",
    ),
    ModelOption(
        value="gemini-3-pro-image-preview",
        label="Gemini 3 Pro Image (Preview)",
        price="~ $0.13-0.24 / img",
    ),
]


# ---------------------------------------------------------------------------
# Preview
# ---------------------------------------------------------------------------


class TitleSegment(BaseModel):
    """A run of title text drawn in one color."""

    text: str
    accent: bool
    color: str


class ThumbnailPreview(BaseModel):
    """What the mock preview needs to draw a configuration."""

    layout: Layout
    palette: Palette
    title_segments: list[TitleSegment]
    slot_styles: list[str]


# ---------------------------------------------------------------------------
# API payloads
# ---------------------------------------------------------------------------


class PromptResponse(BaseModel):
    prompt: str


class AdaptationPromptRequest(BaseModel):
    """Stateless adaptation-prompt preview."""

    config: ThumbnailConfig
    character_images: CharacterImageSet = Field(default_factory=dict)


class GenerationRequest(BaseModel):
    """Options for a draft or adaptation run. ``model`` defaults from settings."""

    model: Optional[str] = None


class ImageUpload(BaseModel):
    """An uploaded image as a base64 data URL.

    URLs and file paths are rejected.
    """

    image: str = Field(..., min_length=1)

    @field_validator("image")
    @classmethod
    def must_be_data_url(cls, value: str) -> str:
        InputImage.from_data_url(value)
        return value


class CredentialsUpdate(BaseModel):
    """``None`` keeps the stored value; an empty string clears it."""

    api_key: Optional[str] = None
    project_id: Optional[str] = None


class CredentialsView(BaseModel):
    """Stored credentials as shown to the client (API key masked)."""

    configured: bool
    api_key: str
    project_id: str
    credential_kind: Optional[str] = None
