"""Thumbnail studio API router."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from thumbnail_studio.models.studio import (
    MODEL_OPTIONS,
    AdaptationPromptRequest,
    GenerationRequest,
    ImageUpload,
    ModelOption,
    PromptResponse,
    StudioState,
    ThumbnailPreview,
)
from thumbnail_studio.models.thumbnail import ThumbnailConfig
from thumbnail_studio.services.image import ImageGenerationError
from thumbnail_studio.services.preview import build_preview
from thumbnail_studio.services.prompt import compose_adaptation_prompt, compose_generation_prompt
from thumbnail_studio.services.studio import StudioBusyError, StudioService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/thumbnail", tags=["thumbnail"])


def get_studio_service(request: Request) -> StudioService:
    """FastAPI dependency: retrieve StudioService from app.state.

    Returns HTTP 503 if the service was not initialized at startup.
    """
    svc: StudioService | None = getattr(request.app.state, "studio_service", None)
    if svc is None:
        raise HTTPException(status_code=503, detail="Studio service not initialized.")
    return svc


# ---------------------------------------------------------------------------
# Stateless helpers
# ---------------------------------------------------------------------------


@router.get("/models", response_model=list[ModelOption])
async def list_models() -> list[ModelOption]:
    """Image models selectable in the studio."""
    return MODEL_OPTIONS


@router.post("/prompt", response_model=PromptResponse)
async def generation_prompt(config: ThumbnailConfig) -> PromptResponse:
    return PromptResponse(prompt=compose_generation_prompt(config))


@router.post("/adaptation-prompt", response_model=PromptResponse)
async def adaptation_prompt(body: AdaptationPromptRequest) -> PromptResponse:
    return PromptResponse(prompt=compose_adaptation_prompt(body.config, body.character_images))


@router.post("/preview", response_model=ThumbnailPreview)
async def preview(config: ThumbnailConfig) -> ThumbnailPreview:
    """Title color segments and character slot placement for the mock preview."""
    return build_preview(config)


# ---------------------------------------------------------------------------
# Session workflow
# ---------------------------------------------------------------------------


@router.get("/sessions/{session_id}", response_model=StudioState)
async def get_session(
    session_id: str, service: StudioService = Depends(get_studio_service)
) -> StudioState:
    return service.get_state(session_id)


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(
    session_id: str, service: StudioService = Depends(get_studio_service)
) -> None:
    """Drop a session and its images. Raises HTTPException 404 if unknown."""
    if not service.delete_session(session_id):
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")


@router.put("/sessions/{session_id}/config", response_model=StudioState)
async def update_config(
    session_id: str,
    config: ThumbnailConfig,
    service: StudioService = Depends(get_studio_service),
) -> StudioState:
    return service.update_config(session_id, config)


@router.post("/sessions/{session_id}/prompt", response_model=StudioState)
async def preview_session_prompt(
    session_id: str, service: StudioService = Depends(get_studio_service)
) -> StudioState:
    return service.preview_prompt(session_id)


@router.post("/sessions/{session_id}/adaptation-prompt", response_model=StudioState)
async def preview_session_adaptation_prompt(
    session_id: str, service: StudioService = Depends(get_studio_service)
) -> StudioState:
    return service.preview_adaptation_prompt(session_id)


@router.post("/sessions/{session_id}/draft", response_model=StudioState)
async def generate_draft(
    session_id: str,
    body: GenerationRequest | None = None,
    service: StudioService = Depends(get_studio_service),
) -> StudioState:
    """Compose the stage-one prompt and generate a draft image.

    Raises:
        HTTPException 409: A draft is already being generated.
        HTTPException 502: The image API failed (detail carries the reason).
    """
    try:
        return await service.generate_draft(session_id, body.model if body else None)
    except StudioBusyError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ImageGenerationError as exc:
        logger.error(
            "generate_draft failed",
            exc_info=True,
            extra={"session_id": session_id, "error_type": type(exc).__name__},
        )
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@router.post("/sessions/{session_id}/skip", response_model=StudioState)
async def skip_to_adaptation(
    session_id: str, service: StudioService = Depends(get_studio_service)
) -> StudioState:
    """Jump to stage two without generating a draft."""
    return service.skip_to_adaptation(session_id)


@router.post("/sessions/{session_id}/reference", response_model=StudioState)
async def upload_reference(
    session_id: str,
    body: ImageUpload,
    service: StudioService = Depends(get_studio_service),
) -> StudioState:
    """Use an existing image as the draft instead of generating one."""
    return service.upload_reference(session_id, body.image)


@router.post("/sessions/{session_id}/approve", response_model=StudioState)
async def approve_draft(
    session_id: str, service: StudioService = Depends(get_studio_service)
) -> StudioState:
    return service.approve_draft(session_id)


@router.post("/sessions/{session_id}/reset", response_model=StudioState)
async def reset_to_draft(
    session_id: str, service: StudioService = Depends(get_studio_service)
) -> StudioState:
    return service.reset_to_draft(session_id)


@router.post("/sessions/{session_id}/characters/{slot}/images", response_model=StudioState)
async def add_character_image(
    session_id: str,
    slot: int,
    body: ImageUpload,
    service: StudioService = Depends(get_studio_service),
) -> StudioState:
    """Attach a reference photo to a character slot (max 5 per slot)."""
    if slot < 0:
        raise HTTPException(status_code=422, detail="slot must be >= 0")
    return service.add_character_image(session_id, slot, body.image)


@router.delete(
    "/sessions/{session_id}/characters/{slot}/images/{index}", response_model=StudioState
)
async def remove_character_image(
    session_id: str,
    slot: int,
    index: int,
    service: StudioService = Depends(get_studio_service),
) -> StudioState:
    if slot < 0 or index < 0:
        raise HTTPException(status_code=422, detail="slot and index must be >= 0")
    return service.remove_character_image(session_id, slot, index)


@router.post("/sessions/{session_id}/adapt", response_model=StudioState)
async def adapt(
    session_id: str,
    body: GenerationRequest | None = None,
    service: StudioService = Depends(get_studio_service),
) -> StudioState:
    """Swap the uploaded faces into the draft.

    Raises:
        HTTPException 409: An adaptation is already running.
        HTTPException 502: Image decoding or the image API failed.
    """
    try:
        return await service.adapt(session_id, body.model if body else None)
    except StudioBusyError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ImageGenerationError as exc:
        logger.error(
            "adapt failed",
            exc_info=True,
            extra={"session_id": session_id, "error_type": type(exc).__name__},
        )
        raise HTTPException(status_code=502, detail=str(exc)) from exc
