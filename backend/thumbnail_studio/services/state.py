"""Pure state transitions for a studio session."""
from thumbnail_studio.models.studio import (
    Action,
    AdaptationFailed,
    AdaptationFinished,
    AdaptationStarted,
    AddCharacterImage,
    ApproveDraft,
    DraftFailed,
    DraftFinished,
    DraftStarted,
    PreviewAdaptationPrompt,
    PreviewPrompt,
    RemoveCharacterImage,
    ResetToDraft,
    SkipToAdaptation,
    Step,
    StudioState,
    UpdateConfig,
    UploadReference,
)
from thumbnail_studio.models.thumbnail import MAX_IMAGES_PER_SLOT


def _with_slot(state: StudioState, slot: int, images: list[str]) -> dict[int, list[str]]:
    character_images = {k: list(v) for k, v in state.character_images.items()}
    character_images[slot] = images
    return character_images


def reduce(state: StudioState, action: Action) -> StudioState:
    """Return the state after ``action``. ``state`` is never modified.

    Failures record the error message only: earlier prompts and images stay.
    Adding a sixth image to a slot is ignored.
    """
    if isinstance(action, UpdateConfig):
        return state.model_copy(update={"config": action.config})

    if isinstance(action, PreviewPrompt):
        return state.model_copy(update={"generated_prompt": action.prompt})

    if isinstance(action, SkipToAdaptation):
        return state.model_copy(
            update={
                "generated_prompt": action.prompt,
                "generated_draft": True,
                "step": Step.adaptation,
            }
        )

    if isinstance(action, DraftStarted):
        return state.model_copy(update={"generating": True, "api_error": None})

    if isinstance(action, DraftFinished):
        update: dict = {
            "generating": False,
            "generated_draft": True,
            "generated_prompt": action.prompt,
        }
        if action.image is not None:
            update["generated_image"] = action.image
        return state.model_copy(update=update)

    if isinstance(action, DraftFailed):
        return state.model_copy(
            update={
                "generating": False,
                "generated_draft": True,
                "generated_prompt": action.prompt,
                "api_error": action.error,
            }
        )

    if isinstance(action, UploadReference):
        return state.model_copy(update={"generated_image": action.image})

    if isinstance(action, ApproveDraft):
        return state.model_copy(update={"step": Step.adaptation})

    if isinstance(action, ResetToDraft):
        return state.model_copy(update={"step": Step.draft})

    if isinstance(action, AddCharacterImage):
        current = state.character_images.get(action.slot, [])
        if len(current) >= MAX_IMAGES_PER_SLOT:
            return state
        return state.model_copy(
            update={"character_images": _with_slot(state, action.slot, [*current, action.image])}
        )

    if isinstance(action, RemoveCharacterImage):
        current = state.character_images.get(action.slot, [])
        remaining = [img for i, img in enumerate(current) if i != action.index]
        return state.model_copy(
            update={"character_images": _with_slot(state, action.slot, remaining)}
        )

    if isinstance(action, PreviewAdaptationPrompt):
        return state.model_copy(update={"adaptation_prompt": action.prompt})

    if isinstance(action, AdaptationStarted):
        return state.model_copy(
            update={
                "adapting": True,
                "adaptation_done": False,
                "adaptation_error": None,
                "adaptation_prompt": action.prompt,
            }
        )

    if isinstance(action, AdaptationFinished):
        update = {"adapting": False, "adaptation_done": True}
        if action.image is not None:
            update["adaptation_image"] = action.image
        return state.model_copy(update=update)

    if isinstance(action, AdaptationFailed):
        return state.model_copy(update={"adapting": False, "adaptation_error": action.error})

    raise TypeError(f"Unknown action: {type(action).__name__}")
