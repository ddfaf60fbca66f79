"""StudioService: runs the two-stage thumbnail workflow per session."""
from typing import Optional

import httpx

from thumbnail_studio.core.logging import setup_logging
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
    StudioState,
    UpdateConfig,
    UploadReference,
)
from thumbnail_studio.models.thumbnail import InputImage, ThumbnailConfig
from thumbnail_studio.services.credentials import CredentialStore, effective_project_id
from thumbnail_studio.services.image import (
    DEFAULT_LOCATION,
    DEFAULT_MODEL,
    DEFAULT_TIMEOUT,
    decode_image_reference,
    request_generated_image,
)
from thumbnail_studio.services.prompt import compose_adaptation_prompt, compose_generation_prompt
from thumbnail_studio.services.state import reduce

logger = setup_logging("studio")

# Least recently updated idle sessions are evicted beyond this many.
MAX_SESSIONS = 256


class StudioBusyError(Exception):
    """A generation for this session is already in flight."""


class StudioService:
    """Orchestrates draft generation and face adaptation.

    Responsibilities:
    1. Hold one ``StudioState`` per session id, updated only through ``reduce``
    2. Compose prompts from the session's config and character images
    3. Decode reference images and dispatch a single image request
    4. Refuse a second run while one is in flight (per stage)

    Without a stored credential both stages still record their prompt but
    produce no image.
    """

    def __init__(
        self,
        credential_store: CredentialStore,
        default_model: str = DEFAULT_MODEL,
        location: str = DEFAULT_LOCATION,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: Optional[httpx.AsyncClient] = None,
        max_sessions: int = MAX_SESSIONS,
    ) -> None:
        self.credential_store = credential_store
        self.default_model = default_model
        self.location = location
        self.timeout = timeout
        self.http_client = http_client
        self.max_sessions = max_sessions
        self._sessions: dict[str, StudioState] = {}

    # --- state ---------------------------------------------------------------

    def get_state(self, session_id: str) -> StudioState:
        return self._sessions.get(session_id) or StudioState()

    def delete_session(self, session_id: str) -> bool:
        """Forget a session. Returns False when it did not exist."""
        return self._sessions.pop(session_id, None) is not None

    def _evict_idle(self) -> None:
        # Least recently updated first; sessions with a run in flight stay.
        for session_id, state in list(self._sessions.items()):
            if len(self._sessions) < self.max_sessions:
                return
            if not (state.generating or state.adapting):
                del self._sessions[session_id]
                logger.info("Evicted idle session", extra={"session_id": session_id})

    def _dispatch(self, session_id: str, action: Action) -> StudioState:
        state = reduce(self.get_state(session_id), action)
        if self._sessions.pop(session_id, None) is None:
            self._evict_idle()
        self._sessions[session_id] = state
        return state

    def update_config(self, session_id: str, config: ThumbnailConfig) -> StudioState:
        return self._dispatch(session_id, UpdateConfig(config=config))

    def preview_prompt(self, session_id: str) -> StudioState:
        prompt = compose_generation_prompt(self.get_state(session_id).config)
        return self._dispatch(session_id, PreviewPrompt(prompt=prompt))

    def preview_adaptation_prompt(self, session_id: str) -> StudioState:
        state = self.get_state(session_id)
        prompt = compose_adaptation_prompt(state.config, state.character_images)
        return self._dispatch(session_id, PreviewAdaptationPrompt(prompt=prompt))

    def skip_to_adaptation(self, session_id: str) -> StudioState:
        prompt = compose_generation_prompt(self.get_state(session_id).config)
        return self._dispatch(session_id, SkipToAdaptation(prompt=prompt))

    def approve_draft(self, session_id: str) -> StudioState:
        return self._dispatch(session_id, ApproveDraft())

    def reset_to_draft(self, session_id: str) -> StudioState:
        return self._dispatch(session_id, ResetToDraft())

    def upload_reference(self, session_id: str, image: str) -> StudioState:
        return self._dispatch(session_id, UploadReference(image=image))

    def add_character_image(self, session_id: str, slot: int, image: str) -> StudioState:
        return self._dispatch(session_id, AddCharacterImage(slot=slot, image=image))

    def remove_character_image(self, session_id: str, slot: int, index: int) -> StudioState:
        return self._dispatch(session_id, RemoveCharacterImage(slot=slot, index=index))

    # --- generation ------------------------------------------------------------

    async def _request_image(
        self, prompt: str, model: str, input_images: list[InputImage]
    ) -> Optional[str]:
        credentials = self.credential_store.load()
        if not credentials.api_key.strip():
            logger.info("No credential configured, skipping image request")
            return None
        return await request_generated_image(
            credentials.api_key,
            prompt,
            model,
            effective_project_id(credentials.api_key, credentials.project_id),
            input_images,
            self.location,
            client=self.http_client,
            timeout=self.timeout,
        )

    async def generate_draft(self, session_id: str, model: Optional[str] = None) -> StudioState:
        """Stage one: compose the prompt from the config and generate a draft.

        Raises:
            StudioBusyError: A draft is already being generated for the session.
            ImageGenerationError: The image request failed; the error is also
                recorded in ``api_error`` and the previous image is kept.
        """
        state = self.get_state(session_id)
        if state.generating:
            raise StudioBusyError(f"Draft generation already running for {session_id}")

        prompt = compose_generation_prompt(state.config)
        self._dispatch(session_id, DraftStarted())
        try:
            image = await self._request_image(prompt, model or self.default_model, [])
        except Exception as exc:
            logger.error(
                "Draft generation failed: %s",
                exc,
                extra={"session_id": session_id, "error_type": type(exc).__name__},
            )
            self._dispatch(session_id, DraftFailed(prompt=prompt, error=str(exc)))
            raise

        logger.info("Draft generated", extra={"session_id": session_id})
        return self._dispatch(session_id, DraftFinished(prompt=prompt, image=image))

    async def adapt(self, session_id: str, model: Optional[str] = None) -> StudioState:
        """Stage two: swap the uploaded faces into the draft.

        Sends the draft (if any) first, then every character image slot by
        slot, so the numbering matches the adaptation prompt.

        Raises:
            StudioBusyError: An adaptation is already running for the session.
            ImageGenerationError: Decoding or the image request failed; the
                error is recorded in ``adaptation_error``.
        """
        state = self.get_state(session_id)
        if state.adapting:
            raise StudioBusyError(f"Adaptation already running for {session_id}")

        prompt = compose_adaptation_prompt(state.config, state.character_images)
        self._dispatch(session_id, AdaptationStarted(prompt=prompt))
        try:
            input_images: list[InputImage] = []
            if state.generated_image:
                input_images.append(
                    await decode_image_reference(state.generated_image, client=self.http_client)
                )
            for slot in range(state.config.character_count):
                for reference in state.character_images.get(slot, []):
                    input_images.append(
                        await decode_image_reference(reference, client=self.http_client)
                    )
            image = await self._request_image(
                prompt, model or self.default_model, input_images
            )
        except Exception as exc:
            logger.error(
                "Adaptation failed: %s",
                exc,
                extra={"session_id": session_id, "error_type": type(exc).__name__},
            )
            self._dispatch(session_id, AdaptationFailed(error=str(exc)))
            raise

        logger.info("Adaptation finished", extra={"session_id": session_id})
        return self._dispatch(session_id, AdaptationFinished(image=image))
