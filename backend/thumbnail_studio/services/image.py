"""Image request dispatch to the Gemini / Imagen REST APIs.

One call to :func:`request_generated_image` sends exactly one POST and returns
the first image in the response as a data URL. Nothing is retried.
"""
import base64
import logging
import mimetypes
from pathlib import Path
from typing import Any, Literal, Optional, Sequence

import httpx
from pydantic import BaseModel

from thumbnail_studio.models.thumbnail import InputImage
from thumbnail_studio.services.credentials import CredentialKind, classify_credential

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "imagen-3.0-generate-001"
DEFAULT_LOCATION = "us-central1"
DEFAULT_TIMEOUT = 120.0
DEFAULT_MIME_TYPE = "image/png"
ASPECT_RATIO = "16:9"

DIRECT_HOST = "generativelanguage.googleapis.com"
PROJECT_HOST = "aiplatform.googleapis.com"


class ImageGenerationError(Exception):
    """Any failure to turn a prompt into an image."""


class ImageTransportError(ImageGenerationError):
    """The request never produced an HTTP response (DNS, TLS, timeout, ...)."""


class ImageApiError(ImageGenerationError):
    """The API answered with a non-success status."""

    def __init__(self, status_code: int, reason: str, body: str) -> None:
        self.status_code = status_code
        self.reason = reason
        self.body = body
        super().__init__(f"Gemini/Vertex API Error: {status_code} {reason} - {body}")


class NoImageError(ImageGenerationError):
    """The API answered successfully but the response carries no image."""

    def __init__(self, finish_reason: Optional[str] = None) -> None:
        self.finish_reason = finish_reason
        if finish_reason:
            message = f"Gemini finished with reason: {finish_reason} (No image generated)"
        else:
            message = "No image data found in response"
        super().__init__(message)


class ImageReferenceError(ImageGenerationError):
    """An image reference could not be decoded into inline data."""


class Endpoint(BaseModel):
    """Where and how to send a request."""

    url: str
    headers: dict[str, str]
    family: Literal["project", "direct"]
    credential_kind: CredentialKind


def is_multimodal_model(model_id: str) -> bool:
    return "gemini" in model_id.lower()


def is_image_output_model(model_id: str) -> bool:
    name = model_id.lower()
    return "image" in name or "imagen" in name


def resolve_endpoint(
    credential: str,
    model_id: str,
    project_id: Optional[str] = None,
    location: str = DEFAULT_LOCATION,
) -> Endpoint:
    """Pick URL and auth headers from the credential kind and project id.

    A project id only selects the project-scoped endpoint for bearer tokens;
    API keys always go to the direct endpoint with ``?key=``.
    """
    key = credential.strip()
    kind = classify_credential(key)
    method = "generateContent" if is_multimodal_model(model_id) else "predict"
    headers = {"Content-Type": "application/json"}

    if project_id and kind is CredentialKind.bearer_token:
        headers["Authorization"] = f"Bearer {key}"
        return Endpoint(
            url=(
                f"https://{location}-{PROJECT_HOST}/v1/projects/{project_id}"
                f"/locations/{location}/publishers/google/models/{model_id}:{method}"
            ),
            headers=headers,
            family="project",
            credential_kind=kind,
        )

    url = f"https://{DIRECT_HOST}/v1beta/models/{model_id}:{method}"
    if kind is CredentialKind.api_key:
        url = f"{url}?key={key}"
    else:
        headers["Authorization"] = f"Bearer {key}"
    return Endpoint(url=url, headers=headers, family="direct", credential_kind=kind)


def build_payload(
    prompt: str, model_id: str, input_images: Sequence[InputImage] = ()
) -> dict[str, Any]:
    """Build the JSON body for the model family.

    Multimodal models get one user turn (prompt, then inline images). Only
    image-capable names request an IMAGE modality; other multimodal models get
    no generationConfig and answer with text. Legacy models get a single
    text-only instance, since ``predict`` takes no input images here.
    """
    if is_multimodal_model(model_id):
        parts: list[dict[str, Any]] = [{"text": prompt}]
        for image in input_images:
            parts.append({"inlineData": {"mimeType": image.mime_type, "data": image.data}})
        payload: dict[str, Any] = {"contents": [{"role": "user", "parts": parts}]}
        if is_image_output_model(model_id):
            payload["generationConfig"] = {
                "responseModalities": ["TEXT", "IMAGE"],
                "imageConfig": {"aspectRatio": ASPECT_RATIO},
            }
        return payload

    return {
        "instances": [{"prompt": prompt, "aspectRatio": ASPECT_RATIO}],
        "parameters": {"sampleCount": 1},
    }


def extract_image(data: dict[str, Any]) -> str:
    """Return the first image in a response body as a data URL.

    Checks Imagen ``predictions`` first, then Gemini ``candidates`` parts.

    Raises:
        NoImageError: No image found; carries the candidate finishReason if any.
    """
    predictions = data.get("predictions") or []
    if predictions and isinstance(predictions[0], dict):
        prediction = predictions[0]
        encoded = prediction.get("bytesBase64Encoded") or prediction.get("bytesBase64")
        if encoded:
            mime_type = prediction.get("mimeType") or DEFAULT_MIME_TYPE
            return InputImage(mime_type=mime_type, data=encoded).to_data_url()

    candidates = data.get("candidates") or []
    candidate = candidates[0] if candidates and isinstance(candidates[0], dict) else {}
    for part in (candidate.get("content") or {}).get("parts") or []:
        inline = part.get("inlineData") or part.get("inline_data")
        if not inline:
            continue
        mime_type = inline.get("mimeType") or inline.get("mime_type") or ""
        if mime_type.startswith("image/"):
            return InputImage(mime_type=mime_type, data=inline.get("data", "")).to_data_url()

    raise NoImageError(candidate.get("finishReason"))


async def request_generated_image(
    credential: str,
    prompt: str,
    model_id: str = DEFAULT_MODEL,
    project_id: Optional[str] = None,
    input_images: Sequence[InputImage] = (),
    location: str = DEFAULT_LOCATION,
    *,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """Send a prompt (and optional inline images) and return the image data URL.

    Args:
        credential: API key or OAuth/JWT access token.
        prompt: Instruction text for the model.
        model_id: Model name, e.g. ``imagen-3.0-generate-001``.
        project_id: Cloud project; only used with bearer tokens.
        input_images: Images attached after the prompt (multimodal models only).
        location: Region for the project-scoped endpoint.
        client: Shared client to send with; a short-lived one is opened otherwise.
        timeout: Request timeout for the short-lived client.

    Returns:
        ``data:<mime>;base64,<payload>`` for the first image found.

    Raises:
        ImageTransportError: The request failed before a response arrived.
        ImageApiError: Non-success HTTP status.
        NoImageError: Success status but no image in the body.
    """
    endpoint = resolve_endpoint(credential, model_id, project_id, location)
    payload = build_payload(prompt, model_id, input_images)

    logger.info(
        "Dispatching image request: model=%s endpoint=%s credential=%s images=%d",
        model_id,
        endpoint.family,
        endpoint.credential_kind.value,
        len(input_images),
        extra={
            "model": model_id,
            "endpoint": endpoint.family,
            "credential_kind": endpoint.credential_kind.value,
            "image_count": len(input_images),
        },
    )

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout) as owned_client:
                response = await owned_client.post(
                    endpoint.url, headers=endpoint.headers, json=payload
                )
        else:
            response = await client.post(endpoint.url, headers=endpoint.headers, json=payload)
    except httpx.HTTPError as exc:
        raise ImageTransportError(str(exc) or type(exc).__name__) from exc

    if not response.is_success:
        logger.warning(
            "Image API returned %d",
            response.status_code,
            extra={"model": model_id, "status_code": response.status_code},
        )
        raise ImageApiError(response.status_code, response.reason_phrase, response.text)

    try:
        data = response.json()
    except ValueError as exc:
        raise ImageGenerationError("Image API returned a response that is not JSON") from exc

    return extract_image(data if isinstance(data, dict) else {})


async def decode_image_reference(
    reference: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    allow_local: bool = False,
) -> InputImage:
    """Turn an image reference into inline base64 data.

    ``data:`` URLs are parsed in place. Only with ``allow_local`` are
    ``http(s)`` URLs downloaded and anything else read as a local file path;
    the HTTP API never sets it.

    Raises:
        ImageReferenceError: Malformed data URL, failed download, missing file,
            or a non-data reference without ``allow_local``.
    """
    if reference.startswith("data:"):
        try:
            return InputImage.from_data_url(reference)
        except ValueError as exc:
            raise ImageReferenceError(str(exc)) from exc

    if not allow_local:
        raise ImageReferenceError("Only base64 data URLs are accepted as image references")

    if reference.startswith(("http://", "https://")):
        try:
            if client is None:
                async with httpx.AsyncClient(timeout=DEFAULT_TIMEOUT) as owned_client:
                    response = await owned_client.get(reference)
            else:
                response = await client.get(reference)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise ImageReferenceError(f"Could not fetch image {reference}: {exc}") from exc
        mime_type = response.headers.get("content-type", DEFAULT_MIME_TYPE).split(";")[0].strip()
        return InputImage(
            mime_type=mime_type or DEFAULT_MIME_TYPE,
            data=base64.b64encode(response.content).decode("ascii"),
        )

    path = Path(reference)
    if not path.is_file():
        raise ImageReferenceError(f"Image file not found: {reference}")
    mime_type, _ = mimetypes.guess_type(path.name)
    return InputImage(
        mime_type=mime_type or DEFAULT_MIME_TYPE,
        data=base64.b64encode(path.read_bytes()).decode("ascii"),
    )
