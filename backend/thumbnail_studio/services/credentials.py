"""Credential classification and the persisted credential store."""
import logging
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from thumbnail_studio.core.config import Settings

logger = logging.getLogger(__name__)

API_KEY_PREFIX = "AIza"
OAUTH_TOKEN_PREFIX = "ya29."
JWT_PREFIX = "eyJ"
BEARER_MIN_LENGTH = 100
# Below this length a credential is never sent to the project-scoped endpoint.
PROJECT_SCOPE_MIN_LENGTH = 60


class CredentialKind(str, Enum):
    api_key = "api_key"
    bearer_token = "bearer_token"


def classify_credential(credential: str) -> CredentialKind:
    """Guess whether a secret is an API key or a bearer/OAuth access token.

    This is prefix/length sniffing only; nothing is verified. A credential is
    treated as a bearer token when it starts with ``ya29.`` (Google OAuth
    access token) or ``eyJ`` (JWT), or when it is longer than 100 characters
    without the ``AIza`` API-key prefix.
    """
    key = credential.strip()
    looks_like_token = (
        key.startswith(OAUTH_TOKEN_PREFIX)
        or key.startswith(JWT_PREFIX)
        or (len(key) > BEARER_MIN_LENGTH and not key.startswith(API_KEY_PREFIX))
    )
    return CredentialKind.bearer_token if looks_like_token else CredentialKind.api_key


def effective_project_id(credential: str, project_id: Optional[str]) -> Optional[str]:
    """Drop the project id when the credential looks like a plain API key.

    Keeps API-key users on the direct endpoint even when a project id is
    stored, since the project-scoped endpoint only accepts OAuth tokens.
    """
    key = credential.strip()
    if key.startswith(API_KEY_PREFIX) or len(key) < PROJECT_SCOPE_MIN_LENGTH:
        return None
    return project_id.strip() if project_id and project_id.strip() else None


def mask(secret: str) -> str:
    """Render a secret for display, e.g. ``AIza…1234``."""
    if len(secret) <= 8:
        return "*" * len(secret)
    return f"{secret[:4]}…{secret[-4:]}"


class StoredCredentials(BaseModel):
    """The two values persisted between runs."""

    api_key: str = ""
    project_id: str = ""


class CredentialStore:
    """JSON-file persistence for the API credential and optional project id.

    Values are read once at startup and written on every edit. ``defaults``
    (typically from the environment) apply only until the file exists; after
    the first save the file is authoritative, including cleared values.
    """

    def __init__(self, path: Path, defaults: Optional[StoredCredentials] = None) -> None:
        self.path = Path(path)
        self._defaults = defaults or StoredCredentials()
        self._credentials = self._read()

    def _read(self) -> StoredCredentials:
        if not self.path.exists():
            return self._defaults
        logger.debug("Loaded credentials from %s", self.path)
        return StoredCredentials.model_validate_json(self.path.read_text(encoding="utf-8"))

    def load(self) -> StoredCredentials:
        return self._credentials

    def save(
        self, api_key: Optional[str] = None, project_id: Optional[str] = None
    ) -> StoredCredentials:
        """Update one or both values and write them to disk.

        ``None`` leaves a value unchanged; an empty string clears it.
        """
        updated = self._credentials.model_copy(
            update={
                k: v
                for k, v in (("api_key", api_key), ("project_id", project_id))
                if v is not None
            }
        )
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(updated.model_dump_json(indent=2), encoding="utf-8")
        self._credentials = updated
        logger.info("Saved credentials to %s", self.path)
        return updated


def credential_store_from_settings(settings: Settings) -> CredentialStore:
    """Open the configured credential file, seeded from the environment."""
    return CredentialStore(
        Path(settings.credentials_file),
        defaults=StoredCredentials(
            api_key=settings.gemini_api_key,
            project_id=settings.gcp_project_id,
        ),
    )
