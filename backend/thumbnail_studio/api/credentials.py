"""Credential settings router."""
from fastapi import APIRouter, Depends, HTTPException, Request

from thumbnail_studio.models.studio import CredentialsUpdate, CredentialsView
from thumbnail_studio.services.credentials import (
    CredentialStore,
    StoredCredentials,
    classify_credential,
    mask,
)

router = APIRouter(prefix="/api/credentials", tags=["credentials"])


def get_credential_store(request: Request) -> CredentialStore:
    store: CredentialStore | None = getattr(request.app.state, "credential_store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Credential store not initialized.")
    return store


def _view(credentials: StoredCredentials) -> CredentialsView:
    key = credentials.api_key.strip()
    return CredentialsView(
        configured=bool(key),
        api_key=mask(key),
        project_id=credentials.project_id,
        credential_kind=classify_credential(key).value if key else None,
    )


@router.get("", response_model=CredentialsView)
async def get_credentials(store: CredentialStore = Depends(get_credential_store)) -> CredentialsView:
    """Stored credentials with the secret masked."""
    return _view(store.load())


@router.put("", response_model=CredentialsView)
async def update_credentials(
    body: CredentialsUpdate,
    store: CredentialStore = Depends(get_credential_store),
) -> CredentialsView:
    """Persist the API key and/or project id (written on every edit)."""
    return _view(store.save(api_key=body.api_key, project_id=body.project_id))
