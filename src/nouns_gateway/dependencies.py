from fastapi import HTTPException, Request, status

from .components.document_store import DocumentStore, StoreNotConnectedError
from .config import GatewaySettings, get_settings
from .services.governance.repository import GovernanceRepository


def get_app_settings(request: Request) -> GatewaySettings:
    settings = getattr(request.app.state, "settings", None)
    return settings if settings is not None else get_settings()


def get_document_store(request: Request) -> DocumentStore:
    store = getattr(request.app.state, "document_store", None)
    if not store:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Document store not initialized",
        )
    return store


def get_repository(request: Request) -> GovernanceRepository:
    store = get_document_store(request)
    try:
        database = store.database
    except StoreNotConnectedError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Document store not connected",
        ) from e
    return GovernanceRepository(database)
