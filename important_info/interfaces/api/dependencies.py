"""FastAPI dependency utilities."""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session, sessionmaker

from important_info.application.use_cases.announcements import FanOutOrchestrator
from important_info.config import get_settings
from important_info.domain.entities import Principal
from important_info.infrastructure.database import get_session_factory
from important_info.infrastructure.directory import DirectoryClient
from important_info.infrastructure.notifications import LivePushPublisher
from important_info.infrastructure.security import decode_access_token, principal_from_claims
from important_info.infrastructure.storage import AttachmentStorage

# Tokens are issued by the directory service; this service only verifies them.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login")


def resolve_principal(token: str) -> Principal:
    """Return the principal carried by ``token`` or raise 401."""

    try:
        claims = decode_access_token(token)
        return principal_from_claims(claims)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


def get_access_token(token: str = Depends(oauth2_scheme)) -> str:
    """Raw bearer token, forwarded to the directory during fan-out."""

    return token


def get_current_principal(token: str = Depends(oauth2_scheme)) -> Principal:
    return resolve_principal(token)


def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    """Ensure the authenticated caller has administrator privileges."""

    if not principal.is_admin():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator role required",
        )
    return principal


def get_live_push_publisher(request: Request) -> LivePushPublisher:
    return request.app.state.live_push_publisher


def get_directory_client(request: Request) -> DirectoryClient:
    return request.app.state.directory_client


def get_attachment_storage(request: Request) -> AttachmentStorage:
    return request.app.state.attachment_storage


def get_fan_out_orchestrator(
    session_factory: sessionmaker[Session] = Depends(get_session_factory),
    directory: DirectoryClient = Depends(get_directory_client),
    publisher: LivePushPublisher = Depends(get_live_push_publisher),
) -> FanOutOrchestrator:
    return FanOutOrchestrator(session_factory, directory=directory, publisher=publisher)


def get_max_attachments() -> int:
    return get_settings().max_attachments
