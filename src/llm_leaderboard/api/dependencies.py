"""FastAPI dependencies: store handle, runner, optional bearer-token check."""

import secrets
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..db.connection import DatabaseConnection
from ..services.inference_runner import InferenceRunner

bearer_scheme = HTTPBearer(auto_error=False)


def get_db(request: Request) -> DatabaseConnection:
    return request.app.state.db


def get_runner(request: Request) -> InferenceRunner:
    return request.app.state.runner


async def require_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> None:
    """
    Enforce the configured API token. A no-op when no token is configured.
    """
    expected = request.app.state.api_token
    if not expected:
        return

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise credentials_exception
    if not secrets.compare_digest(credentials.credentials, expected):
        raise credentials_exception


def not_found(resource: str, resource_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"{resource} {resource_id} not found",
    )
