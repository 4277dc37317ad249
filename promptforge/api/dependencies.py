from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from promptforge.core.security import decode_token
from promptforge.workspace import PromptWorkspace, WorkspaceRegistry


bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class CurrentOwner:
    id: str
    access_token: str


def get_current_owner(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> CurrentOwner:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_token(credentials.credentials)
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )

    owner_id: str | None = payload.get("sub")
    if not owner_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )
    return CurrentOwner(id=owner_id, access_token=credentials.credentials)


def get_registry(request: Request) -> WorkspaceRegistry:
    return request.app.state.workspaces


async def get_workspace(
    owner: Annotated[CurrentOwner, Depends(get_current_owner)],
    registry: Annotated[WorkspaceRegistry, Depends(get_registry)],
) -> PromptWorkspace:
    return await registry.get(owner.id, owner.access_token)
