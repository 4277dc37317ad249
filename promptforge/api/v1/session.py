"""Session endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from promptforge.api.dependencies import CurrentOwner, get_current_owner, get_registry
from promptforge.workspace import WorkspaceRegistry

router = APIRouter(prefix="/session", tags=["session"])


@router.post("/logout")
def logout(
    owner: Annotated[CurrentOwner, Depends(get_current_owner)],
    registry: Annotated[WorkspaceRegistry, Depends(get_registry)],
):
    """Release the owner's cached workspace. Stored records are kept."""
    ended = registry.end_session(owner.id)
    return {"detail": "Logged out", "released": ended}
