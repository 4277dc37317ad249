"""Tag endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from promptforge.api.dependencies import get_workspace
from promptforge.schemas import TagRecord
from promptforge.workspace import PromptWorkspace

router = APIRouter(prefix="/tags", tags=["tags"])


class TagCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    color: Optional[str] = Field(None, max_length=32)


@router.get("", response_model=List[TagRecord])
def list_tags(workspace: PromptWorkspace = Depends(get_workspace)):
    return workspace.tags


@router.post("", response_model=TagRecord, status_code=status.HTTP_201_CREATED)
async def create_tag(tag_data: TagCreate, workspace: PromptWorkspace = Depends(get_workspace)):
    return await workspace.create_tag(tag_data.name, tag_data.color)


@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tag(tag_id: str, workspace: PromptWorkspace = Depends(get_workspace)):
    """Delete a tag together with its prompt links."""
    await workspace.delete_tag(tag_id)
