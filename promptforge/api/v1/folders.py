"""Folder endpoints."""

from typing import List

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from promptforge.api.dependencies import get_workspace
from promptforge.schemas import FolderRecord
from promptforge.workspace import PromptWorkspace

router = APIRouter(prefix="/folders", tags=["folders"])


class FolderCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)


@router.get("", response_model=List[FolderRecord])
def list_folders(workspace: PromptWorkspace = Depends(get_workspace)):
    return workspace.folders


@router.post("", response_model=FolderRecord, status_code=status.HTTP_201_CREATED)
async def create_folder(folder_data: FolderCreate, workspace: PromptWorkspace = Depends(get_workspace)):
    """Create a folder. Names are not required to be unique."""
    return await workspace.create_folder(folder_data.name)


@router.delete("/{folder_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_folder(folder_id: str, workspace: PromptWorkspace = Depends(get_workspace)):
    await workspace.delete_folder(folder_id)
