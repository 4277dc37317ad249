"""Prompt, revision and prompt-tag endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field, field_validator

from promptforge.api.dependencies import get_workspace
from promptforge.schemas import PromptRecord, RevisionRecord, TagRecord
from promptforge.services.ai_service import SUPPORTED_PROVIDERS
from promptforge.workspace import PromptWorkspace

router = APIRouter(prefix="/prompts", tags=["prompts"])


class PromptCreate(BaseModel):
    title: str = Field(..., min_length=1, description="Prompt title")
    body_md: str = Field("", description="Prompt body as editor markup")
    folder_id: Optional[str] = None


class PromptUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    body_md: Optional[str] = None
    folder_id: Optional[str] = None
    is_pinned: Optional[bool] = None

    @field_validator("title", "body_md", "is_pinned")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class RevisionCreate(BaseModel):
    body_md: str
    command_text: Optional[str] = None
    llm_provider: Optional[str] = None
    token_usage: Optional[int] = Field(None, ge=0)
    parent_revision_id: Optional[str] = None


class RefineCommand(BaseModel):
    command: str = Field(..., min_length=1, description="/enhance, /shorten <n>, enhance or shorten")
    provider: Optional[str] = Field(None, pattern="^(" + "|".join(SUPPORTED_PROVIDERS) + ")$")


class SyncResponse(BaseModel):
    synced: bool
    prompts: int
    conflicts: List[str] = []


@router.get("", response_model=List[PromptRecord])
def list_prompts(
    q: Optional[str] = Query(None, description="Case-insensitive match on title and body"),
    workspace: PromptWorkspace = Depends(get_workspace),
):
    """List the owner's prompts, optionally filtered by a search query."""
    if q is None:
        return workspace.prompts
    return workspace.search_prompts(q)


@router.post("", response_model=PromptRecord, status_code=status.HTTP_201_CREATED)
async def create_prompt(
    prompt_data: PromptCreate,
    workspace: PromptWorkspace = Depends(get_workspace),
):
    return await workspace.create_prompt(prompt_data.title, prompt_data.body_md, prompt_data.folder_id)


@router.post("/sync", response_model=SyncResponse)
async def sync_prompts(workspace: PromptWorkspace = Depends(get_workspace)):
    """Refresh prompts from the remote copy."""
    result = await workspace.resync()
    if result is None:
        return SyncResponse(synced=False, prompts=len(workspace.prompts))
    return SyncResponse(
        synced=True,
        prompts=len(result.merged),
        conflicts=[conflict.record_id for conflict in result.conflicts],
    )


@router.get("/{prompt_id}", response_model=PromptRecord)
def get_prompt(prompt_id: str, workspace: PromptWorkspace = Depends(get_workspace)):
    return workspace.get_prompt(prompt_id)


@router.patch("/{prompt_id}", response_model=PromptRecord)
async def update_prompt(
    prompt_id: str,
    prompt_data: PromptUpdate,
    workspace: PromptWorkspace = Depends(get_workspace),
):
    """Update only the fields present in the request body."""
    return await workspace.update_prompt(prompt_id, prompt_data.model_dump(exclude_unset=True))


@router.delete("/{prompt_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_prompt(prompt_id: str, workspace: PromptWorkspace = Depends(get_workspace)):
    await workspace.delete_prompt(prompt_id)


@router.post("/{prompt_id}/pin", response_model=PromptRecord)
async def toggle_pin(prompt_id: str, workspace: PromptWorkspace = Depends(get_workspace)):
    return await workspace.toggle_pin(prompt_id)


# ==================== Revisions ====================

@router.get("/{prompt_id}/revisions", response_model=List[RevisionRecord])
def list_revisions(prompt_id: str, workspace: PromptWorkspace = Depends(get_workspace)):
    """Revision history, newest first."""
    return workspace.get_revisions(prompt_id)


@router.post(
    "/{prompt_id}/revisions",
    response_model=RevisionRecord,
    status_code=status.HTTP_201_CREATED,
)
async def create_revision(
    prompt_id: str,
    revision_data: RevisionCreate,
    workspace: PromptWorkspace = Depends(get_workspace),
):
    return await workspace.create_revision(
        prompt_id,
        revision_data.body_md,
        command=revision_data.command_text,
        provider=revision_data.llm_provider,
        token_usage=revision_data.token_usage,
        parent_revision_id=revision_data.parent_revision_id,
    )


@router.post(
    "/{prompt_id}/refine",
    response_model=RevisionRecord,
    status_code=status.HTTP_201_CREATED,
)
async def refine_prompt(
    prompt_id: str,
    refine_data: RefineCommand,
    workspace: PromptWorkspace = Depends(get_workspace),
):
    """Refine the prompt body and append the result to its history."""
    return await workspace.refine_prompt(prompt_id, refine_data.command, provider=refine_data.provider)


# ==================== Tags ====================

@router.get("/{prompt_id}/tags", response_model=List[TagRecord])
def list_prompt_tags(prompt_id: str, workspace: PromptWorkspace = Depends(get_workspace)):
    return workspace.tags_for_prompt(prompt_id)


@router.put("/{prompt_id}/tags/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def add_tag(prompt_id: str, tag_id: str, workspace: PromptWorkspace = Depends(get_workspace)):
    await workspace.add_tag_to_prompt(prompt_id, tag_id)


@router.delete("/{prompt_id}/tags/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_tag(prompt_id: str, tag_id: str, workspace: PromptWorkspace = Depends(get_workspace)):
    await workspace.remove_tag_from_prompt(prompt_id, tag_id)
