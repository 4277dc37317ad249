"""Records shared by the in-memory cache, the local store and the remote mirror.

Field names match the remote tables column for column, so a record's
``model_dump()`` is a valid insert payload.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class Record(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class PromptRecord(Record):
    id: str
    user_id: str
    folder_id: Optional[str] = None
    title: str
    body_md: str = ""
    is_pinned: bool = False
    created_at: str
    updated_at: str


class RevisionRecord(Record):
    id: str
    prompt_id: str
    parent_revision_id: Optional[str] = None
    body_md: str
    command_text: Optional[str] = None
    llm_provider: str = "openai"
    token_usage: Optional[int] = None
    created_at: str


class FolderRecord(Record):
    id: str
    user_id: str
    name: str
    created_at: str


class TagRecord(Record):
    id: str
    user_id: str
    name: str
    color: Optional[str] = None


class PromptTagRecord(Record):
    prompt_id: str
    tag_id: str


# Fields a caller may change through an update; the rest are fixed at creation.
PROMPT_MUTABLE_FIELDS = frozenset({"folder_id", "title", "body_md", "is_pinned"})
