"""Prompt and prompt-tag association tables."""

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from promptforge.models.base import Base, RecordModel


class Prompt(RecordModel):
    __tablename__ = "prompts"

    user_id: Mapped[str] = mapped_column(String(64), index=True)
    folder_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)

    title: Mapped[str] = mapped_column(Text, nullable=False)
    body_md: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_pinned: Mapped[bool] = mapped_column(Boolean, default=False, index=True)

    created_at: Mapped[str] = mapped_column(String(32))
    updated_at: Mapped[str] = mapped_column(String(32))


class PromptTag(Base):
    """Many-to-many link between prompts and tags, identified by both ids."""

    __tablename__ = "prompt_tags"

    # No FK constraints: associations may outlive either side until cleaned up.
    prompt_id: Mapped[str] = mapped_column(String(64), primary_key=True, index=True)
    tag_id: Mapped[str] = mapped_column(String(64), primary_key=True, index=True)
