from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from promptforge.models.base import RecordModel


class Revision(RecordModel):
    """Append-only snapshot of a prompt body."""

    __tablename__ = "revisions"

    prompt_id: Mapped[str] = mapped_column(String(64), index=True)
    parent_revision_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    body_md: Mapped[str] = mapped_column(Text, nullable=False)
    command_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    llm_provider: Mapped[str] = mapped_column(String(32), default="openai")
    token_usage: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[str] = mapped_column(String(32))
