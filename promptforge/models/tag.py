from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from promptforge.models.base import RecordModel


class Tag(RecordModel):
    __tablename__ = "tags"

    # Not indexed: tags are read with a full scan and filtered by owner.
    user_id: Mapped[str] = mapped_column(String(64))
    name: Mapped[str] = mapped_column(Text, nullable=False)
    color: Mapped[str | None] = mapped_column(String(32), nullable=True)
