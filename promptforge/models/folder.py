from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from promptforge.models.base import RecordModel


class Folder(RecordModel):
    __tablename__ = "folders"

    # Not indexed: folders are read with a full scan and filtered by owner.
    user_id: Mapped[str] = mapped_column(String(64))
    name: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[str] = mapped_column(String(32))
