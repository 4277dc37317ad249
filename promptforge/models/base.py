from sqlalchemy import String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base declarative class."""


class RecordModel(Base):
    """Abstract base for local store tables keyed by an opaque string id.

    Timestamps are kept as the ISO-8601 strings the rest of the system
    exchanges, not as native datetimes.
    """

    __abstract__ = True

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
