"""Durable local record store for prompts, revisions, folders, tags and their links."""

import logging
from typing import Callable, List

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from promptforge.models import Folder, Prompt, PromptTag, Revision, Tag
from promptforge.schemas import (
    FolderRecord,
    PromptRecord,
    PromptTagRecord,
    RevisionRecord,
    TagRecord,
)


logger = logging.getLogger("promptforge.storage.local")


class LocalStore:
    """Keyed tables with insert-or-replace writes.

    Prompts are looked up through their owner index and revisions through
    their prompt index. Folders and tags carry no owner index, so they are
    read with a full scan and filtered by owner afterwards.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    # ---- prompts ----

    def get_prompts(self, owner_id: str) -> List[PromptRecord]:
        with self._session_factory() as db:
            rows = db.scalars(
                select(Prompt)
                .where(Prompt.user_id == owner_id)
                .order_by(Prompt.updated_at.desc())
            ).all()
            return [PromptRecord.model_validate(row) for row in rows]

    def save_prompt(self, prompt: PromptRecord) -> None:
        self._put(Prompt(**prompt.model_dump()))

    def delete_prompt(self, prompt_id: str) -> None:
        self._delete(Prompt, prompt_id)

    # ---- revisions ----

    def get_revisions(self, prompt_id: str) -> List[RevisionRecord]:
        with self._session_factory() as db:
            rows = db.scalars(
                select(Revision)
                .where(Revision.prompt_id == prompt_id)
                .order_by(Revision.created_at.desc(), Revision.id.desc())
            ).all()
            return [RevisionRecord.model_validate(row) for row in rows]

    def save_revision(self, revision: RevisionRecord) -> None:
        self._put(Revision(**revision.model_dump()))

    # ---- folders ----

    def get_folders(self, owner_id: str) -> List[FolderRecord]:
        with self._session_factory() as db:
            rows = db.scalars(select(Folder).order_by(Folder.created_at)).all()
            return [FolderRecord.model_validate(row) for row in rows if row.user_id == owner_id]

    def save_folder(self, folder: FolderRecord) -> None:
        self._put(Folder(**folder.model_dump()))

    def delete_folder(self, folder_id: str) -> None:
        self._delete(Folder, folder_id)

    # ---- tags ----

    def get_tags(self, owner_id: str) -> List[TagRecord]:
        with self._session_factory() as db:
            rows = db.scalars(select(Tag)).all()
            return [TagRecord.model_validate(row) for row in rows if row.user_id == owner_id]

    def save_tag(self, tag: TagRecord) -> None:
        self._put(Tag(**tag.model_dump()))

    def delete_tag(self, tag_id: str) -> None:
        self._delete(Tag, tag_id)

    # ---- prompt/tag links ----

    def get_prompt_tags(self, owner_id: str) -> List[PromptTagRecord]:
        """Links whose prompt belongs to ``owner_id``."""
        with self._session_factory() as db:
            rows = db.scalars(
                select(PromptTag)
                .join(Prompt, Prompt.id == PromptTag.prompt_id)
                .where(Prompt.user_id == owner_id)
            ).all()
            return [PromptTagRecord.model_validate(row) for row in rows]

    def save_prompt_tag(self, link: PromptTagRecord) -> None:
        self._put(PromptTag(**link.model_dump()))

    def delete_prompt_tag(self, prompt_id: str, tag_id: str) -> None:
        with self._session_factory() as db:
            db.execute(
                delete(PromptTag).where(
                    PromptTag.prompt_id == prompt_id,
                    PromptTag.tag_id == tag_id,
                )
            )
            db.commit()

    def delete_prompt_tags_for_prompt(self, prompt_id: str) -> int:
        with self._session_factory() as db:
            result = db.execute(delete(PromptTag).where(PromptTag.prompt_id == prompt_id))
            db.commit()
            return result.rowcount

    def delete_prompt_tags_for_tag(self, tag_id: str) -> int:
        with self._session_factory() as db:
            result = db.execute(delete(PromptTag).where(PromptTag.tag_id == tag_id))
            db.commit()
            return result.rowcount

    # ---- helpers ----

    def _put(self, row) -> None:
        with self._session_factory() as db:
            db.merge(row)
            db.commit()

    def _delete(self, model, record_id: str) -> None:
        with self._session_factory() as db:
            db.execute(delete(model).where(model.id == record_id))
            db.commit()
        logger.debug("Deleted %s %s from local store", model.__tablename__, record_id)
