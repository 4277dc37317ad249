"""In-memory state for one owner's prompts, folders and tags.

Every mutation follows the same order: build the record, write it to the
local store, update the cache, then mirror it remotely. A local store
failure aborts the mutation before the cache changes. A remote failure
is logged by the mirror and never reaches the caller.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar

from promptforge.core.ids import generate_id, parse_timestamp, utc_timestamp
from promptforge.core.text import parse_slash_command
from promptforge.schemas import (
    PROMPT_MUTABLE_FIELDS,
    FolderRecord,
    PromptRecord,
    PromptTagRecord,
    RevisionRecord,
    TagRecord,
)
from promptforge.services.ai_service import DEFAULT_SHORTEN_LENGTH, RefinementProvider, RefineRequest
from promptforge.storage import LocalStore, RemoteMirror
from promptforge.sync import MergeResult, merge_prompts
from promptforge.workspace.errors import InvalidCommandError, RecordNotFoundError


logger = logging.getLogger("promptforge.workspace")

T = TypeVar("T")


class PromptWorkspace:
    def __init__(
        self,
        owner_id: str,
        store: LocalStore,
        mirror: RemoteMirror,
        refiner: Optional[RefinementProvider] = None,
        default_provider: str = "openai",
    ) -> None:
        self.owner_id = owner_id
        self.store = store
        self.mirror = mirror
        self.refiner = refiner
        self.default_provider = default_provider

        self.prompts: List[PromptRecord] = []
        self.folders: List[FolderRecord] = []
        self.tags: List[TagRecord] = []
        self.prompt_tags: List[PromptTagRecord] = []
        self._revision_clock: Dict[str, str] = {}
        self.loaded = False

    async def _local(self, operation: Callable[..., T], *args: Any) -> T:
        """Run a blocking local store call in a worker thread."""
        return await asyncio.to_thread(operation, *args)

    # ==================== Loading ====================

    async def load(self) -> None:
        """Read everything from the local store, then refresh prompts from remote.

        Only prompts are refreshed from the remote copy. Folders, tags and
        links keep whatever the local store holds.
        """
        self.prompts = await self._local(self.store.get_prompts, self.owner_id)
        self.folders = await self._local(self.store.get_folders, self.owner_id)
        self.tags = await self._local(self.store.get_tags, self.owner_id)
        self.prompt_tags = await self._local(self.store.get_prompt_tags, self.owner_id)
        self.loaded = True
        logger.info(
            "Loaded %d prompts, %d folders, %d tags from local store",
            len(self.prompts), len(self.folders), len(self.tags),
            extra={"owner_id": self.owner_id},
        )
        await self.resync()

    async def resync(self) -> Optional[MergeResult]:
        """Fetch remote prompts and merge them over the cache.

        Returns None when the remote copy could not be read; the cache is
        left untouched in that case.
        """
        rows = await self.mirror.table("prompts").list_by_owner(self.owner_id)
        if rows is None:
            logger.info("Cloud sync not available, using local store only", extra={"owner_id": self.owner_id})
            return None

        remote = []
        for row in rows:
            try:
                remote.append(PromptRecord.model_validate(row))
            except ValueError as exc:
                logger.warning("Skipping malformed remote prompt: %s", exc, extra={"owner_id": self.owner_id})

        result = merge_prompts(self.prompts, remote)
        for conflict in result.conflicts:
            logger.warning(
                "Remote copy overrides local prompt %s (%s)", conflict.record_id, conflict.kind.value,
                extra={"owner_id": self.owner_id},
            )

        for prompt in result.merged:
            await self._local(self.store.save_prompt, prompt)
        self.prompts = list(result.merged)
        return result

    # ==================== Prompts ====================

    def get_prompt(self, prompt_id: str) -> PromptRecord:
        for prompt in self.prompts:
            if prompt.id == prompt_id:
                return prompt
        raise RecordNotFoundError("Prompt", prompt_id)

    async def create_prompt(self, title: str, body: str, folder_id: Optional[str] = None) -> PromptRecord:
        now = utc_timestamp()
        prompt = PromptRecord(
            id=generate_id(),
            user_id=self.owner_id,
            folder_id=folder_id,
            title=title,
            body_md=body,
            is_pinned=False,
            created_at=now,
            updated_at=now,
        )

        await self._local(self.store.save_prompt, prompt)
        self.prompts = [prompt, *self.prompts]

        await self.mirror.table("prompts").insert(prompt.model_dump())
        return prompt

    async def update_prompt(self, prompt_id: str, updates: Dict[str, Any]) -> PromptRecord:
        current = self.get_prompt(prompt_id)
        changes = {key: value for key, value in updates.items() if key in PROMPT_MUTABLE_FIELDS}
        ignored = set(updates) - set(changes)
        if ignored:
            logger.debug("Ignoring immutable prompt fields: %s", sorted(ignored))

        changes["updated_at"] = utc_timestamp(after=current.updated_at)
        updated = current.model_copy(update=changes)
        # model_copy skips validation; round-trip to catch bad field types.
        updated = PromptRecord.model_validate(updated.model_dump())

        await self._local(self.store.save_prompt, updated)
        self.prompts = [updated if p.id == prompt_id else p for p in self.prompts]

        await self.mirror.table("prompts").update(prompt_id, changes)
        return updated

    async def toggle_pin(self, prompt_id: str) -> PromptRecord:
        current = self.get_prompt(prompt_id)
        return await self.update_prompt(prompt_id, {"is_pinned": not current.is_pinned})

    async def delete_prompt(self, prompt_id: str) -> None:
        self.get_prompt(prompt_id)

        await self._local(self.store.delete_prompt, prompt_id)
        removed = await self._local(self.store.delete_prompt_tags_for_prompt, prompt_id)
        self.prompts = [p for p in self.prompts if p.id != prompt_id]
        self.prompt_tags = [link for link in self.prompt_tags if link.prompt_id != prompt_id]
        if removed:
            logger.debug("Dropped %d tag links of deleted prompt %s", removed, prompt_id)

        await self.mirror.table("prompts").delete(prompt_id)

    def search_prompts(self, query: str) -> List[PromptRecord]:
        if not query.strip():
            return list(self.prompts)

        needle = query.lower()
        return [
            prompt
            for prompt in self.prompts
            if needle in prompt.title.lower() or needle in prompt.body_md.lower()
        ]

    # ==================== Revisions ====================

    def get_revisions(self, prompt_id: str) -> List[RevisionRecord]:
        self.get_prompt(prompt_id)
        return self.store.get_revisions(prompt_id)

    async def create_revision(
        self,
        prompt_id: str,
        body: str,
        command: Optional[str] = None,
        provider: Optional[str] = None,
        token_usage: Optional[int] = None,
        parent_revision_id: Optional[str] = None,
    ) -> RevisionRecord:
        """Append a body snapshot to the prompt's history.

        Identical bodies are stored again and the history has no length cap.
        """
        self.get_prompt(prompt_id)
        history = await self._local(self.store.get_revisions, prompt_id)
        created_at = self._next_revision_time(prompt_id, history[0].created_at if history else None)
        revision = RevisionRecord(
            id=generate_id(),
            prompt_id=prompt_id,
            parent_revision_id=parent_revision_id,
            body_md=body,
            command_text=command,
            llm_provider=provider or self.default_provider,
            token_usage=token_usage,
            created_at=created_at,
        )

        await self._local(self.store.save_revision, revision)

        await self.mirror.table("revisions").insert(revision.model_dump())
        return revision

    def _next_revision_time(self, prompt_id: str, stored_latest: Optional[str]) -> str:
        # Strictly increasing per prompt; newest-first ordering relies on it.
        candidates = [t for t in (stored_latest, self._revision_clock.get(prompt_id)) if t]
        latest = max(candidates, key=parse_timestamp) if candidates else None
        created_at = utc_timestamp(after=latest)
        self._revision_clock[prompt_id] = created_at
        return created_at

    async def refine_prompt(
        self,
        prompt_id: str,
        command_text: str,
        provider: Optional[str] = None,
    ) -> RevisionRecord:
        """Run a refinement command over the prompt body and record the result.

        ``command_text`` is either a slash command (``/enhance``,
        ``/shorten 80``) or the bare word ``enhance`` / ``shorten``.
        """
        if self.refiner is None:
            raise InvalidCommandError("No refinement provider configured")

        prompt = self.get_prompt(prompt_id)
        command_text = command_text.strip()
        if command_text in ("enhance", "shorten"):
            command_text = "/" + command_text
        if command_text == "/shorten":
            parsed_command, args = "shorten", []
        else:
            parsed = parse_slash_command(command_text)
            if parsed is None:
                raise InvalidCommandError(f"Unknown command: {command_text!r}")
            parsed_command, args = parsed.command, parsed.args

        request = RefineRequest(
            prompt_text=prompt.body_md,
            command=parsed_command,
            shorten_length=int(args[0]) if args else None,
            provider=provider or self.default_provider,
        )
        result = await self.refiner.refine(request)

        history = await self._local(self.store.get_revisions, prompt_id)
        label = parsed_command
        if parsed_command == "shorten":
            label = f"shorten {request.shorten_length or DEFAULT_SHORTEN_LENGTH}"
        return await self.create_revision(
            prompt_id,
            result.refined_text,
            command=label,
            provider=result.provider,
            token_usage=result.tokens_used,
            parent_revision_id=history[0].id if history else None,
        )

    # ==================== Folders ====================

    async def create_folder(self, name: str) -> FolderRecord:
        folder = FolderRecord(
            id=generate_id(),
            user_id=self.owner_id,
            name=name,
            created_at=utc_timestamp(),
        )

        await self._local(self.store.save_folder, folder)
        self.folders = [*self.folders, folder]

        await self.mirror.table("folders").insert(folder.model_dump())
        return folder

    async def delete_folder(self, folder_id: str) -> None:
        """Remove a folder; its prompts move to "no folder"."""
        if not any(folder.id == folder_id for folder in self.folders):
            raise RecordNotFoundError("Folder", folder_id)

        for prompt in [p for p in self.prompts if p.folder_id == folder_id]:
            await self.update_prompt(prompt.id, {"folder_id": None})

        await self._local(self.store.delete_folder, folder_id)
        self.folders = [folder for folder in self.folders if folder.id != folder_id]

        await self.mirror.table("folders").delete(folder_id)

    # ==================== Tags ====================

    async def create_tag(self, name: str, color: Optional[str] = None) -> TagRecord:
        tag = TagRecord(id=generate_id(), user_id=self.owner_id, name=name, color=color)

        await self._local(self.store.save_tag, tag)
        self.tags = [*self.tags, tag]

        await self.mirror.table("tags").insert(tag.model_dump())
        return tag

    def _get_tag(self, tag_id: str) -> TagRecord:
        for tag in self.tags:
            if tag.id == tag_id:
                return tag
        raise RecordNotFoundError("Tag", tag_id)

    async def delete_tag(self, tag_id: str) -> None:
        self._get_tag(tag_id)

        await self._local(self.store.delete_tag, tag_id)
        await self._local(self.store.delete_prompt_tags_for_tag, tag_id)
        self.tags = [tag for tag in self.tags if tag.id != tag_id]
        self.prompt_tags = [link for link in self.prompt_tags if link.tag_id != tag_id]

        await self.mirror.table("tags").delete(tag_id)

    def tags_for_prompt(self, prompt_id: str) -> List[TagRecord]:
        self.get_prompt(prompt_id)
        tag_ids = {link.tag_id for link in self.prompt_tags if link.prompt_id == prompt_id}
        return [tag for tag in self.tags if tag.id in tag_ids]

    async def add_tag_to_prompt(self, prompt_id: str, tag_id: str) -> PromptTagRecord:
        self.get_prompt(prompt_id)
        self._get_tag(tag_id)
        link = PromptTagRecord(prompt_id=prompt_id, tag_id=tag_id)
        if link in self.prompt_tags:
            return link

        await self._local(self.store.save_prompt_tag, link)
        self.prompt_tags = [*self.prompt_tags, link]

        await self.mirror.table("prompt_tags").insert(link.model_dump())
        return link

    async def remove_tag_from_prompt(self, prompt_id: str, tag_id: str) -> None:
        await self._local(self.store.delete_prompt_tag, prompt_id, tag_id)
        self.prompt_tags = [
            link for link in self.prompt_tags
            if not (link.prompt_id == prompt_id and link.tag_id == tag_id)
        ]

        await self.mirror.table("prompt_tags").delete_match({"prompt_id": prompt_id, "tag_id": tag_id})
