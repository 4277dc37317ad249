"""One loaded workspace per signed-in owner."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, Optional

from promptforge.services.ai_service import RefinementProvider
from promptforge.storage import LocalStore, RemoteMirror
from promptforge.workspace.workspace import PromptWorkspace


logger = logging.getLogger("promptforge.workspace.registry")

MirrorFactory = Callable[[Optional[str]], RemoteMirror]


class WorkspaceRegistry:
    def __init__(
        self,
        store: LocalStore,
        mirror_factory: MirrorFactory,
        refiner: Optional[RefinementProvider] = None,
        default_provider: str = "openai",
    ) -> None:
        self.store = store
        self.mirror_factory = mirror_factory
        self.refiner = refiner
        self.default_provider = default_provider
        self._workspaces: Dict[str, PromptWorkspace] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    async def get(self, owner_id: str, access_token: Optional[str] = None) -> PromptWorkspace:
        """Return the owner's workspace, loading it on first use.

        Concurrent first requests for one owner share a single load. The
        forwarded token is refreshed on every call so remote writes always
        go out with the caller's latest credentials.
        """
        workspace = self._workspaces.get(owner_id)
        if workspace is not None:
            workspace.mirror.access_token = access_token
            return workspace

        lock = self._locks.setdefault(owner_id, asyncio.Lock())
        async with lock:
            workspace = self._workspaces.get(owner_id)
            if workspace is not None:
                workspace.mirror.access_token = access_token
                return workspace

            workspace = PromptWorkspace(
                owner_id,
                store=self.store,
                mirror=self.mirror_factory(access_token),
                refiner=self.refiner,
                default_provider=self.default_provider,
            )
            await workspace.load()
            self._workspaces[owner_id] = workspace
            self._locks.pop(owner_id, None)
            return workspace

    def end_session(self, owner_id: str) -> bool:
        """Drop the cached workspace; the local store keeps its data."""
        self._locks.pop(owner_id, None)
        ended = self._workspaces.pop(owner_id, None) is not None
        if ended:
            logger.info("Session ended", extra={"owner_id": owner_id})
        return ended

    def clear(self) -> None:
        self._workspaces.clear()
        self._locks.clear()

    def __len__(self) -> int:
        return len(self._workspaces)
