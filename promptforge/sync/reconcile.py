"""Deterministic merge of the local and remote prompt sets.

The remote copy wins whenever it is reachable. The merge never drops a
local edit silently though: anything the remote set would hide is
reported as a conflict for the caller to log or surface.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from promptforge.core.ids import parse_timestamp
from promptforge.schemas import PromptRecord


class ConflictKind(str, Enum):
    LOCAL_ONLY = "local_only"
    LOCAL_NEWER = "local_newer"


@dataclass(frozen=True)
class Conflict:
    record_id: str
    kind: ConflictKind
    local: PromptRecord
    remote: Optional[PromptRecord] = None


@dataclass(frozen=True)
class MergeResult:
    merged: List[PromptRecord]
    conflicts: List[Conflict] = field(default_factory=list)


def merge_prompts(local: Iterable[PromptRecord], remote: Iterable[PromptRecord]) -> MergeResult:
    remote_by_id = {prompt.id: prompt for prompt in remote}
    conflicts: List[Conflict] = []

    for prompt in sorted(local, key=lambda p: p.id):
        theirs = remote_by_id.get(prompt.id)
        if theirs is None:
            conflicts.append(Conflict(prompt.id, ConflictKind.LOCAL_ONLY, prompt))
        elif parse_timestamp(prompt.updated_at) > parse_timestamp(theirs.updated_at) and prompt != theirs:
            conflicts.append(Conflict(prompt.id, ConflictKind.LOCAL_NEWER, prompt, theirs))

    merged = sorted(remote_by_id.values(), key=lambda p: (parse_timestamp(p.updated_at), p.id), reverse=True)
    return MergeResult(merged=merged, conflicts=conflicts)
