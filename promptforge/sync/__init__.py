from .reconcile import Conflict, ConflictKind, MergeResult, merge_prompts  # noqa: F401
