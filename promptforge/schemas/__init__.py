from .records import (  # noqa: F401
    PROMPT_MUTABLE_FIELDS,
    FolderRecord,
    PromptRecord,
    PromptTagRecord,
    RevisionRecord,
    TagRecord,
)
