from .errors import InvalidCommandError, RecordNotFoundError, WorkspaceError  # noqa: F401
from .registry import WorkspaceRegistry  # noqa: F401
from .workspace import PromptWorkspace  # noqa: F401
