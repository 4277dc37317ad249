class WorkspaceError(Exception):
    """Base class for domain errors raised by a prompt workspace."""


class RecordNotFoundError(WorkspaceError):
    def __init__(self, kind: str, record_id: str) -> None:
        super().__init__(f"{kind} {record_id} not found")
        self.kind = kind
        self.record_id = record_id


class InvalidCommandError(WorkspaceError):
    """Refinement command text that is neither a slash command nor a known word."""
