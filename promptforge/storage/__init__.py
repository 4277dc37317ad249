from .local_store import LocalStore  # noqa: F401
from .remote_mirror import RemoteMirror, RemoteTable  # noqa: F401
