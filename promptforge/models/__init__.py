from .base import Base  # noqa: F401
from .prompt import Prompt, PromptTag  # noqa: F401
from .revision import Revision  # noqa: F401
from .folder import Folder  # noqa: F401
from .tag import Tag  # noqa: F401
