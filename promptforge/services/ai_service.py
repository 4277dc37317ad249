from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

SUPPORTED_PROVIDERS = ("openai", "anthropic", "google")
DEFAULT_SHORTEN_LENGTH = 100


@dataclass
class RefineRequest:
    prompt_text: str
    command: str = "enhance"
    shorten_length: Optional[int] = None
    provider: str = "openai"
    api_key: Optional[str] = None


@dataclass
class RefineResult:
    refined_text: str
    tokens_used: int
    provider: str
    request_id: str


class RefinementProvider(Protocol):
    async def refine(self, request: RefineRequest) -> RefineResult:  # pragma: no cover - interface
        ...
